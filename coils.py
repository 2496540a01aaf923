# coils.py
import logging
import numpy as np

from inputs import ValidationError, validate_helmholtz_inputs, validate_single_coil_inputs
from magnetics import DomainError, loop_field, calculate_field_map, analyze_field_uniformity

logger = logging.getLogger(__name__)

# --- Constants ---
CM_TO_M = 1e-2
GRAD_STEP_FLOOR = 1e-5  # m
GRAD_STEP_SCALE = 1e-4  # fraction of the loop radius


def coil_current(voltage, resistance):
    """Ohm's law, I = V / Omega."""
    return voltage / resistance


def coil_voltage(current, resistance):
    """Voltage across the coil for display, V = I * Omega."""
    return current * resistance


def field_magnitude(B):
    return float(np.linalg.norm(B))


def helmholtz_centers(loop_radius):
    """Axial positions of the two loops; the spacing equals the loop radius."""
    return (-loop_radius / 2, loop_radius / 2)


def helmholtz_field(point, loop_radius, current, turns):
    """
    Field of a Helmholtz pair: two identical coaxial loops at x = -R/2 and x = +R/2.
    Superposition is exact, so this is just the sum of two loop fields.
    """
    B = np.zeros(3)
    for center in helmholtz_centers(loop_radius):
        B = B + loop_field(point, loop_radius, current, turns, axial_offset=center)
    return B


def gradient_step(loop_radius):
    return max(GRAD_STEP_FLOOR, loop_radius * GRAD_STEP_SCALE)


def coil_field_with_grad(point, loop_radius, current, turns):
    """
    Single coil centred at the origin: field, its magnitude, and a central-difference
    estimate of grad|B| in T/m. Truncation error is O(h^2) for the fixed step h.

    A point one step h from the winding puts a stencil sample on the conductor; that
    component of grad comes back non-finite instead of raising.
    """
    point = np.asarray(point, dtype=float)
    B = loop_field(point, loop_radius, current, turns)
    h = gradient_step(loop_radius)

    def mag_at(offset):
        try:
            return field_magnitude(loop_field(point + offset, loop_radius, current, turns))
        except DomainError:
            logger.debug("Gradient stencil at %s hits the winding", point + offset)
            return np.inf

    grad = np.zeros(3)
    for k in range(3):
        step = np.zeros(3)
        step[k] = h
        grad[k] = (mag_at(step) - mag_at(-step)) / (2 * h)

    return {"B": B, "B_mag": field_magnitude(B), "grad": grad}


def _check_off_winding(point, loop_radius, centers):
    # The closed form is singular on the conductor itself
    rho = np.hypot(point[1], point[2])
    for center in centers:
        if rho == loop_radius and point[0] == center:
            raise ValidationError("Field point lies on the coil winding, where the field is undefined")


def compute_helmholtz_field(x_cm, y_cm, z_cm, R_cm, V, Omega, N):
    """
    Helmholtz pair field in tesla at (x, y, z). Positions and radius are in cm,
    the drive is given as a voltage V across a coil resistance Omega.
    """
    params = validate_helmholtz_inputs(x_cm, y_cm, z_cm, R_cm, V, Omega, N)
    point = np.array([params["x_cm"], params["y_cm"], params["z_cm"]]) * CM_TO_M
    R = params["R_cm"] * CM_TO_M
    I = coil_current(params["V"], params["Omega"])
    _check_off_winding(point, R, helmholtz_centers(R))

    logger.debug("Helmholtz field at %s m (R=%g m, I=%g A, N=%d)", point, R, I, params["N"])
    return helmholtz_field(point, R, I, params["N"])


def compute_single_coil_field(x_cm, y_cm, z_cm, R_cm, I, N):
    """
    Single N-turn coil at the origin. Returns {"B", "B_mag", "grad"} in T and T/m.
    """
    params = validate_single_coil_inputs(x_cm, y_cm, z_cm, R_cm, I, N)
    point = np.array([params["x_cm"], params["y_cm"], params["z_cm"]]) * CM_TO_M
    R = params["R_cm"] * CM_TO_M
    _check_off_winding(point, R, (0.0,))

    logger.debug("Single coil field at %s m (R=%g m, I=%g A, N=%d)", point, R, params["I"], params["N"])
    return coil_field_with_grad(point, R, params["I"], params["N"])


def helmholtz_field_map(R_cm, V, Omega, N, extent=1.5, num_points=40):
    """Field map around a Helmholtz pair, extending `extent` loop radii in x and rho."""
    params = validate_helmholtz_inputs(0.0, 0.0, 0.0, R_cm, V, Omega, N)
    R = params["R_cm"] * CM_TO_M
    I = coil_current(params["V"], params["Omega"])
    return calculate_field_map(R, I, params["N"], helmholtz_centers(R),
                               x_max=extent * R, rho_max=extent * R,
                               num_x_points=num_points, num_rho_points=num_points)


def single_coil_field_map(R_cm, I, N, extent=1.5, num_points=40):
    params = validate_single_coil_inputs(0.0, 0.0, 0.0, R_cm, I, N)
    R = params["R_cm"] * CM_TO_M
    return calculate_field_map(R, params["I"], params["N"], (0.0,),
                               x_max=extent * R, rho_max=extent * R,
                               num_x_points=num_points, num_rho_points=num_points)


def helmholtz_uniformity(R_cm, V, Omega, N, span_fraction=0.2, num_points=21):
    """
    On-axis ripple (%) of the Helmholtz field over the central region
    |x| <= span_fraction * R / 2.
    """
    params = validate_helmholtz_inputs(0.0, 0.0, 0.0, R_cm, V, Omega, N)
    R = params["R_cm"] * CM_TO_M
    I = coil_current(params["V"], params["Omega"])
    half_span = span_fraction * R / 2
    x_axis = np.linspace(-half_span, half_span, num_points)
    b_axis = [helmholtz_field((x, 0.0, 0.0), R, I, params["N"])[0] for x in x_axis]
    return analyze_field_uniformity(b_axis)
