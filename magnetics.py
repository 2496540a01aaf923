# magnetics.py
import logging
import numpy as np

logger = logging.getLogger(__name__)

# --- Constants ---
MU_0 = 4 * np.pi * 1e-7  # Vacuum permeability
AGM_TOL = 1e-14
AGM_MAX_ITER = 100
M_CLAMP_EPS = 1e-14  # Keeps m strictly below 1 near the winding


class DomainError(ValueError):
    """Raised when a value falls outside the range the field formulas accept."""


def ellipke_agm(m):
    """
    Complete elliptic integrals K(m) and E(m) via the arithmetic-geometric mean.
    m is the squared modulus k^2 and must lie in [0, 1).
    Returns the tuple (K, E).
    """
    if not np.isfinite(m) or m < 0 or m >= 1:
        raise DomainError(f"Elliptic parameter m must be in [0, 1), got {m!r}")

    a = 1.0
    b = np.sqrt(1.0 - m)
    c = a - b
    # E = K * (1 - sum 2^(n-1) c_n^2), starting from c_0^2 = m
    total = m / 2.0
    weight = 1.0
    n_iter = 0
    while abs(c) > AGM_TOL * a:
        if n_iter >= AGM_MAX_ITER:
            raise DomainError(f"AGM did not converge for m={m!r} after {AGM_MAX_ITER} iterations")
        a_next = (a + b) / 2.0
        b_next = np.sqrt(a * b)
        c = (a - b) / 2.0
        total += weight * c * c
        weight *= 2.0
        a, b = a_next, b_next
        n_iter += 1

    logger.debug("AGM converged for m=%.6g in %d iterations", m, n_iter)
    K = np.pi / (2.0 * a)
    E = K * (1.0 - total)
    return float(K), float(E)


def loop_field(point, loop_radius, current, turns, axial_offset=0.0):
    """
    Magnetic flux density (T) of an N-turn circular loop at a single field point.

    The loop axis is the x-axis and the loop is centred at x = axial_offset.
    All lengths are in meters. The loop radius is assumed to be positive;
    callers validate it before getting here.
    """
    x, y, z = (float(v) for v in point)
    R = float(loop_radius)
    rho = np.hypot(y, z)
    zax = x - axial_offset
    z2 = zax * zax

    # On-axis the general expression is 0/0 in B_rho, use the closed form instead
    if rho == 0:
        bx = (MU_0 * current * turns * R * R) / (2 * (R * R + z2) ** 1.5)
        return np.array([bx, 0.0, 0.0])

    gap2 = (R - rho) ** 2 + z2
    if gap2 == 0:
        raise DomainError("Field point lies on the loop winding; the field is singular there")

    denom2 = (R + rho) ** 2 + z2
    m_raw = (4 * R * rho) / denom2
    m = min(1.0 - M_CLAMP_EPS, max(0.0, m_raw))
    if m != m_raw:
        logger.debug("Clamped elliptic parameter %.17g to %.17g", m_raw, m)
    K, E = ellipke_agm(m)

    factor = (MU_0 * current * turns) / (2 * np.pi * np.sqrt(denom2))
    rho2 = rho * rho
    b_rho = factor * (zax / rho) * (-K + ((R * R + rho2 + z2) / gap2) * E)
    b_axial = factor * (K + ((R * R - rho2 - z2) / gap2) * E)

    cos_phi = y / rho
    sin_phi = z / rho
    return np.array([b_axial, b_rho * cos_phi, b_rho * sin_phi])


def calculate_field_map(loop_radius, current, turns, axial_offsets, x_max, rho_max,
                        num_x_points=40, num_rho_points=40):
    """
    Evaluates the superposed loop field on a regular grid in the (x, rho) half-plane.
    Field points are taken at (x, rho, 0), so B_radial is the y component.
    """
    x_grid = np.linspace(-x_max, x_max, num_x_points)
    rho_grid = np.linspace(0.0, rho_max, num_rho_points)

    B_axial = np.zeros((num_x_points, num_rho_points), dtype=float)
    B_radial = np.zeros_like(B_axial)

    if len(axial_offsets) == 0:
        return {"x_grid": x_grid, "rho_grid": rho_grid,
                "B_axial": B_axial, "B_radial": B_radial, "B_mag": np.zeros_like(B_axial)}

    for x_idx, x_point in enumerate(x_grid):
        for rho_idx, rho_point in enumerate(rho_grid):
            total = np.zeros(3)
            for offset in axial_offsets:
                try:
                    total += loop_field((x_point, rho_point, 0.0), loop_radius, current, turns, offset)
                except DomainError:
                    # Grid node sits on a winding; leave it undefined for plotting
                    total[:] = np.nan
                    break
            B_axial[x_idx, rho_idx] = total[0]
            B_radial[x_idx, rho_idx] = total[1]

    B_mag = np.sqrt(B_axial**2 + B_radial**2)
    return {"x_grid": x_grid, "rho_grid": rho_grid,
            "B_axial": B_axial, "B_radial": B_radial, "B_mag": B_mag}


def analyze_field_uniformity(b_axis):
    """On-axis field ripple in percent: (max - min) / (max + min) * 100."""
    b_axis = np.asarray(b_axis, dtype=float)
    if b_axis.size == 0:
        return 0.0
    b_axis = np.abs(b_axis[np.isfinite(b_axis)])
    if b_axis.size == 0:
        return 0.0

    b_max, b_min = np.max(b_axis), np.min(b_axis)
    return float((b_max - b_min) / (b_max + b_min) * 100) if (b_max + b_min) > 0 else 0.0
