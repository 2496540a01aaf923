# inputs.py
import logging
import numpy as np

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when calculator inputs are rejected before any field computation."""


# Form keys for each calculator, in display order
HELMHOLTZ_KEYS = ["x_cm", "y_cm", "z_cm", "R_cm", "V", "Omega", "N"]
SINGLE_COIL_KEYS = ["x_cm", "y_cm", "z_cm", "R_cm", "I", "Omega", "N"]

PRESETS = {
    "helmholtz": {
        "Custom": {},
        "Lab Pair (R=10 cm, 100 turns)": {
            "x_cm": 0.0, "y_cm": 0.0, "z_cm": 0.0, "R_cm": 10.0,
            "V": 10.0, "Omega": 10.0, "N": 100,
        },
        "Large Calibration Pair (R=50 cm)": {
            "x_cm": 0.0, "y_cm": 5.0, "z_cm": 0.0, "R_cm": 50.0,
            "V": 24.0, "Omega": 4.0, "N": 200,
        },
        "Small Bench Pair (R=3 cm)": {
            "x_cm": 0.5, "y_cm": 0.0, "z_cm": 0.5, "R_cm": 3.0,
            "V": 5.0, "Omega": 2.5, "N": 30,
        },
    },
    "single_coil": {
        "Custom": {},
        "Bench Coil (R=5 cm, 50 turns)": {
            "x_cm": 2.0, "y_cm": 0.0, "z_cm": 0.0, "R_cm": 5.0,
            "I": 1.0, "Omega": 3.0, "N": 50,
        },
        "Off-Axis Probe (R=10 cm)": {
            "x_cm": 3.0, "y_cm": 4.0, "z_cm": 2.0, "R_cm": 10.0,
            "I": 2.0, "Omega": 5.0, "N": 100,
        },
    },
}


def parse_number(value, name):
    """Converts a form value to a finite float, raising ValidationError otherwise."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValidationError(f"{name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}") from None
    if not np.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def parse_turns(value, name="N"):
    """Turn count must be a positive whole number; '100' and 100.0 are accepted."""
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        turns = int(value)
    else:
        number = parse_number(value, name)
        if not float(number).is_integer():
            raise ValidationError(f"{name} must be a whole number of turns, got {value!r}")
        turns = int(number)
    if turns <= 0:
        raise ValidationError(f"{name} must be a positive integer, got {turns}")
    return turns


def check_positive(value, name):
    if value <= 0:
        raise ValidationError(f"{name} must be greater than 0, got {value}")
    return value


def validate_helmholtz_inputs(x_cm, y_cm, z_cm, R_cm, V, Omega, N):
    """Returns a dict of cleaned Helmholtz calculator inputs."""
    params = {
        "x_cm": parse_number(x_cm, "x"),
        "y_cm": parse_number(y_cm, "y"),
        "z_cm": parse_number(z_cm, "z"),
        "R_cm": check_positive(parse_number(R_cm, "R"), "R"),
        "V": parse_number(V, "V"),
        "Omega": check_positive(parse_number(Omega, "Resistance"), "Resistance"),
        "N": parse_turns(N),
    }
    return params


def validate_single_coil_inputs(x_cm, y_cm, z_cm, R_cm, I, N, Omega=None):
    """
    Returns a dict of cleaned single-coil inputs. Omega is only needed for the
    displayed coil voltage, so it is checked only when given.
    """
    params = {
        "x_cm": parse_number(x_cm, "x"),
        "y_cm": parse_number(y_cm, "y"),
        "z_cm": parse_number(z_cm, "z"),
        "R_cm": check_positive(parse_number(R_cm, "R"), "R"),
        "I": parse_number(I, "I"),
        "N": parse_turns(N),
    }
    if Omega is not None:
        params["Omega"] = check_positive(parse_number(Omega, "Resistance"), "Resistance")
    return params


def parse_form(form, keys):
    """
    Pulls the given keys out of a form dict (e.g. tkinter StringVar values).
    Missing keys count as empty entries.
    """
    missing = [key for key in keys if str(form.get(key, "")).strip() == ""]
    if missing:
        raise ValidationError(f"Please fill in all inputs (missing: {', '.join(missing)})")
    return {key: form[key] for key in keys}


def parse_helmholtz_form(form):
    return validate_helmholtz_inputs(**parse_form(form, HELMHOLTZ_KEYS))


def parse_single_coil_form(form):
    return validate_single_coil_inputs(**parse_form(form, SINGLE_COIL_KEYS))


def get_preset(calculator, name):
    """Returns a copy of a named preset, or an empty dict for unknown names."""
    presets = PRESETS.get(calculator)
    if presets is None:
        raise KeyError(f"Unknown calculator '{calculator}'")
    if name not in presets:
        logger.warning("Preset '%s' not found for %s, using Custom", name, calculator)
        return {}
    return dict(presets[name])
