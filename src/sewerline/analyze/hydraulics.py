"""Hydraulic relations of a single full-bore pipe run."""

import numpy as np


def hydraulic_radius(diameter_m: float) -> float:
    """Hydraulic radius of a circular pipe flowing full (area / wetted perimeter)."""
    return diameter_m / 4


def slope_from_gradient(gradient: float) -> float:
    """Convert a 1:X gradient denominator to a slope fraction, 0 for a flat run."""
    if gradient == 0:
        return 0.0
    return 1 / abs(gradient)


def manning_velocity(diameter_m: float, mannings_n: float, gradient: float) -> float:
    """Calculate the full-bore flow velocity with Manning's equation.

    V = (1 / n) * R^(2/3) * S^(1/2)

    Parameters
    ----------
    diameter_m : float
        Internal diameter in meters
    mannings_n : float
        Manning roughness coefficient of the pipe
    gradient : float
        Denominator X of the gradient 1:X, the sign is ignored

    Returns
    -------
    float
        Velocity in m/s, 0.0 for a flat run
    """
    radius = hydraulic_radius(diameter_m)
    slope = slope_from_gradient(gradient)
    return float((1 / mannings_n) * np.power(radius, 2 / 3) * np.sqrt(slope))


def fall_from_gradient(distance: float, gradient: float) -> float:
    return distance / gradient


def gradient_from_fall(distance: float, fall: float) -> float:
    """Gradient denominator of a run, 0 when both ends are level."""
    if fall == 0:
        return 0.0
    return distance / fall
