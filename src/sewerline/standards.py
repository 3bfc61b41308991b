"""Code of practice thresholds used by the compliance checks."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CodeOfPractice:
    """Regulatory limits a single drain-line run is checked against.

    Gradients are stored as the denominator X of 1:X, so a larger value is a
    flatter slope. Lengths, depths and falls are in meters, velocities in m/s.
    """

    max_length: float = 50.0  # Maximum drain-line length between chambers
    max_gradient: float = 20.0  # Steepest permitted gradient 1:X
    min_depth: float = 0.75  # Minimum chamber depth (top level to invert)
    gravity_min_velocity: float = 0.9  # Self-cleansing velocity of gravity sewers
    pumping_min_velocity: float = 1.0  # Self-cleansing velocity of pumping mains
    max_velocity: float = 2.4  # Scouring limit, shared by both
    backdrop_min_fall: float = 0.5  # Fall requiring a backdrop or tumbling bay
    vortex_min_fall: float = 6.0  # Fall requiring a vortex drop structure

    def __post_init__(self) -> None:
        for name in (
            "max_length",
            "max_gradient",
            "min_depth",
            "gravity_min_velocity",
            "pumping_min_velocity",
            "max_velocity",
            "backdrop_min_fall",
            "vortex_min_fall",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.backdrop_min_fall >= self.vortex_min_fall:
            raise ValueError("backdrop_min_fall must be smaller than vortex_min_fall")

    def min_velocity(self, is_pumping_main: bool) -> float:
        if is_pumping_main:
            return self.pumping_min_velocity
        return self.gravity_min_velocity


DEFAULT_STANDARDS = CodeOfPractice()
