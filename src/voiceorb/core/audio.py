"""
Audio-level mapping.

The engine consumes a single raw amplitude in roughly [-1, 1] and turns it
into a bounded intensity in [0, 1]. Every audio-reactive quantity (sphere
size, orbit speed, particle size/opacity, burst energy) derives from that
one value through its own coefficient in ``Reactivity``.
"""

import math
from dataclasses import dataclass


def normalize(raw_level: float) -> float:
    """
    Map a raw audio level to visual intensity.

    Computes ``clamp((raw + 1) / 2, 0, 1)``. Out-of-range input is clamped;
    NaN maps to 0.

    Args:
        raw_level: Raw amplitude, nominally in [-1, 1].

    Returns:
        Normalized level in [0, 1].
    """
    level = float(raw_level)
    if math.isnan(level):
        return 0.0
    return max(0.0, min(1.0, (level + 1.0) / 2.0))


@dataclass(frozen=True)
class Reactivity:
    """Amplification coefficients applied to the normalized level."""

    sphere_growth: float = 0.3  # Core radius gain
    orbit_speed: float = 0.5  # Angular speed gain
    orbit_distance: float = 0.4  # Orbit radius gain
    particle_size: float = 0.7  # Dot radius gain
    particle_opacity: float = 0.3  # Dot opacity gain
    max_particle_opacity: float = 0.9
    arc_width: float = 2.0  # Stroke width gain (base width 1)
    arc_opacity: float = 0.6  # Stroke alpha relative to its dot
    arc_control_distance: float = 1.2
    arc_sway: float = 0.1

    def sphere_radius(self, base_radius: float, level: float) -> float:
        return base_radius * (1.0 + level * self.sphere_growth)

    def orbit_radius(self, distance: float, level: float) -> float:
        return distance * (1.0 + level * self.orbit_distance)


DEFAULT_REACTIVITY = Reactivity()
