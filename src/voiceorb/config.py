"""
Engine configuration and named profiles.

``baseline`` and ``full`` reproduce the two shipped variants of the
visualizer: the plain orbiting sphere and the burst-capable one.
"""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional, Union

# Device pixel ratio is never resolved above this
MAX_PIXEL_RATIO = 2.0


@dataclass
class EngineConfig:
    """Configuration for the visualizer engine."""

    size: int = 400  # Logical square canvas size
    pixel_ratio: float = 1.0
    particle_count: int = 120
    explosions_enabled: bool = True
    seed: Optional[int] = None

    # Frame pacing
    fps_cap: float = 30.0

    # Clock steps per processed frame
    visual_time_step: float = 0.01
    pulse_step: float = 0.05
    rotation_step: float = 0.01

    # Burst triggering
    explosion_threshold: float = 2.0
    explosion_step: float = 0.1  # Accumulator gain per unit level
    burst_base: int = 5
    burst_scale: int = 10

    # Layout
    arc_stride: int = 3
    base_radius_fraction: float = 1 / 3

    def __post_init__(self):
        if int(self.size) <= 0:
            raise ValueError(f"size must be positive, got {self.size}")
        if self.fps_cap <= 0:
            raise ValueError(f"fps_cap must be positive, got {self.fps_cap}")
        if self.particle_count < 0:
            raise ValueError(f"particle_count must be >= 0, got {self.particle_count}")
        self.size = int(self.size)

    @property
    def frame_budget_ms(self) -> float:
        """Minimum interval between processed frames."""
        return 1000.0 / self.fps_cap

    @property
    def resolved_pixel_ratio(self) -> float:
        return resolve_pixel_ratio(self.pixel_ratio)

    def backing_size(self, size: Optional[int] = None) -> int:
        """Backing-surface dimension for a logical size."""
        logical = self.size if size is None else size
        return max(1, int(logical * self.resolved_pixel_ratio))


def resolve_pixel_ratio(ratio: float) -> float:
    """Clamp a device pixel ratio into [1, MAX_PIXEL_RATIO]."""
    try:
        ratio = float(ratio)
    except (TypeError, ValueError):
        return 1.0
    if ratio != ratio:  # NaN
        return 1.0
    return max(1.0, min(MAX_PIXEL_RATIO, ratio))


PROFILES: dict[str, dict[str, Any]] = {
    "baseline": {"particle_count": 100, "explosions_enabled": False},
    "full": {"particle_count": 120, "explosions_enabled": True},
}


def make_config(profile: str = "full", **overrides) -> EngineConfig:
    """
    Build a config from a named profile plus overrides.

    Raises:
        ValueError: Unknown profile or override key.
    """
    if profile not in PROFILES:
        raise ValueError(f"Unknown profile {profile!r} (expected one of: {', '.join(PROFILES)})")

    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    values = dict(PROFILES[profile])
    values.update(overrides)
    return EngineConfig(**values)


def load_config(path: Union[str, Path], profile: str = "full") -> EngineConfig:
    """
    Load a JSON object of overrides on top of a profile.

    Args:
        path: JSON file path.
        profile: Profile the overrides are applied to.

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: The file is not a JSON object or has unknown keys.
    """
    path = Path(path)
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")

    profile = data.pop("profile", profile)
    return make_config(profile, **data)


def with_overrides(config: EngineConfig, **overrides) -> EngineConfig:
    """Return a copy of ``config`` with non-None overrides applied."""
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})
