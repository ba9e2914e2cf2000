"""
Orbiting particle simulation.

Particles orbit the sphere at a fixed base distance, flicker, and react to
the normalized audio level. While the agent speaks, accumulated audio energy
triggers explosion bursts: a random subset of particles is ejected outward
with a cubic ease-out and fades to nothing before rejoining its orbit.

Mapping:
- Audio level -> orbit speed, orbit radius, dot size, dot opacity
- Visual time -> flicker phase, arc sway
- Burst trigger -> radial ejection of 5-15 particles
"""

import math
import random
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Sequence, Union

from voiceorb.core.audio import DEFAULT_REACTIVITY, Reactivity
from voiceorb.core.palette import PARTICLE_COLORS, Color

# Nominal visual-time step; per-tick constants are defined against it.
VISUAL_TIME_STEP = 0.01


@dataclass
class ExplosionState:
    """Transient radial-ejection sub-state of a particle."""

    active: bool = False
    progress: float = 0.0
    speed: float = 0.02
    target_distance: float = 0.0


@dataclass
class Particle:
    """A single orbiting particle."""

    angle: float
    distance: float
    speed: float
    size: float
    opacity: float
    color: Color
    active: bool
    explosion: ExplosionState = field(default_factory=ExplosionState)

    # Derived each tick
    x: float = 0.0
    y: float = 0.0
    current_size: float = 0.0
    current_opacity: float = 0.0
    arc_opacity: float = 0.0  # Uncapped; only the dot is capped

    @property
    def exploding(self) -> bool:
        return self.explosion.active


@dataclass(frozen=True)
class ParticleConfig:
    """Population and motion tuning for the particle system."""

    distance_range: tuple[float, float] = (0.8, 1.2)  # x sphere base radius
    speed_range: tuple[float, float] = (0.001, 0.006)  # radians per tick
    size_range: tuple[float, float] = (1.0, 4.0)
    opacity_range: tuple[float, float] = (0.1, 0.9)
    active_probability: float = 0.7
    explosion_speed_range: tuple[float, float] = (0.01, 0.04)  # progress per tick
    explosion_reach_range: tuple[float, float] = (1.5, 3.0)  # x base distance
    flicker_rate: float = 5.0
    flicker_depth: float = 0.3
    burst_base: int = 5
    burst_scale: int = 10
    arc_stride: int = 3
    explosions_enabled: bool = True
    palette: tuple[Color, ...] = PARTICLE_COLORS


@dataclass(frozen=True)
class ParticleDot:
    """Renderable particle disk."""

    index: int
    center: tuple[float, float]
    radius: float
    color: Color


@dataclass(frozen=True)
class ArcStroke:
    """Renderable curved connection between two neighbouring particles."""

    index: int
    start: tuple[float, float]
    control: tuple[float, float]
    end: tuple[float, float]
    color: Color
    width: float


Renderable = Union[ParticleDot, ArcStroke]


def ease_out_cubic(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


class ParticleSystem:
    """
    Owns the particle population and advances it once per rendered frame.

    Particles are created once and never destroyed; inactive particles are
    skipped, explosions toggle on and off in place.
    """

    def __init__(
        self,
        particles: Sequence[Particle],
        config: Optional[ParticleConfig] = None,
        reactivity: Reactivity = DEFAULT_REACTIVITY,
        center: tuple[float, float] = (0.0, 0.0),
    ):
        self.particles = list(particles)
        self.cfg = config or ParticleConfig()
        self.reactivity = reactivity
        self.center = center

        # Inputs of the latest tick, used to lay out arcs
        self.level = 0.0
        self.elapsed = 0.0

    @classmethod
    def initialize(
        cls,
        count: int,
        base_radius: float,
        rng: random.Random,
        config: Optional[ParticleConfig] = None,
        reactivity: Reactivity = DEFAULT_REACTIVITY,
        center: tuple[float, float] = (0.0, 0.0),
    ) -> "ParticleSystem":
        """
        Create a population of ``count`` randomized particles.

        Args:
            count: Number of particles (0 is a legal, empty population).
            base_radius: Sphere base radius the orbits are scaled from.
            rng: Random source; a seeded instance makes the population
                reproducible.
            config: Tuning ranges. Uses defaults if None.
            reactivity: Audio amplification coefficients.
            center: Orbit center in surface pixels.
        """
        cfg = config or ParticleConfig()
        particles = []
        for _ in range(max(0, int(count))):
            angle = rng.uniform(0.0, 2 * math.pi)
            distance = base_radius * rng.uniform(*cfg.distance_range)
            speed = rng.uniform(*cfg.speed_range)
            size = rng.uniform(*cfg.size_range)
            opacity = rng.uniform(*cfg.opacity_range)
            color = rng.choice(cfg.palette)
            active = rng.random() < cfg.active_probability
            explosion = ExplosionState(
                speed=rng.uniform(*cfg.explosion_speed_range),
                target_distance=distance * rng.uniform(*cfg.explosion_reach_range),
            )
            particles.append(
                Particle(
                    angle=angle,
                    distance=distance,
                    speed=speed,
                    size=size,
                    opacity=opacity,
                    color=color,
                    active=active,
                    explosion=explosion,
                )
            )
        return cls(particles, cfg, reactivity, center)

    def __len__(self) -> int:
        return len(self.particles)

    @property
    def exploding_count(self) -> int:
        return sum(1 for p in self.particles if p.exploding)

    def tick(self, dt_visual: float, level: float, elapsed: float):
        """
        Advance every active particle by one frame.

        Args:
            dt_visual: Visual-time increment; increments scale by
                ``dt_visual / VISUAL_TIME_STEP``.
            level: Normalized audio level in [0, 1].
            elapsed: Accumulated visual time (flicker phase).
        """
        step = dt_visual / VISUAL_TIME_STEP
        rx = self.reactivity
        cx, cy = self.center
        self.level = level
        self.elapsed = elapsed

        for index, p in enumerate(self.particles):
            if not p.active:
                continue

            if p.exploding:
                p.explosion.progress += p.explosion.speed * step
                if p.explosion.progress >= 1.0:
                    # Burst over; rejoin the orbit below in this same tick
                    p.explosion.active = False
                    p.explosion.progress = 0.0
                else:
                    ease = ease_out_cubic(p.explosion.progress)
                    reach = p.distance + (p.explosion.target_distance - p.distance) * ease
                    p.x = cx + math.cos(p.angle) * reach
                    p.y = cy + math.sin(p.angle) * reach
                    p.current_size = p.size * (1.0 + ease)
                    p.current_opacity = p.opacity * (1.0 - ease)
                    continue

            p.angle += p.speed * (1.0 + level * rx.orbit_speed) * step
            orbit = rx.orbit_radius(p.distance, level)
            p.x = cx + math.cos(p.angle) * orbit
            p.y = cy + math.sin(p.angle) * orbit
            p.current_size = p.size * (1.0 + level * rx.particle_size)

            cfg = self.cfg
            flicker = (1.0 - cfg.flicker_depth) + math.sin(elapsed * cfg.flicker_rate + index) * cfg.flicker_depth
            p.arc_opacity = p.opacity * flicker * (1.0 + level * rx.particle_opacity)
            p.current_opacity = min(rx.max_particle_opacity, p.arc_opacity)

    def trigger_bursts(self, level: float, rng: random.Random) -> int:
        """
        Start explosions on a random subset of eligible particles.

        Selects ``floor(burst_base + level * burst_scale)`` particles among
        the active, non-exploding ones.

        Returns:
            Number of explosions started.
        """
        if not self.cfg.explosions_enabled:
            return 0

        wanted = int(math.floor(self.cfg.burst_base + level * self.cfg.burst_scale))
        eligible = [p for p in self.particles if p.active and not p.exploding]
        chosen = rng.sample(eligible, min(wanted, len(eligible)))
        for p in chosen:
            p.explosion.active = True
            p.explosion.progress = 0.0
        return len(chosen)

    def _arc_for(self, index: int, p: Particle) -> Optional[ArcStroke]:
        stride = self.cfg.arc_stride
        if stride <= 0 or index % stride != 0 or index >= len(self.particles) - 1:
            return None
        nxt = self.particles[index + 1]
        if not nxt.active or nxt.exploding:
            return None

        rx = self.reactivity
        cx, cy = self.center
        level = self.level
        next_orbit = rx.orbit_radius(nxt.distance, level)
        end = (cx + math.cos(nxt.angle) * next_orbit, cy + math.sin(nxt.angle) * next_orbit)

        mid_angle = (p.angle + nxt.angle) / 2
        reach = (
            rx.orbit_radius(p.distance, level)
            * rx.arc_control_distance
            * (1.0 + math.sin(self.elapsed * 2) * rx.arc_sway)
        )
        control = (cx + math.cos(mid_angle) * reach, cy + math.sin(mid_angle) * reach)

        return ArcStroke(
            index=index,
            start=(p.x, p.y),
            control=control,
            end=end,
            color=p.color.with_alpha(p.arc_opacity * rx.arc_opacity),
            width=1.0 + level * rx.arc_width,
        )

    def renderables(self) -> Iterator[Renderable]:
        """Yield dots (and their trailing arcs) in draw order."""
        for index, p in enumerate(self.particles):
            if not p.active:
                continue
            yield ParticleDot(
                index=index,
                center=(p.x, p.y),
                radius=p.current_size,
                color=p.color.with_alpha(p.current_opacity),
            )
            if p.exploding:
                continue
            arc = self._arc_for(index, p)
            if arc is not None:
                yield arc

    def for_each_renderable(self, callback: Callable[[Renderable], None]):
        for item in self.renderables():
            callback(item)

    def draw(self, surface) -> int:
        """Issue draw calls for every renderable. Returns the number issued."""
        count = 0
        for item in self.renderables():
            if isinstance(item, ParticleDot):
                if item.radius > 0:
                    surface.fill_circle(item.center, item.radius, item.color)
                    count += 1
            else:
                surface.stroke_quadratic(item.start, item.control, item.end, item.color, item.width)
                count += 1
        return count
