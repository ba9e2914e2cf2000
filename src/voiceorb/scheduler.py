"""
Frame-rate governed animation loop.

The host owns the display-refresh notifications (``FrameHost``); the
scheduler turns each notification into at most one processed frame per
frame budget. All mutable animation state lives in an explicit
``EngineState`` that ``render_frame`` advances, so a frame can be produced
from (state, inputs, surface) alone without any live host.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from voiceorb.config import EngineConfig
from voiceorb.core.audio import normalize
from voiceorb.core.palette import AgentState, parse_state
from voiceorb.core.particles import ParticleConfig, ParticleSystem
from voiceorb.core.sphere import SphereGeometry, SphereRenderer

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


@dataclass
class AnimationClock:
    """Phases advanced once per processed frame."""

    visual_time: float = 0.0
    rotation_phase: float = 0.0
    pulse_phase: float = 0.0
    explosion_accumulator: float = 0.0

    def advance(self, cfg: EngineConfig):
        self.visual_time += cfg.visual_time_step
        self.pulse_phase += cfg.pulse_step
        self.rotation_phase += cfg.rotation_step


@dataclass(frozen=True)
class HostInputs:
    """
    Snapshot of the host-driven values, read once per frame.

    Immutable; hosts publish a new snapshot instead of editing one.
    """

    size: int
    state: AgentState
    audio_level: float = 0.0

    def __post_init__(self):
        if int(self.size) <= 0:
            raise ValueError(f"size must be positive, got {self.size}")
        object.__setattr__(self, "state", parse_state(self.state))
        object.__setattr__(self, "size", int(self.size))


@dataclass
class EngineState:
    """Everything a frame mutates: clock, particles, random source."""

    config: EngineConfig
    clock: AnimationClock
    particles: ParticleSystem
    sphere: SphereRenderer = field(default_factory=SphereRenderer)
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def create(cls, config: EngineConfig, size: Optional[int] = None) -> "EngineState":
        """
        Build a fresh engine for a logical canvas size.

        Particle orbits are laid out from the backing-surface dimension
        (logical size times the resolved pixel ratio).
        """
        rng = random.Random(config.seed)
        dim = config.backing_size(size)
        particle_cfg = ParticleConfig(
            burst_base=config.burst_base,
            burst_scale=config.burst_scale,
            arc_stride=config.arc_stride,
            explosions_enabled=config.explosions_enabled,
        )
        particles = ParticleSystem.initialize(
            config.particle_count,
            dim * config.base_radius_fraction,
            rng,
            config=particle_cfg,
            center=(dim / 2, dim / 2),
        )
        return cls(config=config, clock=AnimationClock(), particles=particles, rng=rng)


@dataclass
class FrameResult:
    """What a processed frame did."""

    level: float
    bursts: int
    geometry: SphereGeometry


def render_frame(engine: EngineState, inputs: HostInputs, surface) -> FrameResult:
    """
    Advance the engine by one frame and draw it.

    Order: clock, audio normalization, burst trigger, clear, glow + core,
    particles and arcs, highlights.

    Args:
        engine: Engine state, mutated in place.
        inputs: Host inputs for this frame.
        surface: Drawing surface sized to the backing dimension.

    Returns:
        FrameResult with the normalized level, bursts started and the
        sphere geometry used.
    """
    cfg = engine.config
    clock = engine.clock
    clock.advance(cfg)

    level = normalize(inputs.audio_level)

    bursts = 0
    if cfg.explosions_enabled:
        clock.explosion_accumulator += level * cfg.explosion_step
        if clock.explosion_accumulator > cfg.explosion_threshold and inputs.state is AgentState.SPEAKING:
            bursts = engine.particles.trigger_bursts(level, engine.rng)
            clock.explosion_accumulator = 0.0
            logger.debug("Burst: %d particles at level %.2f", bursts, level)

    surface.clear()

    dim = cfg.backing_size(inputs.size)
    center = (dim / 2, dim / 2)
    geometry = engine.sphere.compute_geometry(
        center,
        dim * cfg.base_radius_fraction,
        level,
        inputs.state,
        clock.pulse_phase,
    )
    engine.sphere.render_body(surface, geometry)

    engine.particles.center = center
    engine.particles.tick(cfg.visual_time_step, level, clock.visual_time)
    engine.particles.draw(surface)

    engine.sphere.render_highlights(surface, geometry)

    return FrameResult(level=level, bursts=bursts, geometry=geometry)


class FrameHost(Protocol):
    """Display-refresh notification source."""

    def request_frame(self, callback: FrameCallback) -> int: ...

    def cancel_frame(self, handle: int) -> None: ...


class ManualFrameHost:
    """
    Frame host driven explicitly by ``advance(timestamp)``.

    Callbacks requested before an ``advance`` call run during it; callbacks
    they request in turn wait for the next ``advance``.
    """

    def __init__(self):
        self._pending: dict[int, FrameCallback] = {}
        self._next_handle = 1
        self.now = 0.0

    def request_frame(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def pending_callbacks(self) -> list[FrameCallback]:
        return list(self._pending.values())

    def advance(self, timestamp: float) -> int:
        """Run all queued callbacks at ``timestamp`` (ms). Returns how many ran."""
        self.now = timestamp
        batch, self._pending = self._pending, {}
        for callback in batch.values():
            callback(timestamp)
        return len(batch)


class AnimationScheduler:
    """
    Drives ``render_frame`` from host frame callbacks at a capped rate.

    States: stopped -> running -> stopped. Stopping cancels the pending
    callback and leaves the engine intact, so a restart resumes the same
    particles and clock.

    Args:
        config: Engine configuration.
        host: Source of frame callbacks.
        input_source: Returns the current HostInputs.
        surface_provider: Returns a surface for a backing dimension, or
            None while no surface is available.
    """

    def __init__(
        self,
        config: EngineConfig,
        host: FrameHost,
        input_source: Callable[[], HostInputs],
        surface_provider: Callable[[int], object],
    ):
        self.cfg = config
        self.host = host
        self.input_source = input_source
        self.surface_provider = surface_provider

        self.engine: Optional[EngineState] = None
        self.running = False
        self.last_result: Optional[FrameResult] = None
        self.frames_processed = 0
        self.frames_skipped = 0

        self._handle: Optional[int] = None
        self._generation = 0
        self._last_frame_time: Optional[float] = None

    def start(self):
        """Begin requesting frames. No-op if already running."""
        if self.running:
            return

        if self.engine is None:
            inputs = self.input_source()
            self.engine = EngineState.create(self.cfg, inputs.size)
            logger.info(
                "Engine initialized, size: %d, pixel ratio: %.2f, particles: %d",
                inputs.size,
                self.cfg.resolved_pixel_ratio,
                len(self.engine.particles),
            )

        self.running = True
        self._generation += 1
        self._last_frame_time = None
        self._request()
        logger.debug("Animation started")

    def stop(self):
        """Cancel the pending frame request. No-op if already stopped."""
        if not self.running:
            return
        self.running = False
        self._generation += 1
        if self._handle is not None:
            self.host.cancel_frame(self._handle)
            self._handle = None
        logger.debug(
            "Animation stopped after %d frames (%d skipped)",
            self.frames_processed,
            self.frames_skipped,
        )

    def _request(self):
        generation = self._generation
        self._handle = self.host.request_frame(lambda ts: self._on_frame(ts, generation))

    def _on_frame(self, timestamp: float, generation: int):
        # A callback from before the last stop() must neither draw nor reschedule
        if not self.running or generation != self._generation:
            return
        self._handle = None

        budget = self.cfg.frame_budget_ms
        if self._last_frame_time is not None and timestamp - self._last_frame_time < budget:
            self.frames_skipped += 1
        else:
            self._process(timestamp)

        if self.running:
            self._request()

    def _process(self, timestamp: float):
        inputs = self.input_source()
        surface = self.surface_provider(self.cfg.backing_size(inputs.size))
        if surface is None:
            logger.debug("Surface not ready at %.1f ms, retrying next frame", timestamp)
            self.frames_skipped += 1
            return

        self._last_frame_time = timestamp
        self.last_result = render_frame(self.engine, inputs, surface)
        self.frames_processed += 1
