"""Tests for the frame loop, clock and burst triggering."""

import dataclasses
import math

import pytest

from voiceorb.config import EngineConfig
from voiceorb.core.palette import AgentState
from voiceorb.scheduler import (
    AnimationClock,
    AnimationScheduler,
    EngineState,
    HostInputs,
    ManualFrameHost,
    render_frame,
)
from voiceorb.surface import Clear, FillCircle, RecordingSurface, StrokeQuadratic


class _Inputs:
    """Mutable input source standing in for the host."""

    def __init__(self, inputs: HostInputs):
        self.value = inputs
        self.reads = 0

    def __call__(self) -> HostInputs:
        self.reads += 1
        return self.value


def _scheduler(config, inputs, surface=None):
    host = ManualFrameHost()
    surface = surface or RecordingSurface(config.backing_size(inputs.size), config.backing_size(inputs.size))
    scheduler = AnimationScheduler(config, host, _Inputs(inputs), lambda dim: surface)
    return scheduler, host, surface


class TestHostInputs:
    def test_parses_state_name(self):
        assert HostInputs(size=100, state="thinking").state is AgentState.THINKING

    def test_rejects_unknown_state(self):
        with pytest.raises(ValueError):
            HostInputs(size=100, state="sleeping")

    def test_rejects_bad_size(self):
        with pytest.raises(ValueError):
            HostInputs(size=0, state="speaking")

    def test_frozen(self, speaking_loud):
        with pytest.raises(dataclasses.FrozenInstanceError):
            speaking_loud.state = "thinking"
        assert speaking_loud.state is AgentState.SPEAKING


class TestClock:
    def test_advance(self):
        clock = AnimationClock()
        cfg = EngineConfig()
        for _ in range(10):
            clock.advance(cfg)
        assert clock.visual_time == pytest.approx(0.1)
        assert clock.pulse_phase == pytest.approx(0.5)
        assert clock.rotation_phase == pytest.approx(0.1)
        assert clock.explosion_accumulator == 0.0


class TestRenderFrame:
    def test_draw_order(self, config, listening_quiet):
        engine = EngineState.create(config, listening_quiet.size)
        surface = RecordingSurface(120, 120)
        result = render_frame(engine, listening_quiet, surface)

        cmds = surface.commands
        assert isinstance(cmds[0], Clear)
        # glow, core first; two highlights last
        assert cmds[1].paint == result.geometry.glow
        assert cmds[2].paint == result.geometry.core
        assert [c.paint for c in cmds[-2:]] == [h.gradient for h in result.geometry.highlights]
        middle = cmds[3:-2]
        assert middle
        assert all(isinstance(c, (FillCircle, StrokeQuadratic)) for c in middle)

    def test_geometry_from_backing_size(self, listening_quiet):
        cfg = EngineConfig(size=120, pixel_ratio=2.0, particle_count=0)
        engine = EngineState.create(cfg, 120)
        result = render_frame(engine, listening_quiet, RecordingSurface(240, 240))
        assert result.geometry.center == (120.0, 120.0)
        assert result.geometry.sphere_radius == pytest.approx(80.0)

    def test_accumulator_and_bursts(self, config, speaking_loud):
        engine = EngineState.create(config, speaking_loud.size)
        surface = RecordingSurface(120, 120)

        results = [render_frame(engine, speaking_loud, surface) for _ in range(20)]
        assert all(r.bursts == 0 for r in results[:19])
        # Accumulator crosses the threshold on the 20th frame
        assert 5 <= results[19].bursts <= 15
        assert engine.particles.exploding_count == results[19].bursts
        assert engine.clock.explosion_accumulator == 0.0

    def test_no_bursts_unless_speaking(self, config):
        inputs = HostInputs(size=120, state=AgentState.THINKING, audio_level=1.0)
        engine = EngineState.create(config, inputs.size)
        surface = RecordingSurface(120, 120)
        for _ in range(40):
            assert render_frame(engine, inputs, surface).bursts == 0
        assert engine.clock.explosion_accumulator == pytest.approx(4.0)

        inputs = HostInputs(size=120, state=AgentState.SPEAKING, audio_level=1.0)
        assert render_frame(engine, inputs, surface).bursts > 0
        assert engine.clock.explosion_accumulator == 0.0

    def test_baseline_never_bursts(self, speaking_loud):
        cfg = EngineConfig(size=120, particle_count=60, seed=1, explosions_enabled=False)
        engine = EngineState.create(cfg, 120)
        surface = RecordingSurface(120, 120)
        for _ in range(60):
            render_frame(engine, speaking_loud, surface)
        assert engine.particles.exploding_count == 0
        assert engine.clock.explosion_accumulator == 0.0

    def test_quiet_particles_in_band(self, listening_quiet):
        cfg = EngineConfig(size=300, particle_count=100, seed=42)
        engine = EngineState.create(cfg, 300)
        inputs = HostInputs(size=300, state=AgentState.LISTENING, audio_level=-1.0)
        render_frame(engine, inputs, RecordingSurface(300, 300))
        for p in engine.particles.particles:
            if p.active:
                assert 80.0 - 1e-9 <= math.hypot(p.x - 150, p.y - 150) <= 120.0 + 1e-9

    def test_replay_is_deterministic(self, config, speaking_loud):
        def run():
            engine = EngineState.create(config, 120)
            surface = RecordingSurface(120, 120)
            for _ in range(30):
                result = render_frame(engine, speaking_loud, surface)
            return result.geometry, surface.commands

        assert run() == run()


class TestAnimationScheduler:
    def test_start_requests_frame(self, config, listening_quiet):
        scheduler, host, _ = _scheduler(config, listening_quiet)
        assert not scheduler.running
        scheduler.start()
        assert scheduler.running
        assert host.pending == 1
        assert scheduler.engine is not None

    def test_start_twice_is_noop(self, config, listening_quiet):
        scheduler, host, _ = _scheduler(config, listening_quiet)
        scheduler.start()
        scheduler.start()
        assert host.pending == 1

    def test_frame_skip_within_budget(self, config, listening_quiet):
        scheduler, host, surface = _scheduler(config, listening_quiet)
        scheduler.start()

        host.advance(1000.0)
        assert scheduler.frames_processed == 1
        drawn = len(surface.commands)

        host.advance(1016.0)
        assert scheduler.frames_processed == 1
        assert scheduler.frames_skipped == 1
        assert len(surface.commands) == drawn
        assert host.pending == 1

        host.advance(1034.0)
        assert scheduler.frames_processed == 2

    def test_first_frame_always_processed(self, config, listening_quiet):
        scheduler, host, _ = _scheduler(config, listening_quiet)
        scheduler.start()
        host.advance(0.0)
        assert scheduler.frames_processed == 1

    def test_stop_cancels_pending(self, config, listening_quiet):
        scheduler, host, _ = _scheduler(config, listening_quiet)
        scheduler.start()
        host.advance(0.0)
        scheduler.stop()
        assert not scheduler.running
        assert host.pending == 0
        assert host.advance(100.0) == 0

    def test_in_flight_callback_after_stop_draws_nothing(self, config, listening_quiet):
        scheduler, host, surface = _scheduler(config, listening_quiet)
        scheduler.start()
        host.advance(0.0)
        (queued,) = host.pending_callbacks()

        scheduler.stop()
        surface.reset()
        queued(500.0)

        assert surface.commands == []
        assert host.pending == 0
        assert scheduler.frames_processed == 1

    def test_stale_callback_after_restart(self, config, listening_quiet):
        scheduler, host, surface = _scheduler(config, listening_quiet)
        scheduler.start()
        host.advance(0.0)
        (stale,) = host.pending_callbacks()

        scheduler.stop()
        scheduler.start()
        processed = scheduler.frames_processed
        stale(100.0)

        assert scheduler.frames_processed == processed
        assert host.pending == 1

        scheduler.stop()
        assert host.pending == 0

    def test_restart_keeps_particles_and_clock(self, config, listening_quiet):
        scheduler, host, _ = _scheduler(config, listening_quiet)
        scheduler.start()
        for i in range(5):
            host.advance(i * 40.0)
        engine = scheduler.engine
        particles = engine.particles
        visual_time = engine.clock.visual_time

        scheduler.stop()
        scheduler.start()
        assert scheduler.engine is engine
        assert scheduler.engine.particles is particles
        assert scheduler.engine.clock.visual_time == visual_time

        host.advance(10_000.0)
        assert scheduler.engine.clock.visual_time > visual_time

    def test_surface_unavailable_retries(self, config, listening_quiet):
        host = ManualFrameHost()
        ready = {"surface": None}
        scheduler = AnimationScheduler(config, host, lambda: listening_quiet, lambda dim: ready["surface"])
        scheduler.start()

        host.advance(0.0)
        assert scheduler.frames_processed == 0
        assert host.pending == 1

        ready["surface"] = RecordingSurface(120, 120)
        host.advance(5.0)
        assert scheduler.frames_processed == 1
        assert ready["surface"].commands

    def test_inputs_read_per_processed_frame(self, config, listening_quiet):
        scheduler, host, _ = _scheduler(config, listening_quiet)
        source = scheduler.input_source
        scheduler.start()
        reads = source.reads
        host.advance(0.0)
        host.advance(1.0)
        assert source.reads == reads + 1

    def test_state_changes_pick_up_palette(self, config, listening_quiet):
        scheduler, host, _ = _scheduler(config, listening_quiet)
        scheduler.start()
        host.advance(0.0)
        first = scheduler.last_result.geometry.core

        scheduler.input_source.value = HostInputs(size=120, state=AgentState.SPEAKING, audio_level=-1.0)
        host.advance(100.0)
        assert scheduler.last_result.geometry.core.stops != first.stops
