"""
Live pygame host for the visualizer.

The window's display loop plays the role of the display-refresh clock:
every loop iteration fires the pending frame callbacks with the current
tick count, the scheduler decides whether that refresh is a processed frame,
and the latest raster is blitted to the window.

Keys:
    1-6       select agent state (disconnected ... speaking)
    UP/DOWN   nudge the raw audio level
    D         toggle the simulated demo signal
    SPACE     start / stop the animation
    ESC       quit
"""

import logging
from typing import Optional

import pygame

from voiceorb.config import EngineConfig
from voiceorb.core.palette import AgentState
from voiceorb.demo import STATE_CYCLE, DemoSignal
from voiceorb.raster import RasterProvider
from voiceorb.scheduler import AnimationScheduler, HostInputs, ManualFrameHost

logger = logging.getLogger(__name__)

BACKGROUND = (255, 255, 255)
LEVEL_NUDGE = 0.1

STATE_KEYS = {
    pygame.K_1 + i: state for i, state in enumerate(STATE_CYCLE)
}


class ViewerControls:
    """Host-side input state mutated by key presses."""

    def __init__(self, size: int, state: AgentState, level: float, demo: Optional[DemoSignal]):
        self.size = size
        self.state = state
        self.level = level
        self.demo = demo
        self.demo_enabled = demo is not None
        self.seconds = 0.0

    def handle_key(self, key: int) -> bool:
        """Apply a key press. Returns False when the viewer should quit."""
        if key == pygame.K_ESCAPE:
            return False
        if key in STATE_KEYS:
            self.state = STATE_KEYS[key]
            self.demo_enabled = False
        elif key == pygame.K_UP:
            self.level = min(1.0, self.level + LEVEL_NUDGE)
            self.demo_enabled = False
        elif key == pygame.K_DOWN:
            self.level = max(-1.0, self.level - LEVEL_NUDGE)
            self.demo_enabled = False
        elif key == pygame.K_d:
            if self.demo is None:
                self.demo = DemoSignal(size=self.size)
            self.demo_enabled = not self.demo_enabled
        return True

    def inputs(self) -> HostInputs:
        if self.demo_enabled and self.demo is not None:
            return self.demo.inputs_at(self.seconds)
        return HostInputs(size=self.size, state=self.state, audio_level=self.level)


def run_viewer(
    config: EngineConfig,
    state: AgentState = AgentState.LISTENING,
    level: float = 0.0,
    demo: bool = False,
    refresh_rate: int = 60,
):
    """
    Open a window and animate until closed.

    Args:
        config: Engine configuration (size and pixel ratio size the window).
        state: Initial agent state.
        level: Initial raw audio level.
        demo: Start with the simulated demo signal.
        refresh_rate: Display loop rate; the engine caps itself below it.
    """
    pygame.init()
    dim = config.backing_size()
    screen = pygame.display.set_mode((dim, dim))
    pygame.display.set_caption("voiceorb  -  1-6 state  UP/DOWN level  D demo  SPACE pause  ESC quit")
    clock = pygame.time.Clock()

    controls = ViewerControls(
        config.size,
        state,
        level,
        DemoSignal(size=config.size, seed=config.seed) if demo else None,
    )
    host = ManualFrameHost()
    provider = RasterProvider()
    scheduler = AnimationScheduler(config, host, controls.inputs, provider)
    scheduler.start()

    logger.info("Viewer running at %dx%d, refresh %d Hz", dim, dim, refresh_rate)

    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_SPACE:
                        if scheduler.running:
                            scheduler.stop()
                        else:
                            scheduler.start()
                    elif not controls.handle_key(event.key):
                        running = False

            now = pygame.time.get_ticks()
            controls.seconds = now / 1000.0
            host.advance(float(now))

            screen.fill(BACKGROUND)
            if provider.surface is not None:
                rgba = provider.surface.to_array()
                frame = pygame.image.frombuffer(rgba.tobytes(), (rgba.shape[1], rgba.shape[0]), "RGBA")
                screen.blit(frame, (0, 0))
            pygame.display.flip()

            clock.tick(refresh_rate)
    finally:
        scheduler.stop()
        pygame.quit()
