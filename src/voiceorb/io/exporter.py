"""
Offline frame rendering and export.

Frames come from the real scheduler driven by a ManualFrameHost with
timestamps one frame budget apart, so the exported animation paces exactly
like the live one. Export goes through Pillow: a numbered PNG sequence or
a looping animated GIF.
"""

import math
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Union

import numpy as np
from PIL import Image

from voiceorb.config import EngineConfig
from voiceorb.raster import RasterProvider
from voiceorb.scheduler import AnimationScheduler, HostInputs, ManualFrameHost

InputSpec = Union[HostInputs, Callable[[float], HostInputs]]


def render_frames(
    config: EngineConfig,
    inputs: InputSpec,
    n_frames: int,
    background: Optional[tuple[int, int, int]] = None,
    progress_callback: callable = None,
) -> Iterator[np.ndarray]:
    """
    Render ``n_frames`` processed frames as a generator.

    Args:
        config: Engine configuration.
        inputs: Fixed HostInputs, or a callable mapping seconds since start
            to HostInputs.
        n_frames: Number of frames to produce.
        background: Opaque RGB background; frames are RGBA when None.
        progress_callback: Optional callback(current, total).

    Yields:
        (H, W, 4) uint8 RGBA arrays, or (H, W, 3) RGB with a background.
    """
    host = ManualFrameHost()
    provider = RasterProvider()
    clock = {"ms": 0.0}

    def source() -> HostInputs:
        if callable(inputs):
            return inputs(clock["ms"] / 1000.0)
        return inputs

    scheduler = AnimationScheduler(config, host, source, provider)
    # Whole milliseconds so consecutive timestamps never fall under budget
    step = math.ceil(config.frame_budget_ms)

    scheduler.start()
    try:
        produced = 0
        while produced < n_frames:
            before = scheduler.frames_processed
            host.advance(clock["ms"])
            if scheduler.frames_processed > before:
                produced += 1
                surface = provider.surface
                if background is None:
                    yield surface.to_array()
                else:
                    yield surface.composite_on(background)
                if progress_callback:
                    progress_callback(produced, n_frames)
            clock["ms"] += step
    finally:
        scheduler.stop()


class FrameExporter:
    """
    Writes rendered frames to disk.

    Args:
        fps: Playback rate stored in animated outputs.
    """

    def __init__(self, fps: float = 30.0):
        self.fps = fps

    @property
    def frame_duration_ms(self) -> int:
        return max(1, int(round(1000.0 / self.fps)))

    def _to_image(self, frame: np.ndarray) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(frame))

    def save_png_sequence(
        self,
        frames: Sequence[np.ndarray],
        directory: Union[str, Path],
        prefix: str = "frame",
    ) -> list[Path]:
        """
        Save frames as ``<prefix>_00000.png`` ... in ``directory``.

        Returns:
            Written paths in frame order.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        paths = []
        for i, frame in enumerate(frames):
            path = directory / f"{prefix}_{i:05d}.png"
            self._to_image(frame).save(path)
            paths.append(path)
        return paths

    def save_gif(self, frames: Sequence[np.ndarray], path: Union[str, Path]) -> Path:
        """
        Save frames as a looping animated GIF.

        Raises:
            ValueError: No frames given.
        """
        images = [self._to_image(f).convert("RGB") for f in frames]
        if not images:
            raise ValueError("Cannot write a GIF with no frames")

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        images[0].save(
            path,
            save_all=True,
            append_images=images[1:],
            duration=self.frame_duration_ms,
            loop=0,
        )
        return path
