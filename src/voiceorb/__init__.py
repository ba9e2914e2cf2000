"""Audio-reactive voice agent visualizer: pulsing sphere with orbiting particles."""

from voiceorb.config import EngineConfig, load_config, make_config
from voiceorb.core.audio import normalize
from voiceorb.core.palette import AgentState, Color, lookup, parse_state
from voiceorb.core.particles import ParticleSystem
from voiceorb.core.sphere import SphereRenderer
from voiceorb.io.exporter import FrameExporter, render_frames
from voiceorb.raster import RasterSurface
from voiceorb.scheduler import (
    AnimationScheduler,
    EngineState,
    HostInputs,
    ManualFrameHost,
    render_frame,
)
from voiceorb.surface import RecordingSurface

__version__ = "0.1.0"
__all__ = [
    "AgentState",
    "AnimationScheduler",
    "Color",
    "EngineConfig",
    "EngineState",
    "FrameExporter",
    "HostInputs",
    "ManualFrameHost",
    "ParticleSystem",
    "RasterSurface",
    "RecordingSurface",
    "SphereRenderer",
    "load_config",
    "lookup",
    "make_config",
    "normalize",
    "parse_state",
    "render_frame",
    "render_frames",
]
