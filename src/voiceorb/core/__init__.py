"""Core engine components: palette, audio mapping, particles, sphere."""

from voiceorb.core.audio import DEFAULT_REACTIVITY, Reactivity, normalize
from voiceorb.core.palette import (
    PARTICLE_COLORS,
    STATE_COLORS,
    AgentState,
    Color,
    StateColors,
    lookup,
    parse_state,
)
from voiceorb.core.particles import (
    ArcStroke,
    ExplosionState,
    Particle,
    ParticleConfig,
    ParticleDot,
    ParticleSystem,
)
from voiceorb.core.sphere import SphereGeometry, SphereRenderer, SphereStyle
