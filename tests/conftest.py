"""Pytest configuration and shared fixtures."""

import random

import pytest

from voiceorb.config import EngineConfig
from voiceorb.core.palette import AgentState
from voiceorb.scheduler import HostInputs
from voiceorb.surface import RecordingSurface

TEST_SEED = 42


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(TEST_SEED)


@pytest.fixture
def config() -> EngineConfig:
    """Small, seeded engine config."""
    return EngineConfig(size=120, particle_count=60, seed=TEST_SEED)


@pytest.fixture
def recording() -> RecordingSurface:
    return RecordingSurface(width=120, height=120)


@pytest.fixture
def speaking_loud() -> HostInputs:
    """Speaking at full raw level (normalizes to 1.0)."""
    return HostInputs(size=120, state=AgentState.SPEAKING, audio_level=1.0)


@pytest.fixture
def listening_quiet() -> HostInputs:
    """Listening at minimum raw level (normalizes to 0.0)."""
    return HostInputs(size=120, state=AgentState.LISTENING, audio_level=-1.0)
