"""
Simulated agent signal for demos and offline renders.

Cycles through every agent state on a fixed period and produces a wobbling
raw audio level, refreshed on its own slower cadence the way a separate
audio-analysis callback would.
"""

import math
import random
from typing import Optional

from voiceorb.core.palette import AgentState
from voiceorb.scheduler import HostInputs

STATE_CYCLE = (
    AgentState.DISCONNECTED,
    AgentState.CONNECTING,
    AgentState.INITIALIZING,
    AgentState.LISTENING,
    AgentState.THINKING,
    AgentState.SPEAKING,
)


class DemoSignal:
    """
    Time-driven (state, audio level) producer.

    Args:
        size: Logical canvas size reported to the engine.
        state_period: Seconds spent in each state.
        level_period: Seconds between audio level refreshes.
        seed: Random seed for the level noise.
    """

    def __init__(
        self,
        size: int = 400,
        state_period: float = 3.0,
        level_period: float = 0.1,
        seed: Optional[int] = None,
    ):
        self.size = size
        self.state_period = state_period
        self.level_period = level_period
        self.rng = random.Random(seed)

        self._level = 0.0
        self._level_time: Optional[float] = None

    def state_at(self, t: float) -> AgentState:
        index = int(max(0.0, t) // self.state_period) % len(STATE_CYCLE)
        return STATE_CYCLE[index]

    def level_at(self, t: float) -> float:
        """Raw level in roughly [-0.5, 1.0]; held between refreshes."""
        if self._level_time is None or t - self._level_time >= self.level_period:
            self._level = math.sin(t) * 0.5 + self.rng.random() * 0.5
            self._level_time = t
        return self._level

    def inputs_at(self, t: float) -> HostInputs:
        """Inputs at ``t`` seconds since the demo started."""
        return HostInputs(size=self.size, state=self.state_at(t), audio_level=self.level_at(t))
