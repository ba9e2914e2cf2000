"""
State-to-palette mapping.

Each agent state owns a four-stop palette (primary, secondary, tertiary,
glow) used by the sphere renderer. Colors are structured RGBA values so
that per-frame alpha changes never touch a text representation.
"""

from dataclasses import dataclass, replace
from enum import Enum


class AgentState(str, Enum):
    """Discrete lifecycle phase of the voice agent."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    INITIALIZING = "initializing"
    LISTENING = "listening"
    THINKING = "thinking"
    SPEAKING = "speaking"


@dataclass(frozen=True)
class Color:
    """RGBA color. Channels r, g, b in 0-255, alpha in 0-1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def with_alpha(self, alpha: float) -> "Color":
        """Return a copy with a new (clamped) alpha."""
        return replace(self, a=max(0.0, min(1.0, float(alpha))))

    def as_rgba(self) -> tuple[float, float, float, float]:
        return (float(self.r), float(self.g), float(self.b), float(self.a))

    def as_rgba8(self) -> tuple[int, int, int, int]:
        return (
            int(round(self.r)),
            int(round(self.g)),
            int(round(self.b)),
            int(round(self.a * 255)),
        )


WHITE = Color(255, 255, 255, 1.0)
TRANSPARENT_WHITE = WHITE.with_alpha(0.0)


@dataclass(frozen=True)
class StateColors:
    """Four-stop palette for a single agent state."""

    primary: Color
    secondary: Color
    tertiary: Color
    glow: Color


def _stops(primary, secondary, tertiary, glow) -> StateColors:
    return StateColors(
        primary=Color(*primary, 0.8),
        secondary=Color(*secondary, 0.5),
        tertiary=Color(*tertiary, 0.3),
        glow=Color(*glow, 0.4),
    )


STATE_COLORS: dict[AgentState, StateColors] = {
    AgentState.DISCONNECTED: _stops((150, 150, 180), (130, 130, 160), (120, 120, 150), (140, 140, 170)),
    AgentState.CONNECTING: _stops((100, 170, 255), (80, 150, 235), (60, 130, 215), (90, 160, 245)),
    AgentState.INITIALIZING: _stops((110, 150, 255), (90, 130, 235), (70, 110, 215), (100, 140, 245)),
    AgentState.LISTENING: _stops((120, 210, 255), (100, 190, 235), (80, 170, 215), (110, 200, 245)),
    AgentState.THINKING: _stops((180, 130, 255), (160, 110, 235), (140, 90, 215), (170, 120, 245)),
    AgentState.SPEAKING: _stops((255, 130, 210), (235, 110, 190), (215, 90, 170), (245, 120, 200)),
}

# Orbiting particle palette: blue -> violet -> pink, plus sky blue and turquoise
PARTICLE_COLORS: tuple[Color, ...] = (
    Color(100, 180, 255, 0.8),  # Light blue
    Color(140, 120, 255, 0.8),  # Blue-violet
    Color(180, 100, 255, 0.8),  # Violet
    Color(220, 100, 255, 0.8),  # Violet-pink
    Color(255, 100, 220, 0.8),  # Hot pink
    Color(255, 150, 180, 0.8),  # Light pink
    Color(100, 220, 255, 0.8),  # Sky blue
    Color(120, 255, 220, 0.8),  # Turquoise
)


def parse_state(value: "AgentState | str") -> AgentState:
    """
    Convert a host-supplied value to an AgentState.

    Args:
        value: AgentState member or its string name (e.g. "speaking").

    Returns:
        The matching AgentState.

    Raises:
        ValueError: If the value names no known state.
    """
    if isinstance(value, AgentState):
        return value
    try:
        return AgentState(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in AgentState)
        raise ValueError(f"Unknown agent state {value!r} (expected one of: {valid})") from None


def lookup(state: AgentState) -> StateColors:
    """Return the palette for a state."""
    return STATE_COLORS[state]
