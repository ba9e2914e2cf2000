"""Tests for the state palette and color values."""

import pytest

from voiceorb.core.palette import (
    PARTICLE_COLORS,
    STATE_COLORS,
    AgentState,
    Color,
    StateColors,
    lookup,
    parse_state,
)


class TestColor:
    def test_with_alpha_returns_copy(self):
        c = Color(10, 20, 30, 0.8)
        faded = c.with_alpha(0.25)
        assert faded.as_rgba() == (10.0, 20.0, 30.0, 0.25)
        assert c.a == 0.8

    def test_with_alpha_clamps(self):
        c = Color(10, 20, 30, 0.8)
        assert c.with_alpha(-3).a == 0.0
        assert c.with_alpha(7).a == 1.0

    def test_rgba8(self):
        assert Color(255, 128, 0, 0.5).as_rgba8() == (255, 128, 0, 128)

    def test_immutable(self):
        c = Color(1, 2, 3)
        with pytest.raises(AttributeError):
            c.r = 5


class TestLookup:
    def test_total_over_states(self):
        for state in AgentState:
            assert isinstance(lookup(state), StateColors)
        assert set(STATE_COLORS) == set(AgentState)

    def test_pure(self):
        for state in AgentState:
            assert lookup(state) == lookup(state)

    def test_stop_alphas(self):
        colors = lookup(AgentState.SPEAKING)
        assert colors.primary.a == 0.8
        assert colors.secondary.a == 0.5
        assert colors.tertiary.a == 0.3
        assert colors.glow.a == 0.4

    def test_states_are_distinct(self):
        primaries = {lookup(s).primary for s in AgentState}
        assert len(primaries) == len(AgentState)

    def test_speaking_is_pink(self):
        primary = lookup(AgentState.SPEAKING).primary
        assert primary.r > primary.g


class TestParseState:
    def test_accepts_member(self):
        assert parse_state(AgentState.THINKING) is AgentState.THINKING

    @pytest.mark.parametrize("name", ["speaking", "SPEAKING", " Speaking "])
    def test_accepts_names(self, name):
        assert parse_state(name) is AgentState.SPEAKING

    def test_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unknown agent state"):
            parse_state("dancing")


def test_particle_palette_size():
    assert 5 <= len(PARTICLE_COLORS) <= 8
    assert all(c.a == 0.8 for c in PARTICLE_COLORS)
