"""Tests for audio level normalization."""

import math

import pytest

from voiceorb.core.audio import DEFAULT_REACTIVITY, Reactivity, normalize


class TestNormalize:
    @pytest.mark.parametrize(
        "raw, expected",
        [(-1.0, 0.0), (0.0, 0.5), (1.0, 1.0), (0.5, 0.75)],
    )
    def test_nominal_range(self, raw, expected):
        assert normalize(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [-50.0, -1.5, 1.5, 80.0, math.inf, -math.inf])
    def test_out_of_range_clamped(self, raw):
        assert 0.0 <= normalize(raw) <= 1.0

    def test_nan_is_silent(self):
        assert normalize(float("nan")) == 0.0

    def test_monotonic(self):
        raws = [i / 10.0 for i in range(-30, 31)]
        values = [normalize(r) for r in raws]
        assert all(a <= b for a, b in zip(values, values[1:]))


class TestReactivity:
    def test_sphere_radius(self):
        assert DEFAULT_REACTIVITY.sphere_radius(100.0, 0.0) == 100.0
        assert DEFAULT_REACTIVITY.sphere_radius(100.0, 1.0) == pytest.approx(130.0)

    def test_orbit_radius(self):
        assert DEFAULT_REACTIVITY.orbit_radius(100.0, 1.0) == pytest.approx(140.0)

    def test_overridable(self):
        calm = Reactivity(sphere_growth=0.0)
        assert calm.sphere_radius(50.0, 1.0) == 50.0
