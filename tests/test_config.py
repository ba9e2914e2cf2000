"""Tests for engine configuration and profiles."""

import json

import pytest

from voiceorb.config import (
    MAX_PIXEL_RATIO,
    PROFILES,
    EngineConfig,
    load_config,
    make_config,
    resolve_pixel_ratio,
    with_overrides,
)


class TestEngineConfig:
    def test_defaults(self):
        cfg = EngineConfig()
        assert cfg.size == 400
        assert cfg.frame_budget_ms == pytest.approx(33.333, abs=1e-3)
        assert cfg.explosion_threshold == 2.0
        assert cfg.explosion_step == 0.1
        assert cfg.arc_stride == 3

    @pytest.mark.parametrize(
        "kwargs",
        [{"size": 0}, {"size": -10}, {"fps_cap": 0}, {"particle_count": -1}],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

    @pytest.mark.parametrize(
        "ratio, expected",
        [(1.0, 1.0), (1.5, 1.5), (3.0, MAX_PIXEL_RATIO), (0.5, 1.0), (float("nan"), 1.0), (None, 1.0)],
    )
    def test_pixel_ratio(self, ratio, expected):
        assert resolve_pixel_ratio(ratio) == expected

    def test_backing_size(self):
        cfg = EngineConfig(size=400, pixel_ratio=3.0)
        assert cfg.backing_size() == 800
        assert cfg.backing_size(100) == 200

    def test_with_overrides_skips_none(self):
        cfg = with_overrides(EngineConfig(), size=None, seed=7)
        assert cfg.size == 400
        assert cfg.seed == 7


class TestProfiles:
    def test_baseline_has_no_bursts(self):
        cfg = make_config("baseline")
        assert not cfg.explosions_enabled
        assert cfg.particle_count == 100

    def test_full(self):
        cfg = make_config("full")
        assert cfg.explosions_enabled
        assert cfg.particle_count == 120

    def test_overrides(self):
        cfg = make_config("baseline", particle_count=10, size=200)
        assert (cfg.particle_count, cfg.size) == (10, 200)

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="Unknown profile"):
            make_config("turbo")

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown config keys"):
            make_config("full", sparkle=True)

    def test_profiles_listed(self):
        assert set(PROFILES) == {"baseline", "full"}


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "orb.json"
        path.write_text(json.dumps({"size": 256, "seed": 3, "fps_cap": 24}))
        cfg = load_config(path)
        assert cfg.size == 256
        assert cfg.seed == 3
        assert cfg.frame_budget_ms == pytest.approx(1000 / 24)

    def test_profile_in_file(self, tmp_path):
        path = tmp_path / "orb.json"
        path.write_text(json.dumps({"profile": "baseline"}))
        assert not load_config(path).explosions_enabled

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "orb.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.json")
