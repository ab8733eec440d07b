"""Tests for AnalysisSettings and SettingsManager."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from panelwise.issues import SettingsError
from panelwise.settings import AnalysisSettings, SettingsManager


def _write_settings(root: Path, data) -> Path:
    target = root / ".panelwise" / "settings.json"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(data), encoding="utf-8")
    return target


class TestAnalysisSettings:

    def test_defaults(self):
        s = AnalysisSettings()
        assert s.demand_factors == {"LIGHT": 0.6, "FAN": 0.6, "SOCKET": 0.2, "AC": 0.7}
        assert s.unknown_demand_factor == 1.0
        assert s.circuit_capacity_w == 800.0
        assert s.emergency_prefix == "E-"
        assert s.type_aliases["SDB"] == "SUB"

    def test_defaults_not_shared_between_instances(self):
        a = AnalysisSettings()
        a.demand_factors["LIGHT"] = 0.1
        assert AnalysisSettings().demand_factors["LIGHT"] == 0.6

    def test_factor_keys_upper_cased(self):
        s = AnalysisSettings(demand_factors={"light": 0.5})
        assert s.demand_factors == {"LIGHT": 0.5}

    def test_negative_factor_rejected(self):
        with pytest.raises(ValueError):
            AnalysisSettings(demand_factors={"LIGHT": -0.1})

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            AnalysisSettings(circuit_capacity_w=-5)

    def test_log_level_normalised(self):
        assert AnalysisSettings().log_level is None
        assert AnalysisSettings(log_level=" warning ").log_level == "WARNING"
        assert AnalysisSettings(log_level="").log_level is None

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValueError):
            AnalysisSettings(log_level="chatty")


class TestSettingsManager:

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for key in SettingsManager.env_keys():
            monkeypatch.delenv(key, raising=False)

    def test_load_without_project(self):
        assert SettingsManager().load().circuit_capacity_w == 800.0

    def test_load_from_file(self, tmp_path):
        _write_settings(tmp_path, {"circuit_capacity_w": 1200, "demand_factors": {"LIGHT": 0.8}})
        s = SettingsManager().load(tmp_path)
        assert s.circuit_capacity_w == 1200.0
        assert s.demand_factors == {"LIGHT": 0.8}

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        _write_settings(tmp_path, {"circuit_capacity_w": 1200})
        monkeypatch.setenv("PANELWISE_CIRCUIT_CAPACITY_W", "1500")
        monkeypatch.setenv("PANELWISE_EMERGENCY_PREFIX", "EM-")
        s = SettingsManager().load(tmp_path)
        assert s.circuit_capacity_w == 1500.0
        assert s.emergency_prefix == "EM-"

    def test_log_level_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PANELWISE_LOG_LEVEL", "debug")
        assert SettingsManager().load(tmp_path).log_level == "DEBUG"

    def test_invalid_json(self, tmp_path):
        target = tmp_path / ".panelwise" / "settings.json"
        target.parent.mkdir(parents=True)
        target.write_text("{not json", encoding="utf-8")
        with pytest.raises(SettingsError):
            SettingsManager().load(tmp_path)

    def test_non_object_json(self, tmp_path):
        _write_settings(tmp_path, [1, 2, 3])
        with pytest.raises(SettingsError):
            SettingsManager().load(tmp_path)

    def test_invalid_value(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PANELWISE_CIRCUIT_CAPACITY_W", "lots")
        with pytest.raises(SettingsError):
            SettingsManager().load(tmp_path)

    def test_save_round_trip(self, tmp_path):
        manager = SettingsManager()
        path = manager.save(AnalysisSettings(circuit_capacity_w=950.0), tmp_path)
        assert path.is_file()
        assert manager.load(tmp_path).circuit_capacity_w == 950.0

    def test_env_keys_documented(self):
        keys = SettingsManager.env_keys()
        assert "PANELWISE_LOG_LEVEL" in keys
        assert all(keys.values())
