"""Тесты параметров расчета"""
import json
import logging

import pytest

from thomsonsource import InvalidConfigurationError, LinearThomsonSource, SourceSettings, configure_logging
from thomsonsource.constants import E


class TestSourceSettings:

    def test_defaults(self):
        settings = SourceSettings()
        assert settings.precision == 1.0e-3
        assert settings.np_geometric_factor == 50000
        assert settings.min_energy == pytest.approx(25.0e3 * E)
        assert settings.ksi is None

    def test_dict_round_trip(self):
        settings = SourceSettings(precision=1e-4, thread_number=3, e_spread=True, ksi=[0.1, 0.2, 0.3])
        assert SourceSettings.from_dict(settings.to_dict()) == settings

    def test_unknown_key(self):
        with pytest.raises(InvalidConfigurationError, match="Unknown settings"):
            SourceSettings.from_dict({"precision": 1e-3, "threads": 4})

    @pytest.mark.parametrize("kwargs", [
        {"precision": 0.0},
        {"thread_number": 0},
        {"np_geometric_factor": 0},
        {"ray_x_angle_range": -1.0},
        {"min_energy": 2.0e-15, "max_energy": 1.0e-15},
        {"ksi": [1.0, 0.0]},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            SourceSettings(**kwargs)

    def test_from_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"precision": 1e-4, "np_geometric_factor": 1000, "e_spread": True}))
        settings = SourceSettings.from_json(str(path))
        assert settings.precision == 1e-4
        assert settings.np_geometric_factor == 1000
        assert settings.e_spread

    def test_broken_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{precision: ")
        with pytest.raises(InvalidConfigurationError):
            SourceSettings.from_json(str(path))

    def test_json_must_be_object(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(InvalidConfigurationError):
            SourceSettings.from_json(str(path))

    def test_applied_in_constructor(self, pulse, bunch):
        settings = SourceSettings(precision=1e-4, thread_number=3, np_geometric_factor=123,
                                  shift_factor=2.0, e_spread=True, ksi=[0.0, 0.0, 1.0])
        src = LinearThomsonSource(pulse, bunch, settings=settings, calculate=False)
        assert src.precision == 1e-4
        assert src.thread_number == 3
        assert src.np_geometric_factor == 123
        assert src.shift_factor == 2.0
        assert src.e_spread
        assert src.ksi == [0.0, 0.0, 1.0]
        assert SourceSettings.from_source(src) == settings

    def test_configure_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        configure_logging(logging.DEBUG)
        assert calls[0]["level"] == logging.DEBUG
