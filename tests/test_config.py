"""Tests for layout validation and JSON config loading."""

import json
from dataclasses import replace

import pytest

from autopilot import AutopilotGame
from game_logic import CLASSIC_TARGETS, AutopilotConfig, ConfigurationError
from utils import config_from_dict, config_to_dict, load_config


class TestClassicLayout:
    def test_defaults_validate(self):
        board = AutopilotConfig().validate()
        assert board.portals == {
            "up": (40, 1),
            "down": (40, 40),
            "left": (1, 20),
            "right": (80, 20),
        }

    @pytest.mark.parametrize(
        "heading, expected",
        [
            ("right", [(10, 10), (9, 10), (8, 10)]),
            ("left", [(10, 10), (11, 10), (12, 10)]),
            ("up", [(10, 10), (10, 11), (10, 12)]),
            ("down", [(10, 10), (10, 9), (10, 8)]),
        ],
    )
    def test_initial_body_trails_behind_heading(self, heading, expected):
        cfg = AutopilotConfig(start_x=10, start_y=10, length=3, heading=heading)
        assert cfg.initial_body() == expected


class TestValidation:
    def test_error_is_a_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"quota": 11},
            {"quota": 0},
            {"width": 3},
            {"height": 500},
            {"heading": "north"},
            {"length": 0},
            {"tick_delay_micros": -1},
            {"stop_key": "ab"},
            {"stall_limit_factor": 0},
            {"targets": [(4, 4)] + list(CLASSIC_TARGETS[1:])},
            {"targets": [(40, 1)] + list(CLASSIC_TARGETS[1:])},
            {"targets": [(0, 5)] + list(CLASSIC_TARGETS[1:])},
            {"obstacles": [(38, 1)]},
            {"obstacles": [(78, 10)]},
            {"start_x": 3},
        ],
    )
    def test_invalid_layouts_are_rejected(self, overrides):
        cfg = replace(AutopilotConfig(), **overrides)
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_unplayed_targets_are_not_checked(self):
        cfg = AutopilotConfig(targets=list(CLASSIC_TARGETS) + [(0, 0)])
        cfg.validate()

    def test_game_refuses_invalid_layout(self):
        with pytest.raises(ConfigurationError):
            AutopilotGame(AutopilotConfig(quota=20))


class TestConfigFiles:
    def test_load_config_from_json(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(
            json.dumps(
                {
                    "width": 30,
                    "height": 20,
                    "start_x": 5,
                    "start_y": 10,
                    "length": 3,
                    "targets": [[15, 10]],
                    "obstacles": [],
                    "quota": 1,
                }
            ),
            encoding="utf-8",
        )
        cfg = load_config(str(path))
        assert cfg.width == 30
        assert cfg.targets == [(15, 10)]
        assert cfg.heading == "right"
        cfg.validate()

    def test_unknown_key_is_rejected(self):
        with pytest.raises(ConfigurationError):
            config_from_dict({"widht": 10})

    @pytest.mark.parametrize(
        "raw",
        [
            {"width": "80"},
            {"quota": 2.5},
            {"stop_key": 5},
            {"wrap_anywhere": "no"},
            {"wrap_anywhere": 1},
            {"length": True},
            {"heading": None},
            {"stall_limit_factor": "100"},
            {"targets": [[1.5, 2]]},
            {"obstacles": [["3", 3]]},
            {"targets": [[1, 2, 3]]},
        ],
    )
    def test_wrong_json_types_are_rejected(self, tmp_path, raw):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps(raw), encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_json_booleans_are_accepted(self):
        cfg = config_from_dict({"wrap_anywhere": True})
        assert cfg.wrap_anywhere is True
        assert AutopilotGame(cfg).board.wrap_anywhere is True

    def test_malformed_targets_are_rejected(self):
        with pytest.raises(ConfigurationError):
            config_from_dict({"targets": [5, 6]})

    def test_top_level_must_be_an_object(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_dict_form_uses_lists_for_cells(self):
        cfg = AutopilotConfig(targets=[(15, 10)], obstacles=[], quota=1)
        data = config_to_dict(cfg)
        assert data["targets"] == [[15, 10]]
        assert data["obstacles"] == []
        assert config_from_dict(data) == cfg
