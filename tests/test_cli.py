"""Tests for CLI interface."""

import json
import logging

import pytest
from click.testing import CliRunner
from dxf_factory import SURVEY_LAYER, layer_table, point_entity, section, text_entity

from dxfcloud.cli import create_config, main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove the handler the commands attach to the captured stderr."""
    yield
    logger = logging.getLogger("dxfcloud")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def survey_file(write_dxf):
    pairs = (
        section(
            "TABLES",
            *layer_table((SURVEY_LAYER, 3, "CONTINUOUS"), ("Hidden", -1, "DASHED")),
        )
        + section(
            "ENTITIES",
            *text_entity(SURVEY_LAYER, "0.0", "0.0", "100.0"),
            *text_entity(SURVEY_LAYER, "3.0", "4.0", "bad"),
            *point_entity(SURVEY_LAYER, "30.0", "40.0", "150.0"),
            *point_entity("Hidden", "1", "1", "1"),
        )
        + [(0, "EOF")]
    )
    return write_dxf(pairs, name="survey.dxf")


class TestCLI:
    """Test CLI commands."""

    def test_main_help(self, runner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "DXF layer reader" in result.output
        assert "layers" in result.output
        assert "points" in result.output
        assert "create-config" in result.output

    def test_create_config_command(self, runner, tmp_path):
        config_path = tmp_path / "config.json"
        result = runner.invoke(create_config, [str(config_path)])

        assert result.exit_code == 0
        assert "Sample configuration created" in result.output
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
        assert config_data["Layer"] == SURVEY_LAYER
        assert config_data["EntityTypes"] == ["TEXT", "POINT"]

    def test_create_config_in_missing_directory(self, runner, tmp_path):
        result = runner.invoke(create_config, [str(tmp_path / "missing" / "config.json")])

        assert result.exit_code != 0
        assert "Cannot create configuration file" in result.output


class TestLayersCommand:
    """Test the layers command."""

    def test_lists_layers(self, runner, survey_file):
        result = runner.invoke(main, ["layers", str(survey_file)])

        assert result.exit_code == 0, result.output
        assert "Found 2 layers" in result.output
        lines = result.output.splitlines()
        hidden = next(line for line in lines if line.startswith("Hidden"))
        assert hidden.split() == ["Hidden", "1", "DASHED", "no", "1"]
        survey = next(line for line in lines if line.startswith(SURVEY_LAYER))
        assert survey.split()[-4:] == ["3", "CONTINUOUS", "yes", "3"]

    def test_layers_sorted_case_insensitive(self, runner, survey_file):
        result = runner.invoke(main, ["layers", str(survey_file)])
        assert result.output.index("Hidden") < result.output.index(SURVEY_LAYER)

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["layers", str(tmp_path / "missing.dxf")])

        assert result.exit_code != 0
        assert "does not exist" in result.output

    def test_strict_mode_reports_invalid_file(self, runner, tmp_path):
        path = tmp_path / "invalid.dxf"
        path.write_text("This is not a DXF file\n", encoding="utf-8")

        lenient = runner.invoke(main, ["layers", str(path)])
        assert lenient.exit_code == 0
        assert "Found 0 layers" in lenient.output

        strict = runner.invoke(main, ["layers", "--strict", str(path)])
        assert strict.exit_code != 0
        assert "No SECTION marker" in strict.output


class TestPointsCommand:
    """Test the points command."""

    def test_points_analysis(self, runner, survey_file):
        result = runner.invoke(main, ["points", str(survey_file)])

        assert result.exit_code == 0, result.output
        assert f"Target layer: {SURVEY_LAYER}" in result.output
        assert "Processed 3 entities" in result.output
        assert "Created 2 valid points" in result.output
        assert "Skipped 1 invalid points" in result.output
        assert "Lowest point (ID: 1): 0.00, 0.00, 100.00" in result.output
        assert "Highest point (ID: 2): 30.00, 40.00, 150.00" in result.output
        assert "Distance: 70.71 meters" in result.output
        assert "Slope: 45.0 degrees" in result.output
        assert "Bearing: 36.9 degrees" in result.output

    def test_layer_option(self, runner, survey_file):
        result = runner.invoke(main, ["points", str(survey_file), "--layer", "Hidden"])

        assert result.exit_code == 0, result.output
        assert "Created 1 valid points" in result.output
        assert "Not enough points for calculations" in result.output

    def test_type_option(self, runner, survey_file):
        result = runner.invoke(main, ["points", str(survey_file), "-t", "text"])

        assert result.exit_code == 0, result.output
        assert "Processed 2 entities" in result.output
        assert "Created 1 valid points" in result.output

    def test_missing_layer(self, runner, survey_file):
        result = runner.invoke(main, ["points", str(survey_file), "--layer", "NOPE"])

        assert result.exit_code != 0
        assert "Layer 'NOPE' not found" in result.output

    def test_config_option(self, runner, survey_file, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"Layer": "Hidden", "EntityTypes": ["POINT"]}), encoding="utf-8")

        result = runner.invoke(main, ["points", str(survey_file), "--config", str(config_path)])

        assert result.exit_code == 0, result.output
        assert "Target layer: Hidden" in result.output
        assert "Created 1 valid points" in result.output

    def test_invalid_config(self, runner, survey_file, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("{", encoding="utf-8")

        result = runner.invoke(main, ["points", str(survey_file), "-c", str(config_path)])

        assert result.exit_code != 0
        assert "Processing failed" in result.output
