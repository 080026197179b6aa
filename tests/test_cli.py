"""Tests for the command-line interface."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from click.testing import CliRunner

from desktop_dye.cli import MAX_FAILURES, VERSION, capture_and_submit, cli
from desktop_dye.capture.screen import ScreenInfo
from desktop_dye.config import DEFAULT_CONFIG_FILE_CONTENTS, parse_config
from desktop_dye.core.exceptions import CaptureFailed
from desktop_dye.home_assistant.client import ApiStatus

SCREENS = [
    ScreenInfo(id=1, left=0, top=0, width=2560, height=1440, is_primary=True),
    ScreenInfo(id=2, left=2560, top=0, width=1920, height=1080),
]
RED_PIXELS = np.tile(np.array([255, 0, 0], dtype=np.uint8), (64, 1))


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(DEFAULT_CONFIG_FILE_CONTENTS)
    return path


@pytest.fixture
def mock_api():
    with patch("desktop_dye.cli.HomeAssistantApi") as api_cls:
        api = api_cls.return_value
        api.get_status.return_value = ApiStatus.OK
        yield api


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("desktop_dye.cli.setup_logging"):
        yield


class TestVersion:
    def test_version_option(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert VERSION in result.output


class TestRunCommand:
    """Tests for `desktop-dye run`."""

    @patch("desktop_dye.cli.capture_pixels", return_value=RED_PIXELS)
    @patch("desktop_dye.cli.list_screens", return_value=SCREENS)
    def test_single_cycle_submits_colors(self, mock_screens, mock_capture, runner, config_file, mock_api):
        result = runner.invoke(cli, ["run", "--once", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        mock_capture.assert_called_once_with(SCREENS[0])
        mock_api.set_state.assert_called_once_with("input_text.desktop_dye_colors", "255,0,0")
        assert "Color selection mode set to Default" in result.output
        assert 'Sending colors value (RGB): "255,0,0"' in result.output

    def test_missing_config_creates_default(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        result = runner.invoke(cli, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert path.exists()
        assert "cannot run without editing the config file" in result.output

    def test_invalid_config(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("ha_token: abc\n")
        result = runner.invoke(cli, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert "Missing Home Assistant endpoint in config file" in result.output

    def test_home_assistant_unreachable(self, runner, config_file, mock_api):
        mock_api.get_status.return_value = ApiStatus.INVALID_PASSWORD
        result = runner.invoke(cli, ["run", "--once", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Failed to connect to Home Assistant" in result.output
        assert "invalid_password" in result.output

    @patch("desktop_dye.cli.list_screens", return_value=SCREENS)
    def test_configured_screen_missing(self, mock_screens, runner, config_file, mock_api):
        config_file.write_text(DEFAULT_CONFIG_FILE_CONTENTS + "screen_id: 9\n")
        result = runner.invoke(cli, ["run", "--once", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Failed to find screen with id 9" in result.output

    @patch("desktop_dye.cli.time.sleep")
    @patch("desktop_dye.cli.capture_pixels", side_effect=CaptureFailed("screen went away"))
    @patch("desktop_dye.cli.list_screens", return_value=SCREENS)
    def test_gives_up_after_repeated_failures(
        self, mock_screens, mock_capture, mock_sleep, runner, config_file, mock_api
    ):
        result = runner.invoke(cli, ["run", "--config", str(config_file)])

        assert result.exit_code == 1
        assert mock_capture.call_count == MAX_FAILURES
        assert mock_sleep.call_count == MAX_FAILURES - 1
        assert "Too many failures" in result.output
        assert "screen went away" in result.output
        mock_api.set_state.assert_not_called()

    @patch("desktop_dye.cli.time.sleep")
    @patch("desktop_dye.cli.list_screens", return_value=SCREENS)
    def test_recovers_after_failure(self, mock_screens, mock_sleep, runner, config_file, mock_api):
        with patch(
            "desktop_dye.cli.capture_pixels",
            side_effect=[CaptureFailed("blip"), RED_PIXELS],
        ):
            result = runner.invoke(cli, ["run", "--once", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Retrying in 5 seconds" in result.output
        mock_api.set_state.assert_called_once()


class TestCaptureAndSubmit:
    """Tests for a single capture cycle."""

    @patch("desktop_dye.cli.capture_pixels", return_value=RED_PIXELS)
    def test_unchanged_colors_not_resubmitted(self, mock_capture, valid_config_data, capsys):
        api = MagicMock()
        config = parse_config(valid_config_data)

        first = capture_and_submit(api, config, SCREENS[0], None)
        second = capture_and_submit(api, config, SCREENS[0], first)

        assert first.changed
        assert not second.changed
        api.set_state.assert_called_once_with("input_text.desktop_dye_colors", "255,0,0")
        assert "Colors haven't changed, skipping submission" in capsys.readouterr().out


class TestScreensCommand:
    """Tests for `desktop-dye screens`."""

    @patch("desktop_dye.cli.list_screens", return_value=SCREENS)
    def test_lists_screens(self, mock_screens, runner):
        result = runner.invoke(cli, ["screens"])
        assert result.exit_code == 0
        assert "2560x1440" in result.output
        assert "1920x1080" in result.output

    @patch("desktop_dye.cli.list_screens", return_value=[])
    def test_no_screens(self, mock_screens, runner):
        result = runner.invoke(cli, ["screens"])
        assert "No screens found" in result.output

    @patch("desktop_dye.cli.list_screens", side_effect=CaptureFailed("no display"))
    def test_error(self, mock_screens, runner):
        result = runner.invoke(cli, ["screens"])
        assert result.exit_code == 1
        assert "no display" in result.output


class TestConfigCommands:
    """Tests for `desktop-dye config ...`."""

    def test_path(self, runner, tmp_path):
        with patch("desktop_dye.config.CONFIG_DIR", tmp_path):
            result = runner.invoke(cli, ["config", "path"])
        assert result.output.strip() == str(tmp_path / "config.yaml")

    def test_init(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        result = runner.invoke(cli, ["config", "init", "--config", str(path)])
        assert result.exit_code == 0
        assert path.read_text() == DEFAULT_CONFIG_FILE_CONTENTS

        again = runner.invoke(cli, ["config", "init", "--config", str(path)])
        assert again.exit_code == 1
        assert "already exists" in again.output

    def test_show_masks_token(self, runner, tmp_path, valid_config_data):
        path = tmp_path / "config.yaml"
        path.write_text(
            "".join(f'{key}: "{value}"\n' for key, value in valid_config_data.items())
        )
        result = runner.invoke(cli, ["config", "show", "--config", str(path)])

        assert result.exit_code == 0, result.output
        assert "secret-token" not in result.output
        assert "********" in result.output
        assert "sample_size" in result.output

    def test_show_invalid(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("sample_size: 99\n")
        result = runner.invoke(cli, ["config", "show", "--config", str(path)])
        assert result.exit_code == 1
        assert "Config file is invalid" in result.output

    def test_show_template(self, runner):
        result = runner.invoke(cli, ["config", "show", "--template"])
        assert result.exit_code == 0
        assert "ha_endpoint:" in result.output


class TestPalettesCommand:
    """Tests for `desktop-dye palettes`."""

    @patch("desktop_dye.cli.capture_pixels", return_value=RED_PIXELS)
    @patch("desktop_dye.cli.list_screens", return_value=SCREENS)
    def test_compares_algorithms(self, mock_screens, mock_capture, runner):
        result = runner.invoke(cli, ["palettes", "-n", "3"])

        assert result.exit_code == 0, result.output
        assert "quantization: https://coolors.co/ff0000" in result.output
        assert "clustering: https://coolors.co/" in result.output
        assert "(100.00%)" in result.output

    @patch("desktop_dye.cli.capture_image")
    @patch("desktop_dye.cli.list_screens", return_value=SCREENS)
    def test_save_screenshot(self, mock_screens, mock_image, runner, tmp_path):
        from PIL import Image

        mock_image.return_value = Image.new("RGB", (4, 4), (0, 0, 255))
        out = tmp_path / "shot.png"

        result = runner.invoke(cli, ["palettes", "--screen", "2", "--save", str(out)])

        assert result.exit_code == 0, result.output
        mock_image.assert_called_once_with(SCREENS[1])
        assert out.exists()
        assert "quantization: https://coolors.co/0000ff" in result.output
