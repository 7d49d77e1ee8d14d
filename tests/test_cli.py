"""Tests for CLI commands."""

from pathlib import Path

import yaml
from typer.testing import CliRunner

from darkpage.cli import app

runner = CliRunner()

EXAMPLE_PAGE = "examples/news_page.yaml"


class TestApplyCommand:
    """Test the apply CLI command."""

    def test_apply_example(self) -> None:
        result = runner.invoke(app, ["apply", EXAMPLE_PAGE])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["hostname"] == "www.news.example.com"
        assert data["site_theme"] == "light"
        elements = data["elements"]
        assert elements["html"]["background-color"] == "rgb(18, 18, 18) !important"
        assert elements["html/body"]["background-color"] == "rgb(0, 0, 0) !important"
        assert "filter" in elements["html/body/header#masthead/img"]
        assert elements["html/body/article#story/p[1]"]["color"] == "rgb(255, 255, 255) !important"
        assert "color" not in elements.get("html/body/article#story/p[2]", {})
        assert "html/body/article#story/video" not in elements

    def test_apply_to_file(self, tmp_path: Path) -> None:
        output_file = tmp_path / "styles.yaml"
        result = runner.invoke(app, ["apply", EXAMPLE_PAGE, "--output", str(output_file)])

        assert result.exit_code == 0
        assert "light site" in result.stdout
        assert output_file.exists()
        assert "rgb(18, 18, 18)" in output_file.read_text()

    def test_apply_dark_page(self, tmp_path: Path) -> None:
        page = tmp_path / "page.yaml"
        page.write_text(
            "hostname: dark.example.com\n"
            "body:\n"
            "  style: {background-color: 'rgb(15, 15, 15)'}\n"
            "  children:\n"
            "    - tag: div\n"
            "      style: {background-color: 'rgb(255, 255, 255)'}\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["apply", str(page)])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["site_theme"] == "dark"
        assert data["elements"] == {}

    def test_apply_with_profiles(self, tmp_path: Path) -> None:
        profiles = tmp_path / "profiles"
        profiles.mkdir()
        (profiles / "example.com.css").write_text("a {}", encoding="utf-8")
        page = tmp_path / "page.yaml"
        page.write_text("hostname: example.com\n", encoding="utf-8")

        result = runner.invoke(app, ["-v", "1", "apply", str(page), "--profiles", str(profiles)])

        assert result.exit_code == 0
        assert "injected site stylesheet example.com.css" in result.output

    def test_restricted_url_refused(self, tmp_path: Path) -> None:
        page = tmp_path / "page.yaml"
        page.write_text("url: chrome://settings\n", encoding="utf-8")
        result = runner.invoke(app, ["apply", str(page)])

        assert result.exit_code == 1
        assert "restricted" in result.output

    def test_missing_page(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["apply", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_page(self, tmp_path: Path) -> None:
        page = tmp_path / "page.yaml"
        page.write_text("body:\n  children:\n    - id: x\n", encoding="utf-8")
        result = runner.invoke(app, ["apply", str(page)])

        assert result.exit_code == 1
        assert "Invalid page description" in result.output


class TestColorCommand:
    """Test the color CLI command."""

    def test_white(self) -> None:
        result = runner.invoke(app, ["color", "rgb(255, 255, 255)"])

        assert result.exit_code == 0
        assert "Brightness:   255.0" in result.stdout
        assert "Background:   rgb(18, 18, 18)" in result.stdout
        assert "Text:         unchanged" in result.stdout

    def test_input(self) -> None:
        result = runner.invoke(app, ["color", "rgb(255, 255, 255)", "--input"])

        assert result.exit_code == 0
        assert "Background:   rgb(28, 28, 28)" in result.stdout

    def test_dark_context_keeps_black_text(self) -> None:
        light = runner.invoke(app, ["color", "rgb(0, 0, 0)"])
        dark = runner.invoke(app, ["color", "rgb(0, 0, 0)", "--dark-context"])

        assert "Text:         rgb(255, 255, 255)" in light.stdout
        assert "Text:         unchanged" in dark.stdout

    def test_unparseable(self) -> None:
        result = runner.invoke(app, ["color", "transparent"])

        assert result.exit_code == 0
        assert "left unchanged" in result.stdout


class TestGradientCommand:
    """Test the gradient CLI command."""

    def test_light_gradient(self) -> None:
        value = "linear-gradient(90deg, rgb(255, 255, 255) 0%, rgb(200, 200, 200) 100%)"
        result = runner.invoke(app, ["gradient", value])

        assert result.exit_code == 0
        assert "Dark: no" in result.stdout
        assert (
            "Rewritten: linear-gradient(90deg, rgb(18, 18, 18) 0%, rgb(18, 18, 18) 100%)"
            in result.stdout
        )

    def test_not_a_gradient(self) -> None:
        result = runner.invoke(app, ["gradient", "url(a.png)"])

        assert result.exit_code == 0
        assert "not a gradient" in result.stdout


class TestThresholdsCommand:
    """Test the thresholds CLI command and global --config."""

    def test_defaults(self) -> None:
        result = runner.invoke(app, ["thresholds"])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["thresholds"]["bg_brightness"] == 100
        assert data["colors"]["inversion_filter"] == "invert(1) brightness(1.2)"

    def test_config_option(self, tmp_path: Path) -> None:
        config = tmp_path / "custom.yaml"
        config.write_text("thresholds:\n  dark_max: 30\n", encoding="utf-8")
        result = runner.invoke(app, ["-c", str(config), "thresholds"])

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["thresholds"]["dark_max"] == 30

    def test_missing_config(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["-c", str(tmp_path / "none.yaml"), "thresholds"])

        assert result.exit_code == 1
        assert "Config file not found" in result.output
