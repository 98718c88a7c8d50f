"""Tests for PixelSleuth CLI."""

import json
import sys

import pytest

from pixelsleuth import cli
from pixelsleuth.cli import analyze_command


class _Args:
    """Minimal args namespace for testing CLI functions."""

    def __init__(self, **kwargs):
        defaults = {"json": False, "workers": 1, "visualizations": None, "verbose": False}
        defaults.update(kwargs)
        for k, v in defaults.items():
            setattr(self, k, v)


@pytest.fixture()
def png_path(tmp_path, sample_png_bytes):
    path = tmp_path / "gradient.png"
    path.write_bytes(sample_png_bytes)
    return path


class TestAnalyzeCommand:
    def test_json_output(self, png_path, capsys):
        with pytest.raises(SystemExit) as exc:
            analyze_command(_Args(file=str(png_path), json=True))

        output = json.loads(capsys.readouterr().out)
        assert output["file_name"] == "gradient.png"
        assert output["mime_type"] == "image/png"
        assert output["dimensions"] == {"width": 96, "height": 80}
        assert set(output["modules"]) == {"metadata", "ela", "fft", "color", "edge", "noise", "texture"}
        expected = 0 if output["verdict"] == "Likely Real" else 1
        assert exc.value.code == expected

    def test_text_output(self, png_path, capsys):
        with pytest.raises(SystemExit):
            analyze_command(_Args(file=str(png_path)))

        out = capsys.readouterr().out
        assert "Synthetic Image Analysis Report" in out
        assert "Verdict:" in out
        assert "Dimensions: 96x80" in out

    def test_missing_file(self, capsys):
        with pytest.raises(SystemExit) as exc:
            analyze_command(_Args(file="/nonexistent/image.png"))

        assert exc.value.code == 2
        assert "File not found" in capsys.readouterr().err

    def test_undecodable_file(self, tmp_path, capsys):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"\xff\xd8 not really a jpeg")

        with pytest.raises(SystemExit) as exc:
            analyze_command(_Args(file=str(path)))

        assert exc.value.code == 2
        assert "Error:" in capsys.readouterr().err

    def test_visualizations_written(self, png_path, tmp_path, capsys):
        out_dir = tmp_path / "vis"
        with pytest.raises(SystemExit):
            analyze_command(_Args(file=str(png_path), json=True, visualizations=str(out_dir)))

        written = sorted(p.name for p in out_dir.iterdir())
        assert written == [
            f"gradient.{name}.png"
            for name in sorted(["ela", "fft", "color", "edge", "noise", "texture"])
        ]


class TestMain:
    def test_no_command_prints_help(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["pixelsleuth"])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1
        assert "analyze" in capsys.readouterr().out

    def test_analyze_subcommand(self, monkeypatch, png_path, capsys):
        monkeypatch.setattr(sys, "argv", ["pixelsleuth", "analyze", str(png_path), "--json", "-w", "2"])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code in (0, 1)
        assert json.loads(capsys.readouterr().out)["dimensions"]["width"] == 96
