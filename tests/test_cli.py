"""Tests for the command line interface."""

import os

import numpy as np
import pytest
from PIL import Image

import main as cli


@pytest.fixture
def step_image(tmp_path):
    arr = np.zeros((32, 32, 3), dtype=np.uint8)
    arr[:, 16:] = 255
    path = tmp_path / "step.png"
    Image.fromarray(arr).save(path)
    return str(path)


@pytest.fixture
def white_image(tmp_path):
    path = tmp_path / "white.png"
    Image.new('RGB', (8, 8), color='white').save(path)
    return str(path)


class TestMain:
    def test_list_styles(self, capsys):
        assert cli.main(['--list-styles']) == 0
        output = capsys.readouterr().out
        assert 'floyd-steinberg' in output
        assert 'ascii' in output

    def test_no_input_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert 'usage' in capsys.readouterr().out

    def test_single_output(self, step_image, tmp_path, capsys):
        out = str(tmp_path / "out.png")
        assert cli.main([step_image, '-o', out]) == 0
        assert f"Saved to {out}" in capsys.readouterr().out
        with Image.open(out) as image:
            assert image.mode == 'RGBA'
            assert image.size == (32, 32)

    def test_ascii_html(self, step_image, tmp_path):
        out = str(tmp_path / "out.html")
        assert cli.main([step_image, '-s', 'ascii', '--scale', '1', '-o', out]) == 0
        with open(out, encoding='utf-8') as f:
            assert '<pre class="ascii-art">' in f.read()

    def test_ascii_to_terminal(self, step_image, capsys):
        assert cli.main([step_image, '-s', 'ascii']) == 0
        assert "\033[0m" in capsys.readouterr().out

    def test_custom_colour_jpeg(self, step_image, tmp_path):
        out = str(tmp_path / "out.jpg")
        assert cli.main([step_image, '-s', 'stippling', '--color', '180', '100', '100', '-o', out]) == 0
        with Image.open(out) as image:
            assert image.mode == 'RGB'

    def test_batch_reports_failures(self, step_image, tmp_path, capsys):
        missing = str(tmp_path / "missing.png")
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        assert cli.main([step_image, missing, '-d', str(out_dir)]) == 1
        assert os.path.exists(out_dir / "step_floyd_steinberg.png")
        assert "Error processing" in capsys.readouterr().err

    def test_invalid_settings(self, step_image, capsys):
        assert cli.main([step_image, '--contrast', '500']) == 2
        assert "Invalid settings" in capsys.readouterr().err

    def test_blank_result_is_not_written(self, white_image, tmp_path):
        out = tmp_path / "out.png"
        assert cli.main([white_image, '-o', str(out)]) == 1
        assert not out.exists()

    def test_unsupported_extension(self, step_image, tmp_path):
        assert cli.main([step_image, '-o', str(tmp_path / "out.xyz")]) == 1


class TestBuildSettings:
    def test_flags_override_defaults(self):
        args = cli.create_argument_parser().parse_args(['x.png', '-s', 'gradient', '--blur', '2', '-i'])
        settings = cli.build_settings(args)
        assert settings.blur == 2
        assert settings.smoothness == 4
        assert settings.invert is True
        assert settings.use_custom_colors is False

    def test_alpha_alone_enables_magenta(self):
        args = cli.create_argument_parser().parse_args(['x.png', '--alpha', '0.5'])
        settings = cli.build_settings(args)
        assert settings.use_custom_colors is True
        assert (settings.neon_color.h, settings.neon_color.a) == (300, 0.5)

    def test_default_output_path(self):
        path = cli.default_output_path('/tmp/in/photo.jpg', cli.Style.ASCII, None)
        assert path == os.path.join('/tmp/in', 'photo_ascii.txt')
