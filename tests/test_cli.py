"""Tests for the prism-render command-line driver.

Taichi is already initialized by the test session, so init_taichi is
replaced with a no-op: a second ti.init() would discard every field.
"""

import io

import pytest
from PIL import Image as PILImage

SCENE = """\
camera (0 0 3) (0 0 0) (0 1 0) 30
light (0 0 10)
sphere (0 0 0) 1 [1 1 1]
"""


@pytest.fixture
def no_taichi_init(monkeypatch):
    calls = []
    monkeypatch.setattr("src.prism.cli.init_taichi", lambda arch="cpu": calls.append(arch))
    return calls


@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / "scene.txt"
    path.write_text(SCENE, encoding="utf-8")
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test the default option values."""
        from src.prism.cli import build_parser

        args = build_parser().parse_args(["scene.txt"])
        assert args.scene == "scene.txt"
        assert args.output == "out.ppm"
        assert args.size == 500
        assert args.depth == 6
        assert args.rows_per_batch == 32
        assert args.arch == "cpu"
        assert not args.preview
        assert not args.quiet
        assert not args.verbose

    def test_defaults_match_integrator(self):
        """Test the duplicated defaults agree with the integrator constants."""
        from src.prism import cli
        from src.prism.core.integrator import DEFAULT_IMAGE_SIZE, MAX_DEPTH
        from src.prism.core.renderer import DEFAULT_ROWS_PER_BATCH

        assert cli.DEFAULT_IMAGE_SIZE == DEFAULT_IMAGE_SIZE
        assert cli.DEFAULT_DEPTH == MAX_DEPTH
        assert cli.DEFAULT_ROWS_PER_BATCH == DEFAULT_ROWS_PER_BATCH

    def test_invalid_arch(self):
        """Test unknown backends are rejected by argparse."""
        from src.prism.cli import build_parser

        with pytest.raises(SystemExit):
            build_parser().parse_args(["scene.txt", "--arch", "tpu"])


class TestMain:
    """Tests for running the command end to end."""

    def test_render_to_ppm(self, no_taichi_init, scene_file, tmp_path):
        """Test a scene file is rendered to a PPM image."""
        from src.prism.cli import main

        output = tmp_path / "out.ppm"
        status = main([str(scene_file), "-o", str(output), "--size", "8", "--quiet"])

        assert status == 0
        assert no_taichi_init == ["cpu"]
        lines = output.read_text(encoding="ascii").splitlines()
        assert lines[:3] == ["P3", "8 8", "255"]
        assert len(lines) == 3 + 64

    def test_render_to_png(self, no_taichi_init, scene_file, tmp_path):
        """Test a .png output path writes a PNG image."""
        from src.prism.cli import main

        output = tmp_path / "out.png"
        status = main([str(scene_file), "-o", str(output), "--size", "6", "--quiet"])

        assert status == 0
        assert PILImage.open(output).size == (6, 6)

    def test_stdin_to_stdout(self, no_taichi_init, monkeypatch, capsys):
        """Test "-" reads the scene from stdin and writes PPM to stdout."""
        from src.prism.cli import main

        monkeypatch.setattr("sys.stdin", io.StringIO(SCENE))
        status = main(["-", "-o", "-", "--size", "4", "--depth", "0", "--quiet"])

        assert status == 0
        out = capsys.readouterr().out
        assert out.startswith("P3\n4 4\n255\n")
        assert len(out.splitlines()) == 3 + 16

    def test_progress_on_stderr(self, no_taichi_init, scene_file, tmp_path, capsys):
        """Test progress is reported on stderr unless --quiet is given."""
        from src.prism.cli import main

        status = main(
            [str(scene_file), "-o", str(tmp_path / "out.ppm"), "--size", "4", "--rows-per-batch", "2"]
        )

        assert status == 0
        err = capsys.readouterr().err
        assert "Progress: 2/4 rows" in err
        assert "Progress: 4/4 rows" in err

    def test_scene_errors(self, no_taichi_init, tmp_path, capsys):
        """Test a bad scene gives exit status 1 and an error message."""
        from src.prism.cli import main

        path = tmp_path / "bad.txt"
        path.write_text("sphere (0 0 0)\n", encoding="utf-8")

        status = main([str(path), "-o", str(tmp_path / "out.ppm"), "--quiet"])

        assert status == 1
        err = capsys.readouterr().err
        assert "Error:" in err
        assert "line 1" in err
        assert not (tmp_path / "out.ppm").exists()

    def test_missing_scene_file(self, no_taichi_init, tmp_path, capsys):
        """Test a missing scene file gives exit status 1."""
        from src.prism.cli import main

        status = main([str(tmp_path / "missing.txt"), "--quiet"])

        assert status == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_size(self, no_taichi_init, scene_file, tmp_path, capsys):
        """Test an out-of-range image size gives exit status 1."""
        from src.prism.cli import main

        status = main([str(scene_file), "-o", str(tmp_path / "out.ppm"), "--size", "1", "--quiet"])

        assert status == 1
        assert "Image size" in capsys.readouterr().err
