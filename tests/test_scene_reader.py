"""Unit tests for the scene description reader.

Tests cover:
- Reading every component type with and without optional values
- Comments, blank lines and repeated camera lines
- Error collection with line numbers
- Building a SceneManager from a description
- Reading from streams and files
- The demo scene text
"""

import io
import logging

import pytest

SIMPLE_SCENE = """\
camera (0 1 5) (0 1 0) (0 1 0) 45
light (5 5 5) [0.5 0.6 0.7]
plane 0 (0 2 0) [0.8 0.8 0.8] 0.2
sphere (0 1 0) 1 [0.9 0.2 0.2] 0.5
cylinder (2 1 0) (0 3 0) 0.5 2 [0.1 0.2 0.3] 0.3
"""


class TestParseComponents:
    """Tests for reading individual component lines."""

    def test_full_scene(self):
        """Test every component type is read with its values."""
        from src.prism.scene.reader import parse_scene

        description = parse_scene(SIMPLE_SCENE)
        primitives = description.config.primitives

        assert [p["type"] for p in primitives] == ["plane", "sphere", "cylinder"]
        assert primitives[0] == {
            "type": "plane",
            "dist": 0.0,
            "normal": [0.0, 1.0, 0.0],
            "color": [0.8, 0.8, 0.8],
            "reflectivity": 0.2,
        }
        assert primitives[1]["center"] == [0.0, 1.0, 0.0]
        assert primitives[1]["radius"] == 1.0
        assert primitives[1]["reflectivity"] == 0.5
        assert primitives[2]["axis"] == [0.0, 1.0, 0.0]
        assert primitives[2]["height"] == 2.0
        assert primitives[2]["color"] == [0.1, 0.2, 0.3]

        assert description.config.lights == [{"position": [5.0, 5.0, 5.0], "color": [0.5, 0.6, 0.7]}]

        camera = description.camera
        assert camera.position == (0.0, 1.0, 5.0)
        assert camera.target == (0.0, 1.0, 0.0)
        assert camera.up == (0.0, 1.0, 0.0)
        assert camera.fov == 45.0

    def test_optional_values_default(self):
        """Test omitted colors, reflectivity and fov take their defaults."""
        from src.prism.camera.pinhole import DEFAULT_FOV
        from src.prism.scene.intersection import DEFAULT_SURFACE_COLOR
        from src.prism.scene.reader import parse_scene

        description = parse_scene(
            "camera (0 0 5) (0 0 0) (0 1 0)\n"
            "light (0 5 0)\n"
            "sphere (0 0 0) 1\n"
            "plane -1 (0 1 0) 0.4\n"
        )

        assert description.camera.fov == DEFAULT_FOV
        assert description.config.lights[0]["color"] == [1.0, 1.0, 1.0]
        sphere, plane = description.config.primitives
        assert sphere["color"] == list(DEFAULT_SURFACE_COLOR)
        assert sphere["reflectivity"] == 0.0
        assert plane["color"] == list(DEFAULT_SURFACE_COLOR)
        assert plane["reflectivity"] == 0.4
        assert plane["dist"] == -1.0

    def test_comments_and_blank_lines(self):
        """Test comment and blank lines are skipped."""
        from src.prism.scene.reader import parse_scene

        description = parse_scene(
            "# a comment\n\n   \ncamera (0 0 5) (0 0 0) (0 1 0)\n#sphere (0 0 0) 1\n"
        )
        assert description.config.primitives == []

    def test_last_camera_wins(self):
        """Test the last of several camera lines is used."""
        from src.prism.scene.reader import parse_scene

        description = parse_scene(
            "camera (0 0 5) (0 0 0) (0 1 0)\ncamera (1 2 3) (0 0 0) (0 1 0) 30\n"
        )
        assert description.camera.position == (1.0, 2.0, 3.0)
        assert description.camera.fov == 30.0

    def test_accepts_iterable_of_lines(self):
        """Test an iterable of newline-terminated lines is accepted."""
        from src.prism.scene.reader import parse_scene

        description = parse_scene(io.StringIO(SIMPLE_SCENE))
        assert len(description.config.primitives) == 3

    def test_crlf_line_endings(self):
        """Test Windows line endings are tolerated."""
        from src.prism.scene.reader import parse_scene

        description = parse_scene(["camera (0 0 5) (0 0 0) (0 1 0)\r\n", "sphere (0 0 0) 1\r\n"])
        assert description.config.primitives[0]["radius"] == 1.0

    def test_flexible_spacing(self):
        """Test extra whitespace inside and around brackets."""
        from src.prism.scene.reader import parse_scene

        description = parse_scene(
            "camera   ( 0 0 5 )  (0 0 0)\t(0 1 0)\nsphere (  1  2 3) 0.5 [ 1 1 1 ]\n"
        )
        assert description.config.primitives[0]["center"] == [1.0, 2.0, 3.0]
        assert description.config.primitives[0]["color"] == [1.0, 1.0, 1.0]


class TestParseErrors:
    """Tests for error reporting."""

    @pytest.mark.parametrize(
        "line, fragment",
        [
            ("torus (0 0 0) 1 2", "unrecognized type"),
            ("sphere (0 0) 1", "3 components"),
            ("sphere (0 0 0)", "expected radius"),
            ("sphere (0 0 0) abc", "expected a number"),
            ("sphere (0 0 0) -1", "radius"),
            ("sphere (0 0 0) 1 [2 0 0]", "color"),
            ("sphere (0 0 0) 1 [1 0 0] 1.5", "Reflectivity"),
            ("sphere (0 0 0) 1 [1 0 0] 0.5 extra", "trailing input"),
            ("sphere (0 0 0 1", "unbalanced brackets"),
            ("sphere (0 0 nan) 1", "finite"),
            ("plane 0 (0 0 0)", "nonzero vector"),
            ("cylinder (0 0 0) (0 1 0) 1", "expected height"),
            ("light (0 0 0) [-1 0 0]", "Light color"),
            ("(0 0 0) sphere", "component type"),
        ],
    )
    def test_bad_line(self, line, fragment):
        """Test each kind of bad line is reported with its line number."""
        from src.prism.scene.reader import SceneParseError, parse_scene

        with pytest.raises(SceneParseError) as exc_info:
            parse_scene(f"camera (0 0 5) (0 0 0) (0 1 0)\n{line}\n")

        errors = exc_info.value.errors
        assert len(errors) == 1
        assert errors[0].startswith("line 2: ")
        assert fragment.lower() in errors[0].lower()

    def test_missing_camera(self):
        """Test a description without a camera is rejected."""
        from src.prism.scene.reader import SceneParseError, parse_scene

        with pytest.raises(SceneParseError) as exc_info:
            parse_scene("sphere (0 0 0) 1\n")
        assert exc_info.value.errors == ["no camera defined"]

    def test_invalid_camera(self):
        """Test a degenerate camera line is an error."""
        from src.prism.scene.reader import SceneParseError, parse_scene

        with pytest.raises(SceneParseError) as exc_info:
            parse_scene("camera (0 0 5) (0 0 5) (0 1 0)\n")
        errors = exc_info.value.errors
        assert errors[0].startswith("line 1: invalid camera")
        assert errors[1] == "no camera defined"

    def test_all_errors_collected(self, caplog):
        """Test reading continues past errors and logs each one."""
        from src.prism.scene.reader import SceneParseError, parse_scene

        text = "sphere (0 0 0)\nlight (0 5 0)\nbogus\nplane x (0 1 0)\n"
        with caplog.at_level(logging.ERROR, logger="src.prism.scene.reader"):
            with pytest.raises(SceneParseError) as exc_info:
                parse_scene(text, name="broken.txt")

        errors = exc_info.value.errors
        assert [e.split(":")[0] for e in errors] == ["line 1", "line 3", "line 4", "no camera defined"]
        assert len(caplog.records) == 4
        assert all("broken.txt" in r.getMessage() for r in caplog.records)

    def test_parse_error_is_value_error(self):
        """Test SceneParseError can be caught as ValueError."""
        from src.prism.scene.reader import SceneParseError

        error = SceneParseError(["line 1: bad"])
        assert isinstance(error, ValueError)
        assert "line 1: bad" in str(error)


class TestBuildScene:
    """Tests for turning a description into a scene."""

    def test_build_scene(self):
        """Test the primitives and lights are loaded in order."""
        from src.prism.geometry.primitive import PrimitiveKind
        from src.prism.scene.reader import parse_scene

        scene = parse_scene(SIMPLE_SCENE).build_scene()

        assert scene.get_primitive_count() == 3
        assert scene.get_light_count() == 1
        assert [p.kind for p in scene.primitives] == [
            PrimitiveKind.PLANE,
            PrimitiveKind.SPHERE,
            PrimitiveKind.CYLINDER,
        ]

    def test_build_into_existing_scene(self, fresh_scene):
        """Test building into a SceneManager replaces its contents."""
        from src.prism.scene.reader import parse_scene

        fresh_scene.add_sphere((10, 0, 0), 1.0)
        result = parse_scene(SIMPLE_SCENE).build_scene(fresh_scene)

        assert result is fresh_scene
        assert fresh_scene.get_primitive_count() == 3

    def test_demo_text_matches_demo_scene(self):
        """Test the demo scene text describes the built-in demo scene."""
        from src.prism.scene.demo import DEMO_SCENE_TEXT, create_demo_scene
        from src.prism.scene.reader import parse_scene

        scene, camera = create_demo_scene()
        expected = scene.to_config()

        description = parse_scene(DEMO_SCENE_TEXT)
        assert description.build_scene().to_config() == expected
        assert description.camera == camera


class TestReadFiles:
    """Tests for stream and file input."""

    def test_read_scene_stream(self):
        """Test read_scene accepts an open text stream."""
        from src.prism.scene.reader import read_scene

        description = read_scene(io.StringIO(SIMPLE_SCENE))
        assert len(description.config.lights) == 1

    def test_load_scene_file(self, tmp_path):
        """Test load_scene_file reads a description from disk."""
        from src.prism.scene.reader import load_scene_file

        path = tmp_path / "scene.txt"
        path.write_text(SIMPLE_SCENE, encoding="utf-8")

        description = load_scene_file(path)
        assert len(description.config.primitives) == 3

    def test_load_missing_file(self, tmp_path):
        """Test a missing file raises OSError."""
        from src.prism.scene.reader import load_scene_file

        with pytest.raises(OSError):
            load_scene_file(tmp_path / "missing.txt")
