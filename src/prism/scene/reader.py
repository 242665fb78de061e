"""Reader for the line-oriented scene description format.

Each non-blank line describes one scene component. The first word names
the component and the remaining tokens are its parameters. Vectors are
written ``(x y z)`` and colors ``[r g b]``; items in brackets below are
optional::

    camera   (position) (look-at target) (up) [fov]
    light    (position) [color]
    plane    distance (normal) [color] [reflectivity]
    sphere   (center) radius [color] [reflectivity]
    cylinder (center) (axis) radius height [color] [reflectivity]

Lines whose first character is ``#`` are comments. When several camera
lines are present the last one is used; at least one camera is required.

Reading does not stop at the first bad line. Every problem is logged with
its line number and, once the whole input has been read, a single
SceneParseError listing all of them is raised.

Example:
    >>> from src.prism.scene.reader import parse_scene
    >>> description = parse_scene('''
    ... camera (0 1 5) (0 1 0) (0 1 0)
    ... light (5 5 5)
    ... plane 0 (0 1 0) [0.8 0.8 0.8]
    ... sphere (0 1 0) 1 [0.9 0.2 0.2] 0.5
    ... ''')
    >>> scene = description.build_scene()
"""

import logging
import math
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, TextIO

from src.prism.camera.pinhole import DEFAULT_FOV, PinholeCamera
from src.prism.core.ray import normalize_vector
from src.prism.scene.intersection import DEFAULT_SURFACE_COLOR
from src.prism.scene.manager import (
    SceneConfig,
    SceneManager,
    validate_color,
    validate_light_color,
    validate_non_negative,
    validate_reflectivity,
)

logger = logging.getLogger(__name__)

# A vector "(...)", a color "[...]" or a bare word/number
_TOKEN_RE = re.compile(r"\(([^()]*)\)|\[([^\[\]]*)\]|(\S+)")

VECTOR = "vector"
COLOR = "color"
WORD = "word"


class SceneParseError(ValueError):
    """Raised when a scene description contains errors.

    Attributes:
        errors: One message per problem, each prefixed with its line number.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Scene description has errors:\n" + "\n".join(self.errors))


class _LineError(Exception):
    """A problem with a single line; collected by the reader."""


@dataclass
class SceneDescription:
    """The result of reading a scene description.

    Attributes:
        config: Primitives and lights, in the order they appeared.
        camera: The camera from the last camera line.
    """

    config: SceneConfig
    camera: PinholeCamera

    def build_scene(self, scene: SceneManager | None = None) -> SceneManager:
        """Load the primitives and lights into a (new or cleared) SceneManager."""
        if scene is None:
            scene = SceneManager()
        scene.from_config(self.config)
        return scene


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens = []
    for match in _TOKEN_RE.finditer(text):
        vector, color, word = match.groups()
        if vector is not None:
            tokens.append((VECTOR, vector))
        elif color is not None:
            tokens.append((COLOR, color))
        elif any(c in word for c in "()[]"):
            raise _LineError(f"unbalanced brackets in {word!r}")
        else:
            tokens.append((WORD, word))
    return tokens


def _to_float(text: str, what: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise _LineError(f"expected a number for {what}, got {text!r}") from None
    if not math.isfinite(value):
        raise _LineError(f"{what} must be finite, got {text!r}")
    return value


class _Arguments:
    """Cursor over the parameter tokens of one line."""

    def __init__(self, tokens: list[tuple[str, str]]) -> None:
        self._tokens = tokens
        self._pos = 0

    def _peek_kind(self) -> str | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos][0]
        return None

    def _take(self, kind: str, what: str) -> str:
        if self._peek_kind() != kind:
            found = "end of line" if self._peek_kind() is None else repr(self._tokens[self._pos][1])
            raise _LineError(f"expected {what}, found {found}")
        value = self._tokens[self._pos][1]
        self._pos += 1
        return value

    def _triple(self, text: str, what: str) -> tuple[float, float, float]:
        parts = text.split()
        if len(parts) != 3:
            raise _LineError(f"{what} needs 3 components, got {len(parts)}")
        return tuple(_to_float(p, what) for p in parts)

    def vector(self, what: str) -> tuple[float, float, float]:
        return self._triple(self._take(VECTOR, f"{what} (x y z)"), what)

    def number(self, what: str) -> float:
        return _to_float(self._take(WORD, what), what)

    def optional_color(self, default: tuple[float, float, float]) -> tuple[float, float, float]:
        if self._peek_kind() != COLOR:
            return default
        return self._triple(self._take(COLOR, "color"), "color")

    def optional_number(self, what: str, default: float) -> float:
        if self._peek_kind() != WORD:
            return default
        return self.number(what)

    def finish(self) -> None:
        if self._pos < len(self._tokens):
            extra = " ".join(value for _, value in self._tokens[self._pos :])
            raise _LineError(f"unexpected trailing input {extra!r}")


# =============================================================================
# Component Readers
# =============================================================================


def _read_camera(args: _Arguments) -> PinholeCamera:
    position = args.vector("position")
    target = args.vector("target")
    up = args.vector("up")
    fov = args.optional_number("fov", DEFAULT_FOV)
    args.finish()

    camera = PinholeCamera(position=position, target=target, up=up, fov=fov)
    if not camera.valid:
        raise _LineError("invalid camera (degenerate orientation or field of view)")
    return camera


def _read_light(args: _Arguments) -> dict[str, Any]:
    position = args.vector("position")
    color = validate_light_color(args.optional_color((1.0, 1.0, 1.0)))
    args.finish()
    return {"position": list(position), "color": list(color)}


def _read_surface(args: _Arguments) -> tuple[list[float], float]:
    color = validate_color(args.optional_color(DEFAULT_SURFACE_COLOR))
    reflectivity = validate_reflectivity(args.optional_number("reflectivity", 0.0))
    args.finish()
    return list(color), reflectivity


def _read_plane(args: _Arguments) -> dict[str, Any]:
    dist = args.number("distance")
    normal = normalize_vector(args.vector("normal"), "plane normal")
    color, reflectivity = _read_surface(args)
    return {
        "type": "plane",
        "dist": dist,
        "normal": list(normal),
        "color": color,
        "reflectivity": reflectivity,
    }


def _read_sphere(args: _Arguments) -> dict[str, Any]:
    center = args.vector("center")
    radius = validate_non_negative(args.number("radius"), "radius")
    color, reflectivity = _read_surface(args)
    return {
        "type": "sphere",
        "center": list(center),
        "radius": radius,
        "color": color,
        "reflectivity": reflectivity,
    }


def _read_cylinder(args: _Arguments) -> dict[str, Any]:
    center = args.vector("center")
    axis = normalize_vector(args.vector("axis"), "cylinder axis")
    radius = validate_non_negative(args.number("radius"), "radius")
    height = validate_non_negative(args.number("height"), "height")
    color, reflectivity = _read_surface(args)
    return {
        "type": "cylinder",
        "center": list(center),
        "axis": list(axis),
        "radius": radius,
        "height": height,
        "color": color,
        "reflectivity": reflectivity,
    }


PRIMITIVE_READERS = {
    "plane": _read_plane,
    "sphere": _read_sphere,
    "cylinder": _read_cylinder,
}


# =============================================================================
# Public API
# =============================================================================


def parse_scene(source: str | Iterable[str], name: str = "<scene>") -> SceneDescription:
    """Parse a scene description.

    Args:
        source: The whole description as a string, or an iterable of lines
            (such as an open text file).
        name: Name used in log messages.

    Returns:
        A SceneDescription with the primitives, lights and camera.

    Raises:
        SceneParseError: If any line is invalid or no camera is defined.
    """
    lines = source.splitlines() if isinstance(source, str) else source

    config = SceneConfig()
    camera: PinholeCamera | None = None
    errors: list[str] = []

    for line_no, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line or line[0] == "#":
            continue

        try:
            tokens = _tokenize(line)
            if not tokens:
                continue
            kind, keyword = tokens[0]
            if kind != WORD:
                raise _LineError("line must start with a component type")
            args = _Arguments(tokens[1:])

            if keyword in PRIMITIVE_READERS:
                config.primitives.append(PRIMITIVE_READERS[keyword](args))
            elif keyword == "light":
                config.lights.append(_read_light(args))
            elif keyword == "camera":
                camera = _read_camera(args)
            else:
                raise _LineError(f"unrecognized type {keyword!r}")
        except (_LineError, ValueError) as e:
            message = f"line {line_no}: {e}"
            logger.error("%s: %s", name, message)
            errors.append(message)

    if camera is None:
        message = "no camera defined"
        logger.error("%s: %s", name, message)
        errors.append(message)

    if errors:
        raise SceneParseError(errors)

    logger.debug(
        "%s: read %d primitives and %d lights",
        name,
        len(config.primitives),
        len(config.lights),
    )
    return SceneDescription(config=config, camera=camera)


def read_scene(stream: TextIO, name: str | None = None) -> SceneDescription:
    """Parse a scene description from an open text stream."""
    return parse_scene(stream, name or getattr(stream, "name", "<stream>"))


def load_scene_file(filepath: str | os.PathLike) -> SceneDescription:
    """Parse a scene description file.

    Raises:
        OSError: If the file cannot be read.
        SceneParseError: If the description has errors.
    """
    with open(filepath, encoding="utf-8") as f:
        return read_scene(f, os.fspath(filepath))
