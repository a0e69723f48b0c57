"""Wire message parsing and replies.

A message is a mapping {"type": <command>, "data": <payload>}. The payload
may be a mapping or a JSON string. Field names follow the wire schema, and
the short names used by older producers are accepted as aliases:

    origin / o, direction / dir, center / c, radius / r

Parsing failures raise MessageError, which the worker turns into an "Error"
reply.
"""

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from raycaster.camera.pinhole import Viewport
from raycaster.geometry.shapes import Point
from raycaster.materials.lambertian import DEFAULT_MATERIAL, Material

# Command names
VIEWPORT = "viewport"
RAY = "ray"
TRIANGLE = "tri"
SPHERE = "sphere"
CLEAR_SHAPES = "clearshapes"

# Reply types
RESULT = "result"
NOTIFICATION = "Notification"
ERROR = "Error"

VIEWPORT_FIELDS = ("width", "height", "top", "bottom", "left", "right", "near", "far", "fov")


class MessageError(ValueError):
    """A wire message is missing a field or carries an invalid value."""


@dataclass(frozen=True)
class Reply:
    """A reply sent back to the producer.

    Attributes:
        type: "result", "Notification" or "Error".
        message: Human-readable text (notifications and errors).
        data: RGBA pixel bytes (result replies only).
        width: Width of the rendered frame (result replies only).
        height: Height of the rendered frame (result replies only).
    """

    type: str
    message: str = ""
    data: bytes | None = None
    width: int | None = None
    height: int | None = None

    @property
    def is_error(self) -> bool:
        return self.type == ERROR

    def to_dict(self) -> dict[str, Any]:
        reply: dict[str, Any] = {"type": self.type}
        if self.data is not None:
            reply["data"] = self.data
            reply["width"] = self.width
            reply["height"] = self.height
        else:
            reply["message"] = self.message
        return reply


def decode_payload(data: Any) -> Mapping[str, Any]:
    """Turn a message's data member into a mapping.

    Raises:
        MessageError: If the data is not a mapping or valid JSON object.
    """
    if data is None:
        return {}
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise MessageError(f"Payload is not valid JSON: {exc.msg}") from exc
        except RecursionError as exc:
            raise MessageError("Payload is nested too deeply") from exc
    if not isinstance(data, Mapping):
        raise MessageError(f"Payload must be an object, got {type(data).__name__}")
    return data


def require(payload: Mapping[str, Any], *names: str) -> Any:
    """Get the first present field among a name and its aliases.

    Raises:
        MessageError: If none of the names is present.
    """
    for name in names:
        if name in payload and payload[name] is not None:
            return payload[name]
    raise MessageError(f"Missing required field '{names[0]}'")


def _to_number(name: str, value: Any) -> float:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MessageError(f"Field '{name}' must be a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as exc:
        raise MessageError(f"Field '{name}' is too large to be a coordinate") from exc
    if not math.isfinite(number):
        raise MessageError(f"Field '{name}' must be finite, got {value!r}")
    return number


def parse_number(payload: Mapping[str, Any], *names: str) -> float:
    return _to_number(names[0], require(payload, *names))


def parse_point(payload: Mapping[str, Any], *names: str) -> Point:
    """Parse an {x, y, z} object."""
    value = require(payload, *names)
    if not isinstance(value, Mapping):
        raise MessageError(f"Field '{names[0]}' must be an object with x, y and z")
    return tuple(
        _to_number(f"{names[0]}.{axis}", require(value, axis)) for axis in ("x", "y", "z")
    )


def parse_color(value: Any, name: str) -> tuple[float, float, float]:
    """Parse a color given as [r, g, b] or {r, g, b}."""
    if isinstance(value, Mapping):
        channels = [require(value, ch) for ch in ("r", "g", "b")]
    elif isinstance(value, (list, tuple)) and len(value) == 3:
        channels = list(value)
    else:
        raise MessageError(f"Field '{name}' must be [r, g, b] or an object with r, g and b")
    return tuple(_to_number(name, ch) for ch in channels)


def parse_material(payload: Mapping[str, Any]) -> Material:
    """Parse the optional material of a shape message."""
    value = payload.get("material")
    if value is None:
        return DEFAULT_MATERIAL
    if not isinstance(value, Mapping):
        raise MessageError("Field 'material' must be an object")
    ambient = parse_color(value.get("ambient", DEFAULT_MATERIAL.ambient), "material.ambient")
    diffuse = parse_color(value.get("diffuse", DEFAULT_MATERIAL.diffuse), "material.diffuse")
    return Material(ambient=ambient, diffuse=diffuse)


def parse_shape_id(payload: Mapping[str, Any]) -> int | None:
    """Parse the optional shapeId of a shape message."""
    value = payload.get("shapeId")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise MessageError(f"Field 'shapeId' must be an integer, got {value!r}")
    return value


def parse_viewport(payload: Mapping[str, Any]) -> Viewport:
    """Parse a viewport command.

    Raises:
        MessageError: If a field is missing or not a number.
        ValueError: If the viewport dimensions are invalid.
    """
    values = {name: parse_number(payload, name) for name in VIEWPORT_FIELDS}
    for name in ("width", "height"):
        if not values[name].is_integer():
            raise MessageError(f"Field '{name}' must be a whole number, got {values[name]}")
        values[name] = int(values[name])
    return Viewport(**values)


def parse_ray(payload: Mapping[str, Any]) -> tuple[Point, Point]:
    """Parse a ray command into (origin, direction)."""
    return parse_point(payload, "origin", "o"), parse_point(payload, "direction", "dir")


def parse_sphere(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Parse a sphere command into Scene.add_sphere() keyword arguments."""
    return {
        "center": parse_point(payload, "center", "c"),
        "radius": parse_number(payload, "radius", "r"),
        "material": parse_material(payload),
        "shape_id": parse_shape_id(payload),
    }


def parse_triangle(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Parse a tri command into Scene.add_triangle() keyword arguments."""
    return {
        "a": parse_point(payload, "a"),
        "b": parse_point(payload, "b"),
        "c": parse_point(payload, "c"),
        "material": parse_material(payload),
        "shape_id": parse_shape_id(payload),
    }


def format_point(point: Point) -> str:
    """Format a point the way collision notifications print vectors."""
    x, y, z = point
    return f"{{x: {x:g} y: {y:g} z: {z:g} w: 0}}"
