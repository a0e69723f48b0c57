"""Unit tests for wire message parsing."""

import json

import pytest

VIEWPORT_PAYLOAD = {
    "width": 4,
    "height": 3,
    "top": 1,
    "bottom": -1,
    "left": -1,
    "right": 1,
    "near": 1,
    "far": 100,
    "fov": 45,
}


class TestDecodePayload:
    def test_mapping_passes_through(self):
        """Test a mapping payload is returned as is."""
        from raycaster.protocol.messages import decode_payload

        payload = {"r": 1}
        assert decode_payload(payload) is payload

    def test_json_string(self):
        """Test a JSON string payload is decoded."""
        from raycaster.protocol.messages import decode_payload

        assert decode_payload('{"r": 1}') == {"r": 1}

    def test_missing_data_is_empty(self):
        """Test missing data decodes to an empty payload."""
        from raycaster.protocol.messages import decode_payload

        assert decode_payload(None) == {}

    def test_invalid_json(self):
        """Test malformed JSON raises MessageError."""
        from raycaster.protocol.messages import MessageError, decode_payload

        with pytest.raises(MessageError, match="not valid JSON"):
            decode_payload("{r: 1")

    def test_non_object(self):
        """Test a JSON array payload is rejected."""
        from raycaster.protocol.messages import MessageError, decode_payload

        with pytest.raises(MessageError, match="must be an object"):
            decode_payload("[1, 2, 3]")


class TestParseFields:
    def test_point_aliases(self):
        """Test long and short field names parse to the same ray."""
        from raycaster.protocol.messages import parse_ray

        long_form = {"origin": {"x": 0, "y": 0, "z": 0}, "direction": {"x": 0, "y": 0, "z": -1}}
        short_form = {"o": {"x": 0, "y": 0, "z": 0}, "dir": {"x": 0, "y": 0, "z": -1}}
        assert parse_ray(long_form) == parse_ray(short_form) == ((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

    def test_missing_field(self):
        """Test a missing direction names the field."""
        from raycaster.protocol.messages import MessageError, parse_ray

        with pytest.raises(MessageError, match="Missing required field 'direction'"):
            parse_ray({"origin": {"x": 0, "y": 0, "z": 0}})

    def test_missing_axis(self):
        """Test a point without z names the axis."""
        from raycaster.protocol.messages import MessageError, parse_point

        with pytest.raises(MessageError, match="'z'"):
            parse_point({"a": {"x": 0, "y": 0}}, "a")

    @pytest.mark.parametrize("value", ["1", True, None, float("nan")])
    def test_invalid_number(self, value):
        """Test strings, booleans, null and NaN are not numbers."""
        from raycaster.protocol.messages import MessageError, parse_number

        with pytest.raises(MessageError):
            parse_number({"r": value}, "radius", "r")

    def test_sphere(self):
        """Test sphere fields map to add_sphere arguments."""
        from raycaster.materials.lambertian import DEFAULT_MATERIAL
        from raycaster.protocol.messages import parse_sphere

        kwargs = parse_sphere({"c": {"x": 1, "y": 2, "z": -5}, "r": 0.5})
        assert kwargs == {
            "center": (1.0, 2.0, -5.0),
            "radius": 0.5,
            "material": DEFAULT_MATERIAL,
            "shape_id": None,
        }

    def test_triangle_with_material_and_id(self):
        """Test triangle material colors and shapeId are parsed."""
        from raycaster.protocol.messages import parse_triangle

        kwargs = parse_triangle(
            {
                "a": {"x": -1, "y": -1, "z": -5},
                "b": {"x": 1, "y": -1, "z": -5},
                "c": {"x": 0, "y": 1, "z": -5},
                "shapeId": 9,
                "material": {"ambient": [0, 0, 0], "diffuse": {"r": 1, "g": 0.5, "b": 0}},
            }
        )
        assert kwargs["shape_id"] == 9
        assert kwargs["material"].ambient == (0.0, 0.0, 0.0)
        assert kwargs["material"].diffuse == (1.0, 0.5, 0.0)

    def test_invalid_shape_id(self):
        """Test a string shapeId is rejected."""
        from raycaster.protocol.messages import MessageError, parse_shape_id

        with pytest.raises(MessageError, match="shapeId"):
            parse_shape_id({"shapeId": "7"})

    def test_invalid_color(self):
        """Test a two-channel ambient color is rejected."""
        from raycaster.protocol.messages import MessageError, parse_material

        with pytest.raises(MessageError, match="material.ambient"):
            parse_material({"material": {"ambient": [0.1, 0.2]}})


class TestParseViewport:
    def test_viewport(self):
        """Test a complete viewport payload parses."""
        from raycaster.protocol.messages import parse_viewport

        viewport = parse_viewport(json.loads(json.dumps(VIEWPORT_PAYLOAD)))
        assert (viewport.width, viewport.height) == (4, 3)
        assert viewport.fov == 45.0

    def test_whole_float_size(self):
        """Test a whole float width becomes an int."""
        from raycaster.protocol.messages import parse_viewport

        viewport = parse_viewport({**VIEWPORT_PAYLOAD, "width": 4.0})
        assert viewport.width == 4

    def test_fractional_size(self):
        """Test a fractional height is rejected."""
        from raycaster.protocol.messages import MessageError, parse_viewport

        with pytest.raises(MessageError, match="whole number"):
            parse_viewport({**VIEWPORT_PAYLOAD, "height": 2.5})

    def test_missing_fov(self):
        """Test a viewport without fov is rejected."""
        from raycaster.protocol.messages import MessageError, parse_viewport

        payload = dict(VIEWPORT_PAYLOAD)
        del payload["fov"]
        with pytest.raises(MessageError, match="'fov'"):
            parse_viewport(payload)


class TestReply:
    def test_notification_dict(self):
        """Test a notification serializes its message."""
        from raycaster.protocol.messages import NOTIFICATION, Reply

        reply = Reply(NOTIFICATION, "Shapes have been cleared")
        assert reply.to_dict() == {"type": "Notification", "message": "Shapes have been cleared"}
        assert not reply.is_error

    def test_result_dict(self):
        """Test a result serializes data, width and height."""
        from raycaster.protocol.messages import RESULT, Reply

        reply = Reply(RESULT, data=b"\x00" * 4, width=1, height=1)
        assert reply.to_dict() == {"type": "result", "data": b"\x00" * 4, "width": 1, "height": 1}

    def test_format_point(self):
        """Test collision points print like vectors with w."""
        from raycaster.protocol.messages import format_point

        assert format_point((0.0, 0.0, -4.0)) == "{x: 0 y: 0 z: -4 w: 0}"
