"""Tests for the message-driven TracerWorker.

Tests cover:
- Every command and its reply
- JSON-string payloads and short field names
- Error replies for malformed, unknown and invalid messages
"""

import json
import logging

import pytest

# x_inc = 1/3 and half extents of 1/3, so the center ray looks straight down -z
VIEWPORT = {
    "width": 3,
    "height": 3,
    "top": 2 / 3,
    "bottom": -2 / 3,
    "left": -2 / 3,
    "right": 2 / 3,
    "near": 1,
    "far": 100,
    "fov": 45,
}

SPHERE = {"center": {"x": 0, "y": 0, "z": -5}, "radius": 1}
TRIANGLE = {
    "a": {"x": -1, "y": -1, "z": -3},
    "b": {"x": 1, "y": -1, "z": -3},
    "c": {"x": 0, "y": 1, "z": -3},
}
FORWARD_RAY = {"origin": {"x": 0, "y": 0, "z": 0}, "direction": {"x": 0, "y": 0, "z": -1}}


@pytest.fixture
def worker():
    from raycaster.core.config import TracerConfig
    from raycaster.protocol.worker import TracerWorker

    return TracerWorker(TracerConfig(max_shapes=4, max_image_width=16, max_image_height=16))


class TestCommands:
    """Tests for successful commands."""

    def test_commands(self, worker):
        """Test the worker answers the five commands."""
        assert set(worker.commands) == {"viewport", "ray", "tri", "sphere", "clearshapes"}

    def test_sphere(self, worker):
        """Test a sphere message adds a shape and names its id."""
        reply = worker.handle({"type": "sphere", "data": SPHERE})
        assert reply.type == "Notification"
        assert reply.message == "Added sphere 0"
        assert worker.scene.shape_count() == 1

    def test_sphere_json_string_short_names(self, worker):
        """Test a JSON string payload with short names and a shapeId."""
        data = json.dumps({"c": {"x": 0, "y": 0, "z": -5}, "r": 1, "shapeId": 12})
        reply = worker.handle({"type": "sphere", "data": data})
        assert reply.message == "Added sphere 12"

    def test_triangle(self, worker):
        """Test a tri message adds a triangle."""
        reply = worker.handle({"type": "tri", "data": TRIANGLE})
        assert reply.type == "Notification"
        assert reply.message == "Added triangle 0"

    def test_ray_collision(self, worker):
        """Test a ray hitting a sphere reports the collision point."""
        worker.handle({"type": "sphere", "data": SPHERE})
        reply = worker.handle({"type": "ray", "data": json.dumps(FORWARD_RAY)})
        assert reply.type == "Notification"
        assert reply.message == "There was a collision at: {x: 0 y: 0 z: -4 w: 0}"

    def test_ray_hits_nearest(self, worker):
        """Test the ray reports the nearer triangle."""
        worker.handle({"type": "sphere", "data": SPHERE})
        worker.handle({"type": "tri", "data": TRIANGLE})
        reply = worker.handle({"type": "ray", "data": FORWARD_RAY})
        assert reply.message == "There was a collision at: {x: 0 y: 0 z: -3 w: 0}"

    def test_ray_no_collision(self, worker):
        """Test a ray into an empty scene reports no collision."""
        reply = worker.handle({"type": "ray", "data": FORWARD_RAY})
        assert reply.type == "Notification"
        assert reply.message == "There was NO collision"

    def test_clear_shapes(self, worker):
        """Test clearshapes empties the scene."""
        worker.handle({"type": "sphere", "data": SPHERE})
        reply = worker.handle({"type": "clearshapes"})
        assert reply.message == "Shapes have been cleared"
        assert worker.scene.shape_count() == 0
        ray = worker.handle({"type": "ray", "data": FORWARD_RAY})
        assert ray.message == "There was NO collision"

    def test_viewport(self, worker):
        """Test a viewport message returns RGBA bytes for the frame."""
        worker.handle({"type": "sphere", "data": SPHERE})
        reply = worker.handle({"type": "viewport", "data": json.dumps(VIEWPORT)})
        assert reply.type == "result"
        assert (reply.width, reply.height) == (3, 3)
        assert isinstance(reply.data, bytes)
        assert len(reply.data) == 3 * 3 * 4
        # Center pixel hits the sphere, corners miss
        center = (1 + 1 * 3) * 4
        assert reply.data[center + 3] == 255
        assert reply.data[0:4] == b"\x00\x00\x00\x00"

    def test_handle_all(self, worker):
        """Test a stream gets one reply per message in order."""
        replies = worker.handle_all(
            [
                {"type": "sphere", "data": SPHERE},
                {"type": "bogus"},
                {"type": "ray", "data": FORWARD_RAY},
            ]
        )
        assert [reply.type for reply in replies] == ["Notification", "Error", "Notification"]


class TestErrors:
    """Tests for Error replies."""

    def test_missing_type(self, worker):
        """Test a message without a type is rejected."""
        reply = worker.handle({"data": SPHERE})
        assert reply.is_error
        assert reply.message == "Must supply a type"

    def test_not_a_mapping(self, worker):
        """Test a non-mapping message is rejected."""
        reply = worker.handle("sphere")
        assert reply.is_error
        assert reply.message == "Must supply a type"

    def test_unknown_type(self, worker):
        """Test an unknown command is rejected."""
        reply = worker.handle({"type": "cube", "data": {}})
        assert reply.is_error
        assert reply.message == "Not sure what you want"

    def test_missing_field(self, worker):
        """Test a missing radius is rejected without adding a shape."""
        reply = worker.handle({"type": "sphere", "data": {"center": SPHERE["center"]}})
        assert reply.is_error
        assert "radius" in reply.message
        assert worker.scene.shape_count() == 0

    def test_invalid_json(self, worker):
        """Test malformed JSON data is rejected."""
        reply = worker.handle({"type": "ray", "data": "{not json"})
        assert reply.is_error
        assert "JSON" in reply.message

    def test_invalid_geometry(self, worker):
        """Test a negative radius is rejected."""
        reply = worker.handle({"type": "sphere", "data": {**SPHERE, "radius": -2}})
        assert reply.is_error
        assert "radius" in reply.message

    def test_degenerate_triangle(self, worker):
        """Test a degenerate triangle is rejected."""
        flat = {**TRIANGLE, "c": {"x": 3, "y": -1, "z": -3}}
        reply = worker.handle({"type": "tri", "data": flat})
        assert reply.is_error
        assert "degenerate" in reply.message

    def test_invalid_viewport(self, worker):
        """Test a zero-width viewport is rejected."""
        reply = worker.handle({"type": "viewport", "data": {**VIEWPORT, "width": 0}})
        assert reply.is_error
        assert "positive" in reply.message

    def test_viewport_too_large(self, worker):
        """Test a viewport above the maximum size is rejected."""
        reply = worker.handle({"type": "viewport", "data": {**VIEWPORT, "width": 64}})
        assert reply.is_error
        assert "exceed maximum" in reply.message

    def test_duplicate_shape_id(self, worker):
        """Test a reused shapeId is rejected."""
        worker.handle({"type": "sphere", "data": {**SPHERE, "shapeId": 1}})
        reply = worker.handle({"type": "tri", "data": {**TRIANGLE, "shapeId": 1}})
        assert reply.is_error
        assert "already in use" in reply.message

    def test_scene_full(self, worker):
        """Test adding to a full scene is rejected."""
        for _ in range(4):
            worker.handle({"type": "sphere", "data": SPHERE})
        reply = worker.handle({"type": "sphere", "data": SPHERE})
        assert reply.is_error
        assert "Maximum number of shapes" in reply.message

    def test_errors_are_logged(self, worker, caplog):
        """Test rejected messages are logged as warnings."""
        with caplog.at_level(logging.WARNING, logger="raycaster.protocol.worker"):
            worker.handle({"type": "sphere", "data": {}})
        assert "Rejected sphere message" in caplog.text

    def test_coordinate_too_large_for_float(self, worker):
        """An integer literal beyond float range replies Error instead of raising."""
        huge = "9" * 400
        data = '{"c": {"x": ' + huge + ', "y": 0, "z": -5}, "r": 1}'
        reply = worker.handle({"type": "sphere", "data": data})
        assert reply.is_error
        assert "too large" in reply.message
        assert worker.scene.shape_count() == 0

    @pytest.mark.parametrize("command", [["viewport"], {"name": "ray"}, 7])
    def test_non_string_type(self, worker, command):
        """A type that is not a command name is treated as an unknown command."""
        reply = worker.handle({"type": command, "data": "{}"})
        assert reply.is_error
        assert reply.message == "Not sure what you want"
