"""Message-driven tracer front end.

The TracerWorker owns one Scene and one Rasterizer and answers wire
messages one at a time:

    viewport     render the scene, reply "result" with RGBA bytes
    ray          cast one ray, reply "Notification" with the collision
    tri          add a triangle, reply "Notification"
    sphere       add a sphere, reply "Notification"
    clearshapes  remove every shape, reply "Notification"

Malformed or unknown messages produce an "Error" reply; they never raise.
Messages must be handled sequentially, a render reads the scene as it is
when the message arrives.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.protocol.worker import TracerWorker
    >>> worker = TracerWorker()
    >>> worker.handle({"type": "sphere", "data": '{"c": {"x": 0, "y": 0, "z": -5}, "r": 1}'})
    Reply(type='Notification', message='Added sphere 0', ...)
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from raycaster.core.config import TracerConfig
from raycaster.core.integrator import Rasterizer
from raycaster.protocol import messages
from raycaster.protocol.messages import ERROR, NOTIFICATION, RESULT, Reply
from raycaster.scene.manager import Scene

logger = logging.getLogger(__name__)

Handler = Callable[[Mapping[str, Any]], Reply]


class TracerWorker:
    """Dispatches wire messages to a Scene and a Rasterizer.

    Attributes:
        config: The TracerConfig shared by the scene and the rasterizer.
        scene: The shapes added through tri and sphere messages.
        rasterizer: Renders the scene for viewport messages.
    """

    def __init__(self, config: TracerConfig | None = None) -> None:
        self.config = config if config is not None else TracerConfig()
        self.scene = Scene(self.config)
        self.rasterizer = Rasterizer(self.scene, self.config)
        self._handlers: dict[str, Handler] = {
            messages.VIEWPORT: self._on_viewport,
            messages.RAY: self._on_ray,
            messages.TRIANGLE: self._on_triangle,
            messages.SPHERE: self._on_sphere,
            messages.CLEAR_SHAPES: self._on_clear_shapes,
        }

    @property
    def commands(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def handle(self, message: Mapping[str, Any]) -> Reply:
        """Handle one message and build its reply."""
        command = message.get("type") if isinstance(message, Mapping) else None
        if not command:
            logger.warning("Rejected message without a type")
            return Reply(ERROR, "Must supply a type")

        handler = self._handlers.get(command) if isinstance(command, str) else None
        if handler is None:
            logger.warning("Rejected unknown command %r", command)
            return Reply(ERROR, "Not sure what you want")

        try:
            payload = messages.decode_payload(message.get("data"))
            return handler(payload)
        except (ValueError, RuntimeError) as exc:
            logger.warning("Rejected %s message: %s", command, exc)
            return Reply(ERROR, str(exc))

    def handle_all(self, stream: Iterable[Mapping[str, Any]]) -> list[Reply]:
        """Handle messages in order, returning one reply per message."""
        return [self.handle(message) for message in stream]

    def _on_viewport(self, payload: Mapping[str, Any]) -> Reply:
        viewport = messages.parse_viewport(payload)
        pixels = self.rasterizer.render(viewport)
        return Reply(RESULT, data=pixels.tobytes(), width=viewport.width, height=viewport.height)

    def _on_ray(self, payload: Mapping[str, Any]) -> Reply:
        origin, direction = messages.parse_ray(payload)
        hit = self.scene.query_ray(origin, direction)
        if not hit.hit:
            return Reply(NOTIFICATION, "There was NO collision")
        logger.debug("Ray hit shape %s at t=%g", hit.shape_id, hit.t)
        return Reply(NOTIFICATION, f"There was a collision at: {messages.format_point(hit.point)}")

    def _on_triangle(self, payload: Mapping[str, Any]) -> Reply:
        tri = self.scene.add_triangle(**messages.parse_triangle(payload))
        return Reply(NOTIFICATION, f"Added triangle {tri.shape_id}")

    def _on_sphere(self, payload: Mapping[str, Any]) -> Reply:
        sphere = self.scene.add_sphere(**messages.parse_sphere(payload))
        return Reply(NOTIFICATION, f"Added sphere {sphere.shape_id}")

    def _on_clear_shapes(self, payload: Mapping[str, Any]) -> Reply:
        self.scene.clear()
        return Reply(NOTIFICATION, "Shapes have been cleared")
