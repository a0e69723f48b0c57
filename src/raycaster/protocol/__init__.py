"""Wire protocol: message parsing, replies and the TracerWorker."""

from .messages import MessageError, Reply
from .worker import TracerWorker

__all__ = [
    "MessageError",
    "Reply",
    "TracerWorker",
]
