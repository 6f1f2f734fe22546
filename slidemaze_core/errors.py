from __future__ import annotations


class SlidemazeError(Exception):
    """Base class for errors raised by the slidemaze package."""


class MazeGenerationError(SlidemazeError):
    """A procedurally carved maze has no path from start to exit."""


class InvalidActionError(SlidemazeError, ValueError):
    """An action payload could not be parsed."""


class InvalidStateError(SlidemazeError, ValueError):
    """A serialized game state could not be parsed."""
