"""Exception types raised by the markup engine."""


class MarkupError(Exception):
    """Base class for markup engine errors."""


class InvalidAnnotationError(MarkupError):
    """Annotation data is malformed (unknown kind, missing coordinates)."""


class DuplicateAnnotationError(MarkupError):
    """An annotation id is already present in the store."""


class ImageLoadError(MarkupError):
    """The base drawing could not be loaded or decoded."""


class SessionStateError(MarkupError):
    """Operation is not valid in the session's current state."""


__all__ = [
    'MarkupError',
    'InvalidAnnotationError',
    'DuplicateAnnotationError',
    'ImageLoadError',
    'SessionStateError',
]
