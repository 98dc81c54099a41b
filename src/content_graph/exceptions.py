"""Exceptions raised by the content graph engine.

Most failure modes resolve to ``None`` or an empty list instead of raising;
these classes cover the few cases a caller has to handle explicitly.
"""


class ContentGraphError(Exception):
    """Base class for engine errors."""


class UnknownObjectKindError(ContentGraphError):
    """A record's type discriminator does not map to a known object kind."""

    def __init__(self, discriminator, record_id=None):
        self.discriminator = discriminator
        self.record_id = record_id
        message = f"Unknown object kind {discriminator!r}"
        if record_id:
            message += f" for record {record_id}"
        super().__init__(message)


class SnapshotError(ContentGraphError):
    """The content snapshot does not have the expected top-level shape."""
