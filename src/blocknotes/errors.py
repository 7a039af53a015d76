"""Error taxonomy shared by the core and its transports."""


class BlockNotesError(Exception):
    """Base class for all expected failures."""

    kind = "error"


class ValidationError(BlockNotesError, ValueError):
    """Bad input: empty or oversized title, malformed wire data, duplicate ids."""

    kind = "validation"


class InvalidOperation(BlockNotesError):
    """Operation does not apply to the target, e.g. toggling a non-todo block."""

    kind = "invalid_operation"


class NotFound(BlockNotesError, LookupError):
    """Repository lookup miss."""

    kind = "not_found"


class PermissionDenied(BlockNotesError):
    """Acting user may not read or write the note."""

    kind = "permission_denied"
