"""
Error taxonomy for camp operations.

Policy and filter functions never raise these (they degrade gracefully);
mutation operations raise them and the application's error handlers turn
them into HTTP responses.
"""


class CampanionError(Exception):
    """Base class for all camp operation errors."""


class PermissionDenied(CampanionError):
    """An ownership or role check failed on a mutating operation."""


class NotFound(CampanionError):
    """
    A record id did not resolve, or resolved to a record hidden from the viewer.

    The two cases carry the same message so callers cannot tell them apart.
    """

    def __init__(self, kind='camp', record_id=None):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f'{kind} {record_id} not found')


class ValidationFailed(CampanionError):
    """
    A record failed an invariant before a write.

    Attributes:
        errors (dict): field name -> message for every field at fault.
    """

    def __init__(self, errors):
        self.errors = dict(errors)
        super().__init__('; '.join(f'{field}: {message}' for field, message in self.errors.items()))


class UnknownStatus(ValidationFailed):
    """A stored camp status is not one of draft, active or archive."""

    def __init__(self, raw_status):
        self.raw_status = raw_status
        super().__init__({'status': f'Unrecognized camp status {raw_status!r}'})


class CollaboratorFailure(CampanionError):
    """The entity store or the extraction service failed or timed out."""

    def __init__(self, operation, cause=None):
        self.operation = operation
        self.cause = cause
        message = f'{operation} failed'
        if cause is not None:
            message = f'{message}: {cause}'
        super().__init__(message)
