"""
Workflow error taxonomy.

Every error carries a machine-readable `kind` and the HTTP status it maps
to; the API layer renders them as {"kind": ..., "message": ...}.
"""


class WorkflowError(Exception):
    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(WorkflowError):
    kind = "not_found"
    status_code = 404


class ValidationError(WorkflowError):
    kind = "validation"
    status_code = 400


class ForbiddenError(WorkflowError):
    kind = "forbidden"
    status_code = 403


class InternalError(WorkflowError):
    """Persistence or unexpected failure. The cause stays in server logs."""
    kind = "internal"
    status_code = 500
