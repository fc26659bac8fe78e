"""Service-level error taxonomy.

Services raise these; the application factory maps them onto JSON responses
of the form ``{"error": <kind>, "message": <text>}``.
"""


class ServiceError(Exception):
    status_code = 500
    kind = "error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.kind, "message": self.message}


class ValidationError(ServiceError):
    """Malformed input: bad seeds, tied scores at completion, etc."""

    status_code = 400
    kind = "validation_error"


class AuthenticationError(ServiceError):
    """Missing or wrong credentials."""

    status_code = 401
    kind = "authentication_error"


class AuthorizationError(ServiceError):
    status_code = 403
    kind = "authorization_error"


class NotFoundError(ServiceError):
    status_code = 404
    kind = "not_found"


class ConflictError(ServiceError):
    """The request is well-formed but clashes with the current state."""

    status_code = 409
    kind = "conflict"
