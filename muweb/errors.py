"""Error taxonomy shared by every route.

Handlers raise these; the application turns them into the
``{"success": false, "error": ...}`` envelope with the matching status.
"""


class MuWebError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(MuWebError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(MuWebError):
    status_code = 401
    default_message = "Authentication failed"


class ConflictError(MuWebError):
    status_code = 409
    default_message = "Resource already exists"


class NotFoundError(MuWebError):
    status_code = 404
    default_message = "Resource not found"


class InternalError(MuWebError):
    status_code = 500
