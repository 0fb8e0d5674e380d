class ApiError(Exception):
    """Base error for anything a handler should turn into a JSON response."""

    status_code = 500

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self):
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(ApiError):
    status_code = 400

    @classmethod
    def for_field(cls, field, msg, message="Invalid data"):
        return cls(message, errors=[{"loc": [field], "msg": msg, "type": "value_error"}])


class NotFoundError(ApiError):
    status_code = 404


class InternalError(ApiError):
    status_code = 500

    def __init__(self, message="Internal server error"):
        super().__init__(message)
