class ApiError(Exception):
    """Error carried back to the client as a JSON envelope."""
    status_code = 400

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class ValidationError(ApiError):
    status_code = 400

    def __init__(self, message, field=None, errors=None):
        if field and errors is None:
            errors = {"field": field}
        super().__init__(message, errors=errors)
        self.field = field


class NotFoundError(ApiError):
    status_code = 404


class DocumentTemplateError(ApiError):
    """A document template file is missing: deployment is misconfigured."""
    status_code = 500
