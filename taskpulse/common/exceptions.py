from fastapi import HTTPException, status


class TaskPulseException(HTTPException):
    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(TaskPulseException):
    def __init__(self, resource: str, resource_id: str | None = None):
        detail = f"{resource} not found"
        if resource_id:
            detail = f"{resource} '{resource_id}' not found"
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class BadRequestError(TaskPulseException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class ConfigurationError(TaskPulseException):
    def __init__(self, setting: str):
        super().__init__(detail=f"{setting} is not configured")
        self.setting = setting


class ExternalServiceError(TaskPulseException):
    def __init__(self, service: str, detail: str | None = None):
        msg = f"External service error: {service}"
        if detail:
            msg += f" - {detail}"
        super().__init__(detail=msg, status_code=status.HTTP_502_BAD_GATEWAY)


class MondayAPIError(Exception):
    """Raised by the monday.com client on HTTP or GraphQL level failures."""

    def __init__(self, message: str, status_code: int | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []
