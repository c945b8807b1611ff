"""Custom exceptions for the application."""


class ApiException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: dict | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ApiException):
    """Resource not found exception."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(404, f"{resource} not found: {identifier}")


class ValidationError(ApiException):
    """Request validation error."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(422, message, details)


class AssistantNotFoundError(NotFoundError):
    """No snapshot exists for the pull request assistant."""

    def __init__(self, process_id: str) -> None:
        super().__init__("Assistant", process_id)


class AssistantError(Exception):
    """Base exception for the assistant runtime."""


class ActivityError(AssistantError):
    """An activity failed after exhausting its retry policy."""

    def __init__(self, activity: str, attempts: int, cause: BaseException) -> None:
        self.activity = activity
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Activity {activity} failed after {attempts} attempt(s): {cause}")


class ProcessAlreadyStartedError(AssistantError):
    """A live process already holds this identity."""

    def __init__(self, process_id: str) -> None:
        self.process_id = process_id
        super().__init__(f"Process already running: {process_id}")


class ProcessNotFoundError(AssistantError):
    """No live process holds this identity."""

    def __init__(self, process_id: str) -> None:
        self.process_id = process_id
        super().__init__(f"Process not found: {process_id}")


class NonDeterministicGateError(AssistantError):
    """A deprecated gate was previously recorded with its old value."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Gate {name} was recorded as unpatched but its old branch no longer exists"
        )
