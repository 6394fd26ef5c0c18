class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when schedule input cannot be turned into a scheduling attempt."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class FormatError(SchedulerError):
    """Raised when a clock time is not a valid HH:MM value."""
    def __init__(self, value: object):
        super().__init__(
            f"Invalid time value {value!r}; expected HH:MM",
            details={"value": str(value)},
        )
        self.value = value

class ConfigurationError(AppError):
    """Raised when scheduling configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
