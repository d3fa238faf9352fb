class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class ConfigurationError(SchedulerError):
    """Raised when a term lacks the rooms, periods, classes or assignments needed to schedule."""

class TimetableExistsError(AppError):
    """Raised when a term already has slots and regeneration was not requested."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class RegenerationWindowError(AppError):
    """Raised when a term is too far past its start date to be regenerated."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=403, details=details)

class SlotValidationError(AppError):
    """Raised when a manual slot breaks a class-subject or online-delivery rule."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class SlotConflictError(AppError):
    """Raised when a manual slot collides with a persisted slot on room, trainer or class."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)
