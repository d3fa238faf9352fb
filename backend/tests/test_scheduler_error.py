from app.core.exceptions import (
    AppError,
    ConfigurationError,
    RegenerationWindowError,
    ResourceNotFoundError,
    SchedulerError,
    SlotConflictError,
    SlotValidationError,
    TimetableExistsError,
)


def test_scheduler_error_structure():
    err = SchedulerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_status_codes_per_error_kind():
    assert ConfigurationError("No active rooms available").status_code == 400
    assert isinstance(ConfigurationError("x"), SchedulerError)
    assert TimetableExistsError("exists").status_code == 409
    assert RegenerationWindowError("late").status_code == 403
    assert SlotValidationError("invalid").status_code == 400
    assert SlotConflictError("taken").status_code == 409


def test_not_found_carries_resource_details():
    err = ResourceNotFoundError("Term", "abc")
    assert err.status_code == 404
    assert err.message == "Term with id abc not found"
    assert err.details == {"resource_type": "Term", "resource_id": "abc"}
