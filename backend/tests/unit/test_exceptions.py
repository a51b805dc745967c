"""Tests for the domain exception hierarchy and its HTTP mapping."""

import pytest

from tutorly.core.exceptions import (
    ConflictException,
    DependencyFailureException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    SlotOverlapException,
    SlotStorageConflictError,
    UnauthorizedException,
    ValidationException,
)


@pytest.mark.parametrize(
    "exc_class,status_code",
    [
        (ValidationException, 400),
        (UnauthorizedException, 401),
        (ForbiddenException, 403),
        (NotFoundException, 404),
        (ConflictException, 409),
        (ServiceException, 500),
        (DependencyFailureException, 503),
    ],
)
def test_status_codes(exc_class, status_code):
    http_exc = exc_class("boom").to_http_exception()
    assert http_exc.status_code == status_code
    assert http_exc.detail["message"] == "boom"


def test_code_defaults_to_class_name():
    exc = NotFoundException("missing")
    assert exc.code == "NotFoundException"
    assert exc.details == {}


def test_unauthorized_sets_www_authenticate():
    http_exc = UnauthorizedException("no token").to_http_exception()
    assert http_exc.headers == {"WWW-Authenticate": "Bearer"}


def test_dependency_failure_is_retryable():
    exc = DependencyFailureException(retry_after_seconds=5)
    http_exc = exc.to_http_exception()
    assert http_exc.headers == {"Retry-After": "5"}
    assert http_exc.detail["code"] == "DEPENDENCY_FAILURE"
    assert isinstance(exc, ServiceException)


def test_slot_overlap_names_the_conflicting_window():
    exc = SlotOverlapException(
        "Tuesday", "14:30 - 15:30", "14:00 - 15:00", conflicting_slot_id="slot-1"
    )
    assert isinstance(exc, ConflictException)
    assert exc.code == "AVAILABILITY_OVERLAP"
    assert "14:00 - 15:00" in exc.message
    assert "Tuesday" in exc.message
    assert exc.details["conflicting_slot_id"] == "slot-1"
    assert exc.to_http_exception().status_code == 409


def test_slot_overlap_without_known_conflict():
    exc = SlotOverlapException("2025-03-04", "09:00 - 10:00")
    assert exc.details["conflicting_slot"] is None
    assert "2025-03-04" in exc.message


def test_storage_conflict_is_a_repository_error():
    assert issubclass(SlotStorageConflictError, RepositoryException)
    assert not issubclass(RepositoryException, DomainException)
