"""Repository tests: queries against SQLite and error paths with mocked sessions."""

from datetime import date, time
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from tutorly.core.exceptions import RepositoryException, SlotStorageConflictError
from tutorly.models.availability import AvailabilityPattern, WeeklyAvailability
from tutorly.repositories import (
    DateAvailabilityRepository,
    OAuthCredentialRepository,
    TimeOffRepository,
    WeeklyAvailabilityRepository,
)
from tutorly.repositories.base_repository import is_exclusion_violation


class _PgError(Exception):
    def __init__(self, message: str, pgcode: str):
        super().__init__(message)
        self.pgcode = pgcode


class TestDateAvailabilityRepository:
    def test_list_for_date_is_scoped_and_ordered(self, db, teacher_profile, other_teacher_profile):
        repo = DateAvailabilityRepository(db)
        day = date(2025, 3, 4)
        repo.create(teacher_id=teacher_profile.id, available_date=day, start_time=time(14), end_time=time(15))
        repo.create(teacher_id=teacher_profile.id, available_date=day, start_time=time(9), end_time=time(10))
        repo.create(
            teacher_id=teacher_profile.id,
            available_date=date(2025, 3, 5),
            start_time=time(9),
            end_time=time(10),
        )
        repo.create(
            teacher_id=other_teacher_profile.id,
            available_date=day,
            start_time=time(11),
            end_time=time(12),
        )
        db.commit()

        slots = repo.list_for_date(teacher_profile.id, day)
        assert [s.start_time for s in slots] == [time(9), time(14)]

    def test_list_in_range_bounds_are_inclusive(self, db, teacher_profile):
        repo = DateAvailabilityRepository(db)
        for day in (1, 2, 3, 4):
            repo.create(
                teacher_id=teacher_profile.id,
                available_date=date(2025, 3, day),
                start_time=time(9),
                end_time=time(10),
            )
        db.commit()

        slots = repo.list_in_range(teacher_profile.id, date(2025, 3, 2), date(2025, 3, 3))
        assert [s.available_date.day for s in slots] == [2, 3]
        assert len(repo.list_in_range(teacher_profile.id)) == 4

    def test_get_with_teacher_loads_owner(self, db, teacher_profile, teacher_user):
        repo = DateAvailabilityRepository(db)
        slot = repo.create(
            teacher_id=teacher_profile.id,
            available_date=date(2025, 3, 4),
            start_time=time(9),
            end_time=time(10),
        )
        db.commit()
        loaded = repo.get_with_teacher(slot.id)
        assert loaded is not None
        assert loaded.teacher.user_id == teacher_user.id
        assert repo.get_with_teacher("01HZZZZZZZZZZZZZZZZZZZZZZZ") is None


class TestWeeklyAvailabilityRepository:
    def _pattern(self, db, teacher_id):
        pattern = AvailabilityPattern(
            teacher_id=teacher_id,
            name="Mornings",
            days_of_week=[2],
            start_time=time(9),
            duration_minutes=60,
        )
        db.add(pattern)
        db.flush()
        return pattern

    def test_list_for_day_can_exclude_a_pattern(self, db, teacher_profile):
        repo = WeeklyAvailabilityRepository(db)
        pattern = self._pattern(db, teacher_profile.id)
        repo.create(teacher_id=teacher_profile.id, day_of_week=2, start_time=time(9), end_time=time(10), pattern_id=pattern.id)
        repo.create(teacher_id=teacher_profile.id, day_of_week=2, start_time=time(12), end_time=time(13))
        repo.create(teacher_id=teacher_profile.id, day_of_week=3, start_time=time(9), end_time=time(10))
        db.commit()

        assert len(repo.list_for_day(teacher_profile.id, 2)) == 2
        remaining = repo.list_for_day(teacher_profile.id, 2, exclude_pattern_id=pattern.id)
        assert [s.start_time for s in remaining] == [time(12)]

    def test_delete_by_pattern_returns_count(self, db, teacher_profile):
        repo = WeeklyAvailabilityRepository(db)
        pattern = self._pattern(db, teacher_profile.id)
        repo.bulk_create(
            [
                {"teacher_id": teacher_profile.id, "day_of_week": d, "start_time": time(9), "end_time": time(10), "pattern_id": pattern.id}
                for d in (1, 2, 3)
            ]
        )
        repo.create(teacher_id=teacher_profile.id, day_of_week=1, start_time=time(12), end_time=time(13))
        db.commit()

        assert repo.delete_by_pattern(pattern.id) == 3
        db.commit()
        assert repo.list_by_pattern(pattern.id) == []
        assert len(repo.list_for_teacher(teacher_profile.id)) == 1
        assert repo.delete_by_pattern(pattern.id) == 0

    def test_delete_owned_checks_owner(self, db, teacher_profile, other_teacher_profile):
        repo = WeeklyAvailabilityRepository(db)
        slot = repo.create(teacher_id=teacher_profile.id, day_of_week=1, start_time=time(9), end_time=time(10))
        db.commit()

        assert repo.delete_owned(slot.id, other_teacher_profile.id) is False
        assert repo.delete_owned(slot.id, teacher_profile.id) is True
        db.commit()
        assert db.query(WeeklyAvailability).count() == 0


class TestTimeOffRepository:
    def test_overlapping_and_covering(self, db, teacher_profile):
        repo = TimeOffRepository(db)
        repo.create(teacher_id=teacher_profile.id, start_date=date(2025, 7, 1), end_date=date(2025, 7, 10))
        repo.create(teacher_id=teacher_profile.id, start_date=date(2025, 8, 1), end_date=date(2025, 8, 2))
        db.commit()

        assert len(repo.list_overlapping(teacher_profile.id, date(2025, 7, 10), date(2025, 7, 31))) == 1
        assert len(repo.list_overlapping(teacher_profile.id)) == 2
        assert repo.find_covering(teacher_profile.id, date(2025, 7, 1)) is not None
        assert repo.find_covering(teacher_profile.id, date(2025, 7, 10)) is not None
        assert repo.find_covering(teacher_profile.id, date(2025, 7, 11)) is None


class TestOAuthCredentialRepository:
    def test_upsert_then_delete(self, db, teacher_user):
        repo = OAuthCredentialRepository(db)
        first = repo.upsert(teacher_user.id, "zoom", access_token="a1", refresh_token="r1")
        second = repo.upsert(teacher_user.id, "zoom", access_token="a2")
        db.commit()

        assert first.id == second.id
        assert repo.get_for(teacher_user.id, "zoom").access_token == "a2"
        assert repo.get_for(teacher_user.id, "zoom").refresh_token == "r1"
        assert repo.delete_for(teacher_user.id, "zoom") is True
        assert repo.delete_for(teacher_user.id, "zoom") is False


class TestErrorPaths:
    @pytest.fixture
    def mock_db(self):
        return Mock(spec=Session)

    def test_query_failure_is_wrapped(self, mock_db):
        mock_db.query.side_effect = OperationalError("SELECT", {}, Exception("gone"))
        repo = DateAvailabilityRepository(mock_db)
        with pytest.raises(RepositoryException):
            repo.get_by_id("01HZZZZZZZZZZZZZZZZZZZZZZZ")

    def test_exclusion_violation_becomes_storage_conflict(self, mock_db):
        mock_db.flush.side_effect = IntegrityError(
            "INSERT", {}, _PgError("conflicting key value violates exclusion constraint", "23P01")
        )
        repo = WeeklyAvailabilityRepository(mock_db)
        with pytest.raises(SlotStorageConflictError):
            repo.create(teacher_id="t", day_of_week=1, start_time=time(9), end_time=time(10))
        mock_db.rollback.assert_called_once()

    def test_exclusion_violation_on_bulk_create(self, mock_db):
        mock_db.flush.side_effect = IntegrityError(
            "INSERT", {}, _PgError("violates availability_no_overlap", "23P01")
        )
        repo = WeeklyAvailabilityRepository(mock_db)
        with pytest.raises(SlotStorageConflictError):
            repo.bulk_create([{"teacher_id": "t", "day_of_week": 1, "start_time": time(9), "end_time": time(10)}])

    def test_other_integrity_errors_stay_generic(self, mock_db):
        mock_db.flush.side_effect = IntegrityError("INSERT", {}, _PgError("not null violation", "23502"))
        repo = DateAvailabilityRepository(mock_db)
        with pytest.raises(RepositoryException) as exc_info:
            repo.create(teacher_id="t")
        assert not isinstance(exc_info.value, SlotStorageConflictError)

    def test_bulk_delete_failure_is_wrapped(self, mock_db):
        query = Mock()
        query.filter.return_value = query
        query.delete.side_effect = OperationalError("DELETE", {}, Exception("locked"))
        mock_db.query.return_value = query
        repo = WeeklyAvailabilityRepository(mock_db)
        with pytest.raises(RepositoryException):
            repo.delete_by_pattern("p1")

    def test_is_exclusion_violation_reads_sqlstate(self):
        assert is_exclusion_violation(IntegrityError("x", {}, _PgError("boom", "23P01")))
        assert not is_exclusion_violation(IntegrityError("x", {}, _PgError("boom", "23505")))
