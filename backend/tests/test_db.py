"""
Tests for transaction handling: run_atomic retries and the SQLite setup.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from shared.infrastructure.db import is_transient_error, run_atomic
from shared.utils.exceptions import DatabaseError, ValidationError


def _locked() -> OperationalError:
    return OperationalError("UPDATE bill", {}, Exception("database is locked"))


class TestRunAtomic:

    def test_commits_on_success(self):
        db = MagicMock()

        result = run_atomic(db, lambda: 42, name="answer")

        assert result == 42
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_retries_transient_errors_from_scratch(self):
        db = MagicMock()
        calls = []

        def operation():
            calls.append(1)
            if len(calls) < 3:
                raise _locked()
            return "done"

        result = run_atomic(db, operation, name="flaky", max_retries=3, retry_delay=0.001)

        assert result == "done"
        assert len(calls) == 3
        assert db.rollback.call_count == 2
        db.commit.assert_called_once()

    def test_exhausted_retries_raise_database_error(self):
        db = MagicMock()
        operation = MagicMock(side_effect=_locked())

        with pytest.raises(DatabaseError) as exc:
            run_atomic(db, operation, name="stuck", max_retries=2, retry_delay=0.001)

        assert operation.call_count == 3
        assert exc.value.status_code == 500
        assert exc.value.code == "INTERNAL_ERROR"
        db.commit.assert_not_called()

    def test_non_transient_database_errors_are_not_retried(self):
        db = MagicMock()
        operation = MagicMock(side_effect=IntegrityError("INSERT", {}, Exception("unique")))

        with pytest.raises(DatabaseError):
            run_atomic(db, operation, name="insert", max_retries=3, retry_delay=0.001)

        assert operation.call_count == 1
        db.rollback.assert_called_once()

    def test_application_errors_roll_back_and_propagate(self):
        db = MagicMock()

        def operation():
            raise ValidationError("bad input")

        with pytest.raises(ValidationError):
            run_atomic(db, operation, name="validate")

        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_transient_error_classification(self):
        assert is_transient_error(_locked())
        assert is_transient_error(
            DBAPIError("SELECT 1", {}, Exception("gone"), connection_invalidated=True)
        )
        assert not is_transient_error(IntegrityError("INSERT", {}, Exception("unique")))


class TestSqliteSetup:

    def test_foreign_keys_enforced(self, db_session):
        assert db_session.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_file_database_serializes_writers(self, tmp_path):
        """A second writer waits for the first and then fails once the busy timeout expires."""
        from tests.conftest import make_engine

        engine = make_engine(
            f"sqlite:///{tmp_path / 'floor.db'}", connect_args={"timeout": 0.1}
        )
        try:
            with engine.connect() as first, engine.connect() as second:
                first.begin()
                with pytest.raises(OperationalError):
                    second.begin()
                first.rollback()
        finally:
            engine.dispose()
