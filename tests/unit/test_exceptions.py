"""Unit tests for custom exception hierarchy"""
import pytest
from datetime import datetime

import psycopg

from progress_engine.exceptions import (
    ProgressEngineError,
    ValidationError,
    DatabaseError,
    ConnectionError,
    QueryError,
    PointsLedgerError,
    ConfigurationError,
    wrap_external_exception
)


class TestProgressEngineError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = ProgressEngineError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        error = ProgressEngineError(
            message="Points credit failed",
            user_id="user-123",
            operation="add_points",
            context={"delta": 25},
            user_message="Could not update your points"
        )
        assert error.user_id == "user-123"
        assert error.operation == "add_points"
        assert error.context["delta"] == 25
        assert error.user_message == "Could not update your points"

    def test_to_dict(self):
        error = ProgressEngineError("Test error", request_id="req-1")
        data = error.to_dict()

        assert data["error"] == "ProgressEngineError"
        assert data["message"] == "Test error"
        assert data["request_id"] == "req-1"
        assert "timestamp" in data

    def test_exception_is_logged(self, caplog):
        with caplog.at_level("ERROR", logger="progress_engine.exceptions"):
            ProgressEngineError("Something broke", user_id="user-123")

        assert "ProgressEngineError: Something broke" in caplog.text

    def test_wrapping_an_engine_error_logs_one_traceback(self, caplog):
        with caplog.at_level("WARNING", logger="progress_engine.exceptions"):
            cause = QueryError("Database query failed: deadlock detected", cause=RuntimeError("deadlock"))
            error = PointsLedgerError("credit failed", delta=10, cause=cause)

        errors = [r for r in caplog.records if r.levelname == "ERROR"]
        assert len(errors) == 1
        assert errors[0].exc_info is not None
        assert "PointsLedgerError: credit failed" in caplog.text
        assert error.request_id == cause.request_id


class TestSubclasses:

    def test_validation_error(self):
        error = ValidationError("must be non-negative", field="delta", value=-5)
        assert error.field == "delta"
        assert error.value == -5
        assert error.context == {"field": "delta", "value": -5}
        assert "Invalid delta" in error.user_message

    def test_validation_error_merges_extra_context(self):
        error = ValidationError("bad", field="delta", value=-1, context={"user": "x"})
        assert error.context == {"field": "delta", "value": -1, "user": "x"}

    def test_database_hierarchy(self):
        assert issubclass(ConnectionError, DatabaseError)
        assert issubclass(QueryError, DatabaseError)
        assert issubclass(DatabaseError, ProgressEngineError)

    def test_query_error(self):
        error = QueryError("Insert failed", query="INSERT INTO user_achievements")
        assert error.query == "INSERT INTO user_achievements"
        assert error.context["query"] == "INSERT INTO user_achievements"

    def test_points_ledger_error(self):
        error = PointsLedgerError("credit failed", delta=35, achievement_ids=["a", "b"], user_id="user-123")
        assert error.delta == 35
        assert error.achievement_ids == ["a", "b"]
        assert error.context["delta"] == 35
        assert "achievements were saved" in error.user_message

    def test_configuration_error(self):
        error = ConfigurationError("missing", config_key="DATABASE_URL")
        assert error.config_key == "DATABASE_URL"


class TestWrapExternalException:

    def test_operational_error_becomes_connection_error(self):
        original = psycopg.OperationalError("connection refused")
        wrapped = wrap_external_exception(original, operation="count_records", user_id="user-123")

        assert isinstance(wrapped, ConnectionError)
        assert wrapped.cause is original
        assert wrapped.user_id == "user-123"
        assert wrapped.operation == "count_records"

    def test_psycopg_error_becomes_query_error(self):
        wrapped = wrap_external_exception(
            psycopg.errors.UndefinedTable("relation does not exist"),
            operation="count_records",
            context={"table": "vitals"}
        )

        assert isinstance(wrapped, QueryError)
        assert wrapped.context["table"] == "vitals"

    def test_engine_error_passes_through(self):
        original = ValidationError("bad", field="delta")
        assert wrap_external_exception(original, operation="add_points") is original

    def test_other_errors_become_base_error(self):
        wrapped = wrap_external_exception(RuntimeError("boom"), operation="run_check")

        assert type(wrapped) is ProgressEngineError
        assert "run_check failed" in wrapped.message
