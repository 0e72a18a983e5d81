"""Unit tests for custom exception hierarchy"""
import pytest
import psycopg
from datetime import datetime

from learnquest.exceptions import (
    LearnQuestError,
    ValidationError,
    DatabaseError,
    ConnectionError,
    QueryError,
    PersistenceError,
    HydrationError,
    ConfigurationError,
    wrap_external_exception,
)


class TestLearnQuestError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = LearnQuestError("Test error")
        assert error.message == "Test error"
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        error = LearnQuestError(
            message="Write failed",
            learner_id="learner-1",
            operation="write_profile",
            context={"fields": ["xp"]},
        )
        assert error.learner_id == "learner-1"
        assert error.operation == "write_profile"
        assert error.context["fields"] == ["xp"]

    def test_to_dict(self):
        error = LearnQuestError("Test error", operation="fetch_progress")
        data = error.to_dict()

        assert data["error"] == "LearnQuestError"
        assert data["message"] == "Test error"
        assert data["operation"] == "fetch_progress"
        assert data["request_id"] == error.request_id

    def test_logs_on_creation(self, caplog):
        with caplog.at_level("ERROR", logger="learnquest.exceptions"):
            LearnQuestError("Logged error")

        assert "LearnQuestError: Logged error" in caplog.text

    def test_wrapping_error_does_not_log_twice(self, caplog):
        with caplog.at_level("DEBUG", logger="learnquest.exceptions"):
            cause = QueryError("Database query failed: syntax error")
            PersistenceError("write_profile failed", operation="write_profile", cause=cause)

        errors = [r for r in caplog.records if r.levelname == "ERROR"]
        assert [r.getMessage() for r in errors] == ["QueryError: Database query failed: syntax error"]
        assert "PersistenceError: write_profile failed" in caplog.text


class TestSubclasses:

    def test_validation_error_fields(self):
        error = ValidationError("must be non-negative", field="amount", value=-5)

        assert error.field == "amount"
        assert error.context == {"field": "amount", "value": -5}

    def test_persistence_error_is_database_error(self):
        cause = RuntimeError("socket closed")
        error = PersistenceError("write failed", operation="write_profile", cause=cause)

        assert isinstance(error, DatabaseError)
        assert error.operation == "write_profile"
        assert error.cause is cause

    def test_hydration_error_operation(self):
        error = HydrationError("could not load", learner_id="learner-1")

        assert error.operation == "fetch_progress"
        assert error.learner_id == "learner-1"

    def test_configuration_error_key(self):
        error = ConfigurationError("bad zone", config_key="STREAK_TIMEZONE")

        assert error.config_key == "STREAK_TIMEZONE"


class TestWrapExternalException:

    def test_operational_error_becomes_connection_error(self):
        wrapped = wrap_external_exception(psycopg.OperationalError("refused"), operation="read_profile")

        assert isinstance(wrapped, ConnectionError)
        assert wrapped.operation == "read_profile"

    def test_psycopg_error_becomes_query_error_with_context(self):
        wrapped = wrap_external_exception(
            psycopg.ProgrammingError("syntax"),
            operation="write_profile",
            context={"table": "profiles"},
        )

        assert isinstance(wrapped, QueryError)
        assert wrapped.context["table"] == "profiles"

    def test_other_errors_become_base_error(self):
        cause = ValueError("boom")
        wrapped = wrap_external_exception(cause, operation="write_profile", learner_id="learner-1")

        assert type(wrapped) is LearnQuestError
        assert wrapped.cause is cause
        assert wrapped.learner_id == "learner-1"

    def test_own_errors_pass_through(self):
        original = PersistenceError("write failed", operation="write_profile")

        assert wrap_external_exception(original, operation="other") is original
