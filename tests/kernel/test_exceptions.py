"""Tests for the pysession exception hierarchy."""

from pysession.kernel.exceptions import (
    InfrastructureException,
    InvalidStoreException,
    SessionConfigurationException,
    SessionException,
    StoreFailureException,
)


class TestSessionException:
    def test_basic_creation(self):
        exc = SessionException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_code_and_context(self):
        exc = SessionException("store down", code="STORE_001", context={"store": "redis"})
        assert exc.code == "STORE_001"
        assert exc.context["store"] == "redis"

    def test_context_not_shared_between_instances(self):
        exc = SessionException("a")
        exc.context["key"] = "value"
        assert SessionException("b").context == {}


class TestExceptionHierarchy:
    def test_configuration_is_session_exception(self):
        assert issubclass(SessionConfigurationException, SessionException)

    def test_configuration_carries_code(self):
        exc = SessionConfigurationException("bad duration", context={"value": "soon"})
        assert exc.code == "SESSION_CONFIG"
        assert exc.context == {"value": "soon"}

    def test_store_failure_is_infrastructure(self):
        assert issubclass(StoreFailureException, InfrastructureException)
        assert issubclass(InfrastructureException, SessionException)

    def test_invalid_store_is_infrastructure(self):
        assert issubclass(InvalidStoreException, InfrastructureException)
