"""
Unit tests for domain exceptions and exception handler registration.

Tests cover:
- Status codes and messages of each domain exception
- add_exception_handlers registration
- Response bodies produced by each handler
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from apex_backoffice.core.exceptions import (
    AppException,
    BusinessRuleViolation,
    InsufficientFundsException,
    InvalidInputException,
    NotFoundException,
    StorageFailureException,
    add_exception_handlers,
)


class TestDomainExceptions:
    def test_app_exception_attributes(self):
        exc = AppException(status_code=400, message="bad request", details={"key": "v"})
        assert exc.status_code == 400
        assert exc.message == "bad request"
        assert exc.details == {"key": "v"}
        assert str(exc) == "bad request"

    def test_invalid_input_is_400(self):
        exc = InvalidInputException("Amount must be greater than zero")
        assert exc.status_code == 400
        assert isinstance(exc, AppException)

    def test_insufficient_funds_is_400_with_details(self):
        exc = InsufficientFundsException(requested="100.00", available="60.00")
        assert exc.status_code == 400
        assert exc.message == "Insufficient funds for withdrawal"
        assert exc.details == {"requested": "100.00", "available": "60.00"}

    def test_not_found_message(self):
        exc = NotFoundException("Investor", "abc-123")
        assert exc.status_code == 404
        assert "Investor" in exc.message
        assert "abc-123" in exc.message

    def test_business_rule_violation_is_422(self):
        assert BusinessRuleViolation("duplicate").status_code == 422

    def test_storage_failure_message_is_opaque(self):
        exc = StorageFailureException()
        assert exc.status_code == 500
        assert exc.message == "Internal server error"


class TestAddExceptionHandlers:
    def test_handlers_registered(self):
        from unittest.mock import MagicMock

        mock_app = MagicMock()
        mock_app.exception_handler = MagicMock(return_value=lambda fn: fn)
        add_exception_handlers(mock_app)
        # AppException, CircuitBreakerError, StarletteHTTPException,
        # RequestValidationError, Exception
        assert mock_app.exception_handler.call_count == 5


class TestExceptionHandlersIntegration:
    """Invoke the actual exception handlers to cover their response logic."""

    @staticmethod
    def _client(app: FastAPI, raise_app_exceptions: bool = True) -> AsyncClient:
        return AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions),
            base_url="http://test",
        )

    @pytest.mark.asyncio
    async def test_app_exception_body(self):
        app = FastAPI()
        add_exception_handlers(app)

        @app.get("/withdraw")
        async def withdraw():
            raise InsufficientFundsException(requested="100.00", available="60.00")

        async with self._client(app) as client:
            resp = await client.get("/withdraw")
        assert resp.status_code == 400
        assert resp.json() == {"error": True, "message": "Insufficient funds for withdrawal"}

    @pytest.mark.asyncio
    async def test_circuit_breaker_handler_returns_503(self):
        from apex_backoffice.core.resilience import CircuitBreakerError

        app = FastAPI()
        add_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise CircuitBreakerError(name="database", retry_after=9.2)

        async with self._client(app) as client:
            resp = await client.get("/boom")
        assert resp.status_code == 503
        assert resp.headers["Retry-After"] == "10"
        body = resp.json()
        assert body["error"] is True
        assert "circuit is open" in body["message"]

    @pytest.mark.asyncio
    async def test_global_500_handler_hides_details(self):
        # debug=False prevents Starlette's ServerErrorMiddleware from
        # re-raising the exception before our catch-all handler runs.
        app = FastAPI(debug=False)
        add_exception_handlers(app)

        @app.get("/crash")
        async def crash():
            raise RuntimeError("connection string with password")

        async with self._client(app, raise_app_exceptions=False) as client:
            resp = await client.get("/crash")
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] is True
        assert "password" not in body["message"]

    @pytest.mark.asyncio
    async def test_validation_handler_returns_400(self):
        from pydantic import BaseModel

        app = FastAPI()
        add_exception_handlers(app)

        class Body(BaseModel):
            amount: float

        @app.post("/validate")
        async def validate(body: Body):
            return {"ok": True}

        async with self._client(app) as client:
            resp = await client.post("/validate", json={})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] is True
        assert body["message"] == "Validation failed"
        assert body["details"][0]["field"] == "body -> amount"

    @pytest.mark.asyncio
    async def test_http_exception_handler(self):
        app = FastAPI()
        add_exception_handlers(app)

        async with self._client(app) as client:
            resp = await client.get("/nonexistent")
        assert resp.status_code == 404
        assert resp.json()["error"] is True
