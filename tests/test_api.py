"""
Integration tests for the API endpoints using httpx AsyncClient.

These tests exercise the full FastAPI request → endpoint → service pipeline,
with mocked service layers to isolate from the database and S3.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from apex_backoffice.core.exceptions import (
    InsufficientFundsException,
    InvalidInputException,
    NotFoundException,
    StorageFailureException,
    add_exception_handlers,
)
from apex_backoffice.models.transaction import TransactionType
from apex_backoffice.services.balance_calculator import BalanceSnapshot

from .conftest import (
    BOOKING_ID,
    CLIENT_ID,
    INVESTOR_ID,
    RENEWAL_ID,
    VEHICLE_TYPE_ID,
    make_booking,
    make_client,
    make_investor,
    make_renewal,
    make_transaction,
    make_vehicle_type,
)

D = Decimal

# ────────────────────────────────────────────────────────────────────────────
# Test app factory
# ────────────────────────────────────────────────────────────────────────────


def _make_test_app() -> FastAPI:
    """
    Build a minimal FastAPI app with the real routers but
    NO database or lifespan — services will be injected via overrides.
    """
    from apex_backoffice.api.v1.api import api_router

    app = FastAPI()
    add_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")
    return app


class _EndpointTest:
    """Shared setup: a fresh app and a mocked service per test."""

    @pytest.fixture(autouse=True)
    def _setup(self):
        self.app = _make_test_app()
        self.mock_service = AsyncMock()

    def _override(self, dependency):
        self.app.dependency_overrides[dependency] = lambda: self.mock_service

    def _client(self) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=self.app), base_url="http://test")


# ────────────────────────────────────────────────────────────────────────────
# Transactions
# ────────────────────────────────────────────────────────────────────────────


class TestTransactionEndpoints(_EndpointTest):
    @pytest.fixture(autouse=True)
    def _wire(self, _setup):
        from apex_backoffice.api.v1.endpoints.transactions import _get_ledger_service

        self._override(_get_ledger_service)

    @pytest.mark.asyncio
    async def test_deposit_200(self):
        self.mock_service.record_transaction.return_value = BalanceSnapshot(
            D("100.00"), D("110.00")
        )
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/transactions/process",
                json={"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": 100},
            )

        assert resp.status_code == 200
        assert resp.json() == {
            "message": "Deposit successful",
            "account_balance": 100.0,
            "current_balance": 110.0,
        }
        self.mock_service.record_transaction.assert_awaited_once_with(
            INVESTOR_ID, TransactionType.DEPOSIT, D("100")
        )

    @pytest.mark.asyncio
    async def test_withdrawal_message(self):
        self.mock_service.record_transaction.return_value = BalanceSnapshot(D("60.00"), D("66.00"))
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/transactions/process",
                json={"investor_id": str(INVESTOR_ID), "transaction_type": "Withdrawal", "amount": "40"},
            )
        assert resp.json()["message"] == "Withdrawal successful"

    @pytest.mark.asyncio
    async def test_insufficient_funds_400(self):
        self.mock_service.record_transaction.side_effect = InsufficientFundsException(
            requested=D("100"), available=D("60.00")
        )
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/transactions/process",
                json={"investor_id": str(INVESTOR_ID), "transaction_type": "Withdrawal", "amount": 100},
            )
        assert resp.status_code == 400
        assert resp.json() == {"error": True, "message": "Insufficient funds for withdrawal"}

    @pytest.mark.asyncio
    async def test_unknown_investor_404(self):
        self.mock_service.record_transaction.side_effect = NotFoundException("Investor", INVESTOR_ID)
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/transactions/process",
                json={"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": 1},
            )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_sub_cent_amount_rejected_by_service(self):
        self.mock_service.record_transaction.side_effect = InvalidInputException(
            "Amount must be greater than zero"
        )
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/transactions/process",
                json={"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": 0.001},
            )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_storage_failure_500_is_opaque(self):
        self.mock_service.record_transaction.side_effect = StorageFailureException()
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/transactions/process",
                json={"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": 1},
            )
        assert resp.status_code == 500
        assert resp.json()["message"] == "Internal server error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"investor_id": str(INVESTOR_ID), "transaction_type": "deposit", "amount": 10},
            {"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": 0},
            {"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": -5},
            {"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": "abc"},
            {"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit", "amount": 1e19},
            {"investor_id": str(INVESTOR_ID), "transaction_type": "Deposit"},
            {"investor_id": "not-a-uuid", "transaction_type": "Deposit", "amount": 10},
        ],
    )
    async def test_invalid_body_400(self, body):
        async with self._client() as client:
            resp = await client.post("/api/v1/transactions/process", json=body)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Validation failed"
        self.mock_service.record_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_history(self):
        self.mock_service.list_transactions.return_value = [
            make_transaction(transaction_type=TransactionType.WITHDRAWAL, amount=D("40.00")),
            make_transaction(amount=D("100.00")),
        ]
        async with self._client() as client:
            resp = await client.get(f"/api/v1/transactions/{INVESTOR_ID}")

        assert resp.status_code == 200
        data = resp.json()
        assert [row["transaction_type"] for row in data] == ["Withdrawal", "Deposit"]
        assert data[0]["amount"] == 40.0
        assert set(data[0]) == {"transaction_date", "transaction_type", "amount"}

    @pytest.mark.asyncio
    async def test_history_empty(self):
        self.mock_service.list_transactions.return_value = []
        async with self._client() as client:
            resp = await client.get(f"/api/v1/transactions/{INVESTOR_ID}")
        assert resp.status_code == 200
        assert resp.json() == []


# ────────────────────────────────────────────────────────────────────────────
# Investors
# ────────────────────────────────────────────────────────────────────────────


class TestInvestorEndpoints(_EndpointTest):
    @pytest.fixture(autouse=True)
    def _wire(self, _setup):
        from apex_backoffice.api.v1.endpoints.investors import _get_investor_service
        from apex_backoffice.api.v1.endpoints.transactions import _get_ledger_service

        self._override(_get_investor_service)
        self._override(_get_ledger_service)

    @pytest.mark.asyncio
    async def test_list_200(self):
        self.mock_service.list_investors.return_value = [
            make_investor(account_balance=D("60.00"), current_balance=D("66.00"))
        ]
        async with self._client() as client:
            resp = await client.get("/api/v1/investors")

        assert resp.status_code == 200
        row = resp.json()[0]
        assert row["account_balance"] == 60.0
        assert row["current_balance"] == 66.0
        assert row["status"] == "Active"

    @pytest.mark.asyncio
    async def test_list_empty(self):
        self.mock_service.list_investors.return_value = []
        async with self._client() as client:
            resp = await client.get("/api/v1/investors")
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_get_404(self):
        self.mock_service.get_investor.side_effect = NotFoundException("Investor", INVESTOR_ID)
        async with self._client() as client:
            resp = await client.get(f"/api/v1/investors/{INVESTOR_ID}")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_create_201(self):
        self.mock_service.create_investor.return_value = make_investor(name="Jane Mensah")
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/investors",
                json={
                    "name": "Jane Mensah",
                    "account_type": "Fixed Deposit",
                    "investment_term": "12 months",
                    "roi": 10,
                },
            )
        assert resp.status_code == 201
        assert resp.json()["name"] == "Jane Mensah"

    @pytest.mark.asyncio
    async def test_create_negative_roi_400(self):
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/investors",
                json={"name": "J", "account_type": "A", "investment_term": "T", "roi": -1},
            )
        assert resp.status_code == 400
        self.mock_service.create_investor.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_patch_passes_only_supplied_fields(self):
        self.mock_service.update_investor.return_value = make_investor(roi=D("0"))
        async with self._client() as client:
            resp = await client.patch(f"/api/v1/investors/{INVESTOR_ID}", json={"roi": 0})

        assert resp.status_code == 200
        patch = self.mock_service.update_investor.call_args[0][1]
        assert patch.model_dump(exclude_unset=True) == {"roi": D("0")}

    @pytest.mark.asyncio
    async def test_patch_balance_rejected(self):
        async with self._client() as client:
            resp = await client.patch(
                f"/api/v1/investors/{INVESTOR_ID}", json={"account_balance": 1000000}
            )
        assert resp.status_code == 400
        self.mock_service.update_investor.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete(self):
        async with self._client() as client:
            resp = await client.delete(f"/api/v1/investors/{INVESTOR_ID}")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Investor deleted successfully"}
        self.mock_service.delete_investor.assert_awaited_once_with(INVESTOR_ID)

    @pytest.mark.asyncio
    async def test_delete_404(self):
        self.mock_service.delete_investor.side_effect = NotFoundException("Investor", INVESTOR_ID)
        async with self._client() as client:
            resp = await client.delete(f"/api/v1/investors/{INVESTOR_ID}")
        assert resp.status_code == 404


# ────────────────────────────────────────────────────────────────────────────
# Clients, renewals and uploads
# ────────────────────────────────────────────────────────────────────────────


class TestClientEndpoints(_EndpointTest):
    @pytest.fixture(autouse=True)
    def _wire(self, _setup):
        from apex_backoffice.api.v1.endpoints.clients import _get_client_service

        self._override(_get_client_service)

    @pytest.mark.asyncio
    async def test_list_clients(self):
        self.mock_service.list_clients.return_value = [make_client()]
        async with self._client() as client:
            resp = await client.get("/api/v1/clients")
        assert resp.status_code == 200
        assert resp.json()[0]["premium"] == 1250.0

    @pytest.mark.asyncio
    async def test_create_client_201(self):
        self.mock_service.create_client.return_value = make_client(name="Kwame")
        async with self._client() as client:
            resp = await client.post("/api/v1/clients", json={"name": "Kwame"})
        assert resp.status_code == 201

    @pytest.mark.asyncio
    async def test_put_is_a_merge(self):
        self.mock_service.update_client.return_value = make_client()
        async with self._client() as client:
            resp = await client.put(f"/api/v1/clients/{CLIENT_ID}", json={"insurer": ""})
        assert resp.status_code == 200
        patch = self.mock_service.update_client.call_args[0][1]
        assert patch.model_dump(exclude_unset=True) == {"insurer": ""}

    @pytest.mark.asyncio
    async def test_delete_client_404(self):
        self.mock_service.delete_client.side_effect = NotFoundException("Client", CLIENT_ID)
        async with self._client() as client:
            resp = await client.delete(f"/api/v1/clients/{CLIENT_ID}")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_attachment_upload(self):
        self.mock_service.add_attachment.return_value = make_client(
            additional_attachments=["https://b.s3/uploads/1_scan.pdf"]
        )
        async with self._client() as client:
            resp = await client.post(
                f"/api/v1/clients/{CLIENT_ID}/upload",
                files={"file": ("scan.pdf", b"%PDF", "application/pdf")},
            )
        assert resp.status_code == 200
        assert resp.json()["additional_attachments"] == ["https://b.s3/uploads/1_scan.pdf"]
        self.mock_service.add_attachment.assert_awaited_once_with(
            CLIENT_ID, "scan.pdf", b"%PDF", "application/pdf"
        )

    @pytest.mark.asyncio
    async def test_attachment_upload_without_file_400(self):
        async with self._client() as client:
            resp = await client.post(f"/api/v1/clients/{CLIENT_ID}/upload")
        assert resp.status_code == 400
        assert resp.json()["message"] == "No file uploaded"

    @pytest.mark.asyncio
    async def test_list_renewals(self):
        self.mock_service.list_renewals.return_value = [make_renewal()]
        async with self._client() as client:
            resp = await client.get(f"/api/v1/clients/{CLIENT_ID}/renewals")
        assert resp.status_code == 200
        assert resp.json()[0]["renewal_date"] == "2025-03-01"

    @pytest.mark.asyncio
    async def test_create_renewal_multipart(self):
        self.mock_service.create_renewal.return_value = make_renewal()
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/renewals",
                data={
                    "client_id": str(CLIENT_ID),
                    "renewal_date": "2025-03-01",
                    "next_renewal_date": "2026-03-01",
                },
                files={"file": ("policy.pdf", b"%PDF", "application/pdf")},
            )
        assert resp.status_code == 201
        args = self.mock_service.create_renewal.call_args[0]
        assert args[0] == CLIENT_ID
        assert str(args[1]) == "2025-03-01"
        assert args[3] == "policy.pdf"

    @pytest.mark.asyncio
    async def test_delete_renewal(self):
        async with self._client() as client:
            resp = await client.delete(f"/api/v1/clients/{CLIENT_ID}/renewals/{RENEWAL_ID}")
        assert resp.status_code == 200
        self.mock_service.delete_renewal.assert_awaited_once_with(CLIENT_ID, RENEWAL_ID)


class TestUploadEndpoint(_EndpointTest):
    @pytest.fixture(autouse=True)
    def _wire(self, _setup):
        from apex_backoffice.core.storage import get_document_storage

        self._override(get_document_storage)

    @pytest.mark.asyncio
    async def test_upload_returns_url(self):
        self.mock_service.upload.return_value = "https://b.s3.us-east-1.amazonaws.com/uploads/1_a.pdf"
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/upload", files={"file": ("a.pdf", b"data", "application/pdf")}
            )
        assert resp.status_code == 200
        assert resp.json() == {"file_url": "https://b.s3.us-east-1.amazonaws.com/uploads/1_a.pdf"}

    @pytest.mark.asyncio
    async def test_upload_without_file_400(self):
        async with self._client() as client:
            resp = await client.post("/api/v1/upload")
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_storage_failure_500(self):
        self.mock_service.upload.side_effect = StorageFailureException("Failed to upload file")
        async with self._client() as client:
            resp = await client.post("/api/v1/upload", files={"file": ("a.pdf", b"x")})
        assert resp.status_code == 500
        assert resp.json()["message"] == "Failed to upload file"


# ────────────────────────────────────────────────────────────────────────────
# Ferry
# ────────────────────────────────────────────────────────────────────────────


class TestFerryEndpoints(_EndpointTest):
    @pytest.fixture(autouse=True)
    def _wire(self, _setup):
        from apex_backoffice.api.v1.endpoints.ferry import _get_ferry_service

        self._override(_get_ferry_service)

    @pytest.mark.asyncio
    async def test_list_vehicle_types(self):
        self.mock_service.list_vehicle_types.return_value = [make_vehicle_type()]
        async with self._client() as client:
            resp = await client.get("/api/v1/vehicle-types")
        assert resp.status_code == 200
        assert resp.json()[0] == {"id": str(VEHICLE_TYPE_ID), "name": "Saloon car", "cost": 150.0}

    @pytest.mark.asyncio
    async def test_fare_cost_must_be_positive(self):
        async with self._client() as client:
            resp = await client.post("/api/v1/passenger-types", json={"name": "Infant", "cost": 0})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_register_vehicle_unknown_type_404(self):
        self.mock_service.register_vehicle_number.side_effect = NotFoundException(
            "Vehicle type", VEHICLE_TYPE_ID
        )
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/vehicle-numbers",
                json={"vehicle_number": "GT 1", "vehicle_type_id": str(VEHICLE_TYPE_ID)},
            )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_create_booking_defaults(self):
        self.mock_service.create_booking.return_value = make_booking()
        async with self._client() as client:
            resp = await client.post(
                "/api/v1/bookings",
                json={"customer_name": "Ama Owusu", "passengers": [{"type": "Adult", "count": 2}]},
            )
        assert resp.status_code == 201
        data = resp.json()
        assert data["booking_status"] == "Pending"
        assert data["payment_status"] == "Unpaid"
        assert data["net_cost"] == 205.0

    @pytest.mark.asyncio
    async def test_status_without_fields_400(self):
        self.mock_service.update_status.side_effect = InvalidInputException(
            "booking_status or payment_status is required"
        )
        async with self._client() as client:
            resp = await client.put(f"/api/v1/bookings/{BOOKING_ID}/status", json={})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_status_value_400(self):
        async with self._client() as client:
            resp = await client.put(
                f"/api/v1/bookings/{BOOKING_ID}/status", json={"booking_status": "Lost"}
            )
        assert resp.status_code == 400
        self.mock_service.update_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_booking_404(self):
        self.mock_service.delete_booking.side_effect = NotFoundException("Booking", BOOKING_ID)
        async with self._client() as client:
            resp = await client.delete(f"/api/v1/bookings/{BOOKING_ID}")
        assert resp.status_code == 404
