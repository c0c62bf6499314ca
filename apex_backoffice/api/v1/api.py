"""
V1 API router aggregation.

All versioned endpoint routers are mounted here under a common prefix.
The top-level ``main.py`` mounts this router at ``/api/v1``.
"""

from fastapi import APIRouter

from apex_backoffice.api.v1.endpoints import clients, ferry, investors, transactions, uploads

api_router = APIRouter()

api_router.include_router(investors.router, prefix="/investors", tags=["Investors"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])

# These routers define their own full paths (/clients/{id}/renewals, /renewals,
# /bookings/{id}/status, ...) so they are mounted at the root of the v1 prefix.
api_router.include_router(clients.router, tags=["Clients"])
api_router.include_router(uploads.router, tags=["Documents"])
api_router.include_router(ferry.router, tags=["Ferry"])
