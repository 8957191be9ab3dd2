"""Dependency injection for FastAPI endpoints"""

import logging
from typing import AsyncIterator

from fastapi import HTTPException, Request
from osmosis_tax_gateway.domain.exceptions import LedgerAPIError
from osmosis_tax_gateway.infrastructure.clients.ledger import LedgerClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


async def get_ledger_client(request: Request) -> AsyncIterator[LedgerClient]:
    """
    Provide a connected ledger client for the duration of one request.

    Each request gets its own instance; the connection is closed afterwards.
    """
    client = LedgerClient()
    try:
        await client.initialize()
    except LedgerAPIError as e:
        logging.error(f"Ledger connection failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")

    try:
        yield client
    finally:
        await client.disconnect()
