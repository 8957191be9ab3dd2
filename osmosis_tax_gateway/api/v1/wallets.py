"""Wallet endpoints - address validation, transaction history, tax-report export"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from osmosis_tax_gateway.api.dependencies import get_ledger_client, get_request_id
from osmosis_tax_gateway.api.v1.schemas import (
    AddressValidationResponse,
    TransactionListResponse,
    TransactionSchema,
)
from osmosis_tax_gateway.domain.exceptions import InvalidAddressError
from osmosis_tax_gateway.domain.models import FetchOptions, FetchResult
from osmosis_tax_gateway.domain.report import export_to_report, generate_filename
from osmosis_tax_gateway.infrastructure.clients.ledger import LedgerClient
from osmosis_tax_gateway.infrastructure.observability.logging import log_export
from osmosis_tax_gateway.infrastructure.observability.metrics import record_export

router = APIRouter()


@router.get("/wallets/{address}/validation", response_model=AddressValidationResponse)
def validate_wallet_address(address: str):
    """Check an address against the Osmosis bech32 format without touching the ledger"""
    return AddressValidationResponse(address=address, valid=LedgerClient().validate_address(address))


async def _fetch(
    ledger_client: LedgerClient,
    address: str,
    options: FetchOptions,
    request_id: str,
) -> FetchResult:
    try:
        return await ledger_client.fetch_transactions(address, options)
    except InvalidAddressError as e:
        logging.warning(f"Invalid address: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/wallets/{address}/transactions", response_model=TransactionListResponse)
async def list_wallet_transactions(
    address: str,
    request: Request,
    start_date: Optional[datetime] = Query(None, description="Exclude transactions before this instant"),
    end_date: Optional[datetime] = Query(None, description="Exclude transactions after this instant"),
    limit: Optional[int] = Query(None, gt=0, description="Maximum number of transactions"),
    page_size: Optional[int] = Query(None, gt=0, le=1000, description="Ledger page size"),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Fetch and classify the wallet's full transaction history.

    complete is false when the ledger failed mid-pagination; the
    transactions gathered before the failure are still returned.
    """
    options = FetchOptions(limit=limit, page_size=page_size, start_date=start_date, end_date=end_date)
    result = await _fetch(ledger_client, address, options, get_request_id(request))

    return TransactionListResponse(
        address=address,
        count=len(result),
        complete=result.complete,
        error=result.error,
        transactions=[
            TransactionSchema.from_domain(tx, ledger_client.block_explorer_url(tx.hash))
            for tx in result.transactions
        ],
    )


@router.get("/wallets/{address}/export")
async def export_wallet_report(
    address: str,
    request: Request,
    start_date: Optional[datetime] = Query(None, description="Exclude transactions before this instant"),
    end_date: Optional[datetime] = Query(None, description="Exclude transactions after this instant"),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Download the wallet's history as an Awaken Tax CSV.

    X-Export-Complete is "false" when pagination stopped early.
    """
    request_id = get_request_id(request)
    options = FetchOptions(start_date=start_date, end_date=end_date)
    result = await _fetch(ledger_client, address, options, request_id)

    document = export_to_report(result.transactions)
    filename = generate_filename(address)

    record_export(result.complete)
    log_export(request_id, address, len(result), result.complete)

    return Response(
        content=document.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Export-Complete": str(result.complete).lower(),
        },
    )
