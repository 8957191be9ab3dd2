"""GET /v1/transactions/{tx_hash} - Fetch a single transaction's details"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from osmosis_tax_gateway.api.dependencies import get_ledger_client, get_request_id
from osmosis_tax_gateway.api.v1.schemas import TransactionDetailResponse
from osmosis_tax_gateway.domain.exceptions import LedgerAPIError, TransactionNotFoundError
from osmosis_tax_gateway.infrastructure.clients.ledger import LedgerClient

router = APIRouter()


@router.get("/transactions/{tx_hash}", response_model=TransactionDetailResponse)
async def get_transaction(
    tx_hash: str,
    request: Request,
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Retrieve one transaction with block height, gas and raw messages.

    Returns:
        Normalized transaction plus raw execution data and explorer link
    """
    request_id = get_request_id(request)

    try:
        detail = await ledger_client.get_transaction_details(tx_hash)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerAPIError as e:
        logging.error(f"Ledger API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return TransactionDetailResponse.from_detail(detail, ledger_client.block_explorer_url(detail.hash))
