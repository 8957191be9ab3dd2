"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional

from osmosis_tax_gateway.domain.models import Amount, Transaction, TransactionDetail


class AmountSchema(BaseModel):
    """Token amount as exact decimal string"""

    value: str
    denom: str
    symbol: str

    @classmethod
    def from_domain(cls, amount: Amount) -> "AmountSchema":
        return cls(value=amount.value, denom=amount.denom, symbol=amount.symbol)


class TransactionSchema(BaseModel):
    """Single normalized transaction"""

    hash: str
    timestamp: datetime
    type: str
    status: str
    amounts: List[AmountSchema]
    fee: AmountSchema
    memo: Optional[str] = None
    explorer_url: str

    @classmethod
    def from_domain(cls, tx: Transaction, explorer_url: str) -> "TransactionSchema":
        return cls(
            hash=tx.hash,
            timestamp=tx.timestamp,
            type=tx.type.value,
            status=tx.status.value,
            amounts=[AmountSchema.from_domain(a) for a in tx.amounts],
            fee=AmountSchema.from_domain(tx.fee),
            memo=tx.memo,
            explorer_url=explorer_url,
        )


class TransactionListResponse(BaseModel):
    """Response for GET /v1/wallets/{address}/transactions"""

    address: str
    count: int
    complete: bool
    error: Optional[str] = None
    transactions: List[TransactionSchema]


class TransactionDetailResponse(TransactionSchema):
    """Response for GET /v1/transactions/{tx_hash}"""

    block_height: int
    gas_used: int
    gas_wanted: int
    raw_log: Optional[str] = None
    messages: List[Dict[str, Any]]

    @classmethod
    def from_detail(cls, detail: TransactionDetail, explorer_url: str) -> "TransactionDetailResponse":
        base = TransactionSchema.from_domain(detail, explorer_url)
        return cls(
            **base.model_dump(),
            block_height=detail.block_height,
            gas_used=detail.gas_used,
            gas_wanted=detail.gas_wanted,
            raw_log=detail.raw_log,
            messages=list(detail.messages),
        )


class AddressValidationResponse(BaseModel):
    """Response for GET /v1/wallets/{address}/validation"""

    address: str
    valid: bool
