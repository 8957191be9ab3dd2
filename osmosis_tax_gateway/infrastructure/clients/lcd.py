"""Cosmos SDK REST (LCD) HTTP connection for transaction search and lookup"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from osmosis_tax_gateway.domain.exceptions import LedgerAPIError
from osmosis_tax_gateway.domain.messages import Coin

logger = logging.getLogger(__name__)

NODE_INFO_PATH = "/cosmos/base/tendermint/v1beta1/node_info"
TXS_PATH = "/cosmos/tx/v1beta1/txs"


class RawFee(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: List[Coin] = Field(default_factory=list)

    @field_validator("amount", mode="before")
    @classmethod
    def _null_amount(cls, v):
        return [] if v is None else v


class RawAuthInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fee: Optional[RawFee] = None


class RawTxBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    messages: List[Dict[str, Any]] = Field(default_factory=list)
    memo: Optional[str] = ""

    @field_validator("messages", mode="before")
    @classmethod
    def _null_messages(cls, v):
        return [] if v is None else v

    @field_validator("memo", mode="before")
    @classmethod
    def _null_memo(cls, v):
        return "" if v is None else v


class RawTx(BaseModel):
    model_config = ConfigDict(extra="ignore")

    body: RawTxBody = Field(default_factory=RawTxBody)
    auth_info: RawAuthInfo = Field(
        default_factory=RawAuthInfo, validation_alias=AliasChoices("auth_info", "authInfo")
    )

    @field_validator("body", "auth_info", mode="before")
    @classmethod
    def _null_section(cls, v):
        return {} if v is None else v


class RawTxRecord(BaseModel):
    """
    One transaction as returned by the ledger.

    Accepts LCD field names (txhash, gas_used, auth_info) and the camelCase
    names used by protobuf-JSON clients (hash, gasUsed, authInfo). Null
    fields take their defaults; only a missing hash is rejected.
    """

    model_config = ConfigDict(extra="ignore")

    hash: str = Field(validation_alias=AliasChoices("txhash", "hash"))
    height: int = 0
    code: int = 0
    gas_used: int = Field(default=0, validation_alias=AliasChoices("gas_used", "gasUsed"))
    gas_wanted: int = Field(default=0, validation_alias=AliasChoices("gas_wanted", "gasWanted"))
    raw_log: Optional[str] = Field(default=None, validation_alias=AliasChoices("raw_log", "rawLog"))
    tx: RawTx = Field(default_factory=RawTx)

    @field_validator("height", "code", "gas_used", "gas_wanted", mode="before")
    @classmethod
    def _null_number(cls, v):
        return 0 if v is None else v

    @field_validator("tx", mode="before")
    @classmethod
    def _null_tx(cls, v):
        return {} if v is None else v


@dataclass
class TxPage:
    """
    One search page.

    len() counts every record the ledger sent, skipped ones included, so a
    page is only "short" when the ledger itself ran out of records.
    """

    records: List[RawTxRecord] = field(default_factory=list)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.records) + self.skipped

    def __iter__(self):
        return iter(self.records)


def search_query(address: str) -> str:
    """Transactions the address sent, or received through a transfer"""
    return f"message.sender='{address}' OR transfer.recipient='{address}'"


def parse_page(items: List[Any]) -> TxPage:
    """Validate records one by one; a malformed record is logged and skipped"""
    page = TxPage()
    for item in items:
        try:
            page.records.append(RawTxRecord.model_validate(item))
        except ValidationError as e:
            page.skipped += 1
            tx_hash = (item.get("txhash") or item.get("hash")) if isinstance(item, dict) else None
            logger.warning(
                "Skipping malformed ledger record",
                extra={"tx_hash": tx_hash, "error_count": e.error_count()},
            )
    return page


class LcdConnection:
    """Live handle on an LCD endpoint. Obtain with connect(), release with close()."""

    def __init__(self, client: httpx.AsyncClient, chain_id: Optional[str] = None):
        self._client = client
        self.chain_id = chain_id

    @classmethod
    async def connect(
        cls,
        base_url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "LcdConnection":
        """
        Open a connection and probe node info.

        Raises:
            LedgerAPIError: endpoint unreachable or not an LCD node
        """
        client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        try:
            response = await client.get(NODE_INFO_PATH)
            response.raise_for_status()
            node_info = response.json().get("default_node_info") or {}
        except (httpx.HTTPError, ValueError) as e:
            await client.aclose()
            raise LedgerAPIError(f"Cannot connect to ledger at {base_url}: {e}") from e

        chain_id = node_info.get("network")
        logger.info("Connected to ledger", extra={"ledger_url": base_url, "chain_id": chain_id})
        return cls(client, chain_id=chain_id)

    async def search_txs(self, query: str, page: int, limit: int) -> TxPage:
        """
        One page of transactions matching an event query.

        Records that fail validation are skipped and counted in the page,
        the rest of the page is kept.

        Raises:
            LedgerAPIError: On timeout, HTTP errors, or a response that is not a search page
        """
        try:
            response = await self._client.get(
                TXS_PATH,
                params={"query": query, "page": page, "limit": limit, "order_by": "ORDER_BY_ASC"},
            )
            response.raise_for_status()
            data = response.json()
            return parse_page(data.get("tx_responses") or [])

        except httpx.TimeoutException as e:
            raise LedgerAPIError(f"Ledger search timeout on page {page}") from e
        except httpx.HTTPStatusError as e:
            raise LedgerAPIError(f"Ledger search error on page {page}: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LedgerAPIError(f"Ledger search failed on page {page}: {e}") from e
        except (ValidationError, ValueError, AttributeError) as e:
            raise LedgerAPIError(f"Invalid transaction data from ledger: {e}") from e

    async def get_tx(self, tx_hash: str) -> Optional[RawTxRecord]:
        """
        Transaction by hash, or None when the ledger has no such record.

        Raises:
            LedgerAPIError: On timeout, HTTP errors other than 404, or invalid response
        """
        try:
            response = await self._client.get(f"{TXS_PATH}/{tx_hash}")
            if response.status_code == httpx.codes.NOT_FOUND:
                return None
            response.raise_for_status()
            data = response.json().get("tx_response")
            return RawTxRecord.model_validate(data) if data else None

        except httpx.TimeoutException as e:
            raise LedgerAPIError(f"Ledger lookup timeout for {tx_hash}") from e
        except httpx.HTTPStatusError as e:
            raise LedgerAPIError(f"Ledger lookup error for {tx_hash}: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LedgerAPIError(f"Ledger lookup failed for {tx_hash}: {e}") from e
        except (ValidationError, ValueError, AttributeError) as e:
            raise LedgerAPIError(f"Invalid transaction data from ledger: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
