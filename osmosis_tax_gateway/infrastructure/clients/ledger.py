"""Osmosis ledger client: address validation, paginated history fetch, detail lookup"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Set, Union

from osmosis_tax_gateway.config import settings
from osmosis_tax_gateway.domain.amounts import parse_fee
from osmosis_tax_gateway.domain.classifier import parse_messages
from osmosis_tax_gateway.domain.exceptions import (
    ClientNotInitializedError,
    InvalidAddressError,
    LedgerAPIError,
    TransactionNotFoundError,
)
from osmosis_tax_gateway.domain.models import (
    FetchOptions,
    FetchResult,
    Transaction,
    TransactionDetail,
    TransactionStatus,
)
from osmosis_tax_gateway.infrastructure.clients.lcd import LcdConnection, RawTxRecord, search_query
from osmosis_tax_gateway.infrastructure.observability.logging import log_fetch
from osmosis_tax_gateway.infrastructure.observability.metrics import (
    ledger_page_failures_counter,
    ledger_page_latency_histogram,
    record_classified,
)

logger = logging.getLogger(__name__)

BECH32_BODY_LENGTH = 39

Connector = Callable[[str, float], Awaitable[LcdConnection]]


@dataclass(frozen=True)
class Disconnected:
    pass


@dataclass(frozen=True)
class Connected:
    connection: LcdConnection


ConnectionState = Union[Disconnected, Connected]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class LedgerClient:
    """
    Client for the Osmosis ledger.

    The connection handle is stateful: use one instance per address fetch,
    or serialize calls on a shared instance.
    """

    def __init__(
        self,
        rest_url: str | None = None,
        timeout: float | None = None,
        connector: Connector | None = None,
    ):
        self.rest_url = rest_url or settings.ledger_rest_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.block_time_seconds = settings.block_time_seconds
        self._connector = connector or (lambda url, timeout: LcdConnection.connect(url, timeout))
        self._address_pattern = re.compile(rf"{re.escape(settings.address_prefix)}[a-z0-9]{{{BECH32_BODY_LENGTH}}}")
        self.state: ConnectionState = Disconnected()

    async def __aenter__(self) -> "LedgerClient":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.disconnect()

    @property
    def is_connected(self) -> bool:
        return isinstance(self.state, Connected)

    async def initialize(self) -> None:
        """Connect to the ledger. No-op when already connected."""
        if isinstance(self.state, Connected):
            return
        connection = await self._connector(self.rest_url, self.timeout)
        self.state = Connected(connection)

    async def disconnect(self) -> None:
        """Release the connection. Safe to call when never initialized."""
        if isinstance(self.state, Connected):
            connection = self.state.connection
            self.state = Disconnected()
            await connection.close()

    def _connection(self) -> LcdConnection:
        if not isinstance(self.state, Connected):
            raise ClientNotInitializedError()
        return self.state.connection

    def validate_address(self, address: str) -> bool:
        """
        True for prefix + exactly 39 lowercase alphanumerics (43 chars for "osmo").

        Whitespace is not trimmed; callers must strip input first.
        """
        if not isinstance(address, str):
            return False
        return self._address_pattern.fullmatch(address) is not None

    def block_explorer_url(self, tx_hash: str) -> str:
        return f"{settings.explorer_tx_url}/{tx_hash}"

    def _timestamp(self, height: int) -> datetime:
        # Approximation: block height times the nominal block interval since the epoch
        return datetime.fromtimestamp(height * self.block_time_seconds, tz=timezone.utc)

    def normalize(self, record: RawTxRecord, address: str = "") -> Transaction:
        """Build a Transaction from a raw ledger record"""
        parsed = parse_messages(record.tx.body.messages, address)
        return Transaction(
            hash=record.hash,
            timestamp=self._timestamp(record.height),
            type=parsed.type,
            status=TransactionStatus.from_code(record.code),
            amounts=parsed.amounts,
            fee=parse_fee(record.tx.auth_info.fee),
            memo=record.tx.body.memo or None,
        )

    async def fetch_transactions(self, address: str, options: Optional[FetchOptions] = None) -> FetchResult:
        """
        Fetch the address's transaction history, one page at a time.

        Stops on a short (or empty) page, when options.limit transactions are
        collected, or when a page request fails. A failed page does not
        raise: the transactions gathered so far are returned with
        complete=False and the failure reason in error.

        Raises:
            ClientNotInitializedError: initialize() not called
            InvalidAddressError: address fails validate_address()
        """
        connection = self._connection()
        if not self.validate_address(address):
            raise InvalidAddressError(address)

        options = options or FetchOptions()
        page_size = options.page_size or options.limit or settings.default_page_size
        page = options.offset // page_size + 1
        start = _as_utc(options.start_date) if options.start_date else None
        end = _as_utc(options.end_date) if options.end_date else None
        query = search_query(address)

        result = FetchResult(address=address)
        seen: Set[str] = set()
        started = time.time()

        while True:
            try:
                with ledger_page_latency_histogram.time():
                    records = await connection.search_txs(query, page=page, limit=page_size)
            except LedgerAPIError as e:
                ledger_page_failures_counter.inc()
                logger.warning(
                    f"Stopping pagination after ledger error: {e}",
                    extra={"address": address, "page": page},
                )
                result.complete = False
                result.error = str(e)
                break

            result.pages_fetched += 1

            for record in records:
                if record.hash in seen:
                    continue
                seen.add(record.hash)

                tx = self.normalize(record, address)
                if start and tx.timestamp < start:
                    continue
                if end and tx.timestamp > end:
                    continue

                record_classified(tx.type)
                result.transactions.append(tx)

            if options.limit and len(result.transactions) >= options.limit:
                del result.transactions[options.limit:]
                break

            if len(records) < page_size:
                break

            page += 1

        log_fetch(
            address=address,
            count=len(result.transactions),
            pages=result.pages_fetched,
            complete=result.complete,
            duration_ms=(time.time() - started) * 1000,
        )
        return result

    async def get_transaction_details(self, tx_hash: str) -> TransactionDetail:
        """
        Full record for one transaction, including gas and raw log.

        Raises:
            ClientNotInitializedError: initialize() not called
            TransactionNotFoundError: ledger has no record for tx_hash
            LedgerAPIError: ledger unavailable or returned invalid data
        """
        connection = self._connection()
        record = await connection.get_tx(tx_hash)
        if record is None:
            raise TransactionNotFoundError(tx_hash)

        tx = self.normalize(record)
        return TransactionDetail(
            hash=tx.hash,
            timestamp=tx.timestamp,
            type=tx.type,
            status=tx.status,
            amounts=tx.amounts,
            fee=tx.fee,
            memo=tx.memo,
            block_height=record.height,
            gas_used=record.gas_used,
            gas_wanted=record.gas_wanted,
            raw_log=record.raw_log,
            messages=tuple(record.tx.body.messages),
        )
