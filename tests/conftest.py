"""Pytest fixtures for testing"""

import json
import pytest
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from osmosis_tax_gateway.api.dependencies import get_ledger_client
from osmosis_tax_gateway.api.main import create_app
from osmosis_tax_gateway.infrastructure.clients.lcd import LcdConnection, RawTxRecord
from osmosis_tax_gateway.infrastructure.clients.ledger import Connected, LedgerClient


STUB_FILE = Path(__file__).resolve().parents[1] / "mock" / "ledger_server" / "ledger_stub.json"

# 43 characters: "osmo" + 39 lowercase alphanumerics
WALLET = "osmo1abcdefghijklmnopqrstuvwxyz0123456789ab"
OTHER_WALLET = "osmo1" + "q" * 38


@pytest.fixture
def wallet() -> str:
    return WALLET


@pytest.fixture
def other_wallet() -> str:
    return OTHER_WALLET


@pytest.fixture
def stub_records() -> List[Dict[str, Any]]:
    """Raw ledger records served by the mock ledger server"""
    return json.loads(STUB_FILE.read_text())["tx_responses"]


@pytest.fixture
def make_record() -> Callable[..., RawTxRecord]:
    """Factory for raw ledger records; one MsgSend of 1 OSMO unless overridden"""

    def _make(
        tx_hash: str,
        height: int = 1000,
        messages: Optional[List[Dict[str, Any]]] = None,
        fee: Optional[List[Dict[str, str]]] = None,
        code: int = 0,
        memo: str = "",
    ) -> RawTxRecord:
        if messages is None:
            messages = [
                {
                    "@type": "/cosmos.bank.v1beta1.MsgSend",
                    "from_address": WALLET,
                    "to_address": OTHER_WALLET,
                    "amount": [{"denom": "uosmo", "amount": "1000000"}],
                }
            ]
        return RawTxRecord.model_validate(
            {
                "txhash": tx_hash,
                "height": str(height),
                "code": code,
                "gas_used": "50000",
                "gas_wanted": "80000",
                "raw_log": "",
                "tx": {
                    "body": {"messages": messages, "memo": memo},
                    "auth_info": {"fee": {"amount": fee if fee is not None else [{"denom": "uosmo", "amount": "2500"}]}},
                },
            }
        )

    return _make


@pytest.fixture
def fake_connection() -> MagicMock:
    """LCD connection double with async search/lookup/close"""
    connection = MagicMock(spec=LcdConnection)
    connection.chain_id = "osmosis-1"
    connection.search_txs = AsyncMock(return_value=[])
    connection.get_tx = AsyncMock(return_value=None)
    connection.close = AsyncMock(return_value=None)
    return connection


@pytest.fixture
def ledger_client(fake_connection: MagicMock) -> LedgerClient:
    """Uninitialized client whose connector hands out fake_connection"""
    return LedgerClient(rest_url="http://ledger.test", connector=AsyncMock(return_value=fake_connection))


@pytest.fixture
def client(ledger_client: LedgerClient, fake_connection: MagicMock) -> TestClient:
    """Create FastAPI test client backed by the fake ledger connection"""
    app = create_app()
    ledger_client.state = Connected(fake_connection)

    def override_get_ledger_client():
        yield ledger_client

    app.dependency_overrides[get_ledger_client] = override_get_ledger_client
    return TestClient(app)
