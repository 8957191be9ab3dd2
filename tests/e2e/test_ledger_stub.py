"""
E2E tests running the real ledger client against the stub ledger server.

The stub is served in-process over httpx's ASGI transport, so no server
needs to be running. The same app can be started standalone:
    uvicorn mock.ledger_server.main:app --port 1317

Wallets in the stub data:
- main wallet: swap, transfer, stake, reward claim, failed pool join
- other wallet: receives the transfer, casts a governance vote
"""

import httpx
import importlib.util
import pytest
from pathlib import Path
from fastapi.testclient import TestClient
from osmosis_tax_gateway.api.dependencies import get_ledger_client
from osmosis_tax_gateway.api.main import create_app
from osmosis_tax_gateway.domain.exceptions import TransactionNotFoundError
from osmosis_tax_gateway.domain.models import FetchOptions, TransactionStatus, TransactionType
from osmosis_tax_gateway.domain.report import export_to_report, read_report
from osmosis_tax_gateway.infrastructure.clients.lcd import LcdConnection
from osmosis_tax_gateway.infrastructure.clients.ledger import LedgerClient


STUB_URL = "http://ledger-stub"
STUB_SERVER = Path(__file__).resolve().parents[2] / "mock" / "ledger_server" / "main.py"


def _load_stub_app():
    # Loaded by path: a "mock" distribution on sys.path would shadow the directory
    spec = importlib.util.spec_from_file_location("ledger_stub_server", STUB_SERVER)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app


ledger_stub_app = _load_stub_app()


async def _stub_connector(url: str, timeout: float) -> LcdConnection:
    return await LcdConnection.connect(url, timeout, transport=httpx.ASGITransport(app=ledger_stub_app))


@pytest.fixture
async def stub_client():
    async with LedgerClient(rest_url=STUB_URL, connector=_stub_connector) as client:
        yield client


@pytest.fixture
def api_client() -> TestClient:
    app = create_app()

    async def override_get_ledger_client():
        async with LedgerClient(rest_url=STUB_URL, connector=_stub_connector) as client:
            yield client

    app.dependency_overrides[get_ledger_client] = override_get_ledger_client
    return TestClient(app)


@pytest.mark.integration
async def test_connects_to_stub_chain(stub_client: LedgerClient):
    """Test node info probe reads the stub chain id"""
    assert stub_client.state.connection.chain_id == "osmosis-1"


@pytest.mark.integration
async def test_main_wallet_history(stub_client: LedgerClient, wallet: str):
    """
    Main wallet: every record classified in ledger order
    Expected: five transactions, complete, last one failed
    """
    result = await stub_client.fetch_transactions(wallet)

    assert result.complete is True
    assert [tx.type for tx in result] == [
        TransactionType.SWAP,
        TransactionType.TRANSFER,
        TransactionType.STAKE,
        TransactionType.CLAIM_REWARDS,
        TransactionType.PROVIDE_LIQUIDITY,
    ]
    assert result.transactions[1].memo == "Contains, comma"
    assert result.transactions[4].status == TransactionStatus.FAILED


@pytest.mark.integration
async def test_small_pages_same_history(stub_client: LedgerClient, wallet: str):
    """Test paging two at a time yields the same history over three pages"""
    full = await stub_client.fetch_transactions(wallet)
    paged = await stub_client.fetch_transactions(wallet, FetchOptions(page_size=2))

    assert [tx.hash for tx in paged] == [tx.hash for tx in full]
    assert paged.pages_fetched == 3


@pytest.mark.integration
async def test_other_wallet_history(stub_client: LedgerClient, other_wallet: str):
    """
    Other wallet: recipient of the transfer plus its own vote
    Expected: transfer then vote
    """
    result = await stub_client.fetch_transactions(other_wallet)

    assert [tx.type for tx in result] == [TransactionType.TRANSFER, TransactionType.VOTE]


@pytest.mark.integration
async def test_main_wallet_report(stub_client: LedgerClient, wallet: str):
    """Test report rows for every stub transaction type"""
    result = await stub_client.fetch_transactions(wallet)
    rows = read_report(export_to_report(result.transactions))

    assert [r["Type"] for r in rows] == ["Trade", "Transfer", "Stake", "Income", "Trade"]

    swap, transfer, stake, claim, join = rows
    assert (swap["Buy Amount"], swap["Buy Currency"], swap["Sell Amount"], swap["Sell Currency"]) == (
        "5", "ATOM", "10", "OSMO",
    )
    assert (transfer["Sell Amount"], transfer["Fee Amount"]) == ("5", "0.0025")
    assert (stake["Sell Amount"], stake["Fee Amount"]) == ("2", "0.003")
    assert (claim["Buy Amount"], claim["Fee Amount"], claim["Fee Currency"]) == ("", "0", "OSMO")
    assert (join["Sell Amount"], join["Sell Currency"]) == ("0.5+1", "IBC/27394F+OSMO")
    assert join["Date"] == "1970-01-01T01:26:40Z"


@pytest.mark.integration
async def test_transaction_details(stub_client: LedgerClient, stub_records):
    """Test single-hash lookup through the stub"""
    tx_hash = stub_records[4]["txhash"]

    detail = await stub_client.get_transaction_details(tx_hash)

    assert detail.block_height == 1040
    assert detail.gas_wanted == 250000
    assert "out of gas" in detail.raw_log


@pytest.mark.integration
async def test_transaction_details_unknown_hash(stub_client: LedgerClient):
    """Test stub 404 surfaces as TransactionNotFoundError"""
    with pytest.raises(TransactionNotFoundError):
        await stub_client.get_transaction_details("0" * 64)


@pytest.mark.integration
def test_export_endpoint(api_client: TestClient, wallet: str, stub_records):
    """
    Full stack: API -> ledger client -> stub ledger
    Expected: header plus five rows, complete
    """
    response = api_client.get(f"/v1/wallets/{wallet}/export")

    assert response.status_code == 200
    assert response.headers["X-Export-Complete"] == "true"
    lines = response.text.split("\n")
    assert len(lines) == 6
    assert lines[4] == f"1970-01-01T01:25:50Z,Income,,,,,0,OSMO,Osmosis,{stub_records[3]['txhash']}"


@pytest.mark.integration
def test_transactions_endpoint_date_filter(api_client: TestClient, wallet: str):
    """Test date filtering through query parameters"""
    response = api_client.get(
        f"/v1/wallets/{wallet}/transactions",
        params={"start_date": "1970-01-01T01:24:00Z", "end_date": "1970-01-01T01:25:30Z"},
    )

    assert response.status_code == 200
    assert [tx["type"] for tx in response.json()["transactions"]] == ["transfer", "stake"]


@pytest.mark.integration
def test_transaction_endpoint_not_found(api_client: TestClient):
    """Test unknown hash through the full stack returns 404"""
    response = api_client.get(f"/v1/transactions/{'0' * 64}")
    assert response.status_code == 404
