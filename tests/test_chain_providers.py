"""
Chain providers against httpx.MockTransport: no network, scripted upstream.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from chain_providers import HeliusProvider, SolanaRpcProvider, get_provider
from config import Settings
from errors import ConfigurationError, FetchError
from models import BalanceSnapshot

RPC_URL = "https://rpc.test"
HELIUS_BASE = "https://helius.test"
ADDR = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


def _rpc_fetch(handler, address: str = ADDR):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await SolanaRpcProvider(client, RPC_URL).fetch(address)

    return asyncio.run(go())


def _helius_fetch(handler, address: str = ADDR):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await HeliusProvider(client, "key123", HELIUS_BASE).fetch(address)

    return asyncio.run(go())


class ScriptedRpc:
    """Answers the three JSON-RPC methods; records every call."""

    def __init__(self, n_signatures=12, failing=(), missing=(), balance_status=200):
        self.n_signatures = n_signatures
        self.failing = set(failing)
        self.missing = set(missing)
        self.balance_status = balance_status
        self.calls: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        method, params = body["method"], body["params"]

        if method == "getSignaturesForAddress":
            sigs = [
                {"signature": f"sig{i}", "err": None, "memo": None, "blockTime": 1000 - i}
                for i in range(self.n_signatures)
            ]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": sigs})

        if method == "getTransaction":
            sig = params[0]
            if sig in self.failing:
                return httpx.Response(503, text="upstream busy")
            if sig in self.missing:
                return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None})
            return httpx.Response(200, json={
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "blockTime": 1000 - int(sig[3:]),
                    "slot": 5,
                    "meta": {"err": None},
                    "transaction": {"message": {"instructions": []}},
                },
            })

        if method == "getBalance":
            if self.balance_status != 200:
                return httpx.Response(self.balance_status)
            return httpx.Response(200, json={
                "jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": 2_500_000_000},
            })

        raise AssertionError(f"unexpected method {method}")

    def methods(self, name):
        return [c for c in self.calls if c["method"] == name]


# ── Solana RPC ────────────────────────────────────────────────────────────────


def test_rpc_fetches_20_signatures_and_10_details():
    rpc = ScriptedRpc(n_signatures=20)
    history = _rpc_fetch(rpc)

    sig_call = rpc.methods("getSignaturesForAddress")[0]
    assert sig_call["params"] == [ADDR, {"limit": 20}]

    detail_calls = rpc.methods("getTransaction")
    assert len(detail_calls) == 10
    assert detail_calls[0]["params"][1] == {
        "encoding": "jsonParsed",
        "maxSupportedTransactionVersion": 0,
    }

    assert [tx["signature"] for tx in history.transactions] == [f"sig{i}" for i in range(10)]
    assert history.skipped == 0


def test_rpc_record_merges_signature_fields():
    history = _rpc_fetch(ScriptedRpc(n_signatures=1))
    tx = history.transactions[0]

    assert tx["signature"] == "sig0"
    assert tx["blockTime"] == 1000
    assert tx["err"] is None
    assert tx["transaction"] == {"message": {"instructions": []}}


def test_rpc_skips_failed_details_and_keeps_order():
    rpc = ScriptedRpc(n_signatures=12, failing={"sig3"}, missing={"sig5"})
    history = _rpc_fetch(rpc)

    assert [tx["signature"] for tx in history.transactions] == [
        "sig0", "sig1", "sig2", "sig4", "sig6", "sig7", "sig8", "sig9",
    ]
    assert history.skipped == 2


def test_rpc_detail_transport_error_is_skipped():
    rpc = ScriptedRpc(n_signatures=3)

    def handler(request):
        body = json.loads(request.content)
        if body["method"] == "getTransaction" and body["params"][0] == "sig1":
            raise httpx.ConnectError("boom", request=request)
        return rpc(request)

    history = _rpc_fetch(handler)
    assert [tx["signature"] for tx in history.transactions] == ["sig0", "sig2"]
    assert history.skipped == 1


def test_rpc_balance_snapshot():
    history = _rpc_fetch(ScriptedRpc(n_signatures=2))
    assert history.balances == BalanceSnapshot(native_balance=2_500_000_000, sol=2.5)


def test_rpc_balance_failure_is_not_fatal():
    history = _rpc_fetch(ScriptedRpc(n_signatures=2, balance_status=500))

    assert len(history.transactions) == 2
    assert history.balances == BalanceSnapshot()


def test_rpc_signature_http_error_raises_fetch_error():
    def handler(request):
        return httpx.Response(429, text="slow down")

    with pytest.raises(FetchError) as exc:
        _rpc_fetch(handler)
    assert exc.value.message == "Failed to fetch wallet transactions"


def test_rpc_signature_network_error_raises_fetch_error():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(FetchError):
        _rpc_fetch(handler)


@pytest.mark.parametrize("payload", [[{"signature": "sig0"}], None, "oops"])
def test_rpc_non_object_signature_response_raises_fetch_error(payload):
    def handler(request):
        return httpx.Response(200, content=json.dumps(payload).encode())

    with pytest.raises(FetchError):
        _rpc_fetch(handler)


def test_rpc_no_signatures_gives_empty_history():
    history = _rpc_fetch(ScriptedRpc(n_signatures=0))
    assert history.transactions == []
    assert history.skipped == 0


def test_fetch_rejects_empty_address():
    with pytest.raises(ValueError):
        _rpc_fetch(ScriptedRpc(), address="")


# ── Helius ────────────────────────────────────────────────────────────────────


def test_helius_fetch(indexed_txs):
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        assert request.url.params["api-key"] == "key123"
        if request.url.path.endswith("/transactions"):
            return httpx.Response(200, json=indexed_txs)
        if request.url.path.endswith("/balances"):
            return httpx.Response(200, json={
                "nativeBalance": 1_000_000_000,
                "tokens": [{"mint": "BONKmint", "amount": 5, "decimals": 5}],
            })
        raise AssertionError(request.url)

    history = _helius_fetch(handler)

    assert [r.url.path for r in seen] == [
        f"/v0/addresses/{ADDR}/transactions",
        f"/v0/addresses/{ADDR}/balances",
    ]
    assert history.transactions == indexed_txs
    assert history.balances.sol == 1.0
    assert history.balances.tokens[0]["mint"] == "BONKmint"


def test_helius_requests_full_page_and_keeps_it():
    txs = [{"type": "TRANSFER", "timestamp": 100 - i} for i in range(40)]
    seen = []

    def handler(request):
        if request.url.path.endswith("/transactions"):
            seen.append(request.url.params)
            return httpx.Response(200, json=txs)
        return httpx.Response(200, json={"nativeBalance": 0, "tokens": []})

    history = _helius_fetch(handler)

    assert history.transactions == txs
    assert seen[0]["limit"] == "100"
    assert seen[0]["api-key"] == "key123"


def test_helius_non_list_response_raises_fetch_error():
    def handler(request):
        if request.url.path.endswith("/transactions"):
            return httpx.Response(200, json={"error": "rate limited"})
        return httpx.Response(200, json={"nativeBalance": 0, "tokens": []})

    with pytest.raises(FetchError):
        _helius_fetch(handler)


def test_helius_null_response_gives_empty_history():
    def handler(request):
        if request.url.path.endswith("/transactions"):
            return httpx.Response(200, content=b"null")
        return httpx.Response(200, json={"nativeBalance": 0, "tokens": []})

    assert _helius_fetch(handler).transactions == []


def test_helius_transactions_error_raises_fetch_error():
    def handler(request):
        return httpx.Response(401, json={"error": "invalid api key"})

    with pytest.raises(FetchError):
        _helius_fetch(handler)


def test_helius_balance_failure_is_not_fatal(indexed_txs):
    def handler(request):
        if request.url.path.endswith("/transactions"):
            return httpx.Response(200, json=indexed_txs)
        raise httpx.ReadTimeout("slow", request=request)

    history = _helius_fetch(handler)
    assert len(history.transactions) == 4
    assert history.balances == BalanceSnapshot()


# ── Factory ───────────────────────────────────────────────────────────────────


def test_get_provider_pairs_policy():
    client = httpx.AsyncClient()
    rpc = get_provider(Settings(chain_provider="rpc"), client)
    helius = get_provider(
        Settings(chain_provider="helius", helius_api_key="k"), client
    )

    assert isinstance(rpc, SolanaRpcProvider)
    assert rpc.stats_policy == "instructions"
    assert isinstance(helius, HeliusProvider)
    assert helius.stats_policy == "indexed"


def test_get_provider_helius_requires_key():
    with pytest.raises(ConfigurationError):
        get_provider(Settings(chain_provider="helius"), httpx.AsyncClient())
