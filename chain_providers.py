import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from config import Settings
from errors import ConfigurationError, FetchError
from models import BalanceSnapshot, WalletHistory
from utils import lamports_to_sol, short_address

logger = logging.getLogger(__name__)

SIGNATURE_LIMIT = 20
DETAIL_LIMIT = 10
# one full Helius page; the prompt sample is truncated separately
INDEXER_TX_LIMIT = 100


# ── Base Provider ─────────────────────────────────────────────────────────────


class ChainProvider(ABC):
    """Fetches recent history and balances for one wallet.

    ``stats_policy`` names the ``wallet_analyzer`` policy that understands
    the record shape this provider returns.
    """

    name: str = ""
    stats_policy: str = ""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @abstractmethod
    async def get_transactions(self, address: str) -> tuple[list[dict[str, Any]], int]:
        """Return ``(records, skipped)``; raises ``FetchError`` on failure."""
        ...

    @abstractmethod
    async def get_balances(self, address: str) -> BalanceSnapshot:
        ...

    async def fetch(self, address: str) -> WalletHistory:
        if not address:
            raise ValueError("address must be a non-empty string")

        transactions, skipped = await self.get_transactions(address)
        balances = await self._safe_balances(address)
        return WalletHistory(
            transactions=transactions, balances=balances, skipped=skipped
        )

    async def _safe_balances(self, address: str) -> BalanceSnapshot:
        try:
            return await self.get_balances(address)
        except Exception as e:
            logger.warning(
                "[%s] balance fetch failed for %s, using empty snapshot: %s",
                self.name, short_address(address), e,
            )
            return BalanceSnapshot()


# ── Solana JSON-RPC (signatures + getTransaction) ─────────────────────────────


class SolanaRpcProvider(ChainProvider):
    name = "solana-rpc"
    stats_policy = "instructions"

    def __init__(self, client: httpx.AsyncClient, rpc_url: str):
        super().__init__(client)
        self.rpc_url = rpc_url

    async def _rpc_call(self, method: str, params: list) -> httpx.Response:
        return await self.client.post(
            self.rpc_url,
            json={"jsonrpc": "2.0", "id": 1, "method": method, "params": params},
        )

    async def get_signatures(self, address: str) -> list[dict[str, Any]]:
        try:
            resp = await self._rpc_call(
                "getSignaturesForAddress", [address, {"limit": SIGNATURE_LIMIT}]
            )
        except httpx.HTTPError as e:
            logger.warning("[%s] signature fetch failed: %s", self.name, e)
            raise FetchError() from e

        if not resp.is_success:
            logger.warning(
                "[%s] getSignaturesForAddress returned HTTP %s",
                self.name, resp.status_code,
            )
            raise FetchError()

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError() from e
        if not isinstance(data, dict):
            logger.warning(
                "[%s] getSignaturesForAddress returned %s, expected an object",
                self.name, type(data).__name__,
            )
            raise FetchError()
        return data.get("result") or []

    async def get_transaction(self, sig: dict[str, Any]) -> Optional[dict[str, Any]]:
        resp = await self._rpc_call(
            "getTransaction",
            [
                sig["signature"],
                {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0},
            ],
        )
        resp.raise_for_status()
        result = resp.json().get("result")
        if not result:
            return None

        return {
            "signature": sig["signature"],
            "blockTime": result.get("blockTime"),
            "err": sig.get("err"),
            "memo": sig.get("memo"),
            **result,
        }

    async def get_transactions(self, address: str) -> tuple[list[dict[str, Any]], int]:
        signatures = await self.get_signatures(address)
        wanted = signatures[:DETAIL_LIMIT]

        # gather keeps signature order; failures come back as exceptions
        results = await asyncio.gather(
            *(self.get_transaction(sig) for sig in wanted), return_exceptions=True
        )

        transactions: list[dict[str, Any]] = []
        skipped = 0
        for sig, r in zip(wanted, results):
            if isinstance(r, dict):
                transactions.append(r)
                continue
            skipped += 1
            if isinstance(r, BaseException):
                logger.debug(
                    "[%s] skipped %s: %s", self.name, sig.get("signature"), r
                )

        logger.info(
            "[%s] %s: %d signatures, %d transactions, %d skipped",
            self.name, short_address(address), len(signatures),
            len(transactions), skipped,
        )
        return transactions, skipped

    async def get_balances(self, address: str) -> BalanceSnapshot:
        resp = await self._rpc_call("getBalance", [address])
        resp.raise_for_status()
        lamports = (resp.json().get("result") or {}).get("value") or 0
        return BalanceSnapshot(
            native_balance=int(lamports), sol=lamports_to_sol(lamports)
        )


# ── Helius indexer (enriched transactions + balances) ─────────────────────────


class HeliusProvider(ChainProvider):
    name = "helius"
    stats_policy = "indexed"

    def __init__(self, client: httpx.AsyncClient, api_key: str, api_base: str):
        super().__init__(client)
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")

    def _url(self, address: str, resource: str) -> str:
        return f"{self.api_base}/v0/addresses/{address}/{resource}"

    async def get_transactions(self, address: str) -> tuple[list[dict[str, Any]], int]:
        try:
            resp = await self.client.get(
                self._url(address, "transactions"),
                params={"api-key": self.api_key, "limit": INDEXER_TX_LIMIT},
            )
        except httpx.HTTPError as e:
            logger.warning("[%s] transaction fetch failed: %s", self.name, e)
            raise FetchError() from e

        if not resp.is_success:
            logger.warning(
                "[%s] transactions endpoint returned HTTP %s",
                self.name, resp.status_code,
            )
            raise FetchError()

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError() from e

        if data is None:
            data = []
        if not isinstance(data, list):
            logger.warning(
                "[%s] transactions endpoint returned %s, expected a list",
                self.name, type(data).__name__,
            )
            raise FetchError()

        transactions = [tx for tx in data if isinstance(tx, dict)]
        logger.info(
            "[%s] %s: %d transactions",
            self.name, short_address(address), len(transactions),
        )
        return transactions, 0

    async def get_balances(self, address: str) -> BalanceSnapshot:
        resp = await self.client.get(
            self._url(address, "balances"),
            params={"api-key": self.api_key},
        )
        resp.raise_for_status()
        data = resp.json() or {}
        lamports = data.get("nativeBalance") or 0
        return BalanceSnapshot(
            native_balance=int(lamports),
            sol=lamports_to_sol(lamports),
            tokens=data.get("tokens") or [],
        )


# ── Factory ───────────────────────────────────────────────────────────────────


def get_provider(settings: Settings, client: httpx.AsyncClient) -> ChainProvider:
    if settings.chain_provider == "rpc":
        return SolanaRpcProvider(client, settings.solana_rpc_url)
    elif settings.chain_provider == "helius":
        if not settings.helius_api_key:
            raise ConfigurationError(
                "HELIUS_API_KEY is not set (required when CHAIN_PROVIDER=helius)."
            )
        return HeliusProvider(
            client, settings.helius_api_key, settings.helius_api_base
        )
    raise ConfigurationError(f"Unknown CHAIN_PROVIDER '{settings.chain_provider}'")
