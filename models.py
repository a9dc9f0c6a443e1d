from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Chain Data ────────────────────────────────────────────────────────────────


class BalanceSnapshot(BaseModel):
    native_balance: int = 0  # lamports
    sol: float = 0.0
    tokens: list[dict[str, Any]] = []


class WalletHistory(BaseModel):
    """Provider-shaped transaction records (newest first) plus balances."""

    transactions: list[dict[str, Any]] = []
    balances: Optional[BalanceSnapshot] = None
    skipped: int = 0


# ── Derived ───────────────────────────────────────────────────────────────────


class WalletStats(BaseModel):
    total_txs: int = 0
    swaps: int = 0
    transfers: int = 0
    nft_trades: int = 0
    failed_txs: int = 0
    protocols: list[str] = []
    tokens_traded: int = 0
    suspicious_patterns: list[str] = []


class RoastStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_transactions: int = Field(0, alias="totalTransactions")
    swaps: int = 0
    transfers: int = 0
    nft_trades: int = Field(0, alias="nftTrades")
    failed_transactions: int = Field(0, alias="failedTransactions")
    unique_tokens: int = Field(0, alias="uniqueTokens")
    protocols: list[str] = []
    suspicious_patterns: list[str] = Field([], alias="suspiciousPatterns")

    @classmethod
    def from_stats(cls, stats: WalletStats, max_protocols: int = 5) -> "RoastStats":
        return cls(
            total_transactions=stats.total_txs,
            swaps=stats.swaps,
            transfers=stats.transfers,
            nft_trades=stats.nft_trades,
            failed_transactions=stats.failed_txs,
            unique_tokens=stats.tokens_traded,
            protocols=stats.protocols[:max_protocols],
            suspicious_patterns=stats.suspicious_patterns,
        )


class RoastResult(BaseModel):
    address: str
    roast: str
    score: Optional[float] = None
    stats: RoastStats


# ── API Models ────────────────────────────────────────────────────────────────


class RoastRequest(BaseModel):
    address: Optional[str] = Field(
        None, description="Solana wallet address or a Solscan/Explorer account URL"
    )


class HealthResponse(BaseModel):
    status: str
    agent: str


class ErrorResponse(BaseModel):
    error: str
