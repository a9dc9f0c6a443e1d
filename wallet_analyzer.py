"""Fold a wallet's transaction records into a handful of counters.

Two classification policies exist, one per provider record shape:

* ``indexed`` trusts the labels an indexer (Helius enriched transactions)
  already put on each record: ``type``, ``transactionError``, ``source`` and
  ``tokenTransfers``.
* ``instructions`` inspects the parsed instructions of raw ``getTransaction``
  results from a plain Solana RPC node.

A deployment picks exactly one through its chain provider.
"""

from typing import Any, Callable, Optional

from models import BalanceSnapshot, WalletStats

RUG_FLAG = "Possible rug pull victim"

# Substrings of a program label that mark a swap (Jupiter, Raydium "Swap", ...)
SWAP_MARKERS = ("JUP", "Swap")
TOKEN_PROGRAM = "spl-token"

Policy = Callable[[dict[str, Any], "_Tally"], None]


class _Tally:
    def __init__(self) -> None:
        self.swaps = 0
        self.transfers = 0
        self.nft_trades = 0
        self.failed = 0
        self.protocols: dict[str, None] = {}  # insertion-ordered set
        self.tokens: set[str] = set()
        self.suspicious: list[str] = []


# ── Policies ──────────────────────────────────────────────────────────────────


def _classify_indexed(tx: dict[str, Any], tally: _Tally) -> None:
    tx_type = tx.get("type") or ""
    if tx_type == "SWAP":
        tally.swaps += 1
    elif tx_type == "TRANSFER":
        tally.transfers += 1
    if "NFT" in tx_type:
        tally.nft_trades += 1

    if tx.get("transactionError"):
        tally.failed += 1

    if tx.get("source"):
        tally.protocols[tx["source"]] = None

    for transfer in tx.get("tokenTransfers") or []:
        mint = transfer.get("mint") if isinstance(transfer, dict) else None
        if mint:
            tally.tokens.add(mint)


def _classify_instructions(tx: dict[str, Any], tally: _Tally) -> None:
    if tx.get("err"):
        tally.failed += 1

    message = (tx.get("transaction") or {}).get("message") or {}
    for ix in message.get("instructions") or []:
        program = ix.get("program") or ix.get("programId")
        if program:
            tally.protocols[program] = None
            if any(marker in program for marker in SWAP_MARKERS):
                tally.swaps += 1

        # Memo and some system instructions carry `parsed` as a plain string
        parsed = ix.get("parsed")
        if not isinstance(parsed, dict):
            parsed = {}

        if program == TOKEN_PROGRAM or parsed.get("type") == "transfer":
            tally.transfers += 1
            mint = (parsed.get("info") or {}).get("mint")
            if mint:
                tally.tokens.add(mint)


POLICIES: dict[str, Policy] = {
    "indexed": _classify_indexed,
    "instructions": _classify_instructions,
}


# ── Reducer ───────────────────────────────────────────────────────────────────


def analyze(
    transactions: list[dict[str, Any]],
    balances: Optional[BalanceSnapshot] = None,
    policy: str = "instructions",
) -> WalletStats:
    """Single pass over ``transactions``; no I/O, same input gives same stats.

    ``balances`` is accepted for parity with the fetch result but no counter
    depends on it today.
    """
    try:
        classify = POLICIES[policy]
    except KeyError:
        raise ValueError(f"Unknown stats policy: {policy}") from None

    tally = _Tally()
    for tx in transactions:
        classify(tx, tally)

        description = tx.get("description")
        if isinstance(description, str) and "rug" in description.lower():
            tally.suspicious.append(RUG_FLAG)

    return WalletStats(
        total_txs=len(transactions),
        swaps=tally.swaps,
        transfers=tally.transfers,
        nft_trades=tally.nft_trades,
        failed_txs=tally.failed,
        protocols=list(tally.protocols),
        tokens_traded=len(tally.tokens),
        suspicious_patterns=tally.suspicious,
    )
