"""
Shared fixtures: provider-shaped transaction records and a fake LLM client.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class FakeMessages:
    def __init__(self, text: str):
        self.text = text
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


class FakeAnthropic:
    """Stands in for anthropic.AsyncAnthropic: only messages.create is used."""

    def __init__(self, text: str = "You bought the top. DEGEN SCORE: 7/10"):
        self.messages = FakeMessages(text)


@pytest.fixture
def wallet() -> str:
    return WALLET


@pytest.fixture
def fake_llm() -> FakeAnthropic:
    return FakeAnthropic()


@pytest.fixture
def indexed_txs() -> list[dict]:
    """Helius enriched-transaction records, newest first."""
    return [
        {
            "type": "SWAP",
            "source": "JUPITER",
            "description": "swapped 2 SOL for 1,000,000 BONK",
            "timestamp": 1714000000,
            "transactionError": None,
            "tokenTransfers": [{"mint": "BONKmint"}, {"mint": "So11111111111111111111111111111111111111112"}],
        },
        {
            "type": "TRANSFER",
            "source": "SYSTEM_PROGRAM",
            "description": "sent 0.1 SOL to a friend",
            "timestamp": 1713990000,
            "transactionError": None,
            "tokenTransfers": [],
        },
        {
            "type": "NFT_SALE",
            "source": "MAGIC_EDEN",
            "description": "sold Mad Lad #42",
            "timestamp": 1713980000,
            "transactionError": None,
            "tokenTransfers": [],
        },
        {
            "type": "SWAP",
            "source": "RAYDIUM",
            "description": "swapped into RUGCOIN, then got rugged",
            "timestamp": 1713970000,
            "transactionError": {"InstructionError": [0, "Custom"]},
            "tokenTransfers": [{"mint": "BONKmint"}, {"mint": "RUGmint"}],
        },
    ]


@pytest.fixture
def rpc_txs() -> list[dict]:
    """getTransaction(jsonParsed) results merged with their signature entries."""
    return [
        {
            "signature": "sig0",
            "blockTime": 1714000000,
            "err": None,
            "memo": None,
            "transaction": {
                "message": {
                    "instructions": [
                        {"programId": "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"},
                        {
                            "program": "spl-token",
                            "parsed": {"type": "transferChecked", "info": {"mint": "BONKmint"}},
                        },
                    ]
                }
            },
        },
        {
            "signature": "sig1",
            "blockTime": 1713990000,
            "err": {"InstructionError": [0, "Custom"]},
            "memo": None,
            "transaction": {
                "message": {
                    "instructions": [
                        {"program": "system", "parsed": {"type": "transfer", "info": {"lamports": 10}}},
                        {"program": "spl-memo", "parsed": "gm"},
                    ]
                }
            },
        },
    ]
