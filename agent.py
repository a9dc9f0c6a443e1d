import json
import logging
from typing import Any, Optional

from config import Settings
from errors import ConfigurationError, EmptyHistoryError
from models import BalanceSnapshot, RoastResult, RoastStats, WalletStats
from prompts import NO_BALANCES, NO_PROTOCOLS, ROAST_PROMPT
from utils import extract_score

logger = logging.getLogger(__name__)

SAMPLE_TX_LIMIT = 20
SAMPLE_TOKEN_LIMIT = 10
MAX_PROTOCOLS = 5


def sample_transactions(transactions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Most recent transactions reduced to the fields the roast looks at."""
    return [
        {
            "type": tx.get("type"),
            "description": tx.get("description"),
            "timestamp": tx.get("timestamp", tx.get("blockTime")),
            "source": tx.get("source"),
            "error": tx.get("transactionError") or tx.get("err") or None,
        }
        for tx in transactions[:SAMPLE_TX_LIMIT]
    ]


def build_roast_prompt(
    address: str,
    transactions: list[dict[str, Any]],
    balances: Optional[BalanceSnapshot],
    stats: WalletStats,
) -> str:
    if balances is not None:
        balance_block = json.dumps(
            balances.tokens[:SAMPLE_TOKEN_LIMIT], indent=2, default=str
        )
    else:
        balance_block = NO_BALANCES

    return ROAST_PROMPT.format(
        address=address,
        total_txs=stats.total_txs,
        swaps=stats.swaps,
        failed_txs=stats.failed_txs,
        tokens_traded=stats.tokens_traded,
        protocols=", ".join(stats.protocols) or NO_PROTOCOLS,
        sample_txs=json.dumps(
            sample_transactions(transactions), indent=2, default=str
        ),
        balances=balance_block,
    )


class RoastAgent:
    """Turns wallet stats into a roast through a single LLM completion."""

    def __init__(
        self,
        client: Any,
        model: str,
        provider: str = "anthropic",
        max_tokens: int = 1024,
    ):
        self.client = client
        self.model = model
        self.provider = provider
        self.max_tokens = max_tokens

    # ── Provider Init ─────────────────────────────────────────────────────

    @classmethod
    def from_settings(cls, settings: Settings) -> "RoastAgent":
        provider = settings.ai_provider
        if provider == "anthropic":
            client, model = cls._init_anthropic(settings)
        elif provider == "openai":
            client, model = cls._init_openai(settings)
        elif provider == "gemini":
            client, model = cls._init_gemini(settings)
        else:
            raise ConfigurationError(
                f"Unknown AI_PROVIDER '{provider}'. "
                "Set AI_PROVIDER to 'anthropic', 'openai', or 'gemini'."
            )
        logger.info("AI Provider: %s | Model: %s", provider, model)
        return cls(client, model, provider=provider, max_tokens=settings.max_tokens)

    @staticmethod
    def _init_anthropic(settings: Settings):
        import anthropic

        if not settings.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not set.")
        client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
        return client, settings.claude_model

    @staticmethod
    def _init_openai(settings: Settings):
        from openai import AsyncOpenAI

        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set.")
        return AsyncOpenAI(api_key=settings.openai_api_key), settings.openai_model

    @staticmethod
    def _init_gemini(settings: Settings):
        import google.generativeai as genai

        if not settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set.")
        genai.configure(api_key=settings.gemini_api_key)
        return genai.GenerativeModel(settings.gemini_model), settings.gemini_model

    # ── Generate Roast ────────────────────────────────────────────────────

    async def generate(
        self,
        address: str,
        transactions: list[dict[str, Any]],
        balances: Optional[BalanceSnapshot],
        stats: WalletStats,
    ) -> RoastResult:
        if not transactions:
            raise EmptyHistoryError()

        prompt = build_roast_prompt(address, transactions, balances, stats)
        roast = await self.complete(prompt)

        return RoastResult(
            address=address,
            roast=roast,
            score=extract_score(roast),
            stats=RoastStats.from_stats(stats, max_protocols=MAX_PROTOCOLS),
        )

    async def complete(self, prompt: str) -> str:
        if self.provider == "anthropic":
            return await self._call_anthropic(prompt)
        elif self.provider == "openai":
            return await self._call_openai(prompt)
        elif self.provider == "gemini":
            return await self._call_gemini(prompt)
        raise ConfigurationError(f"Unknown AI_PROVIDER '{self.provider}'")

    async def _call_anthropic(self, prompt: str) -> str:
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return message.content[0].text

    async def _call_openai(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    async def _call_gemini(self, prompt: str) -> str:
        response = await self.client.generate_content_async(
            prompt,
            generation_config={"max_output_tokens": self.max_tokens},
        )
        return response.text
