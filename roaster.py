import logging

import httpx

from agent import RoastAgent
from chain_providers import ChainProvider, get_provider
from config import Settings
from errors import ValidationError
from models import RoastResult
from utils import normalize_address, short_address
from wallet_analyzer import analyze

logger = logging.getLogger(__name__)


class WalletRoaster:
    """Fetch -> analyze -> generate, once per request. Holds no per-wallet state."""

    def __init__(self, provider: ChainProvider, agent: RoastAgent):
        self.provider = provider
        self.agent = agent

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient) -> "WalletRoaster":
        provider = get_provider(settings, client)
        logger.info(
            "Chain provider: %s | stats policy: %s",
            provider.name, provider.stats_policy,
        )
        return cls(provider, RoastAgent.from_settings(settings))

    async def roast(self, address: str) -> RoastResult:
        address = normalize_address(address or "")
        if not address:
            raise ValidationError()

        logger.info("Roasting %s", short_address(address))
        history = await self.provider.fetch(address)
        stats = analyze(
            history.transactions, history.balances, policy=self.provider.stats_policy
        )
        return await self.agent.generate(
            address, history.transactions, history.balances, stats
        )
