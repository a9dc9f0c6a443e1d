import os
from dataclasses import dataclass

from dotenv import load_dotenv

from errors import ConfigurationError

load_dotenv()


CHAIN_PROVIDERS = ("rpc", "helius")
AI_PROVIDERS = ("anthropic", "openai", "gemini")


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 3002
    app_env: str = "development"
    log_level: str = "INFO"

    # ── Chain data ────────────────────────────────────────────────────────
    chain_provider: str = "rpc"
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    helius_api_key: str = ""
    helius_api_base: str = "https://api.helius.xyz"
    http_timeout_s: float = 30.0

    # ── LLM ───────────────────────────────────────────────────────────────
    ai_provider: str = "anthropic"
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    max_tokens: int = 1024

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3002")),
            app_env=os.getenv("APP_ENV", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            chain_provider=os.getenv("CHAIN_PROVIDER", "rpc").lower(),
            solana_rpc_url=os.getenv(
                "SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com"
            ),
            helius_api_key=os.getenv("HELIUS_API_KEY", ""),
            helius_api_base=os.getenv("HELIUS_API_BASE", "https://api.helius.xyz"),
            http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", "30")),
            ai_provider=os.getenv("AI_PROVIDER", "anthropic").lower(),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            claude_model=os.getenv("CLAUDE_MODEL", "claude-sonnet-4-20250514"),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
            max_tokens=int(os.getenv("ROAST_MAX_TOKENS", "1024")),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.chain_provider not in CHAIN_PROVIDERS:
            raise ConfigurationError(
                f"Unknown CHAIN_PROVIDER '{self.chain_provider}'. "
                "Set CHAIN_PROVIDER to 'rpc' or 'helius'."
            )
        if self.ai_provider not in AI_PROVIDERS:
            raise ConfigurationError(
                f"Unknown AI_PROVIDER '{self.ai_provider}'. "
                "Set AI_PROVIDER to 'anthropic', 'openai', or 'gemini'."
            )
