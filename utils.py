import re
from typing import Optional

EXPLORER_PREFIXES = (
    "https://solscan.io/account/",
    "https://explorer.solana.com/address/",
)

_SCORE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*/\s*10")


def normalize_address(address: str) -> str:
    """Strip a pasted Solscan/Explorer account URL and surrounding whitespace."""
    for prefix in EXPLORER_PREFIXES:
        address = address.replace(prefix, "", 1)
    return address.strip()


def extract_score(text: str) -> Optional[float]:
    """First ``N/10`` (or ``N.N / 10``) in the roast, or None when absent."""
    match = _SCORE_RE.search(text or "")
    return float(match.group(1)) if match else None


def short_address(address: str, chars: int = 6) -> str:
    """Truncate: 7xKX...AsU"""
    if len(address) <= chars * 2 + 3:
        return address
    return f"{address[:chars]}...{address[-chars:]}"


def lamports_to_sol(lamports: int | str) -> float:
    return int(lamports) / 1e9
