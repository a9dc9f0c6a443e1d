import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import httpx
from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastmcp import FastMCP

from config import Settings
from errors import (
    ConfigurationError,
    RoastError,
    ValidationError,
    error_message,
    error_status,
)
from models import ErrorResponse, HealthResponse, RoastRequest, RoastResult
from roaster import WalletRoaster

settings = Settings.from_env()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("wallet_roast")

AGENT_NAME = "Wallet-Roast"
PUBLIC_DIR = Path(__file__).resolve().parent / "public"


# ── MCP Server (mounted at /mcp) ─────────────────────────────────────────────

mcp = FastMCP(
    name="Wallet-Roast",
    instructions=(
        "Roasts Solana wallets. Provide a public wallet address (or a Solscan / "
        "Solana Explorer account URL) and get a humorous critique of its recent "
        "trading history plus a degen score out of 10."
    ),
)


@mcp.tool()
async def roast_wallet(address: str) -> dict:
    """
    Roast a Solana wallet based on its recent transactions.

    Args:
        address: Solana wallet address or explorer account URL.

    Returns:
        The roast text, the extracted degen score and summary stats.
    """
    result = await current_roaster(app).roast(address)
    return result.model_dump(by_alias=True)


# Each roast is independent, so the MCP endpoint keeps no session state.
mcp_app = mcp.http_app(stateless_http=True, json_response=True)


# ── Lifespan ──────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = httpx.AsyncClient(timeout=settings.http_timeout_s)
    app.state.roaster = None
    app.state.roaster_error = None
    try:
        app.state.roaster = WalletRoaster.from_settings(settings, client)
    except ConfigurationError as e:
        logger.error("Roasting disabled: %s", e.message)
        app.state.roaster_error = e.message
    logger.info("%s ready", AGENT_NAME)
    try:
        async with mcp_app.lifespan(app):
            yield
    finally:
        await client.aclose()
        logger.info("Shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Wallet-Roast",
    description=(
        "Paste a Solana wallet and get roasted. Fetches recent transactions, "
        "counts swaps, transfers and failures, and asks an LLM for a savage "
        "critique ending in a DEGEN SCORE."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/mcp", mcp_app)
if PUBLIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")


def current_roaster(app: FastAPI) -> WalletRoaster:
    roaster: Optional[WalletRoaster] = getattr(app.state, "roaster", None)
    if roaster is None:
        raise ConfigurationError(getattr(app.state, "roaster_error", None))
    return roaster


def get_roaster(request: Request) -> WalletRoaster:
    return current_roaster(request.app)


def required_address(req: Optional[RoastRequest] = Body(default=None)) -> str:
    """The body's address; a missing body or address is a 400."""
    if req is None or not req.address:
        raise ValidationError()
    return req.address


@app.exception_handler(RoastError)
async def roast_error_handler(request: Request, exc: RoastError):
    logger.warning("Roast error: %s", exc.message)
    return JSONResponse(
        status_code=error_status(exc), content={"error": error_message(exc)}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # The only request body is {address: string}
    logger.warning("Invalid roast request: %s", exc.errors())
    return JSONResponse(
        status_code=400, content={"error": ValidationError.default_message}
    )


# ── Info ──────────────────────────────────────────────────────────────────────


@app.get("/api/health", response_model=HealthResponse, tags=["Info"])
def health():
    return HealthResponse(status="ok", agent=AGENT_NAME)


@app.get("/", include_in_schema=False)
def index():
    return FileResponse(PUBLIC_DIR / "index.html")


# ── Core: Roast Wallet ────────────────────────────────────────────────────────


@app.post(
    "/api/roast",
    response_model=RoastResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Wallet"],
)
async def roast(
    address: str = Depends(required_address),
    roaster: WalletRoaster = Depends(get_roaster),
):
    """
    Roast a Solana wallet.

    Accepts a bare address or a pasted `https://solscan.io/account/...` /
    `https://explorer.solana.com/address/...` URL.
    """
    try:
        return await roaster.roast(address)
    except RoastError:
        raise
    except Exception as e:
        logger.exception("Roast error")
        return JSONResponse(status_code=500, content={"error": error_message(e)})


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.app_env == "development",
    )
