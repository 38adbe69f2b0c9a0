"""
Mikud - Israel Post zipcode lookup service
Run with: uvicorn main:app --reload --port 8000
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()  # Must be before importing config

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mikud.cache import LookupCache
from mikud.config import Config
from mikud.router import configure_router, router as zip_router
from mikud.service import LookupService

cfg = Config()  # Fresh instance after dotenv loaded

logging.basicConfig(
    level=getattr(logging, cfg.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Globals
_service: LookupService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _service

    client = httpx.AsyncClient(timeout=cfg.request_timeout)
    cache = LookupCache(**cfg.get_cache_config()) if cfg.enable_cache else None
    _service = LookupService(cfg, cache=cache, client=client)
    configure_router(_service)

    logger.info(f"Mikud started | endpoint={cfg.endpoint_url} | timeout={cfg.request_timeout}s")
    if cache is not None:
        logger.info(f"Cache: in-memory (ttl={cfg.cache_ttl}s, soft bound={cfg.cache_max_entries})")
    else:
        logger.info("Cache: disabled")

    yield

    # Shutdown
    configure_router(None)
    await client.aclose()
    _service = None


app = FastAPI(title="Mikud", version="1.0.0", lifespan=lifespan)
app.include_router(zip_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Sanitized global exception handler - never exposes internal details."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "kind": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        },
    )


@app.get("/api/health")
async def health():
    """Health check"""
    cache = _service.cache if _service else None
    return {
        "status": "healthy" if _service else "starting",
        "endpoint": cfg.endpoint_url,
        "cache": cache is not None,
        "cached_entries": len(cache) if cache is not None else 0,
    }
