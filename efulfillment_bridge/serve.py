"""FastAPI entrypoint for the Shopify -> eFulfillment bridge.

Run with ``uvicorn efulfillment_bridge.serve:app``. Settings are loaded once
at startup; missing configuration aborts startup rather than serving
requests that can never be verified or submitted.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from efulfillment_bridge import __version__
from efulfillment_bridge.config import load_settings
from efulfillment_bridge.webhooks.handlers import register_webhook_routes

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "settings", None) is None:
        app.state.settings = load_settings()
    logger.info(
        "eFulfillment bridge ready (merchant=%s, endpoint=%s)",
        app.state.settings.merchant_name,
        app.state.settings.endpoint,
    )
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="eFulfillment Bridge",
        description="Forwards Shopify orders to eFulfillment Service",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    register_webhook_routes(app)
    return app


app = create_app()
