# -*- coding: utf-8 -*-

import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ink_battles.analyzers.llm_analyzer import LLMBackend
from ink_battles.api.endpoints.analyze import router as analyze_router
from ink_battles.api.endpoints.connection import router as connection_router
from ink_battles.config import DefaultProviderSettings, ProviderConfigResolver
from ink_battles.streaming.session import HEARTBEAT_INTERVAL_SECONDS

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)

APP_TITLE = "Ink Battles API"
APP_VERSION = "1.0.0"


def _cors_origins() -> list:
    raw_value = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _heartbeat_interval() -> float:
    raw_value = os.getenv("HEARTBEAT_INTERVAL_SECONDS", "").strip()
    if not raw_value:
        return HEARTBEAT_INTERVAL_SECONDS
    try:
        value = float(raw_value)
    except ValueError:
        logger.warning("Geçersiz HEARTBEAT_INTERVAL_SECONDS değeri: %s", raw_value)
        return HEARTBEAT_INTERVAL_SECONDS
    return value if value > 0 else HEARTBEAT_INTERVAL_SECONDS


def create_app(
    settings: Optional[DefaultProviderSettings] = None,
    backend: Optional[Any] = None,
    heartbeat_interval: Optional[float] = None,
) -> FastAPI:
    """Build the API with explicitly injected defaults and backend."""
    application = FastAPI(title=APP_TITLE, version=APP_VERSION)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.state.resolver = ProviderConfigResolver(settings or DefaultProviderSettings.from_env())
    application.state.backend = backend or LLMBackend()
    application.state.heartbeat_interval = heartbeat_interval or _heartbeat_interval()

    application.include_router(analyze_router)
    application.include_router(connection_router)

    @application.get("/")
    async def root():
        return {"message": APP_TITLE, "version": APP_VERSION}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
