from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.exception_handlers import register_exception_handlers
from app.logging_config import setup_logging
from app.sentiment.router import router as sentiment_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("app_startup", provider=settings.llm_provider, model=settings.llm_model)
    yield


app = FastAPI(
    title="AI Sentiment Scraper",
    description="AI-generated community sentiment reports for stock symbols",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(sentiment_router, prefix="/api/v1/sentiment", tags=["sentiment"])


@app.get("/api/v1/health")
async def health():
    return {"status": "healthy"}
