from typing import Annotated

from fastapi import Depends

from app.config import settings
from app.llm.base import GenerationClient
from app.sentiment.service import SentimentService
from app.sentiment.session import SessionRegistry

_session_registry = SessionRegistry(max_sessions=settings.max_sessions)


def get_generation_client() -> GenerationClient:
    from app.llm.factory import LLMFactory

    return LLMFactory.create()


GenerationClientDep = Annotated[GenerationClient, Depends(get_generation_client)]


def get_sentiment_service(client: GenerationClientDep) -> SentimentService:
    return SentimentService(
        client,
        model=settings.llm_model,
        use_response_schema=settings.use_response_schema,
    )


def get_session_registry() -> SessionRegistry:
    return _session_registry


SentimentServiceDep = Annotated[SentimentService, Depends(get_sentiment_service)]
SessionRegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
