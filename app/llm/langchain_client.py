import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from app.exceptions import EmptyResponseError, ServiceBlockedError, TransportFailureError
from app.llm.base import GenerationClient, GenerationRequest

logger = structlog.get_logger()

# finish_reason (OpenAI) / stop_reason (Anthropic) values meaning the model declined
_REFUSAL_REASONS = {"content_filter", "refusal"}


def _content_text(content: str | list) -> str:
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LangChainClient(GenerationClient):
    """Any langchain chat model; the response schema hint is not forwarded."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    async def generate(self, request: GenerationRequest) -> str:
        logger.info("langchain_generate_start", model=request.model, prompt_len=len(request.instruction))
        try:
            response = await self._llm.ainvoke([HumanMessage(content=request.instruction)])
        except Exception as exc:
            logger.error("langchain_generate_error", model=request.model, error=str(exc))
            raise TransportFailureError(f"The AI service request failed: {exc}") from exc

        metadata = response.response_metadata or {}
        stop_reason = metadata.get("finish_reason") or metadata.get("stop_reason")
        if stop_reason in _REFUSAL_REASONS:
            logger.warning("langchain_generate_blocked", model=request.model, reason=stop_reason)
            raise ServiceBlockedError(stop_reason)

        text = _content_text(response.content)
        if not text.strip():
            logger.warning("langchain_generate_empty", model=request.model)
            raise EmptyResponseError()

        logger.info("langchain_generate_done", model=request.model, chars=len(text))
        return text
