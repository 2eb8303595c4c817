import httpx
import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.exceptions import EmptyResponseError, ServiceBlockedError, TransportFailureError
from app.llm.base import GenerationClient, GenerationRequest

logger = structlog.get_logger()

_BLOCKING_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"}


def _enum_value(value: object) -> str:
    return str(getattr(value, "value", value))


class GeminiClient(GenerationClient):
    """Google Gemini over the google-genai async API."""

    def __init__(
        self,
        api_key: str,
        temperature: float = 0.7,
        client: genai.Client | None = None,
    ) -> None:
        self._client = client or genai.Client(api_key=api_key)
        self._temperature = temperature

    async def generate(self, request: GenerationRequest) -> str:
        logger.info(
            "gemini_generate_start",
            model=request.model,
            prompt_len=len(request.instruction),
            schema=request.response_schema is not None,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=request.model,
                contents=request.instruction,
                config=self._build_config(request),
            )
        except genai_errors.APIError as exc:
            logger.error("gemini_api_error", model=request.model, code=exc.code, status=exc.status)
            raise TransportFailureError(
                f"The AI service request failed ({exc.code} {exc.status})."
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("gemini_transport_error", model=request.model, error=str(exc))
            raise TransportFailureError(f"Could not reach the AI service: {exc}") from exc

        block_reason = self._block_reason(response)
        if block_reason:
            logger.warning("gemini_generate_blocked", model=request.model, reason=block_reason)
            raise ServiceBlockedError(block_reason)

        text = response.text
        if not text or not text.strip():
            logger.warning("gemini_generate_empty", model=request.model)
            raise EmptyResponseError()

        logger.info("gemini_generate_done", model=request.model, chars=len(text))
        return text

    def _build_config(self, request: GenerationRequest) -> types.GenerateContentConfig:
        config_kwargs: dict = {
            "temperature": self._temperature,
            "response_mime_type": "application/json",
        }
        if request.response_schema is not None:
            config_kwargs["response_schema"] = request.response_schema
        return types.GenerateContentConfig(**config_kwargs)

    @staticmethod
    def _block_reason(response: types.GenerateContentResponse) -> str | None:
        """Return the provider's stated reason when the prompt or answer was blocked."""
        feedback = response.prompt_feedback
        reason = _enum_value(feedback.block_reason) if feedback and feedback.block_reason else None
        if reason and not reason.endswith("UNSPECIFIED"):
            if feedback.block_reason_message:
                return f"{reason}: {feedback.block_reason_message}"
            return reason

        candidates = response.candidates or []
        for candidate in candidates:
            finish_reason = candidate.finish_reason
            if finish_reason is not None and _enum_value(finish_reason) in _BLOCKING_FINISH_REASONS:
                return _enum_value(finish_reason)
        return None
