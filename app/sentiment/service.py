import structlog

from app.exceptions import MalformedResponseError, ResponseValidationError, SymbolRejectedError
from app.llm.base import GenerationClient, GenerationRequest
from app.sentiment.prompts import RESPONSE_SCHEMA, build_instruction, normalize_symbol
from app.sentiment.schemas import SentimentReport
from app.sentiment.validator import validate_response

logger = structlog.get_logger()


class SentimentService:
    def __init__(
        self,
        client: GenerationClient,
        model: str,
        use_response_schema: bool = True,
    ) -> None:
        self._client = client
        self._model = model
        self._use_response_schema = use_response_schema

    async def analyze(self, symbol: str) -> SentimentReport:
        ticker = normalize_symbol(symbol)
        logger.info("sentiment_analyze", ticker=ticker, model=self._model)

        request = GenerationRequest(
            model=self._model,
            instruction=build_instruction(ticker),
            response_schema=RESPONSE_SCHEMA if self._use_response_schema else None,
        )
        text = await self._client.generate(request)

        try:
            report = validate_response(text, ticker)
        except SymbolRejectedError:
            logger.info("sentiment_symbol_rejected", ticker=ticker)
            raise
        except MalformedResponseError as exc:
            logger.error(
                "sentiment_malformed_response",
                ticker=ticker,
                error=exc.message,
                raw_len=len(exc.raw_text or ""),
            )
            raise
        except ResponseValidationError as exc:
            logger.error("sentiment_validation_failed", ticker=ticker, code=exc.code, error=exc.message)
            raise

        logger.info("sentiment_analyze_done", ticker=ticker, total_comments=report.total_comments)
        return report
