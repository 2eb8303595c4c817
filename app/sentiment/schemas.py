from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

THEME_COUNT = 3
TREND_WEEKS = 4


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SentimentTrendPoint(_CamelModel):
    week: str
    positive: int = Field(ge=0)
    negative: int = Field(ge=0)
    neutral: int = Field(ge=0)


class SentimentReport(_CamelModel):
    total_comments: int = Field(ge=0)
    positive_comments: int = Field(ge=0)
    negative_comments: int = Field(ge=0)
    neutral_comments: int = Field(ge=0)
    positive_themes: tuple[str, str, str]
    negative_themes: tuple[str, str, str]
    sentiment_trend: tuple[
        SentimentTrendPoint, SentimentTrendPoint, SentimentTrendPoint, SentimentTrendPoint
    ]  # oldest -> newest


# Untrusted model output, one of two shapes


@dataclass(frozen=True)
class SymbolRejection:
    error: str | None


@dataclass(frozen=True)
class AcceptanceClaim:
    payload: dict[str, Any]


RawModelResponse = SymbolRejection | AcceptanceClaim


# Dashboard session state


class AnalyzeRequest(BaseModel):
    symbol: str


class ErrorDetail(BaseModel):
    error: str
    message: str
    severity: Literal["notice", "error"]


class DashboardState(_CamelModel):
    session_id: str
    symbol: str | None = None
    last_analyzed_symbol: str | None = None
    report: SentimentReport | None = None
    error: ErrorDetail | None = None
    is_loading: bool = False
