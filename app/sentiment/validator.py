"""Turns raw generation-service text into a trusted ``SentimentReport``.

The model's output is treated as untrusted input. It passes through ordered
gates (extract, parse, rejection, completeness, non-negativity, sum,
cardinality) and the first failing gate raises; nothing partial is returned.
"""

import json
from typing import Any

from app.exceptions import (
    IncompleteDataError,
    InconsistentDataError,
    MalformedResponseError,
    SymbolRejectedError,
)
from app.sentiment.schemas import (
    THEME_COUNT,
    TREND_WEEKS,
    AcceptanceClaim,
    RawModelResponse,
    SentimentReport,
    SentimentTrendPoint,
    SymbolRejection,
)

_COUNT_FIELDS = ("totalComments", "positiveComments", "negativeComments", "neutralComments")
_THEME_FIELDS = ("positiveThemes", "negativeThemes")
_WEEK_COUNT_FIELDS = ("positive", "negative", "neutral")


def extract_json_object(text: str) -> str:
    """Return the ``{...}`` span of ``text``, tolerating prose or fences around it."""
    cleaned = (text or "").strip()
    if cleaned.startswith("{") and cleaned.endswith("}"):
        return cleaned

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        raise MalformedResponseError(
            "AI response did not contain a valid JSON object.", raw_text=text
        )
    return cleaned[start : end + 1]


def parse_raw_response(text: str) -> RawModelResponse:
    candidate = extract_json_object(text)
    try:
        data = json.loads(candidate)
    # ValueError also covers integer literals past the int-conversion digit limit
    except (ValueError, RecursionError) as exc:
        raise MalformedResponseError(
            "AI response could not be parsed as JSON.", raw_text=text
        ) from exc

    if not isinstance(data, dict):
        raise MalformedResponseError("AI response was not a JSON object.", raw_text=text)

    if data.get("validSymbol") is False:
        error = data.get("error")
        return SymbolRejection(error=error if isinstance(error, str) else None)
    return AcceptanceClaim(payload=data)


def _as_count(value: Any) -> int | None:
    """Integers, and integral floats such as ``12.0``; booleans are not counts."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _require_count(container: dict, key: str, where: str) -> int:
    count = _as_count(container.get(key))
    if count is None:
        raise IncompleteDataError(f"'{key}' is missing or not an integer in {where}.")
    return count


def _require_strings(payload: dict, key: str) -> list[str]:
    value = payload.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise IncompleteDataError(f"'{key}' is missing or not a list of strings.")
    return value


def _require_trend(payload: dict) -> list[dict[str, Any]]:
    value = payload.get("sentimentTrend")
    if not isinstance(value, list):
        raise IncompleteDataError("'sentimentTrend' is missing or not a list.")

    trend = []
    for index, point in enumerate(value):
        where = f"sentimentTrend[{index}]"
        if not isinstance(point, dict):
            raise IncompleteDataError(f"{where} is not an object.")
        if not isinstance(point.get("week"), str):
            raise IncompleteDataError(f"'week' is missing or not a string in {where}.")
        counts = {key: _require_count(point, key, where) for key in _WEEK_COUNT_FIELDS}
        trend.append({"week": point["week"], **counts})
    return trend


def _check_complete(payload: dict[str, Any]) -> dict[str, Any]:
    """Completeness gate: every field present with the right basic type.

    Checked by hand rather than through ``SentimentReport`` validation:
    pydantic would coerce ``"10"`` and ``True`` into counts, and would report
    a negative count or a wrong list length in the same error as a missing
    field. Those belong to the later gates and must surface as
    ``InconsistentDataError``, not ``IncompleteDataError``.
    """
    if "validSymbol" in payload and not isinstance(payload["validSymbol"], bool):
        raise IncompleteDataError("'validSymbol' is not a boolean.")

    normalized: dict[str, Any] = {
        key: _require_count(payload, key, "the report") for key in _COUNT_FIELDS
    }
    for key in _THEME_FIELDS:
        normalized[key] = _require_strings(payload, key)
    normalized["sentimentTrend"] = _require_trend(payload)
    return normalized


def _check_non_negative(data: dict[str, Any]) -> None:
    for key in _COUNT_FIELDS:
        if data[key] < 0:
            raise InconsistentDataError(f"'{key}' is negative ({data[key]}).")
    for index, point in enumerate(data["sentimentTrend"]):
        for key in _WEEK_COUNT_FIELDS:
            if point[key] < 0:
                raise InconsistentDataError(
                    f"'{key}' is negative in sentimentTrend[{index}] ({point[key]})."
                )


def _check_sum(data: dict[str, Any]) -> None:
    parts = data["positiveComments"] + data["negativeComments"] + data["neutralComments"]
    if parts != data["totalComments"]:
        raise InconsistentDataError(
            f"Comment totals do not match ({parts} categorized vs {data['totalComments']} total)."
        )


def _check_cardinality(data: dict[str, Any]) -> None:
    for key in _THEME_FIELDS:
        if len(data[key]) != THEME_COUNT:
            raise InconsistentDataError(
                f"Expected {THEME_COUNT} entries in '{key}', got {len(data[key])}."
            )
    if len(data["sentimentTrend"]) != TREND_WEEKS:
        raise InconsistentDataError(
            f"Expected {TREND_WEEKS} trend points, got {len(data['sentimentTrend'])}."
        )


def validate_acceptance(claim: AcceptanceClaim) -> SentimentReport:
    data = _check_complete(claim.payload)
    _check_non_negative(data)
    _check_sum(data)
    _check_cardinality(data)

    return SentimentReport(
        total_comments=data["totalComments"],
        positive_comments=data["positiveComments"],
        negative_comments=data["negativeComments"],
        neutral_comments=data["neutralComments"],
        positive_themes=tuple(data["positiveThemes"]),
        negative_themes=tuple(data["negativeThemes"]),
        sentiment_trend=tuple(SentimentTrendPoint(**point) for point in data["sentimentTrend"]),
    )


def validate_response(text: str, symbol: str) -> SentimentReport:
    """Run all gates over ``text``; raise the first failure or return the report."""
    match parse_raw_response(text):
        case SymbolRejection(error=error):
            message = error if error and error.strip() else None
            raise SymbolRejectedError(
                symbol, message or f'The symbol "{symbol}" is not a valid stock ticker.'
            )
        case AcceptanceClaim() as claim:
            return validate_acceptance(claim)
