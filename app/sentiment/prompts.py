"""Instruction and response schema sent to the generation service."""

from app.exceptions import EmptySymbolError

SENTIMENT_PROMPT = """Act as an expert financial sentiment analysis tool. Your first and \
most important task is to validate the stock symbol provided.

**Step 1: Validation**
First, silently determine whether "{symbol}" is a real, publicly traded stock symbol \
that can be found on Yahoo Finance and has an active community comments page.

**Step 2: Response**
Reply with exactly one JSON object and nothing else: no explanatory text, no markdown \
code fences.
- If the symbol is INVALID or cannot be found on Yahoo Finance, return ONLY this object \
and stop:
  {{"validSymbol": false, "error": "The symbol '{symbol}' is not a valid stock ticker or \
has no community data on Yahoo Finance."}}
- If and only if the symbol is VALID, perform the deep analysis below and return the \
analysis object.

**Deep Analysis (valid symbols only)**
Analyze the community comments on Yahoo Finance for {symbol} over the last 30 days:
1. Sarcasm Detection: interpret sarcasm correctly. "Fantastic, another 10% dive" is negative.
2. Contextual Analysis: read whole threads. A reply can change the meaning of the comment \
it answers.
3. Filter Noise: discount repetitive, low-effort comments from bots or spam accounts \
(e.g. users repeatedly posting rocket emojis).

The analysis object must contain these keys, holding your best plausible estimate:
1. "validSymbol": true
2. "error": null
3. "totalComments": integer, the number of meaningful comments
4. "positiveComments": integer
5. "negativeComments": integer
6. "neutralComments": integer, neutral or unsorted comments
7. "positiveThemes": array of exactly 3 short strings, each a key bullish theme
8. "negativeThemes": array of exactly 3 short strings, each a key bearish theme
9. "sentimentTrend": array of exactly 4 objects, one per week of the last 4 weeks, ordered \
oldest to newest. Each object has the keys "week", "positive", "negative" and "neutral". \
Use descriptive week labels: "4 Weeks Ago", "3 Weeks Ago", "2 Weeks Ago", "Last Week".

positiveComments + negativeComments + neutralComments must exactly equal totalComments. \
All counts must be non-negative integers."""


def _nullable(schema: dict) -> dict:
    return {**schema, "nullable": True}


_TREND_POINT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "week": {"type": "STRING"},
        "positive": {"type": "INTEGER"},
        "negative": {"type": "INTEGER"},
        "neutral": {"type": "INTEGER"},
    },
    "required": ["week", "positive", "negative", "neutral"],
}

_STRING_LIST_SCHEMA = {"type": "ARRAY", "items": {"type": "STRING"}}

# Covers both the rejection and the analysis shape; only validSymbol is required.
RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "validSymbol": {"type": "BOOLEAN"},
        "error": _nullable({"type": "STRING"}),
        "totalComments": _nullable({"type": "INTEGER"}),
        "positiveComments": _nullable({"type": "INTEGER"}),
        "negativeComments": _nullable({"type": "INTEGER"}),
        "neutralComments": _nullable({"type": "INTEGER"}),
        "positiveThemes": _nullable(_STRING_LIST_SCHEMA),
        "negativeThemes": _nullable(_STRING_LIST_SCHEMA),
        "sentimentTrend": _nullable({"type": "ARRAY", "items": _TREND_POINT_SCHEMA}),
    },
    "required": ["validSymbol"],
}


def normalize_symbol(symbol: str | None) -> str:
    """Upper-case and strip a ticker; blank input raises ``EmptySymbolError``."""
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise EmptySymbolError()
    return normalized


def build_instruction(symbol: str) -> str:
    return SENTIMENT_PROMPT.format(symbol=normalize_symbol(symbol))
