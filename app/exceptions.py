from enum import StrEnum


class ErrorKind(StrEnum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    LLM_CONFIG_ERROR = "LLM_CONFIG_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ANALYSIS_IN_PROGRESS = "ANALYSIS_IN_PROGRESS"
    EMPTY_SYMBOL = "EMPTY_SYMBOL"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    SERVICE_BLOCKED = "SERVICE_BLOCKED"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    SYMBOL_REJECTED = "SYMBOL_REJECTED"
    INCOMPLETE_DATA = "INCOMPLETE_DATA"
    INCONSISTENT_DATA = "INCONSISTENT_DATA"


class AppError(Exception):
    severity = "error"

    def __init__(self, message: str, code: str = ErrorKind.INTERNAL_ERROR):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code=ErrorKind.NOT_FOUND)


class ConflictError(AppError):
    def __init__(self, message: str, code: str = ErrorKind.ANALYSIS_IN_PROGRESS):
        super().__init__(message, code=code)


class EmptySymbolError(AppError):
    def __init__(self) -> None:
        super().__init__("Please enter a stock symbol.", code=ErrorKind.EMPTY_SYMBOL)


# Upstream generation service failures


class UpstreamError(AppError):
    """Base for failures of the external generation call itself."""


class TransportFailureError(UpstreamError):
    def __init__(self, message: str):
        super().__init__(message, code=ErrorKind.TRANSPORT_FAILURE)


class ServiceBlockedError(UpstreamError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"The AI service declined to answer: {reason}", code=ErrorKind.SERVICE_BLOCKED
        )


class EmptyResponseError(UpstreamError):
    def __init__(self) -> None:
        super().__init__("The AI service returned an empty response.", code=ErrorKind.EMPTY_RESPONSE)


# Model output that could not be trusted


class ResponseValidationError(AppError):
    """Base for model output rejected by the response validator."""


class MalformedResponseError(ResponseValidationError):
    def __init__(self, message: str, raw_text: str | None = None):
        # kept for diagnostics only, never rendered to the client
        self.raw_text = raw_text
        super().__init__(message, code=ErrorKind.MALFORMED_RESPONSE)


class SymbolRejectedError(ResponseValidationError):
    severity = "notice"

    def __init__(self, symbol: str, message: str):
        self.symbol = symbol
        super().__init__(message, code=ErrorKind.SYMBOL_REJECTED)


class IncompleteDataError(ResponseValidationError):
    def __init__(self, message: str):
        super().__init__(f"AI data inconsistency: {message}", code=ErrorKind.INCOMPLETE_DATA)


class InconsistentDataError(ResponseValidationError):
    def __init__(self, message: str):
        super().__init__(f"AI data inconsistency: {message}", code=ErrorKind.INCONSISTENT_DATA)
