"""Per-dashboard analysis state.

A session runs at most one analysis at a time. Each run is tagged with a
generation number; a result that comes back after the session moved on
(abandoned or dropped) is discarded instead of being written into the state.
"""

from collections import OrderedDict

import structlog

from app.exceptions import AppError, ConflictError, ErrorKind, NotFoundError
from app.sentiment.schemas import DashboardState, ErrorDetail
from app.sentiment.service import SentimentService

logger = structlog.get_logger()


class AnalysisSession:
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self._generation = 0
        self._pending: int | None = None
        self._state = DashboardState(session_id=session_id)

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    async def run(self, service: SentimentService, symbol: str) -> DashboardState:
        if self.is_pending:
            raise ConflictError(
                f"An analysis for '{self._state.symbol}' is already running in this session"
            )

        self._generation += 1
        generation = self._generation
        self._pending = generation
        self._state = self._state.model_copy(
            update={
                "symbol": (symbol or "").strip().upper() or None,
                "report": None,
                "error": None,
                "is_loading": True,
            }
        )

        try:
            report = await service.analyze(symbol)
        except AppError as exc:
            if self._is_current(generation):
                self._state = self._state.model_copy(
                    update={
                        "error": ErrorDetail(error=exc.code, message=exc.message, severity=exc.severity),
                        "is_loading": False,
                    }
                )
        except Exception:
            logger.exception("analysis_session_failed", session_id=self.session_id, symbol=self._state.symbol)
            if self._is_current(generation):
                self._state = self._state.model_copy(
                    update={
                        "error": ErrorDetail(
                            error=ErrorKind.INTERNAL_ERROR,
                            message="The analysis failed unexpectedly.",
                            severity="error",
                        ),
                        "is_loading": False,
                    }
                )
            raise
        else:
            if self._is_current(generation):
                self._state = self._state.model_copy(
                    update={
                        "report": report,
                        "last_analyzed_symbol": self._state.symbol,
                        "is_loading": False,
                    }
                )
        finally:
            if self._pending == generation:
                self._pending = None

        return self._state

    def abandon(self) -> None:
        """Stop waiting for the in-flight analysis; its result will be dropped."""
        if self._pending is None:
            return
        logger.info("analysis_session_abandoned", session_id=self.session_id, symbol=self._state.symbol)
        self._generation += 1
        self._pending = None
        self._state = self._state.model_copy(update={"is_loading": False})

    def _is_current(self, generation: int) -> bool:
        if generation == self._generation:
            return True
        logger.info("analysis_result_discarded", session_id=self.session_id, generation=generation)
        return False


class SessionRegistry:
    """In-memory sessions, capped at ``max_sessions``.

    When full, the least recently used idle session is evicted. Sessions with
    an analysis in flight are never evicted.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, AnalysisSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get_or_create(self, session_id: str) -> AnalysisSession:
        session = self._sessions.get(session_id)
        if session is None:
            self._evict_idle()
            session = AnalysisSession(session_id)
            self._sessions[session_id] = session
        self._sessions.move_to_end(session_id)
        return session

    def get(self, session_id: str) -> AnalysisSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        self._sessions.move_to_end(session_id)
        return session

    def drop(self, session_id: str) -> None:
        session = self.get(session_id)
        session.abandon()
        del self._sessions[session_id]

    def _evict_idle(self) -> None:
        while len(self._sessions) >= self._max_sessions:
            idle_id = next((sid for sid, s in self._sessions.items() if not s.is_pending), None)
            if idle_id is None:
                return
            del self._sessions[idle_id]
            logger.info("analysis_session_evicted", session_id=idle_id)
