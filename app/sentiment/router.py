from fastapi import APIRouter, Response

from app.dependencies import SentimentServiceDep, SessionRegistryDep
from app.sentiment.schemas import AnalyzeRequest, DashboardState, SentimentReport

router = APIRouter()


@router.get("/{ticker}", response_model=SentimentReport)
async def analyze_sentiment(ticker: str, service: SentimentServiceDep) -> SentimentReport:
    return await service.analyze(ticker)


@router.post("/sessions/{session_id}/analyze", response_model=DashboardState)
async def analyze_in_session(
    session_id: str,
    body: AnalyzeRequest,
    service: SentimentServiceDep,
    sessions: SessionRegistryDep,
) -> DashboardState:
    session = sessions.get_or_create(session_id)
    return await session.run(service, body.symbol)


@router.get("/sessions/{session_id}", response_model=DashboardState)
async def get_session_state(session_id: str, sessions: SessionRegistryDep) -> DashboardState:
    return sessions.get(session_id).state


@router.delete("/sessions/{session_id}", status_code=204)
async def drop_session(session_id: str, sessions: SessionRegistryDep) -> Response:
    sessions.drop(session_id)
    return Response(status_code=204)
