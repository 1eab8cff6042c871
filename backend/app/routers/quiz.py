from datetime import datetime
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from app.core.auth import CallerIdentity, get_optional_identity
from app.database import get_db, get_user_db
from app.schemas.quiz import (
    QuizSubmission,
    QuizSubmitResponse,
    QuizResultsResponse,
    QuizAnalyticsResponse,
)
from app.services.quiz_service import QuizService, build_quiz_service
from app.services.recommendation_engine import EmptyCatalogError
from app.utils.device import device_info_from_request

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quiz", tags=["quiz"])


def get_quiz_service(
    db: Session = Depends(get_db),
    user_db: Session = Depends(get_user_db),
) -> QuizService:
    return build_quiz_service(db=db, user_db=user_db)


def _internal_error(e: Exception) -> HTTPException:
    error_type = type(e).__name__
    error_message = str(e) if str(e) else "An unexpected error occurred"
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "detail": "internal_error",
            "error_type": error_type,
            "error": error_message,
        },
    )


@router.post("/submit", response_model=QuizSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_quiz(
    payload: QuizSubmission,
    request: Request,
    identity: Optional[CallerIdentity] = Depends(get_optional_identity),
    service: QuizService = Depends(get_quiz_service),
):
    """
    Process a quiz submission into an anonymous session with recommendations.

    When the caller is signed in, a copy of the recommendations is also stored
    against their user id (best effort).
    """
    user_id = identity.user_id if identity else None
    device_info = device_info_from_request(request)

    try:
        result = service.submit_quiz(payload, device_info, user_id=user_id)
    except EmptyCatalogError as e:
        logger.error("[QUIZ] Catalog not configured: %s", e.catalog)
        raise _internal_error(e)
    except Exception as e:
        logger.exception(
            "[QUIZ SUBMIT ERROR] user_id=%s, error_type=%s, error=%s",
            user_id, type(e).__name__, e,
        )
        raise _internal_error(e)

    return QuizSubmitResponse(
        session_id=result.session_id,
        results=result.results,
        recommendations_stored=result.recommendations_stored,
    )


@router.get("/results/{session_id}", response_model=QuizResultsResponse)
async def get_quiz_results(
    session_id: str,
    service: QuizService = Depends(get_quiz_service),
):
    """Fetch stored results by session id. No authentication required."""
    stored = service.fetch_results(session_id)
    if stored is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz results not found or expired",
        )

    return QuizResultsResponse(
        results=stored.results,
        session_id=stored.session_id,
        timestamp=stored.timestamp,
    )


@router.delete("/results/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz_results(
    session_id: str,
    service: QuizService = Depends(get_quiz_service),
):
    """Delete an anonymous session on request of whoever holds its id."""
    if not service.delete_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz results not found or expired",
        )
    logger.info("[QUIZ] Deleted session %s... on request", session_id[:8])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/analytics", response_model=QuizAnalyticsResponse)
async def get_quiz_analytics(
    start_date: Optional[datetime] = Query(None, description="Only sessions at or after this time"),
    end_date: Optional[datetime] = Query(None, description="Only sessions at or before this time"),
    service: QuizService = Depends(get_quiz_service),
):
    """Anonymous aggregate over quiz sessions."""
    analytics = service.fetch_analytics(start_date=start_date, end_date=end_date)
    return QuizAnalyticsResponse(analytics=analytics)


@router.get("/health")
def quiz_health():
    return {
        "status": "ok",
        "message": "Anonymous quiz service is running",
        "timestamp": datetime.utcnow().isoformat(),
    }
