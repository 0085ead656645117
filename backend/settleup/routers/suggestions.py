"""AI suggestions: who likely shared an expense, scored per attendee."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from settleup.database import get_db
from settleup.schemas import SuggestionRequest, SuggestionResponse
from settleup.services import attribution, ledger

router = APIRouter(prefix="/projects/{project_id}/suggestions", tags=["suggestions"])


@router.post("", response_model=SuggestionResponse)
def suggest(project_id: int, data: SuggestionRequest, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    if not data.description.strip():
        raise HTTPException(status_code=400, detail="Description is required")
    attendees = [a.name for a in project.attendees]
    try:
        scores = attribution.suggest_attributions(data.description, attendees)
    except attribution.AttributionUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except attribution.AttributionError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return SuggestionResponse(
        scores=scores,
        suggested_participants=attribution.suggested_participants(scores, data.threshold),
    )
