"""Attendees: list, add, rename, remove (with cascade to groups and expenses)."""
from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from settleup.database import get_db
from settleup.schemas import AttendeeCreate, AttendeeRename, ProjectResponse
from settleup.services import ledger

router = APIRouter(prefix="/projects/{project_id}/attendees", tags=["attendees"])


@router.get("", response_model=list[str])
def list_attendees(project_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    return [a.name for a in project.attendees]


@router.post("", response_model=ProjectResponse)
def add_attendee(project_id: int, data: AttendeeCreate, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    ledger.add_attendee(db, project, data.name)
    db.commit()
    db.refresh(project)
    return ledger.project_response(project)


@router.patch("/{name}", response_model=ProjectResponse)
def rename_attendee(project_id: int, name: str, data: AttendeeRename, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    attendee = ledger.get_attendee(project, name)
    ledger.rename_attendee(db, project, attendee, data.name)
    db.commit()
    db.refresh(project)
    return ledger.project_response(project)


@router.delete("/{name}", response_model=ProjectResponse)
def remove_attendee(project_id: int, name: str, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    attendee = ledger.get_attendee(project, name)
    ledger.remove_attendee(db, attendee)
    db.commit()
    db.refresh(project)
    logger.info("Removed attendee {!r} from project {}", name, project_id)
    return ledger.project_response(project)
