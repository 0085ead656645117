"""Attendee groups: list (with the built-in "All Attendees" group), create, delete."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from settleup.database import get_db
from settleup.schemas import GroupCreate, GroupResponse
from settleup.services import ledger

router = APIRouter(prefix="/projects/{project_id}/groups", tags=["groups"])


@router.get("", response_model=list[GroupResponse])
def list_groups(project_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    return [ledger.all_attendees_group(project)] + [ledger.group_response(g) for g in project.groups]


@router.post("", response_model=GroupResponse)
def create_group(project_id: int, data: GroupCreate, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    group = ledger.add_group(db, project, data.name, data.members)
    db.commit()
    db.refresh(group)
    return ledger.group_response(group)


@router.get("/{group_id}", response_model=GroupResponse)
def get_group(project_id: int, group_id: str, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    if ledger.is_all_attendees(group_id):
        return ledger.all_attendees_group(project)
    group = ledger.find_group(project, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return ledger.group_response(group)


@router.delete("/{group_id}", status_code=204)
def delete_group(project_id: int, group_id: str, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    if ledger.is_all_attendees(group_id):
        raise HTTPException(status_code=400, detail="The All Attendees group cannot be deleted")
    group = ledger.find_group(project, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    db.delete(group)
    db.commit()
