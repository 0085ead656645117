"""Projects: create, list, get, rename, delete, save to / load from a JSON file."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from settleup.database import get_db
from settleup.models import Project
from settleup.schemas import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectState
from settleup.services import ledger

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectResponse])
def list_projects(db: Session = Depends(get_db)):
    projects = db.query(Project).order_by(Project.id).all()
    return [ledger.project_response(p) for p in projects]


@router.post("", response_model=ProjectResponse)
def create_project(data: ProjectCreate, db: Session = Depends(get_db)):
    project = Project(name=data.name.strip() or "Untitled project")
    db.add(project)
    db.commit()
    db.refresh(project)
    return ledger.project_response(project)


@router.post("/import", response_model=ProjectResponse)
def import_project(data: ProjectState, db: Session = Depends(get_db)):
    project = ledger.import_state(db, data)
    db.commit()
    db.refresh(project)
    return ledger.project_response(project)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: int, db: Session = Depends(get_db)):
    return ledger.project_response(ledger.get_project(db, project_id))


@router.get("/{project_id}/export", response_model=ProjectState)
def export_project(project_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    state = ledger.export_state(project)
    return JSONResponse(
        content=state.model_dump(),
        headers={"Content-Disposition": f"attachment; filename=settleup-project-{project_id}.json"},
    )


@router.patch("/{project_id}", response_model=ProjectResponse)
def update_project(project_id: int, data: ProjectUpdate, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    if data.name is not None and data.name.strip():
        project.name = data.name.strip()
    db.commit()
    db.refresh(project)
    return ledger.project_response(project)


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    db.delete(project)
    db.commit()
