"""Expenses: create, fast entry, list, update, delete, export."""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from settleup.database import get_db
from settleup.schemas import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, FastEntryRequest, FastEntryResponse,
)
from settleup.services import ledger
from settleup.services.exports import EXPENSES_CSV_FILENAME, expenses_csv
from settleup.services.fast_entry import FastEntryError, parse_fast_entry

router = APIRouter(prefix="/projects/{project_id}/expenses", tags=["expenses"])


@router.post("", response_model=ExpenseResponse)
def create_expense(project_id: int, data: ExpenseCreate, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    participants = ledger.resolve_participants(project, data.participants, data.group_id)
    expense = ledger.create_expense(db, project, data.description, data.amount, data.paid_by, participants)
    db.commit()
    db.refresh(expense)
    return ledger.expense_response(expense)


@router.post("/fast-entry", response_model=FastEntryResponse)
def create_fast_entry(project_id: int, data: FastEntryRequest, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    try:
        entry = parse_fast_entry(data.text)
    except FastEntryError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not ledger.find_attendee(project, entry.payer):
        raise HTTPException(
            status_code=400,
            detail=f'Attendee "{entry.payer}" not found. Ensure payer is in attendees list.',
        )

    group_name = None
    warning = None
    participants = list(project.attendees)
    if entry.group_name:
        group = ledger.find_group_by_name(project, entry.group_name)
        if group:
            group_name = group.name
            participants = list(group.members)
        else:
            warning = f'Group "{entry.group_name}" not found. Participants set to all attendees. Please verify.'
    if not participants:
        raise HTTPException(status_code=400, detail="At least one participant required")

    expense = ledger.create_expense(db, project, entry.description, entry.amount, entry.payer, participants)
    db.commit()
    db.refresh(expense)
    return FastEntryResponse(
        expense=ledger.expense_response(expense),
        group_name=group_name,
        warning=warning,
    )


@router.get("", response_model=list[ExpenseResponse])
def list_expenses(project_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    return [ledger.expense_response(e) for e in project.expenses]


@router.get("/export")
def export_expenses(project_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    if not project.expenses:
        raise HTTPException(status_code=400, detail="There are no expenses to export")
    _, records = ledger.project_inputs(project)
    return StreamingResponse(
        iter([expenses_csv(records)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={EXPENSES_CSV_FILENAME}"},
    )


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(project_id: int, expense_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    return ledger.expense_response(ledger.get_expense(project, expense_id))


@router.patch("/{expense_id}", response_model=ExpenseResponse)
def update_expense(project_id: int, expense_id: int, data: ExpenseUpdate, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    expense = ledger.get_expense(project, expense_id)

    participants = None
    if data.participants is not None or data.group_id is not None:
        participants = ledger.resolve_participants(project, data.participants, data.group_id)

    ledger.update_expense(
        db, project, expense,
        description=data.description,
        amount=data.amount,
        paid_by=data.paid_by,
        participants=participants,
    )
    db.commit()
    db.refresh(expense)
    return ledger.expense_response(expense)


@router.delete("/{expense_id}", status_code=204)
def delete_expense(project_id: int, expense_id: int, db: Session = Depends(get_db)):
    project = ledger.get_project(db, project_id)
    expense = ledger.get_expense(project, expense_id)
    db.delete(expense)
    db.commit()
