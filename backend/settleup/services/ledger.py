"""Project roster, groups and expense bookkeeping shared by the routers."""
import math
from typing import Optional, Union

from fastapi import HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from settleup.models import Project, Attendee, AttendeeGroup, Expense
from settleup.schemas import (
    ALL_ATTENDEES_GROUP_ID,
    ALL_ATTENDEES_GROUP_NAME,
    Expense as ExpenseRecord,
    ExpenseResponse,
    ExpenseState,
    GroupResponse,
    GroupState,
    ProjectResponse,
    ProjectState,
)

GroupId = Union[int, str]


# ----- Lookups -----
def get_project(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def find_attendee(project: Project, name: str) -> Optional[Attendee]:
    return next((a for a in project.attendees if a.name == name), None)


def get_attendee(project: Project, name: str) -> Attendee:
    attendee = find_attendee(project, name)
    if not attendee:
        raise HTTPException(status_code=404, detail=f'Attendee "{name}" not found')
    return attendee


def is_all_attendees(group_id: GroupId) -> bool:
    return str(group_id).strip().lower() == ALL_ATTENDEES_GROUP_ID


def find_group(project: Project, group_id: GroupId) -> Optional[AttendeeGroup]:
    try:
        gid = int(group_id)
    except (TypeError, ValueError):
        return None
    return next((g for g in project.groups if g.id == gid), None)


def find_group_by_name(project: Project, name: str) -> Optional[AttendeeGroup]:
    wanted = name.strip().lower()
    return next((g for g in project.groups if g.name.lower() == wanted), None)


def group_attendees(project: Project, group_id: GroupId) -> list[Attendee]:
    if is_all_attendees(group_id):
        return list(project.attendees)
    group = find_group(project, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return list(group.members)


# ----- Attendees -----
def add_attendee(db: Session, project: Project, name: str) -> Attendee:
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Attendee name is required")
    if find_attendee(project, name):
        raise HTTPException(status_code=400, detail=f'Attendee "{name}" already exists')
    position = max((a.position for a in project.attendees), default=-1) + 1
    attendee = Attendee(name=name, position=position)
    project.attendees.append(attendee)
    db.flush()
    return attendee


def rename_attendee(db: Session, project: Project, attendee: Attendee, new_name: str) -> Attendee:
    new_name = new_name.strip()
    if not new_name:
        raise HTTPException(status_code=400, detail="Attendee name is required")
    if new_name != attendee.name and find_attendee(project, new_name):
        raise HTTPException(status_code=400, detail=f'Attendee "{new_name}" already exists')
    attendee.name = new_name
    db.flush()
    return attendee


def remove_attendee(db: Session, attendee: Attendee) -> None:
    """
    Remove an attendee and everything that no longer makes sense without them:
    groups left empty, expenses they paid, and expenses left with no participants.
    """
    for group in list(attendee.groups):
        group.members.remove(attendee)
        if not group.members:
            logger.info("Deleting group {!r}: no members left", group.name)
            db.delete(group)

    for expense in list(attendee.participant_in):
        if expense.payer_id == attendee.id:
            continue
        expense.participants.remove(attendee)
        if not expense.participants:
            logger.info("Deleting expense {}: no participants left", expense.id)
            db.delete(expense)

    for expense in list(attendee.expenses_paid):
        logger.info("Deleting expense {}: payer {!r} removed", expense.id, attendee.name)
        db.delete(expense)

    db.delete(attendee)
    db.flush()


# ----- Groups -----
def add_group(db: Session, project: Project, name: str, member_names: list[str]) -> AttendeeGroup:
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Group name is required")
    if not member_names:
        raise HTTPException(status_code=400, detail="Select at least one member for the group")
    if name.lower() == ALL_ATTENDEES_GROUP_NAME.lower() or find_group_by_name(project, name):
        raise HTTPException(status_code=400, detail="A group with this name already exists")
    members = _attendees_by_name(project, member_names, "Group members must be attendees")
    group = AttendeeGroup(name=name, members=members)
    project.groups.append(group)
    db.flush()
    return group


# ----- Expenses -----
def _attendees_by_name(project: Project, names: list[str], error: str) -> list[Attendee]:
    found = []
    for name in dict.fromkeys(names):
        attendee = find_attendee(project, name)
        if not attendee:
            raise HTTPException(status_code=400, detail=error)
        found.append(attendee)
    return found


def resolve_participants(
    project: Project,
    names: Optional[list[str]] = None,
    group_id: Optional[GroupId] = None,
) -> list[Attendee]:
    """Explicit names win, then a group's members, then every attendee."""
    if names is not None:
        participants = _attendees_by_name(project, names, "All participants must be attendees")
    elif group_id is not None:
        participants = group_attendees(project, group_id)
    else:
        participants = list(project.attendees)
    if not participants:
        raise HTTPException(status_code=400, detail="At least one participant required")
    return participants


def _check_expense_fields(description: str, amount: float) -> str:
    description = description.strip()
    if not description:
        raise HTTPException(status_code=400, detail="Description is required")
    if not math.isfinite(amount) or amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be a positive number")
    return description


def _payer(project: Project, name: str) -> Attendee:
    payer = find_attendee(project, name)
    if not payer:
        raise HTTPException(status_code=400, detail=f'Payer "{name}" must be an attendee')
    return payer


def create_expense(
    db: Session,
    project: Project,
    description: str,
    amount: float,
    paid_by: str,
    participants: list[Attendee],
) -> Expense:
    description = _check_expense_fields(description, amount)
    expense = Expense(
        description=description,
        amount=amount,
        payer=_payer(project, paid_by),
        participants=participants,
    )
    project.expenses.append(expense)
    db.flush()
    logger.debug("Added expense {!r} ({:.2f}) to project {}", description, amount, project.id)
    return expense


def update_expense(
    db: Session,
    project: Project,
    expense: Expense,
    description: Optional[str] = None,
    amount: Optional[float] = None,
    paid_by: Optional[str] = None,
    participants: Optional[list[Attendee]] = None,
) -> Expense:
    expense.description = _check_expense_fields(
        description if description is not None else expense.description,
        amount if amount is not None else expense.amount,
    )
    if amount is not None:
        expense.amount = amount
    if paid_by is not None:
        expense.payer = _payer(project, paid_by)
    if participants is not None:
        expense.participants = participants
    db.flush()
    return expense


def get_expense(project: Project, expense_id: int) -> Expense:
    expense = next((e for e in project.expenses if e.id == expense_id), None)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


# ----- Conversions -----
def expense_record(expense: Expense) -> ExpenseRecord:
    return ExpenseRecord(
        id=expense.id,
        description=expense.description,
        amount=expense.amount,
        paid_by=expense.payer.name,
        participants=[p.name for p in expense.participants],
    )


def expense_response(expense: Expense) -> ExpenseResponse:
    return ExpenseResponse(
        **expense_record(expense).model_dump(),
        project_id=expense.project_id,
        created_at=expense.created_at,
    )


def group_response(group: AttendeeGroup) -> GroupResponse:
    return GroupResponse(id=group.id, name=group.name, members=[m.name for m in group.members])


def all_attendees_group(project: Project) -> GroupResponse:
    return GroupResponse(
        id=ALL_ATTENDEES_GROUP_ID,
        name=ALL_ATTENDEES_GROUP_NAME,
        members=[a.name for a in project.attendees],
        is_system_group=True,
    )


def project_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        created_at=project.created_at,
        attendees=[a.name for a in project.attendees],
        expense_count=len(project.expenses),
    )


def project_inputs(project: Project) -> tuple[list[str], list[ExpenseRecord]]:
    """Attendee names and expense records in the shape the settlement calculator takes."""
    return [a.name for a in project.attendees], [expense_record(e) for e in project.expenses]


# ----- Project files -----
def export_state(project: Project) -> ProjectState:
    return ProjectState(
        name=project.name,
        attendees=[a.name for a in project.attendees],
        groups=[GroupState(name=g.name, members=[m.name for m in g.members]) for g in project.groups],
        expenses=[
            ExpenseState(
                description=e.description,
                amount=e.amount,
                paid_by=e.payer.name,
                participants=[p.name for p in e.participants],
            )
            for e in project.expenses
        ],
    )


def import_state(db: Session, state: ProjectState) -> Project:
    project = Project(name=state.name.strip() or "Imported project")
    db.add(project)
    for name in state.attendees:
        add_attendee(db, project, name)
    for g in state.groups:
        add_group(db, project, g.name, g.members)
    for e in state.expenses:
        participants = resolve_participants(project, e.participants)
        create_expense(db, project, e.description, e.amount, e.paid_by, participants)
    logger.info(
        "Imported project {!r}: {} attendees, {} groups, {} expenses",
        project.name, len(state.attendees), len(state.groups), len(state.expenses),
    )
    return project
