"""Settlements: balances and who pays whom for a project, plus a text summary."""
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from loguru import logger
from sqlalchemy.orm import Session

from settleup.database import get_db
from settleup.models import Project
from settleup.schemas import Balance, Settlement, SettlementSummary
from settleup.services import ledger
from settleup.services.exports import SUMMARY_FILENAME, is_all_settled, settlement_summary_text
from settleup.services.settlement_calculator import round_money, settle_up

router = APIRouter(prefix="/projects/{project_id}/settlements", tags=["settlements"])


def _calculate(project: Project, consolidate: bool) -> tuple[list[Balance], list[Settlement]]:
    if not project.attendees or not project.expenses:
        raise HTTPException(
            status_code=400,
            detail="Please add attendees and expenses before calculating.",
        )
    attendees, expenses = ledger.project_inputs(project)
    balances, settlements = settle_up(attendees, expenses, consolidate=consolidate)
    balances = [Balance(attendee_name=b.attendee_name, amount=round_money(b.amount)) for b in balances]
    logger.info(
        "Project {}: {} balances, {} settlements (consolidated={})",
        project.id, len(balances), len(settlements), consolidate,
    )
    return balances, settlements


@router.get("", response_model=SettlementSummary)
def get_settlements(
    project_id: int,
    consolidate: bool = Query(True),
    db: Session = Depends(get_db),
):
    project = ledger.get_project(db, project_id)
    balances, settlements = _calculate(project, consolidate)
    return SettlementSummary(
        project_id=project_id,
        balances=balances,
        settlements=settlements,
        consolidated=consolidate,
        all_settled=is_all_settled(balances, settlements),
    )


@router.get("/summary", response_class=PlainTextResponse)
def get_summary(
    project_id: int,
    consolidate: bool = Query(True),
    db: Session = Depends(get_db),
):
    project = ledger.get_project(db, project_id)
    balances, settlements = _calculate(project, consolidate)
    return PlainTextResponse(
        settlement_summary_text(balances, settlements),
        headers={"Content-Disposition": f"attachment; filename={SUMMARY_FILENAME}"},
    )
