"""CSV and plain-text exports of a project's expenses and settlements."""
import csv
import io

from settleup.schemas import Balance, Expense, Settlement
from settleup.services.settlement_calculator import MONEY_EPSILON

EXPENSES_CSV_FILENAME = "settleup_expenses.csv"
SUMMARY_FILENAME = "settleup_summary.txt"


def expenses_csv(expenses: list[Expense]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["Description", "Amount", "Paid By", "Participants"])
    for e in expenses:
        writer.writerow([
            e.description,
            f"{e.amount:.2f}",
            e.paid_by,
            "; ".join(e.participants),
        ])
    return output.getvalue()


def is_all_settled(balances: list[Balance], settlements: list[Settlement]) -> bool:
    return not settlements and all(abs(b.amount) < MONEY_EPSILON for b in balances)


def settlement_summary_text(balances: list[Balance], settlements: list[Settlement]) -> str:
    lines = ["SettleUp Summary:", ""]

    if is_all_settled(balances, settlements):
        lines.append("All expenses are perfectly settled!")
        return "\n".join(lines) + "\n"

    if balances:
        lines.append("--- Balances ---")
        for b in balances:
            verb = "is owed" if b.amount >= 0 else "owes"
            lines.append(f"{b.attendee_name}: {verb} ${abs(b.amount):.2f}")
        lines.append("")

    lines.append("--- Payments ---")
    if settlements:
        for s in settlements:
            lines.append(f"{s.from_attendee} pays {s.to_attendee} ${s.amount:.2f}")
    else:
        lines.append(
            "No transactions needed, but balances are not zero "
            "(likely due to rounding or very small amounts)."
        )
    return "\n".join(lines) + "\n"
