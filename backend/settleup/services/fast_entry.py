"""Parse one-line expense entries: "Description, Amount, Payer[, Group name]"."""
import math
from dataclasses import dataclass
from typing import Optional


class FastEntryError(ValueError):
    pass


@dataclass
class FastEntry:
    description: str
    amount: float
    payer: str
    group_name: Optional[str] = None


def parse_fast_entry(text: str) -> FastEntry:
    if not text or not text.strip():
        raise FastEntryError("Please enter expense details.")

    parts = [part.strip() for part in text.split(",")]
    if len(parts) < 3 or len(parts) > 4:
        raise FastEntryError("Expected: Desc, Amount, Payer OR Desc, Amount, Payer, GroupName")

    description, amount_str, payer = parts[:3]
    group_name = parts[3] if len(parts) == 4 and parts[3] else None

    if not description:
        raise FastEntryError("Description cannot be empty.")
    try:
        amount = float(amount_str)
    except ValueError:
        raise FastEntryError("Amount must be a positive number.")
    if not math.isfinite(amount) or amount <= 0:
        raise FastEntryError("Amount must be a positive number.")
    if not payer:
        raise FastEntryError("Payer name cannot be empty.")

    return FastEntry(description=description, amount=amount, payer=payer, group_name=group_name)
