import pytest

from settleup.schemas import Balance, Expense, Settlement
from settleup.services.exports import expenses_csv, is_all_settled, settlement_summary_text
from settleup.services.fast_entry import FastEntryError, parse_fast_entry


def test_parse_fast_entry():
    entry = parse_fast_entry(" Coffee ,  4.5 , Ann ")
    assert (entry.description, entry.amount, entry.payer, entry.group_name) == ("Coffee", 4.5, "Ann", None)


def test_parse_fast_entry_with_group():
    assert parse_fast_entry("Coffee, 4.5, Ann, Early birds").group_name == "Early birds"


@pytest.mark.parametrize("text", [
    "",
    "Coffee, 4.5",
    "Coffee, 4.5, Ann, Group, Extra",
    ", 4.5, Ann",
    "Coffee, -1, Ann",
    "Coffee, nan, Ann",
    "Coffee, 4.5, ",
])
def test_parse_fast_entry_rejects(text):
    with pytest.raises(FastEntryError):
        parse_fast_entry(text)


def test_expenses_csv_empty():
    assert expenses_csv([]) == "Description,Amount,Paid By,Participants\n"


def test_expenses_csv_rows():
    csv_text = expenses_csv([Expense(description="Tea", amount=3, paid_by="Ann", participants=["Ann", "Ben"])])
    assert csv_text.splitlines()[1] == "Tea,3.00,Ann,Ann; Ben"


def test_summary_with_residual_balance():
    balances = [Balance(attendee_name="Ann", amount=0.01), Balance(attendee_name="Ben", amount=0.0)]
    assert not is_all_settled(balances, [])
    text = settlement_summary_text(balances, [])
    assert "Ann: is owed $0.01" in text
    assert "No transactions needed" in text


def test_summary_lists_payments():
    settlements = [Settlement(**{"from": "Ben", "to": "Ann", "amount": 12.5})]
    text = settlement_summary_text([], settlements)
    assert "--- Balances ---" not in text
    assert text.endswith("--- Payments ---\nBen pays Ann $12.50\n")
