"""Who owes whom: balances, minimal transfers, and one-payment-per-payer consolidation."""
from typing import Iterable, Optional

from loguru import logger

from settleup.schemas import Balance, Expense, Settlement

# Amounts below one cent are treated as settled.
MONEY_EPSILON = 0.01

FlowTable = dict[str, dict[str, float]]


def round_money(amount: float) -> float:
    return round(amount, 2)


def compute_balances(participants: Iterable[str], expenses: Iterable[Expense]) -> list[Balance]:
    """
    Net balance per attendee (positive = is owed money, negative = owes money).

    Names referenced by an expense but missing from ``participants`` are added
    with a zero starting balance. An expense with no participants credits the
    payer in full and debits nobody.
    """
    balances: dict[str, float] = {name: 0.0 for name in participants}
    for e in expenses:
        balances[e.paid_by] = balances.get(e.paid_by, 0.0) + e.amount
        if not e.participants:
            continue
        share = e.amount / len(e.participants)
        for name in e.participants:
            balances[name] = balances.get(name, 0.0) - share

    return [Balance(attendee_name=name, amount=amount) for name, amount in balances.items()]


def optimize_transactions(balances: Iterable[Balance]) -> list[Settlement]:
    """
    Greedy largest-first matching of debtors to creditors.
    Returns at most (#debtors + #creditors - 1) transfers, each >= 0.01.
    """
    debtors = []  # [name, amount_owed]
    creditors = []
    for b in balances:
        amount = round_money(b.amount)
        if amount <= -MONEY_EPSILON:
            debtors.append([b.attendee_name, -amount])
        elif amount >= MONEY_EPSILON:
            creditors.append([b.attendee_name, amount])
    # list.sort is stable, so equal amounts keep their input order
    debtors.sort(key=lambda x: -x[1])
    creditors.sort(key=lambda x: -x[1])

    out: list[Settlement] = []
    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        transfer = round_money(min(debtor[1], creditor[1]))
        if transfer >= MONEY_EPSILON:
            out.append(Settlement(from_attendee=debtor[0], to_attendee=creditor[0], amount=transfer))
        debtor[1] -= transfer
        creditor[1] -= transfer
        if debtor[1] < MONEY_EPSILON:
            i += 1
        if creditor[1] < MONEY_EPSILON:
            j += 1

    if i < len(debtors) or j < len(creditors):
        logger.debug(
            "Unmatched balances left after optimizing: {} debtor(s), {} creditor(s)",
            len(debtors) - i, len(creditors) - j,
        )
    return out


def _set_flow(flows: FlowTable, from_name: str, to_name: str, amount: float) -> None:
    row = flows.setdefault(from_name, {})
    amount = round_money(amount)
    if amount < MONEY_EPSILON:
        row.pop(to_name, None)
        if not row:
            del flows[from_name]
    else:
        row[to_name] = amount


def adjust_flow(flows: FlowTable, from_name: str, to_name: str, amount: float) -> None:
    """
    Add ``amount`` flowing from ``from_name`` to ``to_name``.

    An existing reverse flow is netted first so the table never holds both
    A->B and B->A. A negative amount moves money the other way.
    """
    if from_name == to_name or amount == 0:
        return
    if amount < 0:
        from_name, to_name, amount = to_name, from_name, -amount
    remaining = round_money(amount)

    reverse = flows.get(to_name, {}).get(from_name, 0.0)
    if reverse > 0:
        if reverse >= remaining:
            _set_flow(flows, to_name, from_name, reverse - remaining)
            remaining = 0.0
        else:
            _set_flow(flows, to_name, from_name, 0)
            remaining -= reverse

    if remaining > 0:
        current = flows.get(from_name, {}).get(to_name, 0.0)
        _set_flow(flows, from_name, to_name, current + remaining)


def _flatten(flows: FlowTable) -> list[Settlement]:
    return [
        Settlement(from_attendee=from_name, to_attendee=to_name, amount=amount)
        for from_name, row in flows.items()
        for to_name, amount in row.items()
        if amount >= MONEY_EPSILON
    ]


def _find_cycle(flows: FlowTable) -> Optional[list[str]]:
    """Names [n0, ..., nk] with flows n0->n1 ... nk->n0, or None if there is no cycle."""
    state: dict[str, int] = {}  # 1 = on current path, 2 = done
    for start in list(flows):
        if start in state:
            continue
        state[start] = 1
        path = [start]
        stack = [iter(flows.get(start, {}))]
        while stack:
            for child in stack[-1]:
                if state.get(child) == 1:
                    return path[path.index(child):]
                if child not in state:
                    state[child] = 1
                    path.append(child)
                    stack.append(iter(flows.get(child, {})))
                    break
            else:
                state[path.pop()] = 2
                stack.pop()
    return None


def cancel_cycles(flows: FlowTable) -> None:
    """
    Remove directed cycles (A->B->C->A) by taking the smallest flow off every
    edge of the cycle. Net positions are unchanged and the table ends acyclic.
    """
    while True:
        cycle = _find_cycle(flows)
        if cycle is None:
            return
        edges = list(zip(cycle, cycle[1:] + cycle[:1]))
        smallest = min(flows[a][b] for a, b in edges)
        for a, b in edges:
            _set_flow(flows, a, b, flows[a][b] - smallest)


def _seed(settlements: Iterable[Settlement]) -> FlowTable:
    flows: FlowTable = {}
    for s in settlements:
        adjust_flow(flows, s.from_attendee, s.to_attendee, s.amount)
    cancel_cycles(flows)
    return flows


def _consolidate_once(settlements: list[Settlement]) -> list[Settlement]:
    # callers pass settlements that are already netted and acyclic
    flows = _seed(settlements)

    original: dict[str, list[Settlement]] = {}
    for s in settlements:
        original.setdefault(s.from_attendee, []).append(s)

    for payer, payments in original.items():
        if len(payments) < 2:
            continue
        intermediary = payments[0].to_attendee
        total = 0.0
        for p in payments:
            total += p.amount
            adjust_flow(flows, payer, p.to_attendee, -p.amount)
        adjust_flow(flows, payer, intermediary, round_money(total))
        for p in payments:
            if p.to_attendee != intermediary:
                adjust_flow(flows, intermediary, p.to_attendee, p.amount)

    cancel_cycles(flows)
    return _flatten(flows)


def _has_split_payers(settlements: list[Settlement]) -> bool:
    payers = [s.from_attendee for s in settlements]
    return len(payers) != len(set(payers))


def _consolidate_passes(settlements: list[Settlement], max_passes: int) -> list[Settlement]:
    for _ in range(max_passes):
        if not _has_split_payers(settlements):
            break
        settlements = _consolidate_once(settlements)
    return settlements


def _net_balances(settlements: list[Settlement]) -> list[Balance]:
    net: dict[str, float] = {}
    for s in settlements:
        net[s.from_attendee] = net.get(s.from_attendee, 0.0) - s.amount
        net[s.to_attendee] = net.get(s.to_attendee, 0.0) + s.amount
    return [Balance(attendee_name=name, amount=amount) for name, amount in net.items()]


def consolidate_payments(settlements: Iterable[Settlement]) -> list[Settlement]:
    """
    Rewrite transfers so each payer makes at most one payment.

    Back-and-forth flows and longer cycles are cancelled first. A payer owing
    several people then pays the total to the first payee listed, who
    forwards the rest. Forwarding can leave the intermediary with several
    payments of its own, so passes repeat until every payer is down to one.
    If that does not happen within one pass per name, the transfers are
    rebuilt from net positions with the optimizer and consolidated again.

    Each participant's net position is unchanged, and the result is a fixed
    point: consolidating it again returns it as is. Output is sorted by
    (from, to).
    """
    current = _flatten(_seed(settlements))
    names = {s.from_attendee for s in current} | {s.to_attendee for s in current}
    max_passes = len(names) + 1

    result = _consolidate_passes(current, max_passes)
    if _has_split_payers(result):
        logger.warning(
            "Payment consolidation still split after {} passes; rebuilding from net balances",
            max_passes,
        )
        result = _consolidate_passes(optimize_transactions(_net_balances(current)), max_passes)

    return sorted(result, key=lambda s: (s.from_attendee, s.to_attendee))


def settle_up(
    participants: Iterable[str],
    expenses: Iterable[Expense],
    consolidate: bool = True,
) -> tuple[list[Balance], list[Settlement]]:
    """Run the whole pipeline: balances, then transfers, optionally consolidated."""
    balances = compute_balances(participants, expenses)
    settlements = optimize_transactions(balances)
    if consolidate:
        settlements = consolidate_payments(settlements)
    return balances, settlements
