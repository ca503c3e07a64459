import math
from typing import Dict, List
from models import Trip, Balance, Contribution, Settlement, TripSummary


TOLERANCE = 0.01


class InvalidReferenceError(ValueError):
    """An expense points at a person who is not part of the trip."""

    def __init__(self, expense_id: str, person_id: str):
        self.expense_id = expense_id
        self.person_id = person_id
        super().__init__(
            f"Expense {expense_id} references unknown person {person_id}")


def summarize_trip(trip: Trip) -> TripSummary:
    balances = calculate_balances(trip)
    settlements = settle_balances(balances)

    return TripSummary(
        total_amount=trip.total_amount,
        all_settled=all(abs(b) < TOLERANCE for b in balances.values()),
        balances=[
            Balance(person_id=person.id,
                    person_name=person.name,
                    balance=balances[person.id],
                    status=balance_status(balances[person.id]))
            for person in trip.people
        ],
        settlements=settlements,
        contributions=calculate_contributions(trip)
    )


def calculate_balances(trip: Trip) -> Dict[str, float]:
    """Net position of every person in ``trip``.

    Positive means the person is owed money, negative means they owe.
    Every person appears in the result, even without any expense.
    """
    balances: Dict[str, float] = {p.id: 0.0 for p in trip.people}

    for expense in trip.expenses:
        if expense.paid_by not in balances:
            raise InvalidReferenceError(expense.id, expense.paid_by)
        balances[expense.paid_by] += expense.amount

        if expense.custom_splits is not None:
            debits = expense.custom_splits.items()
        else:
            split_amount = expense.amount / len(expense.split_among)
            debits = ((person_id, split_amount) for person_id in expense.split_among)

        for person_id, amount in debits:
            if person_id not in balances:
                raise InvalidReferenceError(expense.id, person_id)
            balances[person_id] -= amount

    return balances


def calculate_settlements(trip: Trip) -> List[Settlement]:
    return settle_balances(calculate_balances(trip))


def settle_balances(balances: Dict[str, float]) -> List[Settlement]:
    """Greedy debt netting over a balance mapping.

    The largest debt is matched against the largest credit first. This keeps
    the transfer count low for typical groups but is not guaranteed minimal.
    """
    debtors = [[pid, amount] for pid, amount in balances.items() if amount < -TOLERANCE]
    creditors = [[pid, amount] for pid, amount in balances.items() if amount > TOLERANCE]

    debtors.sort(key=lambda x: x[1])
    creditors.sort(key=lambda x: x[1], reverse=True)

    settlements = []

    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        settlement_amount = min(-debtor[1], creditor[1])

        if settlement_amount > TOLERANCE:
            settlements.append(Settlement(
                from_id=debtor[0],
                to_id=creditor[0],
                amount=round_cents(settlement_amount)
            ))

        debtor[1] += settlement_amount
        creditor[1] -= settlement_amount

        if abs(debtor[1]) < TOLERANCE:
            i += 1
        if abs(creditor[1]) < TOLERANCE:
            j += 1

    return settlements


def round_cents(amount: float) -> float:
    """Round to cents, half a cent going up."""
    return math.floor(amount * 100 + 0.5) / 100


def balance_status(balance: float) -> str:
    if balance > TOLERANCE:
        return 'Gets Back'
    if balance < -TOLERANCE:
        return 'Owes'
    return 'Settled'


def calculate_contributions(trip: Trip) -> List[Contribution]:
    total = trip.total_amount
    contributions = []

    for person in trip.people:
        paid = [e.amount for e in trip.expenses if e.paid_by == person.id]
        total_paid = sum(paid)

        contributions.append(Contribution(
            person_id=person.id,
            person_name=person.name,
            total_paid=total_paid,
            expense_count=len(paid),
            percentage=total_paid / total * 100 if total > 0 else 0.0,
            average_expense=total_paid / len(paid) if paid else 0.0
        ))

    contributions.sort(key=lambda c: c.total_paid, reverse=True)

    return contributions
