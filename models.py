from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Dict, List, Optional
from datetime import datetime
from uuid import uuid4


SPLIT_TOLERANCE = 0.01


class Person(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str

    @field_validator('name')
    @classmethod
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Person name cannot be empty')
        return v.strip()


class Expense(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    amount: float
    paid_by: str
    split_among: List[str]
    custom_splits: Optional[Dict[str, float]] = None
    date: datetime = Field(default_factory=datetime.now)

    @field_validator('title')
    @classmethod
    def title_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Expense title cannot be empty')
        return v.strip()

    @field_validator('amount')
    @classmethod
    def amount_positive(cls, v):
        if not v > 0:
            raise ValueError('Amount must be greater than 0')
        return v

    @field_validator('split_among')
    @classmethod
    def at_least_one_participant(cls, v):
        if not v:
            raise ValueError('At least one participant is required')
        # drop duplicates, keep selection order
        return list(dict.fromkeys(v))

    @model_validator(mode='after')
    def custom_splits_match(self):
        if self.custom_splits is None:
            return self

        if set(self.custom_splits) != set(self.split_among):
            raise ValueError('Custom splits must cover exactly the selected participants')

        for person_id, value in self.custom_splits.items():
            if not value >= 0:
                raise ValueError(f'Custom split for {person_id} cannot be negative')

        total = sum(self.custom_splits.values())
        if not abs(total - self.amount) <= SPLIT_TOLERANCE:
            raise ValueError(
                f"Split amounts don't match: custom splits total {total:.2f} "
                f"but expense is {self.amount:.2f}")
        return self

    @property
    def split_type(self) -> str:
        return 'custom' if self.custom_splits is not None else 'equal'

    def share_of(self, person_id: str) -> float:
        """Amount owed by ``person_id`` for this expense."""
        if self.custom_splits is not None:
            return self.custom_splits.get(person_id, 0.0)
        if person_id not in self.split_among:
            return 0.0
        return self.amount / len(self.split_among)

    def references(self, person_id: str) -> bool:
        return (self.paid_by == person_id
                or person_id in self.split_among
                or person_id in (self.custom_splits or {}))


class Trip(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    created_at: datetime = Field(default_factory=datetime.now)
    people: List[Person] = Field(default_factory=list)
    expenses: List[Expense] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Trip name cannot be empty')
        return v.strip()

    @property
    def total_amount(self) -> float:
        return sum(expense.amount for expense in self.expenses)

    def person_ids(self) -> List[str]:
        return [p.id for p in self.people]

    def person_name(self, person_id: str) -> str:
        for person in self.people:
            if person.id == person_id:
                return person.name
        return 'Unknown'

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        return None


class Settlement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_id: str = Field(alias='from')
    to_id: str = Field(alias='to')
    amount: float


class Balance(BaseModel):
    person_id: str
    person_name: str
    balance: float
    status: str


class Contribution(BaseModel):
    person_id: str
    person_name: str
    total_paid: float
    expense_count: int
    percentage: float
    average_expense: float


class TripSummary(BaseModel):
    total_amount: float
    all_settled: bool
    balances: List[Balance]
    settlements: List[Settlement]
    contributions: List[Contribution]
