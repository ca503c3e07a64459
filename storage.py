import json
import logging
import os
from typing import Dict, List, Optional

from pydantic import ValidationError

from config import load_settings
from models import Trip, Person, Expense
from settlement import InvalidReferenceError

logger = logging.getLogger(__name__)


class TripNotFoundError(LookupError):
    pass


class ExpenseNotFoundError(LookupError):
    pass


class TripStorage:
    """Ordered trip store, optionally mirrored to a JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self.trips: Dict[str, Trip] = {}
        if path:
            self.load()

    def load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            trips = [Trip.model_validate(t) for t in data]
        except FileNotFoundError:
            logger.info("No trip file at %s, starting empty", self.path)
            return
        except (ValueError, TypeError, ValidationError) as e:
            logger.error("Error loading trips from %s: %s", self.path, e)
            return

        self.trips = {trip.id: trip for trip in trips}
        logger.info("Loaded %d trips from %s", len(trips), self.path)

    def save(self) -> None:
        if not self.path:
            return

        data = [trip.model_dump(mode="json") for trip in self.trips.values()]
        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving trips to %s: %s", self.path, e)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug("Saved %d trips to %s", len(data), self.path)

    def create_trip(self, trip: Trip) -> Trip:
        self.trips[trip.id] = trip
        self.save()
        return trip

    def list_trips(self) -> List[Trip]:
        return list(self.trips.values())

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return self.trips.get(trip_id)

    def update_trip(self, trip: Trip) -> Trip:
        self._require_trip(trip.id)
        self.trips[trip.id] = trip
        self.save()
        return trip

    def delete_trip(self, trip_id: str) -> None:
        self._require_trip(trip_id)
        del self.trips[trip_id]
        self.save()

    def add_person(self, trip_id: str, person: Person) -> Trip:
        trip = self._require_trip(trip_id)
        trip.people.append(person)
        self.save()
        return trip

    def remove_person(self, trip_id: str, person_id: str) -> Trip:
        """Remove a person together with every expense that mentions them."""
        trip = self._require_trip(trip_id)
        trip.people = [p for p in trip.people if p.id != person_id]

        kept = [e for e in trip.expenses if not e.references(person_id)]
        dropped = len(trip.expenses) - len(kept)
        trip.expenses = kept
        if dropped:
            logger.info("Removed %d expenses of person %s from trip %s",
                        dropped, person_id, trip_id)

        self.save()
        return trip

    def add_expense(self, trip_id: str, expense: Expense) -> Trip:
        trip = self._require_trip(trip_id)
        self._check_references(trip, expense)
        trip.expenses.append(expense)
        self.save()
        return trip

    def update_expense(self, trip_id: str, expense: Expense) -> Trip:
        trip = self._require_trip(trip_id)
        self._check_references(trip, expense)
        for i, existing in enumerate(trip.expenses):
            if existing.id == expense.id:
                trip.expenses[i] = expense
                break
        else:
            raise ExpenseNotFoundError(expense.id)
        self.save()
        return trip

    def delete_expense(self, trip_id: str, expense_id: str) -> Trip:
        trip = self._require_trip(trip_id)
        if trip.get_expense(expense_id) is None:
            raise ExpenseNotFoundError(expense_id)
        trip.expenses = [e for e in trip.expenses if e.id != expense_id]
        self.save()
        return trip

    def _require_trip(self, trip_id: str) -> Trip:
        trip = self.trips.get(trip_id)
        if trip is None:
            raise TripNotFoundError(trip_id)
        return trip

    @staticmethod
    def _check_references(trip: Trip, expense: Expense) -> None:
        known = set(trip.person_ids())
        for person_id in [expense.paid_by, *expense.split_among]:
            if person_id not in known:
                raise InvalidReferenceError(expense.id, person_id)


storage = TripStorage(load_settings().data_file)
