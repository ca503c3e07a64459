from fastapi import FastAPI, Request, Form, HTTPException
from fastapi.responses import HTMLResponse, StreamingResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from typing import Dict, List
import io
import logging
import os

from config import load_settings
from models import Trip, Person, Expense, Settlement, TripSummary
from storage import storage, ExpenseNotFoundError
from settlement import (InvalidReferenceError, calculate_balances,
                        calculate_settlements, summarize_trip)
from exports import export_csv, export_xlsx, export_pdf, export_filename
from utils import format_currency, parse_currency

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)
templates = Jinja2Templates(
    directory=os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates"))

templates.env.filters['format_currency'] = (
    lambda amount: format_currency(amount, settings.currency))
templates.env.globals['app_title'] = settings.app_title

EXPORTERS = {
    "csv": (export_csv, "text/csv"),
    "xlsx": (export_xlsx,
             "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    "pdf": (export_pdf, "application/pdf"),
}


def _validation_message(e: ValidationError) -> str:
    return "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())


def get_trip_or_404(trip_id: str) -> Trip:
    trip = storage.get_trip(trip_id)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")
    return trip


def summarize_or_400(trip: Trip) -> TripSummary:
    try:
        return summarize_trip(trip)
    except InvalidReferenceError as e:
        logger.error("Trip %s has a dangling reference: %s", trip.id, e)
        raise HTTPException(status_code=400, detail=str(e))


def trip_redirect(trip_id: str) -> RedirectResponse:
    return RedirectResponse(url=f"/trip/{trip_id}", status_code=303)


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    trips = sorted(storage.list_trips(), key=lambda t: t.created_at, reverse=True)
    return templates.TemplateResponse(request, "home.html", {"trips": trips})


@app.post("/trip/create")
async def create_trip(trip_name: str = Form(...),
                      people_names: List[str] = Form(...)):
    names = [name.strip() for name in people_names if name.strip()]
    if len(names) < 2:
        raise HTTPException(status_code=400,
                            detail="A trip needs at least two people")

    try:
        trip = Trip(name=trip_name, people=[Person(name=n) for n in names])
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e))

    storage.create_trip(trip)
    logger.info("Created trip %s with %d people", trip.id, len(trip.people))
    return trip_redirect(trip.id)


@app.get("/trip/{trip_id}", response_class=HTMLResponse)
async def view_trip(request: Request, trip_id: str):
    trip = get_trip_or_404(trip_id)
    summary = summarize_or_400(trip)

    return templates.TemplateResponse(request, "trip.html", {
        "trip": trip,
        "summary": summary
    })


@app.post("/trip/{trip_id}/delete")
async def delete_trip(trip_id: str):
    get_trip_or_404(trip_id)
    storage.delete_trip(trip_id)
    logger.info("Deleted trip %s", trip_id)
    return RedirectResponse(url="/", status_code=303)


@app.post("/trip/{trip_id}/person/add")
async def add_person(trip_id: str, person_name: str = Form(...)):
    get_trip_or_404(trip_id)

    try:
        person = Person(name=person_name)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e))

    storage.add_person(trip_id, person)
    return trip_redirect(trip_id)


@app.post("/trip/{trip_id}/person/{person_id}/remove")
async def remove_person(trip_id: str, person_id: str):
    trip = get_trip_or_404(trip_id)
    if person_id not in trip.person_ids():
        raise HTTPException(status_code=404, detail="Person not found")

    storage.remove_person(trip_id, person_id)
    return trip_redirect(trip_id)


@app.post("/trip/{trip_id}/expense/add")
async def add_expense(request: Request,
                      trip_id: str,
                      title: str = Form(...),
                      amount: str = Form(...),
                      paid_by: str = Form(...),
                      split_among: List[str] = Form(...),
                      split_type: str = Form("equal")):
    trip = get_trip_or_404(trip_id)

    try:
        amount_value = parse_currency(amount)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if amount_value <= 0:
        raise HTTPException(status_code=400,
                            detail="Amount must be greater than 0")

    participant_ids = set(trip.person_ids())
    if paid_by not in participant_ids:
        raise HTTPException(status_code=400,
                            detail="Payer must be part of the trip")

    for pid in split_among:
        if pid not in participant_ids:
            raise HTTPException(
                status_code=400,
                detail="Everyone in the split must be part of the trip")

    custom_splits = None
    if split_type == "custom":
        form = await request.form()
        custom_splits = {}
        for pid in split_among:
            try:
                custom_splits[pid] = parse_currency(form.get(f"split_{pid}") or "0")
            except ValueError:
                raise HTTPException(status_code=400,
                                    detail="Invalid custom split amount")
    elif split_type != "equal":
        raise HTTPException(status_code=400, detail="Unknown split type")

    try:
        expense = Expense(title=title,
                          amount=amount_value,
                          paid_by=paid_by,
                          split_among=split_among,
                          custom_splits=custom_splits)
    except ValidationError as e:
        logger.info("Rejected expense for trip %s: %s", trip_id, e)
        raise HTTPException(status_code=400, detail=_validation_message(e))

    storage.add_expense(trip_id, expense)
    logger.info("Added expense %s (%.2f) to trip %s",
                expense.id, expense.amount, trip_id)
    return trip_redirect(trip_id)


@app.post("/trip/{trip_id}/expense/{expense_id}/delete")
async def delete_expense(trip_id: str, expense_id: str):
    get_trip_or_404(trip_id)

    try:
        storage.delete_expense(trip_id, expense_id)
    except ExpenseNotFoundError:
        raise HTTPException(status_code=404, detail="Expense not found")

    return trip_redirect(trip_id)


@app.get("/api/trips/{trip_id}/balances")
async def trip_balances(trip_id: str) -> Dict[str, float]:
    trip = get_trip_or_404(trip_id)
    try:
        return calculate_balances(trip)
    except InvalidReferenceError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/trips/{trip_id}/settlements")
async def trip_settlements(trip_id: str) -> List[Settlement]:
    trip = get_trip_or_404(trip_id)
    try:
        return calculate_settlements(trip)
    except InvalidReferenceError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/trips/{trip_id}/summary")
async def trip_summary(trip_id: str) -> TripSummary:
    return summarize_or_400(get_trip_or_404(trip_id))


@app.get("/trip/{trip_id}/export/{fmt}")
async def export_trip(trip_id: str, fmt: str):
    trip = get_trip_or_404(trip_id)
    if fmt not in EXPORTERS:
        raise HTTPException(status_code=404, detail="Unknown export format")

    exporter, media_type = EXPORTERS[fmt]
    try:
        content = exporter(trip, settings.currency)
    except InvalidReferenceError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={
            "Content-Disposition":
            f"attachment; filename={export_filename(trip, fmt)}"
        })


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
