"""HTTP endpoints. Every route waits for the configuration gate first."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from src.api.schemas import (
    AddAnimalOut,
    AnimalIn,
    AnimalOut,
    AnimalTypeOut,
    AnimalUpdateIn,
    BulkIn,
    CaregiverAnimalOut,
    CaregiverNameOut,
    CompleteIn,
    CompleteOut,
    ProfileOut,
    ProtocolIO,
    ScheduleEntryOut,
    ScheduleIn,
    TodayOut,
    TreatmentRecordIO,
    TypeRosterOut,
    WriteOut,
)
from src.core.context import CareContext, CareServices
from src.core.dates import parse_date, weekday_name
from src.core.errors import NotFoundError
from src.core.protocol_expander import expand_protocols, sort_descending
from src.core.runtime_config import PROTOCOLS_SHEET_ID
from src.core.treatment_writer import range_of
from src.data.models import TreatmentRecord

logger = logging.getLogger(__name__)

router = APIRouter()


def get_context(request: Request) -> CareContext:
    return request.app.state.context


async def get_services(
    context: Annotated[CareContext, Depends(get_context)],
) -> CareServices:
    return await context.services()


Context = Annotated[CareContext, Depends(get_context)]
Services = Annotated[CareServices, Depends(get_services)]


def _require(value: str | None, name: str) -> str:
    if not value or not value.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{name} is required")
    return value.strip()


def _with_weekday(record: TreatmentRecord, locale: str) -> TreatmentRecord:
    if record.weekday:
        return record
    parsed = parse_date(record.date)
    if parsed is None:
        return record
    return replace(record, weekday=weekday_name(parsed, locale))


async def _treatment_sheet(services: CareServices, animal_type: str, animal_name: str) -> str:
    document_id = await services.aggregator.find_treatment_sheet(
        animal_type, animal_name, exact=True
    )
    if document_id is None:
        raise NotFoundError(
            "No sheet found for this animal",
            animalName=animal_name,
            animalType=animal_type,
        )
    return document_id


# ---------------------------------------------------------------------------
# Treatments
# ---------------------------------------------------------------------------


@router.get("/treatments", response_model=None)
async def get_treatments(
    context: Context,
    services: Services,
    animal_type: str | None = Query(None, alias="animalType"),
    animal_name: str | None = Query(None, alias="animalName"),
    animal_id: str | None = Query(None, alias="animalId"),
    profile: str | None = Query(None),
):
    """Profile view, species view or the list of species, by query shape."""
    key = animal_name or animal_id
    if profile and key:
        animal_type = _require(animal_type, "animalType")
        animal = await services.animals.find_animal(animal_type, key)
        if animal is None:
            raise NotFoundError("Animal not found", animalName=key, animalType=animal_type)
        records = await services.aggregator.profile_treatments(
            animal_type, animal, context.today()
        )
        return ProfileOut(
            animal=AnimalOut.from_animal(animal),
            treatments=[TreatmentRecordIO.from_record(r) for r in records],
        )

    if animal_type:
        animals = await services.animals.list_animals(animal_type)
        if services.config.get(PROTOCOLS_SHEET_ID):
            protocols = await services.protocols.list_protocols(animal_type)
        else:
            logger.warning("%s is not configured, returning no protocols", PROTOCOLS_SHEET_ID)
            protocols = []
        return TypeRosterOut(
            animals=[AnimalOut.from_animal(a) for a in animals],
            protocols=[ProtocolIO.from_protocol(p) for p in protocols],
        )

    return [AnimalTypeOut.from_info(info) for info in services.config.registry.all()]


@router.put("/treatments", response_model=None)
async def update_animal(
    body: AnimalUpdateIn,
    services: Services,
    animal_name: str | None = Query(None, alias="animalName"),
):
    name = animal_name or str(body.updated_animal.get("name") or "")
    name = _require(name, "animalName")
    await services.animals.update_animal_fields(body.animal_type, name, body.updated_animal)
    return {"animal": body.updated_animal}


@router.post("/treatments/bulk", status_code=status.HTTP_201_CREATED, response_model=WriteOut)
async def bulk_add_treatments(
    body: BulkIn,
    context: Context,
    services: Services,
    animal_name: str | None = Query(None, alias="animalName"),
    animal_type: str | None = Query(None, alias="animalType"),
    delete: str | None = Query(None),
    caregiver: str | None = Query(None),
) -> WriteOut:
    """Insert rows at the top of the animal's sheet, optionally replacing their date span."""
    animal_name = _require(animal_name, "animalName")
    animal_type = _require(animal_type, "animalType")
    logger.info(
        "Bulk add of %d treatment(s) for %s '%s' (delete=%s, caregiver=%s)",
        len(body.treatments), animal_type, animal_name, delete, caregiver,
    )

    document_id = await _treatment_sheet(services, animal_type, animal_name)
    locale = context.settings.WEEKDAY_LOCALE
    records = [_with_weekday(t.to_record(), locale) for t in body.treatments]
    delete_range = range_of(records) if (delete or "").upper() == "TRUE" else None

    result = await services.writer.write_batch(document_id, records, delete_range)
    return WriteOut(rows_written=result.rows_written, rows_deleted=result.rows_deleted)


@router.post("/treatments/schedule", status_code=status.HTTP_201_CREATED, response_model=WriteOut)
async def schedule_treatments(
    body: ScheduleIn,
    context: Context,
    services: Services,
) -> WriteOut:
    """Expand protocols for a case from a start date and write the rows."""
    start = parse_date(body.start_date)
    if start is None:
        raise ValueError(f"Invalid startDate: {body.start_date!r}")

    info = services.config.registry.resolve(body.animal_type)
    if body.protocols is not None:
        protocols = [p.to_protocol(info.label, body.medical_case) for p in body.protocols]
    else:
        protocols = await services.protocols.find_protocols(info.type, body.medical_case)
    if not protocols:
        raise NotFoundError(
            f"No protocols for case '{body.medical_case}'",
            animalName=body.animal_name,
            animalType=info.key,
        )

    records = sort_descending(
        expand_protocols(
            protocols,
            start,
            notes=body.notes,
            medical_case=body.medical_case,
            weekday_locale=context.settings.WEEKDAY_LOCALE,
        )
    )
    document_id = await _treatment_sheet(services, info.key, body.animal_name)
    delete_range = range_of(records) if body.replace else None
    result = await services.writer.write_batch(document_id, records, delete_range)
    return WriteOut(rows_written=result.rows_written, rows_deleted=result.rows_deleted)


@router.get("/treatments/today", response_model=TodayOut)
async def treatments_today(context: Context, services: Services) -> TodayOut:
    schedule = await services.aggregator.facility_schedule(context.today())
    return TodayOut(
        treatments=[ScheduleEntryOut.from_entry(e) for e in schedule.entries],
        timestamp=datetime.now(timezone.utc).isoformat(),
        errors=schedule.errors,
    )


@router.post("/treatments/complete", response_model=CompleteOut)
async def complete_treatment(body: CompleteIn, context: Context, services: Services) -> CompleteOut:
    result = await services.aggregator.set_completion(
        body.animal_name,
        body.animal_type,
        body.medical_case,
        body.time_slot,
        body.is_completed,
        context.today(),
    )
    state = "complete" if body.is_completed else "incomplete"
    return CompleteOut(
        message=f"Treatment marked as {state}",
        rows_updated=result.rows_updated,
        row_numbers=result.row_numbers,
    )


# ---------------------------------------------------------------------------
# Animals and caregivers
# ---------------------------------------------------------------------------


@router.get("/animals", response_model=list[CaregiverAnimalOut])
async def animals_for_caregiver(
    context: Context,
    services: Services,
    caregiver: str | None = Query(None),
) -> list[CaregiverAnimalOut]:
    caregiver = _require(caregiver, "caregiver")
    found = await services.aggregator.animals_with_treatment_today(caregiver, context.today())
    return [
        CaregiverAnimalOut(**vars(animal), animal_type=info.key) for info, animal in found
    ]


@router.post("/animals", status_code=status.HTTP_201_CREATED, response_model=AddAnimalOut)
async def add_animal(body: AnimalIn, services: Services) -> AddAnimalOut:
    result = await services.animals.add_animal(body.animal_type, body.to_animal())
    return AddAnimalOut(
        success=result.primary_ok,
        animal=AnimalOut.from_animal(result.animal),
        treatment_sheet_id=result.treatment_sheet_id,
        treatment_sheet_error=result.secondary_error,
    )


@router.get("/caregiver", response_model=CaregiverNameOut)
async def caregiver_name(
    services: Services,
    email: str | None = Query(None),
) -> CaregiverNameOut:
    email = _require(email, "email")
    return CaregiverNameOut(caregiver_name=await services.caregivers.name_for_email(email))


@router.get("/caregivers", response_model=list[str])
async def caregivers(services: Services) -> list[str]:
    return await services.caregivers.list_caregivers()
