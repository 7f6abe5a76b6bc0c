"""Hazard station endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.hazards import ClassifiedStationModel, ClassifyReadingsRequest, ClassifyReadingsResponse
from ...services.hazards.readings import stations_from_readings

router = APIRouter(prefix="/hazards", tags=["hazards"])


@router.post("/classify", response_model=ClassifyReadingsResponse, status_code=status.HTTP_200_OK)
def classify(payload: ClassifyReadingsRequest) -> ClassifyReadingsResponse:
    """Derive station risk levels from raw water-level readings."""
    try:
        stations = stations_from_readings(reading.to_domain() for reading in payload.readings)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ClassifyReadingsResponse(
        stations=[
            ClassifiedStationModel(
                id=station.id,
                name=station.name,
                lat=station.lat,
                lng=station.lng,
                risk_level=station.risk_level,
            )
            for station in stations
        ]
    )
