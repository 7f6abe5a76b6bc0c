"""Navigation endpoints."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.navigation import HazardRefreshRequest, NavigationRequestModel, NavigationResponse
from ...services.detour.controller import DetourController
from ...services.detour.models import NavigationRequest
from ...services.outputs.status_formatter import outcome_to_json
from ...services.routing.osrm_client import OSRMClient

router = APIRouter(prefix="/navigation", tags=["navigation"])
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_detour_controller() -> DetourController:
    try:
        provider = OSRMClient()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="OSRM service is not configured. Please check FLOODROUTE_OSRM_BASE_URL setting.",
        ) from e
    return DetourController(provider)


@router.post("/evaluate", response_model=NavigationResponse, status_code=status.HTTP_200_OK)
def evaluate(
    payload: NavigationRequestModel,
    controller: DetourController = Depends(get_detour_controller),
) -> NavigationResponse:
    request = NavigationRequest(
        session_id=payload.session_id,
        origin=payload.origin.to_domain(),
        destination=payload.destination.to_domain(),
        vehicle_profile=payload.vehicle_profile,
        avoid_hazards=payload.avoid_hazards,
    )
    stations = [station.to_domain() for station in payload.stations]
    try:
        outcome = controller.evaluate(request, stations)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error evaluating route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to evaluate route: {str(exc)}",
        ) from exc
    return NavigationResponse(**outcome_to_json(outcome))


@router.post("/{session_id}/hazards", response_model=NavigationResponse, status_code=status.HTTP_200_OK)
def refresh_hazards(
    session_id: str,
    payload: HazardRefreshRequest,
    controller: DetourController = Depends(get_detour_controller),
) -> NavigationResponse:
    """Re-evaluate a session's route against a new hazard snapshot."""
    stations = [station.to_domain() for station in payload.stations]
    try:
        outcome = controller.on_hazard_refresh(session_id, stations)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown navigation session '{session_id}'",
        ) from exc
    except Exception as exc:
        logger.exception(f"Error refreshing hazards: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to refresh hazards: {str(exc)}",
        ) from exc
    return NavigationResponse(**outcome_to_json(outcome))


@router.delete("/{session_id}", status_code=status.HTTP_200_OK)
def forget_session(
    session_id: str,
    controller: DetourController = Depends(get_detour_controller),
) -> dict:
    if not controller.forget(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown navigation session '{session_id}'",
        )
    return {"success": True, "message": f"Session {session_id} cleared"}
