"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import CompareRequest, CompareResponse, TourRequest, TourResponse
from ...services.routing.service import compare_strategies, plan_tour

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/tour", response_model=TourResponse, status_code=status.HTTP_200_OK)
def tour(payload: TourRequest) -> TourResponse:
    try:
        return plan_tour(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error building tour: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build tour: {str(exc)}",
        ) from exc


@router.post("/compare", response_model=CompareResponse, status_code=status.HTTP_200_OK)
def compare(payload: CompareRequest) -> CompareResponse:
    try:
        return compare_strategies(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error comparing strategies: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compare strategies: {str(exc)}",
        ) from exc
