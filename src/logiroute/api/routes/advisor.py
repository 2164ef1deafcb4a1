"""Advisor endpoints. Both answer with ``available: false`` instead of failing when the advisor is down."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.advisor import ProposalRequest, ProposalResponse, RebalanceRequest, RebalanceResponse
from ...services.advisor.service import propose_routes, rebalance_stock

router = APIRouter(prefix="/advisor", tags=["advisor"])


@router.post("/rebalance", response_model=RebalanceResponse, status_code=status.HTTP_200_OK)
def rebalance(payload: RebalanceRequest) -> RebalanceResponse:
    return rebalance_stock(payload)


@router.post("/propose-route", response_model=ProposalResponse, status_code=status.HTTP_200_OK)
def propose_route(payload: ProposalRequest) -> ProposalResponse:
    return propose_routes(payload)
