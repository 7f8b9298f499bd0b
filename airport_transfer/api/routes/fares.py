"""
Fare endpoints
==============

GET /api/v1/fares                  -- every vehicle class with its fare
GET /api/v1/fares/{vehicle_class}  -- fare for one vehicle class
"""

from fastapi import APIRouter, Depends

from airport_transfer.api.dependencies import get_estimator
from airport_transfer.api.schemas import FareQuoteResponse
from airport_transfer.domain.pricing import FareEstimator, parse_vehicle_class

router = APIRouter(prefix="/fares", tags=["fares"])


@router.get("", response_model=list[FareQuoteResponse], summary="List fares")
async def list_fares(estimator: FareEstimator = Depends(get_estimator)):
    return estimator.quote_all()


@router.get(
    "/{vehicle_class}",
    response_model=FareQuoteResponse,
    summary="Estimate the fare for a vehicle class",
)
async def get_fare(
    vehicle_class: str, estimator: FareEstimator = Depends(get_estimator)
):
    vc = parse_vehicle_class(vehicle_class)
    fare = estimator.estimate(vc)
    rate = estimator.rates[vc]
    return FareQuoteResponse(
        vehicle_class=vc, label=rate.label, seats=rate.seats, fare=fare
    )
