"""
Fare Estimator  (Strategy Pattern)
==================================

Formula
-------
Fare = round(Base_Rate(vehicle_class) x Multiplier(vehicle_class))

The service runs a single fixed corridor (Haridwar <-> Dehradun Airport),
so the fare is a static lookup by vehicle class.  Trip distance and live
demand are deliberately not inputs.

The fare is computed once when a booking is submitted and stored with it;
changing the rate table later never touches existing bookings.

Complexity: O(1) per estimate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

from .enums import VehicleClass
from .errors import InvalidVehicleClass


@dataclass(frozen=True)
class VehicleRate:
    label: str
    seats: int
    base_rate: int  # INR
    multiplier: float


DEFAULT_RATES: dict[VehicleClass, VehicleRate] = {
    VehicleClass.STANDARD: VehicleRate("Sedan (4 Seats)", 4, 2000, 1.0),
    VehicleClass.PREMIUM_LARGE: VehicleRate("SUV (6 Seats)", 6, 3500, 1.3),
    VehicleClass.PREMIUM_SEDAN: VehicleRate("Premium Sedan", 4, 5500, 1.8),
}


def parse_vehicle_class(value) -> VehicleClass:
    """Coerce *value* to a ``VehicleClass`` or raise ``InvalidVehicleClass``."""
    if isinstance(value, VehicleClass):
        return value
    try:
        return VehicleClass(value)
    except ValueError:
        raise InvalidVehicleClass(f"Unknown vehicle class: {value!r}") from None


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, rate: VehicleRate) -> int: ...


class StaticCorridorPricing(PricingStrategy):
    def calculate(self, rate: VehicleRate) -> int:
        return round(rate.base_rate * rate.multiplier)


# ── Estimator facade ──────────────────────────────────────────────────


@dataclass(frozen=True)
class FareQuote:
    vehicle_class: VehicleClass
    label: str
    seats: int
    fare: int


class FareEstimator:
    """High-level API used by the lifecycle engine and the API layer."""

    def __init__(
        self,
        rates: Mapping[VehicleClass, VehicleRate] | None = None,
        strategy: PricingStrategy | None = None,
    ):
        self.rates = dict(rates if rates is not None else DEFAULT_RATES)
        self.strategy = strategy or StaticCorridorPricing()

    def estimate(self, vehicle_class) -> int:
        vc = parse_vehicle_class(vehicle_class)
        rate = self.rates.get(vc)
        if rate is None:
            raise InvalidVehicleClass(f"No rate configured for {vc.value!r}")
        return max(0, self.strategy.calculate(rate))

    def quote_all(self) -> list[FareQuote]:
        return [
            FareQuote(vc, rate.label, rate.seats, self.estimate(vc))
            for vc, rate in self.rates.items()
        ]


_default_estimator = FareEstimator()


def estimate(vehicle_class) -> int:
    """Fare for *vehicle_class* under the default rate table."""
    return _default_estimator.estimate(vehicle_class)
