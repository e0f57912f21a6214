"""
Fare Estimation Engine  (Strategy Pattern)
==========================================

Formula
-------
Fare = (Base_Fare + Distance x Rate_Per_KM)
       x Surge_Multiplier x Traffic_Factor x Weather_Factor x Time_Factor

* Distance is the Haversine great-circle distance in km.
* Every situational factor defaults to 1.0 (no effect) when absent.
* The result is rounded to 2 decimal places.

Non-positive multipliers are passed through untouched; the request schema
is where they get rejected.

Complexity: O(1) per quote.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .distance import distance
from .entities import Location

BASE_FARE = 5.0
RATE_PER_KM = 2.0


@dataclass(frozen=True)
class PricingFactors:
    traffic_factor: float = 1.0
    weather_factor: float = 1.0
    time_factor: float = 1.0

    @property
    def combined(self) -> float:
        return self.traffic_factor * self.weather_factor * self.time_factor


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float: ...


class StandardPricing(PricingStrategy):
    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float:
        return base_fare + distance_km * rate_per_km


class MultiplierPricing(PricingStrategy):
    """Scales the standard fare by surge and the situational factors."""

    def __init__(
        self,
        surge_multiplier: float = 1.0,
        factors: Optional[PricingFactors] = None,
    ):
        self.surge_multiplier = surge_multiplier
        self.factors = factors or PricingFactors()
        self._base = StandardPricing()

    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float:
        raw = self._base.calculate(distance_km, base_fare, rate_per_km)
        return raw * self.surge_multiplier * self.factors.combined


# ── Engine facade ─────────────────────────────────────────────────────


class FareEstimator:
    """High-level API used by the ``/ride-price`` endpoint."""

    def __init__(self, base_fare: float = BASE_FARE, rate_per_km: float = RATE_PER_KM):
        self.base_fare = base_fare
        self.rate_per_km = rate_per_km

    def estimate(
        self,
        pickup: Location,
        destination: Location,
        surge_multiplier: float = 1.0,
        factors: Optional[PricingFactors] = None,
    ) -> float:
        distance_km = distance(pickup, destination)
        strategy = MultiplierPricing(surge_multiplier, factors)
        return round(
            strategy.calculate(distance_km, self.base_fare, self.rate_per_km), 2
        )
