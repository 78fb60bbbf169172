"""
Compute supply pipeline.

Three compounding series, each with a rate that can itself decay year over
year (Moore's-law slowdown, low-hanging algorithmic fruit getting picked,
hardware price/performance plateaus):

- raw compute    = 10^base * prod(1 + rate * (1 - decay)^y)
- efficiency     = prod(factor ^ ((1 - decay)^y))
- unit cost      = 10^cost * prod(1 - decline * (1 - decay)^y)

Every year is rebuilt from year 0, so a year's numbers never depend on which
other years were evaluated first.
"""

from dataclasses import dataclass

import numpy as np

from .config import BASE_YEAR, FLOPS_PER_EXAFLOP, ModelConfig


@dataclass(frozen=True)
class SupplySnapshot:
    """Compute capacity and cost for one calendar year."""

    year: int
    total_compute_flops: float  # installed FLOP/s
    efficiency_multiplier: float  # algorithmic gain vs 2024
    effective_compute_flops: float  # raw capacity * efficiency
    cost_per_exaflop: float  # $ per 10^18 FLOPs

    @property
    def production_cost_per_flop(self) -> float:
        return self.cost_per_exaflop / FLOPS_PER_EXAFLOP


def _decaying_rates(rate: float, decay: float, years: int) -> np.ndarray:
    return rate * (1.0 - decay) ** np.arange(years, dtype=float)


def total_compute(base_exponent: float, growth_rate: float, years: int,
                  growth_decay: float = 0.0) -> float:
    """Installed inference compute in FLOP/s, ``years`` after the base year."""
    base = 10.0 ** base_exponent
    if growth_decay == 0 or years <= 0:
        return base * (1.0 + growth_rate) ** max(years, 0)
    return base * float(np.prod(1.0 + _decaying_rates(growth_rate, growth_decay, years)))


def efficiency_multiplier(improvement: float, years: int, decay: float = 0.0) -> float:
    """Cumulative algorithmic efficiency gain; the log of the yearly factor decays."""
    if decay == 0 or years <= 0:
        return improvement ** max(years, 0)
    exponents = (1.0 - decay) ** np.arange(years, dtype=float)
    return float(np.prod(improvement ** exponents))


def compute_cost(base_cost_exponent: float, decline_rate: float, years: int,
                 decline_decay: float = 0.0) -> float:
    """Dollars per exaFLOP ``years`` after the base year."""
    base = 10.0 ** base_cost_exponent
    if decline_decay == 0 or years <= 0:
        return base * (1.0 - decline_rate) ** max(years, 0)
    return base * float(np.prod(1.0 - _decaying_rates(decline_rate, decline_decay, years)))


def project_supply(config: ModelConfig, year: int) -> SupplySnapshot:
    years = year - BASE_YEAR
    raw = total_compute(
        config.base_compute_exponent, config.compute_growth_rate, years,
        config.compute_growth_decay,
    )
    multiplier = efficiency_multiplier(
        config.efficiency_improvement, years, config.efficiency_decay,
    )
    cost = compute_cost(
        config.compute_cost_exponent, config.cost_decline_rate, years,
        config.cost_decline_decay,
    )
    return SupplySnapshot(
        year=year,
        total_compute_flops=raw,
        efficiency_multiplier=multiplier,
        effective_compute_flops=raw * multiplier,
        cost_per_exaflop=cost,
    )
