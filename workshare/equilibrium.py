"""
Joint wage/compute equilibrium.

Wages and compute bids depend on each other: a higher wage raises a tier's
reservation price and pulls in more compute, and more AI hours loosen the
human labor market and pull the wage back down. The fixed point is found by
damped iteration:

    run auction -> tightness per tier -> target wage -> w = 0.7 w + 0.3 target

until no wage moves by more than 1% (relative) or the iteration cap is hit.
The auction is then run one last time so the reported state, including the
binding-constraint labels, reflects the final wages.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .config import (
    MAX_SOLVER_ITERATIONS,
    SOLVER_TOLERANCE,
    WAGE_DAMPING,
    TierParams,
)
from .labor import SkillBand, equilibrium_wage, initial_wages
from .market import MarketClearing, clear_market
from .supply import SupplySnapshot

logger = logging.getLogger(__name__)


@dataclass
class EquilibriumResult:
    market: MarketClearing
    wages: np.ndarray
    iterations: int
    converged: bool


def _max_relative_change(old: np.ndarray, new: np.ndarray) -> float:
    denom = np.maximum(np.abs(old), 1e-12)
    return float(np.max(np.abs(new - old) / denom)) if len(old) else 0.0


def solve_equilibrium(
    tiers: Sequence[TierParams],
    demand_hours: Sequence[float],
    sigmas: Sequence[float],
    supply: SupplySnapshot,
    bands: Sequence[SkillBand],
    wage_floor: float,
    max_iterations: int = MAX_SOLVER_ITERATIONS,
    tolerance: float = SOLVER_TOLERANCE,
    damping: float = WAGE_DAMPING,
) -> EquilibriumResult:
    wages = initial_wages(tiers, wage_floor)
    converged = False
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        market = clear_market(tiers, demand_hours, sigmas, wages, supply, bands)
        targets = np.array([
            equilibrium_wage(tier, alloc.labor_tightness, wage_floor)
            for tier, alloc in zip(tiers, market.allocations)
        ])
        updated = (1.0 - damping) * wages + damping * targets
        change = _max_relative_change(wages, updated)
        wages = updated
        logger.debug("year %d iteration %d: max wage change %.4f",
                     supply.year, iterations, change)
        if change < tolerance:
            converged = True
            break

    if not converged:
        logger.debug("year %d: wages did not converge in %d iterations",
                     supply.year, max_iterations)

    market = clear_market(tiers, demand_hours, sigmas, wages, supply, bands)
    return EquilibriumResult(market=market, wages=wages,
                             iterations=iterations, converged=converged)
