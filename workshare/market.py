"""
Compute market clearing.

Scarce inference compute is auctioned across tiers. Each tier bids its
reservation price per FLOP: what an hour of its work is worth to an employer
(the lower of the going wage and the task value) divided by the FLOPs that
hour needs. Bidders are served in descending price order up to their
σ-limited need. The marginal served tier sets one uniform price for
everybody; when plenty of compute is left over there is no scarcity rent and
the price falls back to production cost.

Whatever AI does not cover goes to the human skill bands, and whatever the
bands cannot cover is unmet.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .config import (
    AI_UTILIZATION,
    CLEARING_ALLOCATION_FRACTION,
    FLOPS_PER_EXAFLOP,
    NEGLIGIBLE_AI_SHARE,
    SECONDS_PER_YEAR,
    UNUSED_COMPUTE_FRACTION,
    TierParams,
)
from .labor import (
    BandAllocation,
    SkillBand,
    allocate_human_hours,
    labor_tightness,
    wage_at_ceiling,
)
from .supply import SupplySnapshot

logger = logging.getLogger(__name__)

COST = "cost"
COMPUTE = "compute"
SUBSTITUTABILITY = "substitutability"
HUMAN_CAPACITY = "humanCapacity"
BINDING_CONSTRAINTS = (COST, COMPUTE, SUBSTITUTABILITY, HUMAN_CAPACITY)

# Relative slack for float comparisons between quantities that are equal by
# construction (e.g. the clearing tier's price vs. its own reservation).
_REL_TOL = 1e-9


@dataclass
class TierAllocation:
    """How one tier's demand was split between AI, humans and nobody."""

    tier_id: str
    demand_hours: float
    hours_ai: float
    hours_human: float
    hours_unmet: float
    effective_sigma: float
    ai_market_cost_per_hour: float
    ai_production_cost_per_hour: float
    tier_wage: float
    human_supply: float
    labor_tightness: float
    compute_used: float  # FLOP/s devoted to this tier
    binding_constraint: str
    wage_at_ceiling: bool

    @property
    def hours_done(self) -> float:
        return self.hours_ai + self.hours_human

    @property
    def ai_share(self) -> float:
        """AI fraction of the hours actually done (unmet excluded)."""
        done = self.hours_done
        return self.hours_ai / done if done > 0 else 0.0

    @property
    def human_share(self) -> float:
        return 1.0 - self.ai_share

    @property
    def human_hours_needed(self) -> float:
        return self.demand_hours - self.hours_ai


@dataclass
class MarketClearing:
    """Outcome of one auction round."""

    allocations: List[TierAllocation]
    market_price_per_flop: float
    production_cost_per_flop: float
    clearing_tier: Optional[str]
    available_compute: float  # FLOPs per year
    compute_used: float  # FLOPs per year
    human: BandAllocation

    @property
    def scarcity_premium(self) -> float:
        return self.market_price_per_flop / self.production_cost_per_flop

    @property
    def compute_utilization(self) -> float:
        if self.available_compute <= 0:
            return 0.0
        return min(1.0, self.compute_used / self.available_compute)


def flops_per_hour(flops_exponent: float, efficiency_multiplier: float) -> float:
    """FLOPs one hour of work needs after algorithmic efficiency gains."""
    return 10.0 ** flops_exponent / efficiency_multiplier


def production_cost_per_hour(flops_exponent: float, cost_per_exaflop: float,
                             efficiency_multiplier: float) -> float:
    """What an hour of AI work costs at the raw compute price."""
    exaflops = flops_per_hour(flops_exponent, efficiency_multiplier) / FLOPS_PER_EXAFLOP
    return exaflops * cost_per_exaflop


def available_compute(supply: SupplySnapshot) -> float:
    """Efficiency-adjusted FLOPs per year available for cognitive work."""
    return supply.effective_compute_flops * SECONDS_PER_YEAR * AI_UTILIZATION


def clear_market(
    tiers: Sequence[TierParams],
    demand_hours: Sequence[float],
    sigmas: Sequence[float],
    wages: Sequence[float],
    supply: SupplySnapshot,
    bands: Sequence[SkillBand],
) -> MarketClearing:
    n = len(tiers)
    demand = np.asarray(demand_hours, dtype=float)
    sigmas = np.asarray(sigmas, dtype=float)
    wages = np.asarray(wages, dtype=float)

    fph = np.array([flops_per_hour(t.flops_exponent, supply.efficiency_multiplier) for t in tiers])
    production_price = supply.production_cost_per_flop
    production_cost_hr = production_price * fph
    value_hr = np.minimum(wages, [t.task_value for t in tiers])
    reservation = value_hr / fph
    max_ai_hours = demand * sigmas
    cost_effective = production_cost_hr < value_hr

    # --- Greedy allocation by reservation price ---
    budget = available_compute(supply)
    remaining = budget
    ai_hours = np.zeros(n)
    clearing_index: Optional[int] = None

    bidders = [i for i in range(n) if cost_effective[i] and max_ai_hours[i] > 0]
    bidders.sort(key=lambda i: (-reservation[i], i))
    for i in bidders:
        if remaining <= 0:
            break
        requested = max_ai_hours[i] * fph[i]
        granted = min(requested, remaining)
        ai_hours[i] = granted / fph[i]
        remaining -= granted
        if granted > CLEARING_ALLOCATION_FRACTION * requested:
            clearing_index = i

    unused_fraction = remaining / budget if budget > 0 else 1.0
    if clearing_index is None or unused_fraction > UNUSED_COMPUTE_FRACTION:
        market_price = production_price
    else:
        market_price = max(reservation[clearing_index], production_price)
    logger.debug("year %d: %d bidders, clearing tier %s, premium %.3g",
                 supply.year, len(bidders),
                 tiers[clearing_index].id if clearing_index is not None else None,
                 market_price / production_price)

    # --- Humans take what AI does not ---
    human_needed = np.maximum(demand - ai_hours, 0.0)
    human = allocate_human_hours(bands, human_needed, wages)

    allocations = []
    for i, tier in enumerate(tiers):
        hours_human = min(human.hours[i], human_needed[i])
        unmet = max(demand[i] - ai_hours[i] - hours_human, 0.0)
        market_cost_hr = market_price * fph[i]
        constraint = _classify(
            cost_effective=bool(cost_effective[i]),
            affordable_at_market=market_cost_hr <= value_hr[i] * (1 + _REL_TOL),
            ai_share_of_demand=ai_hours[i] / demand[i] if demand[i] > 0 else 0.0,
            full_sigma_allocation=ai_hours[i] >= max_ai_hours[i] * (1 - _REL_TOL),
            human_saturated=unmet > _REL_TOL * max(demand[i], 1.0) or human.saturated,
        )
        allocations.append(TierAllocation(
            tier_id=tier.id,
            demand_hours=float(demand[i]),
            hours_ai=float(ai_hours[i]),
            hours_human=float(hours_human),
            hours_unmet=float(unmet),
            effective_sigma=float(sigmas[i]),
            ai_market_cost_per_hour=float(market_cost_hr),
            ai_production_cost_per_hour=float(production_cost_hr[i]),
            tier_wage=float(wages[i]),
            human_supply=float(human.supply[i]),
            labor_tightness=labor_tightness(float(human_needed[i]), float(human.supply[i])),
            compute_used=float(ai_hours[i] * fph[i] / SECONDS_PER_YEAR),
            binding_constraint=constraint,
            wage_at_ceiling=wage_at_ceiling(float(wages[i]), tier),
        ))

    return MarketClearing(
        allocations=allocations,
        market_price_per_flop=float(market_price),
        production_cost_per_flop=float(production_price),
        clearing_tier=tiers[clearing_index].id if clearing_index is not None else None,
        available_compute=float(budget),
        compute_used=float(budget - remaining),
        human=human,
    )


def _classify(
    cost_effective: bool,
    affordable_at_market: bool,
    ai_share_of_demand: float,
    full_sigma_allocation: bool,
    human_saturated: bool,
) -> str:
    """Binding constraint, checked in fixed priority order."""
    if not cost_effective:
        return COST
    if not affordable_at_market and ai_share_of_demand < NEGLIGIBLE_AI_SHARE:
        return COMPUTE
    if full_sigma_allocation:
        return SUBSTITUTABILITY
    if human_saturated:
        return HUMAN_CAPACITY
    return SUBSTITUTABILITY
