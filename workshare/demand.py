"""
Cognitive-work demand dynamics.

Demand is not a fixed pool. Three multiplicative components scale the 2024
base hours of each tier:

1. Baseline growth
   GDP/population growth -> (1 + g)^years

2. AI-induced demand (Jevons effect)
   Cheaper cognitive work -> more of it gets done. Log-scaled in the cost
   reduction and gated by each tier's own σ, so a tier AI cannot touch yet
   sees no inflation from a capability that does not exist.

3. New task creation
   Rising average σ opens work categories that did not exist before.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .config import BASE_YEAR, ModelConfig
from .supply import SupplySnapshot


@dataclass(frozen=True)
class DemandSnapshot:
    """Cognitive-work demand for one year, total and per tier."""

    tier_hours: np.ndarray
    total_hours: float
    baseline: float
    ai_induced: float  # share-weighted average of the per-tier multipliers
    new_tasks: float
    growth_from_baseline: float
    tier_ai_induced: np.ndarray


def cost_reduction_factor(supply: SupplySnapshot, base_cost_per_exaflop: float) -> float:
    """Effective AI cost today relative to 2024, floored at 1% (two decades)."""
    effective_cost_reduction = 1.0 - (
        supply.cost_per_exaflop / supply.efficiency_multiplier
    ) / base_cost_per_exaflop
    return max(0.01, 1.0 - effective_cost_reduction)


def ai_induced_multipliers(sigmas: Sequence[float], elasticity: float,
                           reduction_factor: float) -> np.ndarray:
    decades_cheaper = np.log10(1.0 / reduction_factor)
    raw = 1.0 + elasticity * np.asarray(sigmas, dtype=float) * decades_cheaper
    return np.maximum(1.0, raw)


def project_demand(
    config: ModelConfig,
    year: int,
    sigmas: Sequence[float],
    base_average_sigma: float,
    supply: SupplySnapshot,
    base_cost_per_exaflop: float,
) -> DemandSnapshot:
    years = max(year - BASE_YEAR, 0)
    shares = np.array([t.share for t in config.tiers], dtype=float)
    sigmas = np.asarray(sigmas, dtype=float)

    baseline = (1.0 + config.baseline_demand_growth) ** years

    reduction = cost_reduction_factor(supply, base_cost_per_exaflop)
    tier_induced = ai_induced_multipliers(sigmas, config.demand_elasticity, reduction)
    ai_induced = float(np.dot(shares, tier_induced))

    average_sigma = float(np.dot(shares, sigmas))
    new_tasks = 1.0 + config.new_task_creation_rate * (average_sigma - base_average_sigma)

    base_hours = config.workforce_hours
    tier_hours = base_hours * shares * baseline * tier_induced * new_tasks
    total = float(tier_hours.sum())

    return DemandSnapshot(
        tier_hours=tier_hours,
        total_hours=total,
        baseline=baseline,
        ai_induced=ai_induced,
        new_tasks=new_tasks,
        growth_from_baseline=total / base_hours - 1.0,
        tier_ai_induced=tier_induced,
    )
