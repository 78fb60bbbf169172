"""
Workshare projection engine.

Runs the model one calendar year at a time from 2024 to
``max(year, 2050)``. Each year is self-contained:

1. σ per tier from the substitutability curves
2. compute capacity, efficiency and unit cost
3. cognitive-work demand per tier
4. joint wage/compute equilibrium (auction + skill bands + wage rule)

Only two scalars span years: the first year AI production cost beats the
human wage floor on average (crossover) and the first year no tier is
compute-bound while that also holds (compute sufficiency). Both are taken as
the minimum qualifying year, so the order in which years are evaluated does
not matter.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .config import BASE_YEAR, ModelConfig, TierParams
from .demand import project_demand
from .equilibrium import solve_equilibrium
from .labor import build_skill_bands
from .market import BINDING_CONSTRAINTS, COMPUTE, TierAllocation
from .substitutability import base_average_substitutability, tier_sigmas
from .supply import compute_cost, project_supply

logger = logging.getLogger(__name__)


@dataclass
class DemandComponents:
    """Multiplicative factors behind the year's demand growth."""

    baseline: float
    ai_induced: float
    new_tasks: float


@dataclass
class YearlyProjection:
    """Full snapshot of one projected year."""

    year: int

    # Supply
    total_compute_flops: float
    effective_compute_flops: float
    efficiency_multiplier: float
    compute_cost_per_exaflop: float

    # Demand
    total_cognitive_work_hours: float
    demand_growth_from_baseline: float
    demand_components: DemandComponents

    # Aggregates
    total_ai_hours: float
    total_human_hours: float
    total_unmet_hours: float
    ai_task_share: float
    human_task_share: float
    unmet_share: float
    human_wage_equilibrium: float  # hours-weighted across tiers
    average_substitutability: float

    # Compute market
    market_price_per_flop: float
    production_cost_per_flop: float
    scarcity_premium: float
    clearing_tier: Optional[str]
    compute_utilization: float

    tier_allocations: List[TierAllocation]
    primary_binding_constraint: str
    solver_iterations: int
    solver_converged: bool

    def allocation(self, tier_id: str) -> TierAllocation:
        for alloc in self.tier_allocations:
            if alloc.tier_id == tier_id:
                return alloc
        raise KeyError(f"Unknown tier '{tier_id}'")


@dataclass
class ModelSummary:
    crossover_year: Optional[int]
    compute_sufficiency_year: Optional[int]
    final_ai_share: float
    final_human_share: float
    final_unmet_share: float
    final_human_wage: float
    tier_ai_shares: Dict[str, float]


@dataclass
class ModelOutputs:
    """Projections in ascending year order, the resolved tiers and a summary."""

    projections: List[YearlyProjection]
    tiers: Tuple[TierParams, ...]
    summary: ModelSummary

    def projection(self, year: int) -> YearlyProjection:
        for p in self.projections:
            if p.year == year:
                return p
        raise KeyError(f"No projection for year {year}")

    def to_frame(self) -> pd.DataFrame:
        """One row per year with the aggregate series."""
        rows = []
        for p in self.projections:
            rows.append({
                "year": p.year,
                "total_compute_flops": p.total_compute_flops,
                "effective_compute_flops": p.effective_compute_flops,
                "efficiency_multiplier": p.efficiency_multiplier,
                "compute_cost_per_exaflop": p.compute_cost_per_exaflop,
                "total_cognitive_work_hours": p.total_cognitive_work_hours,
                "demand_growth_from_baseline": p.demand_growth_from_baseline,
                "demand_baseline": p.demand_components.baseline,
                "demand_ai_induced": p.demand_components.ai_induced,
                "demand_new_tasks": p.demand_components.new_tasks,
                "total_ai_hours": p.total_ai_hours,
                "total_human_hours": p.total_human_hours,
                "total_unmet_hours": p.total_unmet_hours,
                "ai_task_share": p.ai_task_share,
                "human_task_share": p.human_task_share,
                "unmet_share": p.unmet_share,
                "human_wage_equilibrium": p.human_wage_equilibrium,
                "average_substitutability": p.average_substitutability,
                "market_price_per_flop": p.market_price_per_flop,
                "production_cost_per_flop": p.production_cost_per_flop,
                "scarcity_premium": p.scarcity_premium,
                "clearing_tier": p.clearing_tier,
                "compute_utilization": p.compute_utilization,
                "primary_binding_constraint": p.primary_binding_constraint,
                "solver_iterations": p.solver_iterations,
                "solver_converged": p.solver_converged,
            })
        return pd.DataFrame(rows).set_index("year")

    def tier_frame(self) -> pd.DataFrame:
        """Long format: one row per (year, tier)."""
        rows = []
        for p in self.projections:
            for a in p.tier_allocations:
                rows.append({
                    "year": p.year,
                    "tier": a.tier_id,
                    "demand_hours": a.demand_hours,
                    "hours_ai": a.hours_ai,
                    "hours_human": a.hours_human,
                    "hours_unmet": a.hours_unmet,
                    "ai_share": a.ai_share,
                    "human_share": a.human_share,
                    "effective_sigma": a.effective_sigma,
                    "ai_market_cost_per_hour": a.ai_market_cost_per_hour,
                    "ai_production_cost_per_hour": a.ai_production_cost_per_hour,
                    "tier_wage": a.tier_wage,
                    "human_supply": a.human_supply,
                    "labor_tightness": a.labor_tightness,
                    "compute_used": a.compute_used,
                    "binding_constraint": a.binding_constraint,
                    "wage_at_ceiling": a.wage_at_ceiling,
                })
        return pd.DataFrame(rows).set_index(["year", "tier"])


def _primary_constraint(tiers: Tuple[TierParams, ...],
                        allocations: List[TierAllocation]) -> str:
    """Constraint covering the largest share of work; ties keep declaration order."""
    weight = {c: 0.0 for c in BINDING_CONSTRAINTS}
    for tier, alloc in zip(tiers, allocations):
        weight[alloc.binding_constraint] += tier.share
    return max(BINDING_CONSTRAINTS, key=lambda c: weight[c])


def _average_ai_cost(tiers: Tuple[TierParams, ...],
                     allocations: List[TierAllocation]) -> float:
    return sum(t.share * a.ai_production_cost_per_hour for t, a in zip(tiers, allocations))


def project_year(config: ModelConfig, year: int) -> YearlyProjection:
    """Evaluate a single year. Pure in ``(config, year)``."""
    tiers = config.tiers
    sigmas = tier_sigmas(tiers, year)
    shares = np.array([t.share for t in tiers])

    supply = project_supply(config, year)
    base_cost = compute_cost(config.compute_cost_exponent, config.cost_decline_rate, 0)
    demand = project_demand(
        config, year, sigmas, base_average_substitutability(tiers), supply, base_cost,
    )

    bands = build_skill_bands([t.human_capable for t in tiers], config.workforce_hours)
    eq = solve_equilibrium(
        tiers, demand.tier_hours, sigmas, supply, bands, config.human_wage_floor,
    )
    market = eq.market
    allocations = market.allocations

    total_ai = sum(a.hours_ai for a in allocations)
    total_human = sum(a.hours_human for a in allocations)
    total_unmet = sum(a.hours_unmet for a in allocations)
    total_demand = demand.total_hours
    if total_human > 0:
        wage = sum(a.tier_wage * a.hours_human for a in allocations) / total_human
    else:
        wage = config.human_wage_floor

    def share(hours: float) -> float:
        return hours / total_demand if total_demand > 0 else 0.0

    return YearlyProjection(
        year=year,
        total_compute_flops=supply.total_compute_flops,
        effective_compute_flops=supply.effective_compute_flops,
        efficiency_multiplier=supply.efficiency_multiplier,
        compute_cost_per_exaflop=supply.cost_per_exaflop,
        total_cognitive_work_hours=total_demand,
        demand_growth_from_baseline=demand.growth_from_baseline,
        demand_components=DemandComponents(
            baseline=demand.baseline,
            ai_induced=demand.ai_induced,
            new_tasks=demand.new_tasks,
        ),
        total_ai_hours=total_ai,
        total_human_hours=total_human,
        total_unmet_hours=total_unmet,
        ai_task_share=share(total_ai),
        human_task_share=share(total_human),
        unmet_share=share(total_unmet),
        human_wage_equilibrium=wage,
        average_substitutability=float(np.dot(shares, sigmas)),
        market_price_per_flop=market.market_price_per_flop,
        production_cost_per_flop=market.production_cost_per_flop,
        scarcity_premium=market.scarcity_premium,
        clearing_tier=market.clearing_tier,
        compute_utilization=market.compute_utilization,
        tier_allocations=allocations,
        primary_binding_constraint=_primary_constraint(tiers, allocations),
        solver_iterations=eq.iterations,
        solver_converged=eq.converged,
    )


class WorkshareModel:
    """Multi-year projection for one configuration."""

    def __init__(self, config: ModelConfig):
        self.config = config

    def years(self) -> range:
        return range(BASE_YEAR, self.config.end_year + 1)

    def run(self) -> ModelOutputs:
        cfg = self.config
        logger.info("running projection %d-%d (target %d)",
                    BASE_YEAR, cfg.end_year, cfg.year)
        projections = [project_year(cfg, year) for year in self.years()]

        crossover = []
        sufficiency = []
        for p in projections:
            cost_competitive = (
                _average_ai_cost(cfg.tiers, p.tier_allocations) < cfg.human_wage_floor
            )
            if cost_competitive:
                crossover.append(p.year)
                if all(a.binding_constraint != COMPUTE for a in p.tier_allocations):
                    sufficiency.append(p.year)

        unconverged = [p.year for p in projections if not p.solver_converged]
        if unconverged:
            logger.debug("solver hit the iteration cap in %d year(s): %s",
                         len(unconverged), unconverged)

        # A target year before the base year has no projection of its own.
        target = next((p for p in projections if p.year == cfg.year), None)
        summary = ModelSummary(
            crossover_year=min(crossover) if crossover else None,
            compute_sufficiency_year=min(sufficiency) if sufficiency else None,
            final_ai_share=target.ai_task_share if target else 0.0,
            final_human_share=target.human_task_share if target else 0.0,
            final_unmet_share=target.unmet_share if target else 0.0,
            final_human_wage=target.human_wage_equilibrium if target else cfg.human_wage_floor,
            tier_ai_shares=(
                {a.tier_id: a.ai_share for a in target.tier_allocations} if target else {}
            ),
        )
        return ModelOutputs(projections=projections, tiers=cfg.tiers, summary=summary)


def run_model(values: Mapping[str, float]) -> ModelOutputs:
    """Run the full projection for a flat parameter map."""
    return WorkshareModel(ModelConfig.from_values(values)).run()
