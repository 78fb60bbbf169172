"""
Human labor side of the market: skill bands and equilibrium wages.

``humanCapable`` is cumulative (the fraction of the workforce able to do a
tier *or any easier one*), so it is differenced into exclusive skill bands.
A band's members may work their own tier or anything easier, never harder.
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .config import WAGE_CEILING_FRACTION, TierParams


@dataclass(frozen=True)
class SkillBand:
    """Workers whose hardest performable tier is ``tier_index``."""

    tier_index: int
    hours: float


@dataclass
class BandAllocation:
    """Result of filling tier demand from the skill bands."""

    hours: np.ndarray  # human hours assigned per tier
    supply: np.ndarray  # per tier: assigned + idle hours of qualified bands
    idle_hours: np.ndarray  # per band, left over after allocation

    @property
    def saturated(self) -> bool:
        """True when every band's hours are used up."""
        total = float(self.hours.sum() + self.idle_hours.sum())
        return float(self.idle_hours.sum()) <= 1e-9 * max(total, 1.0)


def build_skill_bands(human_capable: Sequence[float], workforce_hours: float) -> List[SkillBand]:
    """Difference cumulative capability fractions into exclusive bands.

    Assumes the fractions are non-increasing with difficulty; ``ModelConfig``
    rejects configurations that are not.
    """
    capable = list(human_capable)
    bands = []
    for i, fraction in enumerate(capable):
        harder = capable[i + 1] if i + 1 < len(capable) else 0.0
        bands.append(SkillBand(tier_index=i, hours=(fraction - harder) * workforce_hours))
    return bands


def allocate_human_hours(
    bands: Sequence[SkillBand],
    demand_hours: Sequence[float],
    wages: Sequence[float],
) -> BandAllocation:
    """Greedy fill: most skilled band first, best-paying accessible tier first."""
    remaining_demand = np.array(demand_hours, dtype=float)
    assigned = np.zeros(len(remaining_demand))
    idle = np.array([b.hours for b in bands], dtype=float)

    for band in sorted(bands, key=lambda b: b.tier_index, reverse=True):
        accessible = sorted(
            range(band.tier_index + 1), key=lambda t: (-wages[t], -t)
        )
        for t in accessible:
            if idle[band.tier_index] <= 0:
                break
            take = min(remaining_demand[t], idle[band.tier_index])
            if take <= 0:
                continue
            assigned[t] += take
            remaining_demand[t] -= take
            idle[band.tier_index] -= take

    # Qualified idle hours: bands at or above the tier can still work it.
    supply = np.array([
        assigned[t] + idle[t:].sum() for t in range(len(assigned))
    ])
    return BandAllocation(hours=assigned, supply=supply, idle_hours=idle)


# ============================================================
# Wages
# ============================================================

def base_wage(tier: TierParams, wage_floor: float) -> float:
    return wage_floor * tier.wage_multiplier


def clamp_wage(wage: float, tier: TierParams, wage_floor: float) -> float:
    """Clamp to [floor, taskValue]; the task-value ceiling wins a conflict."""
    return min(max(wage, wage_floor), tier.task_value)


def initial_wages(tiers: Sequence[TierParams], wage_floor: float) -> np.ndarray:
    return np.array([clamp_wage(base_wage(t, wage_floor), t, wage_floor) for t in tiers])


def labor_tightness(hours_needed: float, supply: float) -> float:
    return hours_needed / max(supply, 1.0)


def equilibrium_wage(tier: TierParams, tightness: float, wage_floor: float) -> float:
    """Wage implied by labor-market tightness.

    Shortages push wages up with the tier's elasticity; surpluses are sticky
    downward and can at most halve the base wage.
    """
    base = base_wage(tier, wage_floor)
    if tightness >= 1.0:
        raw = base * tightness ** tier.wage_elasticity
    else:
        raw = base * (0.5 + 0.5 * tightness)
    return clamp_wage(raw, tier, wage_floor)


def wage_at_ceiling(wage: float, tier: TierParams) -> bool:
    return wage >= tier.task_value * WAGE_CEILING_FRACTION
