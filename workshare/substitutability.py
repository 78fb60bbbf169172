"""
Per-tier substitutability (σ) curves.

σ follows a logistic S-curve in *deployed* time: the calendar year shifted
back by the tier's deployment lag, since capability that exists in a lab is
not yet doing work at scale.

    σ(year) = initial + (max - initial) / (1 + exp(-k * (year - lag - midpoint)))

The result is clamped to [0, min(1, max)], so ``maxSigma`` is a hard ceiling.
"""

from typing import Sequence

import numpy as np

from .config import BASE_YEAR, TierParams


def _stable_sigmoid(z: float) -> float:
    if z >= 0:
        return float(1.0 / (1.0 + np.exp(-z)))
    exp_z = np.exp(z)
    return float(exp_z / (1.0 + exp_z))


def tier_substitutability(tier: TierParams, year: float) -> float:
    effective_year = year - tier.deployment_lag
    progress = _stable_sigmoid(tier.sigma_steepness * (effective_year - tier.sigma_midpoint))
    sigma = tier.initial_sigma + (tier.max_sigma - tier.initial_sigma) * progress
    ceiling = min(1.0, max(0.0, tier.max_sigma))
    return min(max(sigma, 0.0), ceiling)


def tier_sigmas(tiers: Sequence[TierParams], year: float) -> np.ndarray:
    """σ for every tier in ``year``, in tier order."""
    return np.array([tier_substitutability(t, year) for t in tiers], dtype=float)


def average_substitutability(tiers: Sequence[TierParams], year: float) -> float:
    """Share-weighted mean σ across tiers."""
    shares = np.array([t.share for t in tiers], dtype=float)
    return float(np.dot(shares, tier_sigmas(tiers, year)))


def base_average_substitutability(tiers: Sequence[TierParams]) -> float:
    return average_substitutability(tiers, BASE_YEAR)
