"""
Configuration for the AI Workshare model.

Defines the parameter schema (the flat ``id -> number`` map that callers
edit), the five cognitive-work tiers with their illustrative defaults, the
typed configuration aggregate the engine actually consumes, engine
constants that are deliberately not exposed as parameters, and named
scenario presets.

Tier-specific parameters use synthesized keys of the form
``tier_<tierId>_<field>``; the flat map only exists at this boundary.
Inside the engine everything flows through ``ModelConfig`` / ``TierParams``.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Tuple

from .exceptions import ConfigurationError

ParameterValues = Dict[str, float]

# --- Projection horizon ---
BASE_YEAR = 2024
MIN_END_YEAR = 2050

# --- Global labor statistics (2024 baseline) ---
GLOBAL_WORKFORCE = 3.4e9  # ILO ILOSTAT 2023: global employment
HOURS_PER_WORKER_YEAR = 1800.0  # OECD average hours worked per year

# --- Compute market constants (not user-adjustable) ---
SECONDS_PER_YEAR = 365.25 * 24 * 3600
AI_UTILIZATION = 0.30  # fraction of installed capacity serving cognitive work
FLOPS_PER_EXAFLOP = 1e18
CLEARING_ALLOCATION_FRACTION = 0.01  # >1% of requested compute makes a tier "served"
UNUSED_COMPUTE_FRACTION = 0.10  # >10% idle compute means no scarcity pricing
NEGLIGIBLE_AI_SHARE = 0.01

# --- Wage/compute equilibrium solver ---
MAX_SOLVER_ITERATIONS = 20
SOLVER_TOLERANCE = 0.01  # max relative wage change per iteration
WAGE_DAMPING = 0.3  # weight of the newly computed wage in each update
WAGE_CEILING_FRACTION = 0.99

TIER_IDS: Tuple[str, ...] = ("routine", "standard", "complex", "expert", "frontier")

TIER_FIELDS: Tuple[str, ...] = (
    "flops",
    "share",
    "initialSigma",
    "maxSigma",
    "sigmaMidpoint",
    "sigmaSteepness",
    "deploymentLag",
    "humanCapable",
    "wageMultiplier",
    "taskValue",
    "wageElasticity",
)


def tier_key(tier_id: str, field_name: str) -> str:
    """Flat-map key for a per-tier parameter, e.g. ``tier_routine_flops``."""
    return f"tier_{tier_id}_{field_name}"


@dataclass(frozen=True)
class Parameter:
    """One user-facing parameter with its default and allowed range."""

    id: str
    label: str
    description: str
    default: float
    min: float
    max: float
    step: float
    unit: str = ""
    format: str = "number"  # number | percent | scientific | currency
    group: str = "compute"  # compute | economic | demand | tiers
    tier: Optional[str] = None

    def clamp(self, value: float) -> float:
        return min(self.max, max(self.min, value))


@dataclass(frozen=True)
class TierConfig:
    """Static defaults for one cognitive-work tier."""

    id: str
    name: str
    description: str
    flops: float  # FLOPs per hour of work, exponent of 10
    share: float  # fraction of cognitive work in this tier
    initial_sigma: float
    max_sigma: float
    sigma_midpoint: float  # year σ is halfway between initial and max
    sigma_steepness: float  # 1 = gradual (~5yr), 3 = sharp (~2yr), 5 = step-like
    deployment_lag: float  # years between capability existing and being deployed
    human_capable: float  # cumulative fraction of workforce able to do this tier or easier
    wage_multiplier: float  # minimum wage as a multiple of the wage floor
    task_value: float  # $/hr ceiling employers will pay
    wage_elasticity: float  # wage response to labor-market tightness


# Five tiers ordered from easiest to hardest. Defaults are illustrative.
TIER_CONFIGS: List[TierConfig] = [
    TierConfig("routine", "Routine", "Email drafts, simple lookups, form filling",
               12, 0.25, 0.10, 1.00, 2026, 2.0, 1.0, 0.90, 1.0, 30, 0.3),
    TierConfig("standard", "Standard", "Document summarization, code review, data analysis",
               14, 0.35, 0.10, 0.98, 2027, 1.5, 1.0, 0.65, 1.5, 60, 0.5),
    TierConfig("complex", "Complex", "Multi-step research, strategic planning",
               16, 0.25, 0.05, 0.95, 2029, 1.2, 2.0, 0.35, 2.5, 150, 0.8),
    TierConfig("expert", "Expert", "Novel research, high-stakes decisions",
               18, 0.12, 0.05, 0.90, 2032, 1.0, 2.0, 0.12, 5.0, 400, 1.2),
    TierConfig("frontier", "Frontier", "Breakthrough innovation, trust-critical work",
               20, 0.03, 0.02, 0.80, 2035, 0.8, 3.0, 0.03, 10.0, 1000, 1.5),
]

TIER_CONFIGS_BY_ID: Dict[str, TierConfig] = {t.id: t for t in TIER_CONFIGS}

# field -> (TierConfig attribute, label suffix, min, max, step, unit, format, description)
_TIER_FIELD_SPECS: Dict[str, Tuple[str, str, float, float, float, str, str, str]] = {
    "flops": ("flops", "FLOPs/hr", 12, 30, 1, "10^X", "number",
              "FLOPs required per hour of this tier's work (exponent of 10)."),
    "share": ("share", "Work Share", 0.01, 0.50, 0.01, "", "percent",
              "Fraction of total cognitive work in this tier."),
    "initialSigma": ("initial_sigma", "σ (start)", 0.01, 0.90, 0.05, "", "number",
                     "Substitutability at the start of the S-curve."),
    "maxSigma": ("max_sigma", "σ (max)", 0.05, 1.0, 0.05, "", "number",
                 "Highest substitutability this tier can ever reach."),
    "sigmaMidpoint": ("sigma_midpoint", "σ Midpoint", 2024, 2050, 1, "", "number",
                      "Year σ is halfway between its start and max (the breakthrough year)."),
    "sigmaSteepness": ("sigma_steepness", "σ Steepness", 0.3, 5, 0.1, "", "number",
                       "Sharpness of the S-curve transition."),
    "deploymentLag": ("deployment_lag", "Deployment Lag", 0, 10, 0.5, "years", "number",
                      "Years between AI being capable of the work and doing it at scale."),
    "humanCapable": ("human_capable", "Human %", 0.01, 1.0, 0.05, "", "percent",
                     "Fraction of the workforce able to perform this tier or any easier one."),
    "wageMultiplier": ("wage_multiplier", "Wage ×", 1.0, 20.0, 0.5, "×", "number",
                       "Minimum wage for this tier as a multiple of the wage floor."),
    "taskValue": ("task_value", "Task Value", 10, 2000, 10, "$/hr", "currency",
                  "Maximum $/hr employers will pay for this tier (wage ceiling)."),
    "wageElasticity": ("wage_elasticity", "Wage ε", 0.1, 2.0, 0.1, "", "number",
                       "How fast wages rise when workers for this tier are scarce."),
}


def _tier_parameters() -> List[Parameter]:
    params = []
    for tier in TIER_CONFIGS:
        for field_name in TIER_FIELDS:
            attr, suffix, lo, hi, step, unit, fmt, desc = _TIER_FIELD_SPECS[field_name]
            params.append(Parameter(
                id=tier_key(tier.id, field_name),
                label=f"{tier.name}: {suffix}",
                description=desc,
                default=getattr(tier, attr),
                min=lo, max=hi, step=step, unit=unit, format=fmt,
                group="tiers", tier=tier.id,
            ))
    return params


PARAMETERS: List[Parameter] = [
    # --- Time ---
    Parameter("year", "Projection Year",
              "The year to project compute and labor dynamics to.",
              2030, 2024, 2050, 1, "", "number", "compute"),

    # --- Compute supply ---
    Parameter("baseComputeExponent", "Base Compute (2024)",
              "Global AI inference compute in FLOP/s (exponent of 10). ~5×10^21 in 2024.",
              21.7, 19, 24, 0.1, "FLOP/s", "scientific", "compute"),
    Parameter("computeGrowthRate", "Annual Compute Growth",
              "Yearly growth of global AI inference capacity. Historical: 2-3x/year.",
              1.0, 0.2, 3.0, 0.1, "/year", "percent", "compute"),
    Parameter("computeGrowthDecay", "Compute Growth Slowdown",
              "Fractional decline of the compute growth rate each year.",
              0.08, 0.0, 0.30, 0.01, "/year", "percent", "compute"),
    Parameter("efficiencyImprovement", "Algorithmic Efficiency Gain",
              "Yearly factor by which the FLOPs needed for the same work shrink.",
              2.0, 1.0, 3.0, 0.1, "x/year", "number", "compute"),
    Parameter("efficiencyDecay", "Efficiency Gain Slowdown",
              "Fractional decline of the (log) efficiency gain each year.",
              0.20, 0.0, 0.30, 0.01, "/year", "percent", "compute"),

    # --- Economic ---
    Parameter("humanWageFloor", "Human Wage Floor",
              "Minimum viable hourly wage for human workers globally.",
              15, 1, 50, 1, "$/hour", "currency", "economic"),
    Parameter("computeCostExponent", "Compute Cost (2024)",
              "Cost per 10^18 FLOPs (one exaFLOP) in 2024 dollars, exponent of 10.",
              0.0, -2, 2, 0.1, "$/exaFLOP", "scientific", "economic"),
    Parameter("costDeclineRate", "Cost Decline Rate",
              "Yearly decline of compute cost. Historical: ~30%/year.",
              0.30, 0.0, 0.5, 0.05, "/year", "percent", "economic"),
    Parameter("costDeclineDecay", "Cost Decline Slowdown",
              "Fractional decline of the cost decline rate each year.",
              0.05, 0.0, 0.20, 0.01, "/year", "percent", "economic"),

    # --- Demand dynamics ---
    Parameter("cognitiveShare", "Cognitive Work Share",
              "Share of global work hours that is cognitive. McKinsey: 35-50%.",
              0.40, 0.20, 0.60, 0.05, "", "percent", "demand"),
    Parameter("baselineDemandGrowth", "Baseline Demand Growth",
              "Background growth of cognitive work from GDP/population.",
              0.03, 0.0, 0.10, 0.01, "/year", "percent", "demand"),
    Parameter("demandElasticity", "Demand Elasticity",
              "Extra demand per decade of AI cost reduction, gated by tier σ.",
              0.5, 0.0, 1.5, 0.1, "", "number", "demand"),
    Parameter("newTaskCreationRate", "New Task Creation",
              "New work created per unit of average σ growth since 2024.",
              0.1, 0.0, 0.5, 0.05, "", "number", "demand"),
] + _tier_parameters()

PARAMETERS_BY_ID: Dict[str, Parameter] = {p.id: p for p in PARAMETERS}


def get_parameter(param_id: str) -> Parameter:
    """Look up a schema entry by id."""
    try:
        return PARAMETERS_BY_ID[param_id]
    except KeyError:
        raise KeyError(f"Unknown parameter '{param_id}'") from None


def get_default_values() -> ParameterValues:
    """Schema-driven default snapshot used to seed caller inputs."""
    return {p.id: float(p.default) for p in PARAMETERS}


def clamp_values(values: Mapping[str, float]) -> ParameterValues:
    """Return a copy with every known parameter clamped to its [min, max]."""
    clamped = dict(values)
    for key, value in values.items():
        param = PARAMETERS_BY_ID.get(key)
        if param is not None:
            clamped[key] = param.clamp(float(value))
    return clamped


def format_value(param: Parameter, value: float) -> str:
    """Human-readable rendering of a parameter value."""
    if param.format == "percent":
        return f"{value * 100:.0f}%"
    if param.format == "scientific":
        if param.id == "baseComputeExponent":
            return f"10^{value:.1f}"
        return f"${10 ** value:.2f}"
    if param.format == "currency":
        return f"${value:.0f}"
    return f"{value:.1f}" if param.step < 1 else f"{value:.0f}"


@dataclass(frozen=True)
class TierParams:
    """Resolved parameters for one tier, as used inside the engine."""

    id: str
    name: str
    flops_exponent: float
    share: float
    initial_sigma: float
    max_sigma: float
    sigma_midpoint: float
    sigma_steepness: float
    deployment_lag: float
    human_capable: float
    wage_multiplier: float
    task_value: float
    wage_elasticity: float


@dataclass(frozen=True)
class ModelConfig:
    """All inputs of one model run, with tier shares already normalized."""

    year: int = 2030
    base_compute_exponent: float = 21.7
    compute_growth_rate: float = 1.0
    compute_growth_decay: float = 0.08
    efficiency_improvement: float = 2.0
    efficiency_decay: float = 0.20
    human_wage_floor: float = 15.0
    compute_cost_exponent: float = 0.0
    cost_decline_rate: float = 0.30
    cost_decline_decay: float = 0.05
    cognitive_share: float = 0.40
    baseline_demand_growth: float = 0.03
    demand_elasticity: float = 0.5
    new_task_creation_rate: float = 0.1
    tiers: Tuple[TierParams, ...] = field(default_factory=tuple)

    @property
    def end_year(self) -> int:
        return max(self.year, MIN_END_YEAR)

    @property
    def workforce_hours(self) -> float:
        """Cognitive hours the 2024 workforce supplies; held fixed across years."""
        return GLOBAL_WORKFORCE * HOURS_PER_WORKER_YEAR * self.cognitive_share

    @classmethod
    def from_values(cls, values: Mapping[str, float]) -> "ModelConfig":
        """Build a config from a flat parameter map, falling back to defaults.

        Raises ``ConfigurationError`` for inputs the engine cannot interpret;
        range clamping is the caller's job (see ``clamp_values``).
        """
        def lookup(key: str) -> float:
            raw = values.get(key)
            value = PARAMETERS_BY_ID[key].default if raw is None else raw
            value = float(value)
            if not math.isfinite(value):
                raise ConfigurationError(f"Parameter '{key}' must be finite, got {raw!r}")
            return value

        tiers = []
        for tier in TIER_CONFIGS:
            resolved = {
                _TIER_FIELD_SPECS[f][0]: lookup(tier_key(tier.id, f)) for f in TIER_FIELDS
            }
            tiers.append(TierParams(
                id=tier.id,
                name=tier.name,
                flops_exponent=resolved["flops"],
                share=resolved["share"],
                initial_sigma=resolved["initial_sigma"],
                max_sigma=resolved["max_sigma"],
                sigma_midpoint=resolved["sigma_midpoint"],
                sigma_steepness=resolved["sigma_steepness"],
                deployment_lag=resolved["deployment_lag"],
                human_capable=resolved["human_capable"],
                wage_multiplier=resolved["wage_multiplier"],
                task_value=resolved["task_value"],
                wage_elasticity=resolved["wage_elasticity"],
            ))

        _validate_tiers(tiers)

        return cls(
            year=int(round(lookup("year"))),
            base_compute_exponent=lookup("baseComputeExponent"),
            compute_growth_rate=lookup("computeGrowthRate"),
            compute_growth_decay=lookup("computeGrowthDecay"),
            efficiency_improvement=lookup("efficiencyImprovement"),
            efficiency_decay=lookup("efficiencyDecay"),
            human_wage_floor=lookup("humanWageFloor"),
            compute_cost_exponent=lookup("computeCostExponent"),
            cost_decline_rate=lookup("costDeclineRate"),
            cost_decline_decay=lookup("costDeclineDecay"),
            cognitive_share=lookup("cognitiveShare"),
            baseline_demand_growth=lookup("baselineDemandGrowth"),
            demand_elasticity=lookup("demandElasticity"),
            new_task_creation_rate=lookup("newTaskCreationRate"),
            tiers=tuple(normalize_tier_shares(tiers)),
        )


def _validate_tiers(tiers: List[TierParams]) -> None:
    for tier in tiers:
        if tier.sigma_steepness <= 0:
            raise ConfigurationError(
                f"Tier '{tier.id}' sigmaSteepness must be positive, got {tier.sigma_steepness}"
            )
        if tier.share < 0:
            raise ConfigurationError(f"Tier '{tier.id}' share must be non-negative")
    if sum(t.share for t in tiers) <= 0:
        raise ConfigurationError("Tier shares must sum to a positive value")
    # Skill bands are differences of consecutive humanCapable values, so the
    # cumulative fractions must not rise as tasks get harder.
    for easier, harder in zip(tiers, tiers[1:]):
        if harder.human_capable > easier.human_capable:
            raise ConfigurationError(
                f"humanCapable must be non-increasing with difficulty: "
                f"{easier.id}={easier.human_capable} < {harder.id}={harder.human_capable}"
            )


def normalize_tier_shares(tiers: List[TierParams]) -> List[TierParams]:
    """Rescale tier shares so they sum to exactly 1."""
    total = sum(t.share for t in tiers)
    if abs(total - 1.0) < 1e-12:
        return list(tiers)
    return [replace(t, share=t.share / total) for t in tiers]


# Named scenario presets: overrides on top of the schema defaults.
SCENARIO_PRESETS: Dict[str, ParameterValues] = {
    "Baseline": {},
    "Compute Constrained": {
        "baseComputeExponent": 21.0,
        "computeGrowthRate": 0.3,
        tier_key("frontier", "flops"): 22,
    },
    "Fast Takeoff": {
        "computeGrowthRate": 2.0,
        "computeGrowthDecay": 0.03,
        "efficiencyImprovement": 2.5,
        tier_key("complex", "sigmaMidpoint"): 2027,
        tier_key("expert", "sigmaMidpoint"): 2029,
        tier_key("frontier", "sigmaMidpoint"): 2031,
    },
    "Slow Diffusion": {
        "computeGrowthRate": 0.5,
        "costDeclineRate": 0.15,
        tier_key("routine", "deploymentLag"): 3,
        tier_key("standard", "deploymentLag"): 4,
        tier_key("complex", "deploymentLag"): 5,
        tier_key("expert", "deploymentLag"): 6,
        tier_key("frontier", "deploymentLag"): 7,
    },
    "Scarce Experts": {
        tier_key("complex", "humanCapable"): 0.25,
        tier_key("expert", "humanCapable"): 0.06,
        tier_key("frontier", "humanCapable"): 0.01,
    },
}


def get_scenario_values(name: str) -> ParameterValues:
    """Default values with a named scenario's overrides applied."""
    if name not in SCENARIO_PRESETS:
        raise KeyError(
            f"Unknown scenario '{name}'. Available: {', '.join(SCENARIO_PRESETS)}"
        )
    values = get_default_values()
    values.update({k: float(v) for k, v in SCENARIO_PRESETS[name].items()})
    return values
