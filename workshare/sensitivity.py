"""
Sensitivity of target-year human work hours to each global parameter.

Central finite differences: every scanned parameter is moved ±10% (clamped
to its range), the full model is re-run at both points, and the result is
expressed as an elasticity, i.e. % change in human hours per % change in the
parameter. That is 2N+1 independent model runs, which can optionally be
spread over worker processes.
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

import pandas as pd

from .config import PARAMETERS, Parameter, ParameterValues, get_default_values, get_parameter
from .engine import run_model

logger = logging.getLogger(__name__)

PERTURBATION = 0.10
KEY_PARAMETER_COUNT = 5
DIRECTION_THRESHOLD_HOURS = 1e6

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"


@dataclass
class ParameterSensitivity:
    parameter_id: str
    parameter_label: str
    parameter_group: str
    sensitivity: float  # elasticity of human hours
    absolute_impact: float  # half the up/down difference, in hours
    direction: str
    rank: int = 0
    is_key_parameter: bool = False


@dataclass
class SensitivityAnalysis:
    sensitivities: List[ParameterSensitivity]
    baseline_human_hours: float
    target_year: int
    key_parameters: List[ParameterSensitivity] = field(default_factory=list)
    advanced_parameters: List[ParameterSensitivity] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        columns = ["parameter_id", "parameter_label", "parameter_group", "sensitivity",
                   "absolute_impact", "direction", "rank", "is_key_parameter"]
        rows = [{c: getattr(s, c) for c in columns} for s in self.sensitivities]
        return pd.DataFrame(rows, columns=columns)


def scanned_parameters() -> List[Parameter]:
    """Global parameters subject to the scan: everything except tiers and year."""
    return [p for p in PARAMETERS if p.group != "tiers" and p.id != "year"]


def human_hours_at(values: Mapping[str, float], target_year: int) -> float:
    """Total human hours in ``target_year``; 0 when the year is not projected."""
    outputs = run_model(values)
    for projection in outputs.projections:
        if projection.year == target_year:
            return projection.total_human_hours
    return 0.0


def _perturbed(values: Mapping[str, float], param: Parameter, factor: float) -> ParameterValues:
    moved = dict(values)
    moved[param.id] = param.clamp(_base_value(values, param) * factor)
    return moved


def _base_value(values: Mapping[str, float], param: Parameter) -> float:
    raw = values.get(param.id)
    return float(param.default if raw is None else raw)


def _direction(absolute_change: float) -> str:
    if absolute_change > DIRECTION_THRESHOLD_HOURS:
        return POSITIVE
    if absolute_change < -DIRECTION_THRESHOLD_HOURS:
        return NEGATIVE
    return NEUTRAL


def _evaluate(runs: Sequence[ParameterValues], target_year: int,
              max_workers: Optional[int]) -> List[float]:
    years = [target_year] * len(runs)
    if max_workers is not None and max_workers > 1 and len(runs) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(human_hours_at, runs, years))
    return [human_hours_at(v, y) for v, y in zip(runs, years)]


def calculate_sensitivities(
    values: Mapping[str, float],
    target_year: int,
    max_workers: Optional[int] = None,
) -> SensitivityAnalysis:
    """Rank global parameters by their effect on human hours in ``target_year``.

    Zero-valued parameters are reported with sensitivity 0 since a percentage
    perturbation of 0 is undefined. If the baseline itself has no human hours
    the analysis is empty.
    """
    baseline = human_hours_at(values, target_year)
    if baseline == 0:
        logger.info("no human hours in %d; skipping sensitivity scan", target_year)
        return SensitivityAnalysis(sensitivities=[], baseline_human_hours=0.0,
                                   target_year=target_year)

    params = scanned_parameters()
    active = [p for p in params if _base_value(values, p) != 0]
    runs: List[ParameterValues] = []
    for p in active:
        runs.append(_perturbed(values, p, 1.0 + PERTURBATION))
        runs.append(_perturbed(values, p, 1.0 - PERTURBATION))

    logger.info("sensitivity scan: %d parameters, %d model runs",
                len(params), len(runs) + 1)
    hours = _evaluate(runs, target_year, max_workers)
    results = dict(zip((p.id for p in active), zip(hours[0::2], hours[1::2])))

    sensitivities = []
    for p in params:
        if p.id not in results:
            sensitivities.append(ParameterSensitivity(
                parameter_id=p.id, parameter_label=p.label, parameter_group=p.group,
                sensitivity=0.0, absolute_impact=0.0, direction=NEUTRAL,
            ))
            continue
        up, down = results[p.id]
        base_value = _base_value(values, p)
        absolute_change = (up - down) / 2.0
        elasticity = (absolute_change / (base_value * PERTURBATION)) * (base_value / baseline)
        sensitivities.append(ParameterSensitivity(
            parameter_id=p.id, parameter_label=p.label, parameter_group=p.group,
            sensitivity=elasticity, absolute_impact=absolute_change,
            direction=_direction(absolute_change),
        ))

    # sorted() is stable, so equal magnitudes keep schema order.
    sensitivities = sorted(sensitivities, key=lambda s: abs(s.sensitivity), reverse=True)
    for i, s in enumerate(sensitivities):
        s.rank = i + 1
        s.is_key_parameter = i < KEY_PARAMETER_COUNT

    return SensitivityAnalysis(
        sensitivities=sensitivities,
        baseline_human_hours=baseline,
        target_year=target_year,
        key_parameters=[s for s in sensitivities if s.is_key_parameter],
        advanced_parameters=[s for s in sensitivities if not s.is_key_parameter],
    )


def get_key_parameter_ids(values: Optional[Mapping[str, float]] = None,
                          target_year: Optional[int] = None,
                          count: int = KEY_PARAMETER_COUNT) -> List[str]:
    """Ids of the ``count`` most influential parameters."""
    values = get_default_values() if values is None else values
    if target_year is None:
        target_year = int(round(_base_value(values, get_parameter("year"))))
    analysis = calculate_sensitivities(values, target_year)
    return [s.parameter_id for s in analysis.sensitivities[:count]]


def format_sensitivity(sensitivity: float) -> str:
    percent = sensitivity * 100
    sign = "+" if percent >= 0 else ""
    return f"{sign}{percent:.1f}%"
