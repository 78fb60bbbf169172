import math

import pandas as pd
import pytest

from workshare.config import (
    TIER_IDS,
    ModelConfig,
    get_default_values,
    get_scenario_values,
    tier_key,
)
from workshare.engine import WorkshareModel, project_year, run_model
from workshare.market import BINDING_CONSTRAINTS, COST


def test_projection_span(default_outputs):
    years = [p.year for p in default_outputs.projections]
    assert years == list(range(2024, 2051))
    assert len(default_outputs.tiers) == 5


def test_target_after_2050_extends_span():
    values = get_default_values()
    values["year"] = 2055
    outputs = run_model(values)
    assert outputs.projections[-1].year == 2055


def test_hours_balance_every_year(default_outputs):
    for p in default_outputs.projections:
        for a in p.tier_allocations:
            assert a.hours_ai + a.hours_human + a.hours_unmet == pytest.approx(
                a.demand_hours, rel=1e-9)
            assert a.hours_ai >= 0 and a.hours_human >= 0 and a.hours_unmet >= 0
            done = a.hours_ai + a.hours_human
            if done > 0:
                assert a.ai_share + a.human_share == pytest.approx(1.0)
        assert p.total_ai_hours + p.total_human_hours + p.total_unmet_hours == pytest.approx(
            p.total_cognitive_work_hours, rel=1e-9)


def test_wages_within_floor_and_task_value(default_outputs):
    tiers = {t.id: t for t in default_outputs.tiers}
    for p in default_outputs.projections:
        for a in p.tier_allocations:
            assert 15.0 * (1 - 1e-9) <= a.tier_wage <= tiers[a.tier_id].task_value * (1 + 1e-9)


def test_market_price_at_least_production_cost(default_outputs):
    for p in default_outputs.projections:
        assert p.market_price_per_flop >= p.production_cost_per_flop
        assert p.scarcity_premium >= 1.0
        assert 0.0 <= p.compute_utilization <= 1.0


def test_sigma_bounds_and_constraint_labels(default_outputs):
    for p in default_outputs.projections:
        assert p.primary_binding_constraint in BINDING_CONSTRAINTS
        for a in p.tier_allocations:
            assert 0.0 <= a.effective_sigma <= 1.0
            assert a.binding_constraint in BINDING_CONSTRAINTS


def test_deterministic(default_values, default_outputs):
    again = run_model(default_values)
    assert again.summary == default_outputs.summary
    for first, second in zip(default_outputs.projections, again.projections):
        assert first == second


def test_year_is_independent_of_run(default_config, default_outputs):
    alone = project_year(default_config, 2037)
    assert alone == default_outputs.projection(2037)


def test_default_year_six_compute(default_outputs):
    p = default_outputs.projection(2030)
    assert 24.2 < math.log10(p.effective_compute_flops) < 24.45


def test_summary_reports_target_year(default_outputs):
    target = default_outputs.projection(2030)
    summary = default_outputs.summary
    assert summary.final_ai_share == target.ai_task_share
    assert summary.final_human_wage == target.human_wage_equilibrium
    assert set(summary.tier_ai_shares) == set(TIER_IDS)
    if summary.compute_sufficiency_year is not None:
        assert summary.crossover_year is not None
        assert summary.compute_sufficiency_year >= summary.crossover_year


def test_no_ai_when_every_ceiling_is_zero(zero_sigma_values):
    outputs = run_model(zero_sigma_values)
    for p in outputs.projections:
        assert p.total_ai_hours == 0
        assert p.total_human_hours == pytest.approx(
            p.total_cognitive_work_hours - p.total_unmet_hours)
        assert p.demand_components.ai_induced == pytest.approx(1.0)
        assert p.demand_components.new_tasks == pytest.approx(1.0)


@pytest.mark.parametrize("tier_id", TIER_IDS)
def test_raising_max_sigma_does_not_lower_ai_share(tier_id):
    low = get_default_values()
    low[tier_key(tier_id, "maxSigma")] = 0.6
    high = dict(low)
    high[tier_key(tier_id, "maxSigma")] = 0.9
    low_out, high_out = run_model(low), run_model(high)
    for year in range(2030, 2051):
        low_p, high_p = low_out.projection(year), high_out.projection(year)
        low_alloc, high_alloc = low_p.allocation(tier_id), high_p.allocation(tier_id)
        # Only years where compute is unpriced and the tier bids in both runs.
        if low_p.scarcity_premium > 1.0 or high_p.scarcity_premium > 1.0:
            continue
        if COST in (low_alloc.binding_constraint, high_alloc.binding_constraint):
            continue
        assert high_alloc.ai_share >= low_alloc.ai_share - 1e-9


def test_scarce_compute_can_reverse_a_higher_ceiling():
    # A higher frontier ceiling adds new-task demand in every tier, and the
    # better paying tiers then outbid frontier for the scarce compute.
    low = get_scenario_values("Compute Constrained")
    low[tier_key("frontier", "maxSigma")] = 0.3
    high = dict(low)
    high[tier_key("frontier", "maxSigma")] = 1.0
    low_out, high_out = run_model(low), run_model(high)
    assert any(
        high_out.projection(year).allocation("frontier").ai_share
        < low_out.projection(year).allocation("frontier").ai_share
        for year in range(2033, 2051)
    )


def test_crossover_uses_production_cost(default_outputs):
    tiers = default_outputs.tiers
    cheaper = [
        p.year for p in default_outputs.projections
        if sum(t.share * a.ai_production_cost_per_hour
               for t, a in zip(tiers, p.tier_allocations)) < 15.0
    ]
    expected = cheaper[0] if cheaper else None
    assert default_outputs.summary.crossover_year == expected


def test_compute_constrained_scenario_has_scarcity():
    outputs = run_model(get_scenario_values("Compute Constrained"))
    assert any(p.scarcity_premium > 1.0 for p in outputs.projections)


def test_to_frame(default_outputs):
    frame = default_outputs.to_frame()
    assert isinstance(frame, pd.DataFrame)
    assert frame.index.name == "year"
    assert len(frame) == len(default_outputs.projections)
    assert frame.loc[2030, "ai_task_share"] == default_outputs.projection(2030).ai_task_share


def test_tier_frame(default_outputs):
    frame = default_outputs.tier_frame()
    assert len(frame) == 5 * len(default_outputs.projections)
    assert list(frame.index.names) == ["year", "tier"]
    routine = default_outputs.projection(2030).allocation("routine")
    assert frame.loc[(2030, "routine"), "hours_ai"] == routine.hours_ai


def test_model_class_matches_function(default_values):
    cfg = ModelConfig.from_values(default_values)
    model = WorkshareModel(cfg)
    assert list(model.years()) == list(range(2024, 2051))
    assert model.run().summary == run_model(default_values).summary
