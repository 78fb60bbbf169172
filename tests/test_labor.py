from dataclasses import replace

import numpy as np
import pytest

from workshare.labor import (
    allocate_human_hours,
    build_skill_bands,
    clamp_wage,
    equilibrium_wage,
    initial_wages,
    labor_tightness,
    wage_at_ceiling,
)


def test_bands_partition_capable_workforce():
    bands = build_skill_bands([0.9, 0.65, 0.35, 0.12, 0.03], 1000.0)
    assert [b.hours for b in bands] == pytest.approx([250, 300, 230, 90, 30])
    assert sum(b.hours for b in bands) == pytest.approx(900.0)


def test_skilled_band_fills_best_paid_tier_first():
    bands = build_skill_bands([1.0, 1.0], 100.0)  # everyone can do both tiers
    alloc = allocate_human_hours(bands, [80.0, 50.0], wages=[10.0, 20.0])
    # the top band (100h) serves tier 1 first, then spills 50h into tier 0
    assert alloc.hours == pytest.approx([50.0, 50.0])
    assert alloc.idle_hours == pytest.approx([0.0, 0.0])
    assert alloc.saturated


def test_unskilled_band_cannot_work_up():
    bands = build_skill_bands([1.0, 0.0], 100.0)
    alloc = allocate_human_hours(bands, [10.0, 40.0], wages=[10.0, 20.0])
    assert alloc.hours == pytest.approx([10.0, 0.0])
    assert alloc.idle_hours == pytest.approx([90.0, 0.0])
    assert not alloc.saturated


def test_supply_counts_qualified_idle_hours():
    bands = build_skill_bands([1.0, 0.5], 100.0)
    alloc = allocate_human_hours(bands, [10.0, 10.0], wages=[10.0, 20.0])
    # band 0: 50h, band 1: 50h; band 1 covers tier 1 then tier 0
    assert alloc.hours == pytest.approx([10.0, 10.0])
    assert alloc.idle_hours == pytest.approx([50.0, 30.0])
    assert alloc.supply == pytest.approx([10.0 + 80.0, 10.0 + 30.0])


def test_wage_tie_prefers_harder_tier():
    bands = build_skill_bands([1.0, 1.0], 10.0)
    alloc = allocate_human_hours(bands, [10.0, 10.0], wages=[15.0, 15.0])
    assert alloc.hours == pytest.approx([0.0, 10.0])


def test_initial_wages_clamped(default_config):
    tiers = default_config.tiers
    wages = initial_wages(tiers, 15.0)
    assert wages == pytest.approx([15.0, 22.5, 37.5, 75.0, 150.0])
    low_value = replace(tiers[4], task_value=100.0)
    assert initial_wages([low_value], 15.0) == pytest.approx([100.0])


def test_task_value_wins_conflict(default_config):
    tier = replace(default_config.tiers[0], task_value=10.0)
    assert clamp_wage(5.0, tier, 15.0) == 10.0


def test_tightness_guards_zero_supply():
    assert labor_tightness(50.0, 0.0) == 50.0
    assert labor_tightness(50.0, 100.0) == 0.5


def test_equilibrium_wage(default_config):
    standard = default_config.tiers[1]  # base 22.5, elasticity 0.5, ceiling 60
    assert equilibrium_wage(standard, 1.0, 15.0) == pytest.approx(22.5)
    assert equilibrium_wage(standard, 4.0, 15.0) == pytest.approx(45.0)
    assert equilibrium_wage(standard, 100.0, 15.0) == 60.0
    # slack market: at most halves the base wage, floor still applies
    assert equilibrium_wage(standard, 0.0, 15.0) == pytest.approx(15.0)
    assert equilibrium_wage(standard, 0.5, 15.0) == pytest.approx(16.875)


def test_wage_at_ceiling(default_config):
    routine = default_config.tiers[0]
    assert wage_at_ceiling(29.8, routine)
    assert not wage_at_ceiling(29.0, routine)


def test_allocation_is_vectorized_output():
    bands = build_skill_bands([1.0], 10.0)
    alloc = allocate_human_hours(bands, [4.0], wages=[1.0])
    assert isinstance(alloc.hours, np.ndarray)
