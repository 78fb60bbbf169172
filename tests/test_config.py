import math

import pytest

from workshare.config import (
    PARAMETERS,
    SCENARIO_PRESETS,
    TIER_FIELDS,
    TIER_IDS,
    ModelConfig,
    clamp_values,
    format_value,
    get_default_values,
    get_parameter,
    get_scenario_values,
    tier_key,
)
from workshare.exceptions import ConfigurationError


def test_defaults_cover_every_tier_field():
    values = get_default_values()
    for tier_id in TIER_IDS:
        for field_name in TIER_FIELDS:
            assert tier_key(tier_id, field_name) in values
    assert values["year"] == 2030
    assert len(values) == len(PARAMETERS)


def test_defaults_lie_within_ranges():
    for p in PARAMETERS:
        assert p.min <= p.default <= p.max, p.id


def test_tier_shares_renormalized():
    values = get_default_values()
    for tier_id in TIER_IDS:
        values[tier_key(tier_id, "share")] = 0.4
    cfg = ModelConfig.from_values(values)
    assert math.isclose(sum(t.share for t in cfg.tiers), 1.0, abs_tol=1e-9)
    assert all(math.isclose(t.share, 0.2) for t in cfg.tiers)


def test_small_share_drift_renormalized():
    values = get_default_values()
    values[tier_key("frontier", "share")] = 0.0305
    cfg = ModelConfig.from_values(values)
    assert math.isclose(sum(t.share for t in cfg.tiers), 1.0, abs_tol=1e-9)
    assert cfg.tiers[-1].share == pytest.approx(0.0305 / 1.0005)


def test_default_shares_left_alone(default_config):
    assert [t.share for t in default_config.tiers] == [0.25, 0.35, 0.25, 0.12, 0.03]


def test_missing_keys_fall_back_to_defaults():
    cfg = ModelConfig.from_values({"year": 2035})
    assert cfg.year == 2035
    assert cfg.human_wage_floor == 15
    assert cfg.tiers[0].flops_exponent == 12
    assert cfg.end_year == 2050


def test_end_year_extends_past_2050():
    assert ModelConfig.from_values({"year": 2060}).end_year == 2060


def test_workforce_hours(default_config):
    assert default_config.workforce_hours == pytest.approx(3.4e9 * 1800 * 0.40)


def test_rejects_non_finite():
    with pytest.raises(ConfigurationError):
        ModelConfig.from_values({"computeGrowthRate": float("nan")})


def test_rejects_non_positive_steepness():
    with pytest.raises(ConfigurationError, match="sigmaSteepness"):
        ModelConfig.from_values({tier_key("expert", "sigmaSteepness"): 0.0})


def test_rejects_zero_total_share():
    values = {tier_key(t, "share"): 0.0 for t in TIER_IDS}
    with pytest.raises(ConfigurationError):
        ModelConfig.from_values(values)


def test_rejects_rising_human_capable():
    with pytest.raises(ConfigurationError, match="humanCapable"):
        ModelConfig.from_values({tier_key("expert", "humanCapable"): 0.5})


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_clamp_values():
    clamped = clamp_values({"computeGrowthRate": 10.0, "humanWageFloor": -3, "other": 7})
    assert clamped["computeGrowthRate"] == 3.0
    assert clamped["humanWageFloor"] == 1
    assert clamped["other"] == 7


def test_get_parameter():
    assert get_parameter("humanWageFloor").unit == "$/hour"
    with pytest.raises(KeyError):
        get_parameter("nope")


def test_scenarios():
    for name in SCENARIO_PRESETS:
        ModelConfig.from_values(get_scenario_values(name))
    constrained = get_scenario_values("Compute Constrained")
    assert constrained["baseComputeExponent"] == 21.0
    assert constrained[tier_key("frontier", "flops")] == 22
    with pytest.raises(KeyError):
        get_scenario_values("Utopia")


def test_format_value():
    assert format_value(get_parameter("cognitiveShare"), 0.4) == "40%"
    assert format_value(get_parameter("baseComputeExponent"), 21.7) == "10^21.7"
    assert format_value(get_parameter("computeCostExponent"), 0.0) == "$1.00"
    assert format_value(get_parameter("humanWageFloor"), 15) == "$15"
