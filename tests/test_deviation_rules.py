import pytest

from deviation_rules import (
    ALIGNED_MESSAGE,
    DeviationThresholds,
    FlagCategory,
    StatusBand,
    evaluate,
    evaluate_flags,
    status_band,
)
from portfolio_engine import normalize_holding
from taxonomy import FACTORS
from conftest import ON_MODEL, make_holding


def _holdings(*records):
    return [normalize_holding(r) for r in records]


class TestDeviationRules:
    def test_scenario_a_equity_overweight(self, us_tech_holdings):
        messages = evaluate(us_tech_holdings)

        assert "Equity allocation deviates by +35.0% from model target." in messages
        assert "Fixed Income allocation deviates by -25.0% from model target." in messages
        assert not any(m.startswith("Portfolio weights total") for m in messages)
        # Real Assets (-5), Cash (-3), Alternatives (-2) stay inside the band
        assert len(messages) == 2

    def test_scenario_b_underweight_total(self):
        messages = evaluate(_holdings(make_holding(weight=90)))
        assert messages[0] == "Portfolio weights total 90.0%. Rebalance toward 100%."

    def test_scenario_c_factor_alerts(self):
        messages = evaluate(_holdings(make_holding(**{f: 1.5 for f in FACTORS})))

        assert "quality factor is 1.20 away from model exposure. Consider sleeve adjustments." in messages
        assert "volatility factor is 1.70 away from model exposure. Consider sleeve adjustments." in messages
        factor_flags = [m for m in messages if " factor is " in m]
        assert len(factor_flags) == len(FACTORS)

    def test_scenario_d_empty_portfolio(self):
        flags = evaluate_flags([])
        assert len(flags) == 1
        assert flags[0].category == FlagCategory.ALIGNED
        assert flags[0].message == ALIGNED_MESSAGE

    def test_on_model_portfolio_is_aligned(self, on_model_holdings):
        assert evaluate(on_model_holdings) == [ALIGNED_MESSAGE]

    def test_rule_order(self):
        flags = evaluate_flags(_holdings(make_holding(weight=50)))
        assert [f.category for f in flags] == [
            FlagCategory.TOTAL_WEIGHT,
            FlagCategory.ALLOCATION,
            FlagCategory.ALLOCATION,
        ]
        assert flags[1].message == "Equity allocation deviates by -15.0% from model target."

    def test_thresholds_are_exclusive(self):
        # Equity exactly 8 points over, total exactly 0.5 over
        records = [dict(r) for r in ON_MODEL]
        records[0]["weight"] = 73
        records[1]["weight"] = 17.5
        # Fixed Income is now 7.5 under; total = 100.5
        assert evaluate(_holdings(*records)) == [ALIGNED_MESSAGE]

    def test_custom_thresholds(self, us_tech_holdings):
        loose = DeviationThresholds(asset_class=40)
        assert evaluate(us_tech_holdings, thresholds=loose) == [ALIGNED_MESSAGE]

    def test_default_thresholds(self):
        thresholds = DeviationThresholds()
        assert (thresholds.total_weight, thresholds.asset_class, thresholds.factor) == (0.5, 8.0, 0.35)

    def test_evaluation_is_repeatable(self, us_tech_holdings):
        assert evaluate_flags(us_tech_holdings) == evaluate_flags(us_tech_holdings)

    def test_flag_serialization(self, us_tech_holdings):
        flag = evaluate_flags(us_tech_holdings)[0]
        assert flag.to_dict() == {
            "category": "allocation",
            "message": "Equity allocation deviates by +35.0% from model target.",
        }
        assert str(flag) == flag.message


class TestStatusBand:
    @pytest.mark.parametrize("value, expected", [
        (0.0, StatusBand.ALIGNED),
        (5.0, StatusBand.ALIGNED),
        (5.01, StatusBand.WATCH),
        (10.0, StatusBand.WATCH),
        (10.5, StatusBand.OFF_TARGET),
    ])
    def test_asset_class_bands(self, value, expected):
        assert status_band(value, 5, 10) is expected

    def test_band_labels(self):
        assert [b.value for b in StatusBand] == ["Aligned", "Watch", "Off target"]
