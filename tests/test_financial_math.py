import pytest

from benchmarks import MODEL_PORTFOLIO, MSCI_WORLD
from financial_math import (
    aggregate_by_dimension,
    compare_distribution,
    compare_factors,
    get_allocations,
    get_factor_exposure,
    max_abs_deviation,
    round_half_up,
    signed_deviations,
    total_weight,
)
from portfolio_engine import normalize_holding
from taxonomy import DIMENSIONS, FACTORS
from conftest import make_holding


class TestRoundHalfUp:
    @pytest.mark.parametrize("raw, expected", [
        (0.125, 0.13),      # exact binary half rounds away from zero
        (-0.125, -0.13),
        (2.675, 2.67),      # 2.675 is stored as 2.67499999...
        (33.333333, 33.33),
        (-0.001, 0.0),
    ])
    def test_two_places(self, raw, expected):
        assert round_half_up(raw) == expected

    def test_negative_zero_normalized(self):
        assert str(round_half_up(-0.001)) == "0.0"


class TestAggregateByDimension:
    def test_scenario_a_currency(self, us_tech_holdings):
        dist = aggregate_by_dimension(us_tech_holdings, "currency")
        assert dist == {"USD": 100.0, "EUR": 0.0, "GBP": 0.0, "JPY": 0.0, "Other": 0.0}

    def test_key_order_follows_enumeration(self, us_tech_holdings):
        dist = aggregate_by_dimension(us_tech_holdings, "sector")
        assert list(dist) == DIMENSIONS["sector"].options()

    def test_empty_holdings_all_zero(self):
        for dim, enum in DIMENSIONS.items():
            dist = aggregate_by_dimension([], dim)
            assert list(dist) == enum.options()
            assert all(v == 0.0 for v in dist.values())

    def test_record_key_accepted_as_dimension(self, us_tech_holdings):
        assert aggregate_by_dimension(us_tech_holdings, "assetClass")["Equity"] == 100.0

    def test_unknown_dimension_raises(self, us_tech_holdings):
        with pytest.raises(KeyError):
            aggregate_by_dimension(us_tech_holdings, "ticker")

    def test_sums_matching_weights(self):
        holdings = [
            normalize_holding(make_holding(weight=30, region="Europe")),
            normalize_holding(make_holding(weight=12.5, region="Europe")),
            normalize_holding(make_holding(weight=20, region="Mars")),   # -> Other
        ]
        dist = aggregate_by_dimension(holdings, "region")
        assert dist["Europe"] == 42.5
        assert dist["Other"] == 20.0
        assert dist["North America"] == 0.0

    def test_rounded_once_after_summing(self):
        # three thirds: per-item rounding would give 99.99
        holdings = [normalize_holding(make_holding(weight=100 / 3)) for _ in range(3)]
        assert aggregate_by_dimension(holdings, "currency")["USD"] == 100.0

    def test_custom_options_subset(self, us_tech_holdings):
        dist = aggregate_by_dimension(us_tech_holdings, "currency", options=["EUR", "USD"])
        assert dist == {"EUR": 0.0, "USD": 100.0}

    def test_sum_matches_total_weight(self):
        holdings = [
            normalize_holding(make_holding(weight=w, sector=s))
            for w, s in [(10.25, "Energy"), (33.1, "Bogus"), (7, "Healthcare"), (0, "Energy")]
        ]
        for dim in DIMENSIONS:
            assert sum(aggregate_by_dimension(holdings, dim).values()) == pytest.approx(
                total_weight(holdings), abs=0.05
            )

    def test_get_allocations_covers_all_dimensions(self, us_tech_holdings):
        allocations = get_allocations(us_tech_holdings)
        assert set(allocations) == set(DIMENSIONS)
        assert allocations["asset_class"]["Equity"] == 100.0


class TestFactorExposure:
    def test_scenario_c_max_scores(self):
        holdings = [normalize_holding(make_holding(**{f: 1.5 for f in FACTORS}))]
        assert get_factor_exposure(holdings) == {f: 1.5 for f in FACTORS}

    def test_empty_portfolio_has_zero_exposure(self):
        assert get_factor_exposure([]) == {f: 0.0 for f in FACTORS}

    def test_zero_total_weight_has_zero_exposure(self):
        holdings = [normalize_holding(make_holding(weight=0, value=1.2, quality=-1.0))]
        assert get_factor_exposure(holdings) == {f: 0.0 for f in FACTORS}

    def test_weighted_average(self):
        # (30 * 0.8 + 10 * -0.4) / 40 = (24 - 4) / 40 = 0.5
        holdings = [
            normalize_holding(make_holding(weight=30, momentum=0.8)),
            normalize_holding(make_holding(weight=10, momentum=-0.4)),
        ]
        assert get_factor_exposure(holdings)["momentum"] == 0.5

    def test_partial_weights_are_still_averaged(self):
        # weights sum to 50; exposure is normalized by the total, not by 100
        holdings = [normalize_holding(make_holding(weight=50, size=1.0))]
        assert get_factor_exposure(holdings)["size"] == 1.0

    def test_rounded_to_two_places(self):
        holdings = [
            normalize_holding(make_holding(weight=1, value=1.0)),
            normalize_holding(make_holding(weight=2, value=0.0)),
        ]
        assert get_factor_exposure(holdings)["value"] == 0.33


class TestComparator:
    def test_max_abs_deviation_over_benchmark_keys(self):
        actual = {"Equity": 100.0, "Fixed Income": 0.0, "Real Assets": 0.0, "Cash": 0.0, "Alternatives": 0.0}
        # Equity 100 vs 65 is the widest gap
        assert max_abs_deviation(actual, MODEL_PORTFOLIO.target("asset_class")) == pytest.approx(35.0)

    def test_missing_actual_key_counts_as_zero(self):
        assert max_abs_deviation({}, {"Equity": 65}) == 65.0

    def test_extra_actual_keys_ignored(self):
        assert max_abs_deviation({"Equity": 65, "Crypto": 90}, {"Equity": 65}) == 0.0

    def test_benchmark_without_coverage_yields_zero(self, us_tech_holdings):
        # MSCI World has no currency targets
        currency = aggregate_by_dimension(us_tech_holdings, "currency")
        assert max_abs_deviation(currency, MSCI_WORLD.target("currency")) == 0.0

    def test_signed_deviations_keyed_by_actual(self):
        actual = {"USD": 70.0, "CHF": 5.0}
        assert signed_deviations(actual, {"USD": 55, "EUR": 30}) == {"USD": 15.0, "CHF": 5.0}

    def test_compare_distribution_rows(self):
        rows = compare_distribution({"Europe": 10.0, "Other": 0.0}, {"Europe": 18, "Other": 2})
        assert rows == [
            {"key": "Europe", "actual": 10.0, "benchmark": 18.0, "delta": -8.0},
            {"key": "Other", "actual": 0.0, "benchmark": 2.0, "delta": -2.0},
        ]

    def test_compare_factors_against_both_benchmarks(self):
        rows = compare_factors({f: 0.0 for f in FACTORS}, MODEL_PORTFOLIO, MSCI_WORLD)
        quality = next(r for r in rows if r["factor"] == "quality")
        assert quality["model"] == 0.3
        assert quality["delta_model"] == pytest.approx(-0.3)
        assert quality["msci_world"] == 0.15
        assert quality["delta_msci_world"] == pytest.approx(-0.15)
