"""Tests for BenchmarkCalculator and percentiles."""
import pytest

from jsi.errors import NotFound, ValidationError
from jsi.models import BenchmarkType, CustomerProfile, DateRange, Percentiles
from jsi.scoring.benchmark_calculator import (
    UNKNOWN_INDUSTRY,
    BenchmarkCalculator,
    calculate_percentiles,
)
from jsi.scoring.utils import percentile


class TestPercentiles:
    """Linear interpolation between closest ranks."""

    def test_empty_is_all_zero(self):
        assert calculate_percentiles([]) == Percentiles(p25=0, p50=0, p75=0, p90=0)

    def test_median_of_odd_length_is_middle_element(self):
        assert percentile([10, 20, 30, 40, 50], 50) == 30

    def test_extremes(self):
        values = [3, 8, 13, 21]
        assert percentile(values, 0) == 3
        assert percentile(values, 100) == 21

    def test_interpolates(self):
        # index = 0.25 * 3 = 0.75 → 10 * 0.25 + 20 * 0.75
        assert percentile([10, 20, 30, 40], 25) == pytest.approx(17.5)

    def test_unsorted_input_sorted_first(self):
        result = calculate_percentiles([90, 10, 50, 30, 70])
        assert result.p50 == 50
        assert result.p25 == 30
        assert result.p75 == 70
        assert result.p90 == pytest.approx(82.0)

    def test_single_value(self):
        assert calculate_percentiles([42]) == Percentiles(p25=42, p50=42, p75=42, p90=42)


@pytest.fixture
def population(make_record):
    return [
        make_record(60, worker_id="w1", customer_id="acme", days_ago=2),
        make_record(80, worker_id="w2", customer_id="acme", days_ago=3),
        make_record(40, worker_id="w3", customer_id="globex", days_ago=4),
        make_record(90, worker_id="w4", customer_id="initech", days_ago=40),
    ]


@pytest.fixture
def customers():
    return [
        CustomerProfile(customer_id="acme", industry_code="LOG", industry_name="Logistics"),
        CustomerProfile(customer_id="globex", industry_code="LOG", industry_name="Freight"),
        CustomerProfile(customer_id="initech", industry_code="SW"),
        CustomerProfile(customer_id="hooli"),
    ]


class TestGlobalBenchmark:

    def test_aggregates_everyone(self, population, now):
        benchmark = BenchmarkCalculator(now=now).calculate_global(population)
        assert benchmark.type == BenchmarkType.GLOBAL
        assert benchmark.worker_count == 4
        assert benchmark.customer_count == 3
        assert benchmark.overall_score == pytest.approx(67.5)
        assert benchmark.work_engagement == pytest.approx(67.5)
        assert benchmark.calculated_at == now

    def test_means_are_unrounded(self, make_record):
        records = [make_record(61), make_record(62, worker_id="w2")]
        assert BenchmarkCalculator().calculate_global(records).overall_score == 61.5

    def test_date_range_filter(self, population):
        window = DateRange(start="2026-03-10", end="2026-03-15")
        benchmark = BenchmarkCalculator().calculate_global(population, window)
        assert benchmark.worker_count == 3
        assert benchmark.date_range == window

    @pytest.mark.parametrize("field", ["start", "end"])
    def test_malformed_date_rejected(self, population, field):
        window = DateRange(**{field: "not-a-date"})
        with pytest.raises(ValidationError) as exc_info:
            BenchmarkCalculator().calculate_global(population, window)
        assert exc_info.value.field == field

    def test_empty_population(self, now):
        benchmark = BenchmarkCalculator(now=now).calculate_global([])
        assert benchmark.worker_count == 0
        assert benchmark.customer_count == 0
        assert benchmark.overall_score == 0
        assert benchmark.percentiles == Percentiles()


class TestIndustryBenchmark:

    def test_restricted_to_members(self, population, customers):
        benchmark = BenchmarkCalculator().calculate_industry("LOG", population, customers)
        assert benchmark.type == BenchmarkType.INDUSTRY
        assert benchmark.worker_count == 3
        assert benchmark.customer_count == 2
        assert benchmark.overall_score == pytest.approx(60.0)
        assert benchmark.industry_name == "Logistics"

    def test_no_members(self, population, customers):
        benchmark = BenchmarkCalculator().calculate_industry("MED", population, customers)
        assert benchmark.customer_count == 0
        assert benchmark.worker_count == 0
        assert benchmark.industry_name == UNKNOWN_INDUSTRY

    def test_members_without_name(self, population, customers):
        benchmark = BenchmarkCalculator().calculate_industry("SW", population, customers)
        assert benchmark.industry_name == UNKNOWN_INDUSTRY
        assert benchmark.worker_count == 1


class TestCustomerBenchmarks:

    def test_global_and_industry(self, population, customers):
        result = BenchmarkCalculator().customer_benchmarks("acme", population, customers)
        assert result.global_benchmark.worker_count == 4
        assert result.industry is not None
        assert result.industry.industry_code == "LOG"

    def test_no_industry_code(self, population, customers):
        result = BenchmarkCalculator().customer_benchmarks("hooli", population, customers)
        assert result.industry is None

    def test_unknown_customer(self, population, customers):
        with pytest.raises(NotFound):
            BenchmarkCalculator().customer_benchmarks("nobody", population, customers)

    def test_serialises_global_key(self, population, customers):
        result = BenchmarkCalculator().customer_benchmarks("hooli", population, customers)
        data = result.model_dump(by_alias=True)
        assert "global" in data
        assert data["industry"] is None
