import math

import numpy as np
import pytest

from iqa_agreement.statistical_analysis import (
    describe,
    maximum,
    mean,
    mean_sd,
    minimum,
    quantile,
    sample_sd,
    total,
)


class TestBasicStatistics:

    def test_sum_and_mean(self):
        assert total([1.0, 2.0, 3.5]) == pytest.approx(6.5)
        assert mean([1.0, 2.0, 3.0, 4.0]) == pytest.approx(2.5)

    def test_empty_sequence_is_undefined(self):
        assert total([]) == 0.0
        assert math.isnan(mean([]))
        assert math.isnan(minimum([]))
        assert math.isnan(maximum([]))
        assert math.isnan(quantile([], 0.5))

    def test_sample_sd_uses_bessel_correction(self):
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        assert sample_sd(values) == pytest.approx(np.std(values, ddof=1))

    def test_sample_sd_undefined_for_single_value(self):
        assert math.isnan(sample_sd([3.0]))
        avg, sd = mean_sd([3.0])
        assert avg == 3.0
        assert math.isnan(sd)

    def test_min_max(self):
        assert minimum([3, -1, 2]) == -1
        assert maximum([3, -1, 2]) == 3

    def test_rejects_matrix_input(self):
        with pytest.raises(ValueError):
            mean([[1, 2], [3, 4]])


class TestQuantile:

    @pytest.mark.parametrize("values, expected", [
        ([1, 2, 3, 4], 2.5),
        ([5, 1, 3], 3.0),
        ([7], 7.0),
    ])
    def test_median(self, values, expected):
        assert quantile(values, 0.5) == pytest.approx(expected)

    def test_linear_interpolation(self):
        assert quantile([10, 20, 30, 40, 50], 0.3) == pytest.approx(22.0)

    def test_extremes(self):
        values = [4.0, 1.0, 3.0]
        assert quantile(values, 0.0) == 1.0
        assert quantile(values, 1.0) == 4.0

    def test_matches_numpy_linear(self, rng):
        values = rng.normal(size=37)
        for q in (0.1, 0.25, 0.5, 0.75, 0.9):
            assert quantile(values, q) == pytest.approx(np.quantile(values, q))

    def test_does_not_mutate_input(self):
        values = [3.0, 1.0, 2.0]
        quantile(values, 0.5)
        assert values == [3.0, 1.0, 2.0]

        array = np.array([3.0, 1.0, 2.0])
        quantile(array, 0.25)
        np.testing.assert_array_equal(array, [3.0, 1.0, 2.0])

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            quantile([1, 2, 3], 1.5)


def test_describe_summary():
    summary = describe([1, 2, 3, 4])
    assert summary["n"] == 4
    assert summary["median"] == pytest.approx(2.5)
    assert summary["q25"] == pytest.approx(1.75)
    assert summary["q75"] == pytest.approx(3.25)
    assert summary["min"] == 1 and summary["max"] == 4
