import pytest

from tripscope.services.forecasting import (
    DataPoint,
    exponential_smoothing,
    linear_regression,
    moving_average,
    round_half_up,
)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4) == 2
    assert round_half_up(-2.5) == -2
    assert round_half_up(-2.6) == -3


def test_round_half_up_just_below_half():
    # 0.49999999999999994 + 0.5 rounds to 1.0 in floating point
    assert round_half_up(0.49999999999999994) == 0
    assert round_half_up(4503599627370497.0) == 4503599627370497


def test_regression_on_exact_line():
    result = linear_regression([DataPoint(0, 0), DataPoint(1, 2), DataPoint(2, 4), DataPoint(3, 6)])
    assert result.slope == pytest.approx(2)
    assert result.intercept == pytest.approx(0)
    assert result.r2 == pytest.approx(1)
    assert result.predict(10) == pytest.approx(20)


def test_regression_accepts_mappings_and_pairs():
    from_dicts = linear_regression([{"x": 0, "y": 1}, {"x": 1, "y": 3}, {"x": 2, "y": 5}])
    from_pairs = linear_regression([(0, 1), (1, 3), (2, 5)])
    assert from_dicts == from_pairs
    assert from_pairs.slope == pytest.approx(2)
    assert from_pairs.intercept == pytest.approx(1)


def test_regression_is_deterministic():
    points = [(0, 3), (1, 7), (2, 4), (3, 9), (4, 8)]
    assert linear_regression(points) == linear_regression(points)


@pytest.mark.parametrize("points", [[], [(3, 9)]])
def test_regression_degenerate_inputs(points):
    result = linear_regression(points)
    assert (result.slope, result.intercept, result.r2) == (0, 0, 0)
    assert result.predict(0) == 0
    assert result.predict(1000) == 0


def test_regression_zero_variance_in_x_predicts_mean():
    result = linear_regression([(1, 2), (1, 4)])
    assert result.slope == 0
    assert result.intercept == pytest.approx(3)
    assert result.r2 == 0
    assert result.predict(100) == pytest.approx(3)


def test_regression_predictions_never_negative():
    result = linear_regression([(0, 10), (1, 5), (2, 0)])
    assert result.slope == pytest.approx(-5)
    assert result.predict(10) == 0


def test_regression_r2_in_unit_interval_for_noisy_data():
    result = linear_regression([(0, 3), (1, 7), (2, 4), (3, 9), (4, 8)])
    assert 0 <= result.r2 <= 1
    flat_noise = linear_regression([(0, 5), (1, 1), (2, 5), (3, 1)])
    assert flat_noise.r2 >= 0


def test_smoothing_follows_linear_trend():
    assert exponential_smoothing([10, 20, 30, 40, 50], 0.3, 3) == [60, 70, 80]


def test_smoothing_single_point_has_flat_trend():
    assert exponential_smoothing([5], 0.3, 3) == [5, 5, 5]


def test_smoothing_empty_input_forecasts_zeros():
    assert exponential_smoothing([], 0.3, 4) == [0, 0, 0, 0]
    assert exponential_smoothing([]) == [0] * 7


def test_smoothing_clamps_declining_series_at_zero():
    assert exponential_smoothing([50, 40, 30, 20, 10], 0.3, 7) == [0] * 7


@pytest.mark.parametrize("periods", [0, 1, 5, 12])
@pytest.mark.parametrize("data", [[], [3], [1, 9, 2, 8], [100, 0, 100, 0, 100]])
def test_smoothing_length_and_sign(data, periods):
    forecast = exponential_smoothing(data, 0.5, periods)
    assert len(forecast) == periods
    assert all(isinstance(v, int) and v >= 0 for v in forecast)


def test_moving_average_example():
    assert moving_average([10, 20, 30, 40, 50], 3) == [10, 15, 20, 30, 40]


def test_moving_average_start_uses_available_values():
    data = [4, 8, 6, 2, 10, 12]
    result = moving_average(data, 4)
    assert len(result) == len(data)
    for i in range(4):
        assert result[i] == pytest.approx(sum(data[:i + 1]) / (i + 1))
    assert result[5] == pytest.approx((6 + 2 + 10 + 12) / 4)


def test_moving_average_edges():
    assert moving_average([]) == []
    assert moving_average([1, 2, 3], 1) == [1, 2, 3]
