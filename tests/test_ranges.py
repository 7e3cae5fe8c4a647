import math
from datetime import datetime, timedelta, timezone

from promchart.ranges import AxisRange, iter_to_range

FALLBACK = AxisRange(0.0, 1.0)


def test_empty_returns_fallback_unchanged():
  assert iter_to_range([], 0.5, FALLBACK) is FALLBACK
  assert iter_to_range(iter(()), 0.5, FALLBACK) == AxisRange(0.0, 1.0)


def test_single_value_expands_by_epsilon():
  assert iter_to_range([2.0], 0.5, FALLBACK) == AxisRange(1.5, 2.5)


def test_many_values_exact_bounds():
  assert iter_to_range([3.0, 1.0, 2.0], 0.5, FALLBACK) == AxisRange(1.0, 3.0)


def test_equal_values_are_not_expanded():
  r = iter_to_range([4.0, 4.0], 0.5, FALLBACK)
  assert r == AxisRange(4.0, 4.0)
  assert r.is_empty()


def test_generator_input_consumed_once():
  r = iter_to_range((v * 2 for v in (5, -1, 3)), 1, AxisRange(0, 1))
  assert r == AxisRange(-2, 10)


def test_datetime_axis_uses_duration_epsilon():
  t = datetime(2024, 1, 1, tzinfo=timezone.utc)
  eps = timedelta(minutes=1)
  fallback = AxisRange(t, t + timedelta(hours=1))

  assert iter_to_range([], eps, fallback) is fallback
  assert iter_to_range([t], eps, fallback) == AxisRange(t - eps, t + eps)
  r = iter_to_range([t + timedelta(seconds=30), t, t + timedelta(seconds=10)], eps, fallback)
  assert r == AxisRange(t, t + timedelta(seconds=30))
  assert r.span == timedelta(seconds=30)


def test_nan_does_not_raise():
  r = iter_to_range([1.0, math.nan, 2.0], 0.5, FALLBACK)
  assert r.start == 1.0
  assert r.end == 2.0
