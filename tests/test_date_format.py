from datetime import datetime, timedelta, timezone

import pytest

from promchart.date_format import Unit, date_format, narrow_unit, wide_unit
from promchart.errors import UnsupportedTimeSpan

UTC = timezone.utc


def dt(*args):
  return datetime(*args, tzinfo=UTC)


def test_one_day_at_800px_shows_month_day_hour_minute():
  # 86400 / 800 = 108 s per pixel
  assert date_format(dt(2024, 3, 10), dt(2024, 3, 11), 800) == "%m-%d %H:%M"


def test_sub_minute_range_shows_seconds_with_hour_and_minute():
  fmt = date_format(dt(2024, 3, 10, 12, 0, 5), dt(2024, 3, 10, 12, 0, 50), 100)
  assert fmt.endswith("%H:%M:%S")


def test_sub_minute_range_across_minute_boundary():
  assert date_format(dt(2024, 3, 10, 12, 0, 40), dt(2024, 3, 10, 12, 1, 20), 50) == "%H:%M:%S"


def test_hour_range_shows_hour_and_minute():
  # 3600 / 400 = 9 s per pixel, narrow unit is second
  assert date_format(dt(2024, 3, 10, 12), dt(2024, 3, 10, 13), 400) == "%H:%M:%S"
  # 3600 / 30 = 120 s per pixel
  assert date_format(dt(2024, 3, 10, 12), dt(2024, 3, 10, 13), 30) == "%H:%M"


def test_year_crossing_range():
  fmt = date_format(dt(2023, 12, 1), dt(2024, 2, 1), 800)
  # 62 days / 800 px = 6696 s per pixel -> hour, corrected to minute
  assert fmt == "%Y-%m-%d %H:%M"


def test_long_range_coarse_pitch_shows_days():
  # two years over 100 px: pitch is several days
  assert date_format(dt(2022, 1, 1), dt(2024, 1, 1), 100) == "%Y-%m-%d"


def test_month_range_narrow_width():
  assert date_format(dt(2024, 1, 1), dt(2024, 3, 1), 20) == "%m-%d"


def test_sub_second_span_is_unsupported():
  a = dt(2024, 3, 10, 12, 0, 0)
  with pytest.raises(UnsupportedTimeSpan):
    date_format(a, a + timedelta(milliseconds=500), 800)
  with pytest.raises(UnsupportedTimeSpan):
    date_format(a, a, 800)


def test_components_follow_time_zone():
  # same UTC day, different local days
  tz = timezone(timedelta(hours=3))
  a = dt(2024, 3, 10, 20)
  b = dt(2024, 3, 10, 22)
  assert wide_unit(a, b) == Unit.HOUR
  assert wide_unit(a.astimezone(tz), b.astimezone(tz)) == Unit.DAY
  assert date_format(a, b, 10, tz=tz) == "%m-%d %H:%M"


def test_width_must_be_positive():
  with pytest.raises(ValueError):
    date_format(dt(2024, 1, 1), dt(2024, 1, 2), 0)


@pytest.mark.parametrize("pitch, unit", [
  (0, Unit.SECOND),
  (59, Unit.SECOND),
  (60, Unit.MINUTE),
  (3599, Unit.MINUTE),
  (3600, Unit.HOUR),
  (86400, Unit.DAY),
])
def test_narrow_unit_buckets(pitch, unit):
  assert narrow_unit(pitch) == unit
