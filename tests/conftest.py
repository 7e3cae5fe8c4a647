from datetime import datetime, timedelta, timezone

import pytest

from promchart.series import Series


@pytest.fixture
def t0():
  return datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_series(t0):
  def _make(values, labels=None, step=timedelta(minutes=1)):
    return Series.from_pairs(labels or {}, [(t0 + i * step, v) for i, v in enumerate(values)])
  return _make
