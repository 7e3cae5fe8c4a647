from __future__ import annotations

import enum
from datetime import datetime, timezone, tzinfo
from typing import Optional

from promchart.errors import UnsupportedTimeSpan

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * 60
SECONDS_PER_DAY = 24 * 60 * 60


class Unit(enum.IntEnum):
  SECOND = 0
  MINUTE = 1
  HOUR = 2
  DAY = 3
  MONTH = 4
  YEAR = 5


# strftime directive and the separator that follows it
UNIT_FORMAT = {
  Unit.YEAR: ("%Y", "-"),
  Unit.MONTH: ("%m", "-"),
  Unit.DAY: ("%d", " "),
  Unit.HOUR: ("%H", ":"),
  Unit.MINUTE: ("%M", ":"),
  Unit.SECOND: ("%S", "."),
}


def wide_unit(start: datetime, end: datetime) -> Unit:
  """Coarsest calendar unit at which start and end differ."""
  if start.year != end.year:
    return Unit.YEAR
  if start.month != end.month:
    return Unit.MONTH
  if start.day != end.day:
    return Unit.DAY
  if start.hour != end.hour:
    return Unit.HOUR
  if start.minute != end.minute:
    return Unit.MINUTE
  if start.second != end.second:
    return Unit.SECOND
  raise UnsupportedTimeSpan(f"time range {start.isoformat()} .. {end.isoformat()} is shorter than one second")


def narrow_unit(pitch: int) -> Unit:
  """Finest unit worth showing when `pitch` seconds pass between adjacent pixels."""
  if pitch >= SECONDS_PER_DAY:
    return Unit.DAY
  if pitch >= SECONDS_PER_HOUR:
    return Unit.HOUR
  if pitch >= SECONDS_PER_MINUTE:
    return Unit.MINUTE
  return Unit.SECOND


def date_format(start: datetime, end: datetime, width: int, tz: Optional[tzinfo] = None) -> str:
  if width <= 0:
    raise ValueError("width must be positive")
  tz = tz or timezone.utc
  a = start.astimezone(tz)
  b = end.astimezone(tz)

  wide = wide_unit(a, b)
  pitch = int((end - start).total_seconds()) // width
  narrow = narrow_unit(pitch)

  # "31 23:59" is ambiguous, show "12-31 23:59"
  if wide == Unit.DAY:
    wide = Unit.MONTH
  # likewise a bare "45" or "59:45" does not read as a time of day
  if wide < Unit.HOUR:
    wide = Unit.HOUR
  # a bare "23" hour reads badly, show "23:59"
  if narrow == Unit.HOUR:
    narrow = Unit.MINUTE
  if narrow > wide:
    narrow = wide

  parts = []
  for u in sorted(Unit, reverse=True):
    if narrow <= u <= wide:
      parts.extend(UNIT_FORMAT[u])
  parts.pop()
  return "".join(parts)
