import math
from datetime import datetime, timezone, tzinfo
from typing import Optional

NICE_LADDER = (1.0, 2.0, 2.5, 5.0, 10.0)


def nice_floor_step(raw: float) -> float:
  if not math.isfinite(raw) or raw <= 0:
    return 1.0
  exp = math.floor(math.log10(raw))
  base = 10.0 ** exp
  factor = raw / base
  prev = NICE_LADDER[0]
  for m in NICE_LADDER:
    if factor < m - 1e-12:
      break
    prev = m
  return prev * base


def next_nice_step(step: float) -> float:
  if step <= 0 or not math.isfinite(step):
    return 1.0
  exp = math.floor(math.log10(step))
  base = 10.0 ** exp
  factor = step / base
  for m in NICE_LADDER:
    if factor < m - 1e-12:
      return m * base
  return 1.0 * (10.0 ** (exp + 1))


def step_decimals(step: float) -> int:
  if step == 0 or not math.isfinite(step):
    return 0
  return min(6, max(0, -int(math.floor(math.log10(abs(step))))))


def fmt_ts(dt: datetime, tz: Optional[tzinfo] = None) -> str:
  return dt.astimezone(tz or timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
