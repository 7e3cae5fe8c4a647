from __future__ import annotations

import dataclasses
from typing import Any, Generic, Iterable, TypeVar

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class AxisRange(Generic[T]):
  """Half-open display interval [start, end)."""
  start: T
  end: T

  @property
  def span(self) -> Any:
    return self.end - self.start

  def is_empty(self) -> bool:
    return not (self.start < self.end)


def iter_to_range(elems: Iterable[T], epsilon: Any, empty: AxisRange[T]) -> AxisRange[T]:
  """
  Min/max of elems as a range.
  - no elements: `empty` unchanged
  - one element a: [a - epsilon, a + epsilon)
  - otherwise exact [min, max), without padding
  """
  it = iter(elems)
  try:
    lo = hi = next(it)
  except StopIteration:
    return empty

  count = 1
  for v in it:
    count += 1
    if v < lo:
      lo = v
    elif v > hi:
      hi = v

  if count == 1:
    return AxisRange(lo - epsilon, lo + epsilon)
  return AxisRange(lo, hi)
