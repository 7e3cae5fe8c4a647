from __future__ import annotations

import dataclasses
import math
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

# Reserved label holding the metric name
NAME_LABEL = "__name__"


@dataclasses.dataclass(frozen=True)
class Sample:
  x: datetime
  y: float  # may be nan/inf, kept as is


@dataclasses.dataclass(frozen=True)
class Series:
  labels: Dict[str, str]
  samples: Tuple[Sample, ...]  # chronological, never re-sorted

  @classmethod
  def from_pairs(cls, labels: Dict[str, str], pairs: Iterable[Tuple[datetime, float]]) -> "Series":
    return cls(labels=dict(labels), samples=tuple(Sample(x, float(y)) for x, y in pairs))

  @property
  def name(self) -> str:
    return self.labels.get(NAME_LABEL, "")

  def __len__(self) -> int:
    return len(self.samples)


@dataclasses.dataclass(frozen=True)
class RenderRequest:
  series: List[Series]
  t_from: datetime
  t_to: datetime
  width: int
  height: int
  template: Optional[str] = None


def all_timestamps(series_list: Iterable[Series]) -> Iterator[datetime]:
  for s in series_list:
    for p in s.samples:
      yield p.x


def finite_values(series_list: Iterable[Series]) -> Iterator[float]:
  """Sample values usable for axis scaling; nan/inf are skipped and drawn as gaps."""
  for s in series_list:
    for p in s.samples:
      if math.isfinite(p.y):
        yield p.y
