from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from promchart.errors import QueryResultError
from promchart.series import Series

logger = logging.getLogger(__name__)


def _parse_value(raw: Any) -> float:
  # Prometheus sends values as strings, including "NaN", "+Inf" and "-Inf"
  try:
    return float(raw)
  except (TypeError, ValueError) as e:
    raise QueryResultError(f"bad sample value: {raw!r}") from e


def _parse_point(point: Any) -> Tuple[datetime, float]:
  try:
    ts, raw = point
    # don't care about sub-second precision
    x = datetime.fromtimestamp(int(float(ts)), timezone.utc)
  except (TypeError, ValueError, OverflowError) as e:
    raise QueryResultError(f"bad sample: {point!r}") from e
  return x, _parse_value(raw)


def parse_query_range(body: Dict[str, Any]) -> List[Series]:
  """
  Convert a decoded /api/v1/query_range response into Series.
  Raises QueryResultError for error responses and unexpected shapes.
  """
  status = body.get("status")
  if status == "error":
    raise QueryResultError(f"query failed: {body.get('error', '')}", error_type=body.get("errorType", ""))
  if status != "success":
    raise QueryResultError(f"unexpected status {status!r}")

  data = body.get("data") or {}
  result_type = data.get("resultType")
  if result_type != "matrix":
    raise QueryResultError(f"unexpected resultType {result_type!r}")

  out: List[Series] = []
  for res in data.get("result") or []:
    labels = {str(k): str(v) for k, v in (res.get("metric") or {}).items()}
    points = [_parse_point(p) for p in res.get("values") or []]
    out.append(Series.from_pairs(labels, points))

  for w in body.get("warnings") or []:
    logger.warning("query warning: %s", w)
  return out


def load_query_range(path: Union[str, Path]) -> List[Series]:
  try:
    body = json.loads(Path(path).read_text(encoding="utf-8"))
  except ValueError as e:
    raise QueryResultError(f"{path}: not valid JSON: {e}") from e
  if not isinstance(body, dict):
    raise QueryResultError(f"{path}: expected a JSON object")
  return parse_query_range(body)
