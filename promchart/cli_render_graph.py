from __future__ import annotations

import argparse
import logging
import math
import time
from datetime import datetime, timedelta, timezone, tzinfo
from pathlib import Path
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import dateparser
from dotenv import find_dotenv, load_dotenv

# Load .env before importing promchart.config
load_dotenv(find_dotenv(), override=False)

from promchart.config import (
  DEFAULT_TZ,
  FONT_FAMILY,
  IMG_HEIGHT,
  IMG_WIDTH,
  LEGEND_TEMPLATE,
  LOG_LEVEL,
  X_EPSILON_SEC,
  Y_EPSILON,
)
from promchart.errors import PromchartError
from promchart.labels import format_labels
from promchart.logging_conf import setup_logging
from promchart.prom_data import load_query_range
from promchart.ranges import AxisRange, iter_to_range
from promchart.render import RenderSettings, SkiaRenderer
from promchart.series import Series, all_timestamps
from promchart.utils import fmt_ts

logger = logging.getLogger(__name__)


def parse_when(text: str, tz: tzinfo) -> datetime:
  dt = dateparser.parse(
    text,
    languages=['en'],
    settings={
      'TIMEZONE': str(tz),
      'RETURN_AS_TIMEZONE_AWARE': True,
      'PREFER_DATES_FROM': 'past',
    }
  )
  if dt is None:
    raise argparse.ArgumentTypeError(f"cannot parse time: {text!r}")
  return dt


def resolve_window(series: List[Series], start: Optional[datetime], end: Optional[datetime],
                   x_epsilon: timedelta) -> Tuple[datetime, datetime]:
  """Requested range, with missing ends taken from the data (or the last hour if there is none)."""
  now = datetime.now(timezone.utc).replace(microsecond=0)
  data_range = iter_to_range(all_timestamps(series), x_epsilon, AxisRange(now - timedelta(hours=1), now))
  if data_range.start == data_range.end:
    # several series sampled at one instant
    data_range = AxisRange(data_range.start - x_epsilon, data_range.end + x_epsilon)
  return start or data_range.start, end or data_range.end


def _print_debug_series(series: List[Series], t_from: datetime, t_to: datetime, width: int, tz: tzinfo):
  period = (t_to - t_from).total_seconds()
  print(f"DEBUG: window [{fmt_ts(t_from, tz)} .. {fmt_ts(t_to, tz)}], period={period:.0f}s, "
        f"target_width={width}, pitch={int(period) // max(1, width)}s")
  for s in series:
    name = format_labels(s.labels)
    if not s.samples:
      print(f"  {name}: NO DATA")
      continue
    finite = [p.y for p in s.samples if math.isfinite(p.y)]
    if finite:
      stats = f"y[min={min(finite):.6g}, max={max(finite):.6g}]"
    else:
      stats = "(all non-finite)"
    print(f"  {name}: points={len(s.samples)} finite={len(finite)} "
          f"clock=[{fmt_ts(s.samples[0].x, tz)} .. {fmt_ts(s.samples[-1].x, tz)}] {stats}")
  print("DEBUG END")


def main(argv=None) -> int:
  p = argparse.ArgumentParser(description="Render a Prometheus query_range result to a line chart")
  p.add_argument("--input", type=Path, required=True, help="JSON body of a /api/v1/query_range response")
  p.add_argument("--start", help="Range start, e.g. '2024-05-01 10:00' or '6 hours ago' (default: first sample)")
  p.add_argument("--end", help="Range end (default: last sample)")
  p.add_argument("--width", type=int, default=IMG_WIDTH, help="Image width")
  p.add_argument("--height", type=int, default=IMG_HEIGHT, help="Image height")
  p.add_argument("--template", default=LEGEND_TEMPLATE, help="Legend label template, e.g. '{{instance}}'")
  p.add_argument("--tz", default=DEFAULT_TZ, help="Time zone for axis labels")
  p.add_argument("--out", type=Path, default=Path("graph.png"))
  p.add_argument("--raw", action="store_true", help="Write raw RGB bytes instead of PNG")
  p.add_argument("--debug", action="store_true", help="Print per-series debug info")
  args = p.parse_args(argv)

  setup_logging(logging.DEBUG if args.debug else LOG_LEVEL)

  t0 = time.time()
  try:
    tz = ZoneInfo(args.tz)
  except (ZoneInfoNotFoundError, ValueError) as e:
    logger.error("unknown time zone %r: %s", args.tz, e)
    return 1
  settings = RenderSettings(y_epsilon=Y_EPSILON, x_epsilon=timedelta(seconds=X_EPSILON_SEC), tz=tz)
  renderer = SkiaRenderer(settings=settings, font_family=FONT_FAMILY)

  try:
    start = parse_when(args.start, tz) if args.start else None
    end = parse_when(args.end, tz) if args.end else None
    series = load_query_range(args.input)
    t_load = time.time()

    t_from, t_to = resolve_window(series, start, end, settings.x_epsilon)
    if args.debug:
      _print_debug_series(series, t_from, t_to, args.width, tz)

    render = renderer.render if args.raw else renderer.render_png
    image = render(series, t_from, t_to, args.width, args.height, template=args.template or None)
  except (PromchartError, argparse.ArgumentTypeError, OSError) as e:
    logger.error("render failed: %s", e)
    return 1
  t_render = time.time()

  args.out.write_bytes(image)

  logger.info(
    "load=%.1fms render=%.1fms total=%.1fms series=%d size=%.1fKB",
    1000 * (t_load - t0),
    1000 * (t_render - t_load),
    1000 * (time.time() - t0),
    len(series),
    len(image) / 1024.0,
  )
  print(f"Wrote {args.out}")
  return 0


if __name__ == "__main__":
  raise SystemExit(main())
