from __future__ import annotations

import dataclasses
import logging
import math
from datetime import datetime, timedelta, timezone, tzinfo
from typing import List, Optional, Sequence, Tuple

import numpy as np
import skia

from promchart.date_format import date_format
from promchart.errors import DrawingFailure
from promchart.labels import make_label_renderer
from promchart.palette import RGB, color_hex, colors
from promchart.ranges import AxisRange, iter_to_range
from promchart.series import RenderRequest, Series, all_timestamps, finite_values
from promchart.utils import next_nice_step, nice_floor_step, step_decimals

logger = logging.getLogger(__name__)

# candidate X tick steps in seconds
TIME_STEPS = [
  1, 2, 5, 10, 15, 30,
  60, 120, 300, 600, 900, 1800,
  3600, 7200, 10800, 21600, 43200,
  86400, 2 * 86400, 7 * 86400, 14 * 86400, 30 * 86400, 91 * 86400, 365 * 86400,
]


@dataclasses.dataclass(frozen=True)
class RenderTheme:
  # Colors
  bg_color: int = skia.ColorWHITE
  plot_bg_color: int = skia.ColorWHITE
  grid_color: int = skia.ColorSetARGB(255, 220, 220, 220)
  axis_color: int = skia.ColorSetARGB(255, 130, 130, 130)
  text_color: int = skia.ColorSetARGB(255, 0, 0, 0)
  legend_bg: int = skia.ColorSetARGB(200, 255, 255, 255)  # translucent, series stay visible below
  legend_border: int = skia.ColorSetARGB(255, 150, 150, 150)
  legend_text: int = skia.ColorSetARGB(255, 10, 10, 10)

  # Fonts
  font_family: str = "DejaVu Sans"
  font_size: float = 10.0
  legend_font_size: float = 10.0

  # Line styles
  line_width: float = 1.6
  grid_width: float = 1.0

  # Layout paddings (label areas around the plot)
  padding_left: int = 48
  padding_right: int = 8
  padding_top: int = 8
  padding_bottom: int = 24

  # Legend box, anchored to the top-right corner of the plot
  legend_margin: int = 8
  legend_padding: int = 6
  legend_row_h: int = 14
  legend_chip_w: int = 10
  legend_chip_h: int = 10
  legend_chip_to_name_dx: int = 4
  legend_baseline_dy: int = 11  # from row top

  # X axis ticks/labels
  tick_length: float = 4.0
  x_label_offset_dy: float = 10.0
  x_ticks_target: int = 8

  # Y axis labels
  y_label_pad_left: float = 4.0
  y_label_baseline_dy: float = 4.0
  y_min_ticks: int = 4
  y_max_ticks: int = 10


@dataclasses.dataclass(frozen=True)
class RenderSettings:
  y_epsilon: float = 0.5
  x_epsilon: timedelta = timedelta(minutes=1)
  y_fallback: AxisRange = AxisRange(0.0, 1.0)
  tz: tzinfo = timezone.utc


@dataclasses.dataclass(frozen=True)
class Layout:
  width: int
  height: int
  padding_left: int
  padding_right: int
  padding_top: int
  padding_bottom: int

  @property
  def plot_rect(self) -> skia.Rect:
    l = self.padding_left
    t = self.padding_top
    r = self.width - self.padding_right
    b = self.height - self.padding_bottom
    return skia.Rect().MakeLTRB(float(l), float(t), float(r), float(b))


@dataclasses.dataclass(frozen=True)
class LegendEntry:
  color: RGB
  label: str


def _skia_color(rgb: RGB, alpha: int = 255) -> int:
  return skia.ColorSetARGB(alpha, rgb[0], rgb[1], rgb[2])


def compute_y_ticks(y_range: AxisRange, min_ticks: int = 4, max_ticks: int = 10) -> Tuple[float, List[float]]:
  """Nice-step ticks lying inside [start, end]; the range itself is never widened."""
  lo, hi = float(y_range.start), float(y_range.end)
  if not (math.isfinite(lo) and math.isfinite(hi)):
    return 0.0, []
  if hi <= lo:
    return 0.0, [lo]

  min_ticks = max(int(min_ticks), 2)
  max_ticks = max(int(max_ticks), min_ticks)

  step = nice_floor_step((hi - lo) / (min_ticks - 1))
  first = math.ceil(lo / step - 1e-9) * step
  cnt = int(math.floor((hi - first) / step + 1e-9)) + 1
  while cnt > max_ticks:
    step = next_nice_step(step)
    first = math.ceil(lo / step - 1e-9) * step
    cnt = int(math.floor((hi - first) / step + 1e-9)) + 1

  decimals = step_decimals(step)
  ticks: List[float] = []
  for i in range(max(cnt, 0)):
    v = first + i * step
    vv = 0.0 if abs(v) < 1e-12 else v
    ticks.append(round(vv, decimals + 1))
  return step, ticks


def time_step(span_sec: float, target: int = 8) -> int:
  # smallest step producing <= target ticks
  for s in TIME_STEPS:
    if span_sec / s <= target:
      return s
  return TIME_STEPS[-1]


def compute_x_ticks(x_range: AxisRange, target: int = 8, tz: Optional[tzinfo] = None) -> List[int]:
  """Epoch seconds of ticks aligned to the step in local time of `tz` (midnights fall on local midnight)."""
  t_from = x_range.start.timestamp()
  t_to = x_range.end.timestamp()
  if t_to <= t_from:
    return []
  step = time_step(t_to - t_from, target)
  # offset taken at the range start, DST changes inside the range are ignored
  offset = x_range.start.astimezone(tz or timezone.utc).utcoffset() or timedelta(0)
  off = int(offset.total_seconds())
  first = int(math.ceil((t_from + off) / step)) * step - off
  ticks: List[int] = []
  x = first
  for _ in range(200):
    if x > t_to:
      break
    ticks.append(x)
    x += step
  return ticks


class SkiaRenderer:
  def __init__(self, theme: Optional[RenderTheme] = None, settings: Optional[RenderSettings] = None,
               font_family: str = ""):
    base = theme or RenderTheme()
    if font_family and font_family != base.font_family:
      base = dataclasses.replace(base, font_family=font_family)
    self.theme = base
    self.settings = settings or RenderSettings()

  def _make_layout(self, width: int, height: int) -> Layout:
    t = self.theme
    return Layout(
      width=width,
      height=height,
      padding_left=t.padding_left,
      padding_right=t.padding_right,
      padding_top=t.padding_top,
      padding_bottom=t.padding_bottom,
    )

  @staticmethod
  def _value_to_y(val: float, rect: skia.Rect, y_range: AxisRange) -> float:
    ymin, ymax = float(y_range.start), float(y_range.end)
    if ymax <= ymin:
      return rect.bottom() - 1
    norm = (val - ymin) / (ymax - ymin)
    return float(rect.bottom() - norm * rect.height())

  @staticmethod
  def _time_to_x(ts: datetime, rect: skia.Rect, x_range: AxisRange) -> float:
    span = (x_range.end - x_range.start).total_seconds()
    if span <= 0:
      return rect.left()
    u = (ts - x_range.start).total_seconds() / span
    return float(rect.left() + u * rect.width())

  def _draw_frame(self, canvas: skia.Canvas, rect: skia.Rect):
    plot_bg_paint = skia.Paint(Color=self.theme.plot_bg_color)
    canvas.drawRect(rect, plot_bg_paint)  # type: ignore[arg-type]
    axis_paint = skia.Paint(Style=skia.Paint.kStroke_Style, Color=self.theme.axis_color,
                            StrokeWidth=self.theme.grid_width)
    canvas.drawRect(rect, axis_paint)  # type: ignore[arg-type]

  def _draw_y_ticks_and_labels(self, canvas: skia.Canvas, rect: skia.Rect, y_range: AxisRange, font: skia.Font):
    step, ticks = compute_y_ticks(y_range, self.theme.y_min_ticks, self.theme.y_max_ticks)
    if not ticks:
      return
    grid_paint = skia.Paint(Style=skia.Paint.kStroke_Style, Color=self.theme.grid_color,
                            StrokeWidth=self.theme.grid_width)
    text_paint = skia.Paint(AntiAlias=True, Color=self.theme.text_color)
    decimals = step_decimals(step) if step else 2

    for v in ticks:
      y = self._value_to_y(v, rect, y_range)
      canvas.drawLine(rect.left(), y, rect.right(), y, grid_paint)
      label = f"{v:.{decimals}f}"
      canvas.drawString(
        label,
        rect.left() - float(self.theme.y_label_pad_left) - font.measureText(label),
        y + float(self.theme.y_label_baseline_dy),
        font,
        text_paint
      )

  def _draw_x_ticks_and_labels(self, canvas: skia.Canvas, rect: skia.Rect, x_range: AxisRange, xfmt: str,
                               font: skia.Font, tz: tzinfo):
    ticks = compute_x_ticks(x_range, self.theme.x_ticks_target, tz)
    if not ticks:
      return

    text_paint = skia.Paint(AntiAlias=True, Color=self.theme.text_color)
    tick_paint = skia.Paint(Style=skia.Paint.kStroke_Style, Color=self.theme.axis_color, StrokeWidth=1.0)
    grid_paint = skia.Paint(Style=skia.Paint.kStroke_Style, Color=self.theme.grid_color,
                            StrokeWidth=self.theme.grid_width)

    for i, tx in enumerate(ticks):
      dt = datetime.fromtimestamp(tx, tz)
      px = self._time_to_x(dt, rect, x_range)
      y1 = rect.bottom()
      y2 = y1 + self.theme.tick_length
      canvas.drawLine(px, rect.top(), px, y1, grid_paint)
      canvas.drawLine(px, y1, px, y2, tick_paint)

      label = dt.strftime(xfmt)
      w = font.measureText(label)
      if (i == len(ticks) - 1) and ((px + w / 2.0) > rect.right()):
        # Right-align the last label to plot right edge
        lx = rect.right() - w
      else:
        lx = px - w / 2.0

      canvas.drawString(label, lx, y2 + float(self.theme.x_label_offset_dy), font, text_paint)

  def _draw_series_line(self, canvas: skia.Canvas, rect: skia.Rect, series: Series, color: RGB,
                        x_range: AxisRange, y_range: AxisRange):
    stroke_paint = skia.Paint(
      Style=skia.Paint.kStroke_Style,
      Color=_skia_color(color),
      StrokeWidth=self.theme.line_width,
      AntiAlias=True,
    )
    dot_paint = skia.Paint(Style=skia.Paint.kFill_Style, Color=_skia_color(color), AntiAlias=True)

    line_path = skia.Path()
    run: List[Tuple[float, float]] = []

    def flush():
      # an isolated point has no segment to stroke
      if len(run) == 1:
        canvas.drawCircle(run[0][0], run[0][1], self.theme.line_width, dot_paint)
      run.clear()

    for p in series.samples:
      if not math.isfinite(p.y):
        flush()
        continue
      x = self._time_to_x(p.x, rect, x_range)
      y = self._value_to_y(p.y, rect, y_range)
      if not run:
        line_path.moveTo(x, y)
      else:
        line_path.lineTo(x, y)
      run.append((x, y))
    flush()

    canvas.drawPath(line_path, stroke_paint)  # type: ignore[arg-type]

  def _draw_legend(self, canvas: skia.Canvas, rect: skia.Rect, entries: Sequence[LegendEntry], font: skia.Font):
    if not entries:
      return
    t = self.theme
    name_w = max(font.measureText(e.label) for e in entries)
    chip_advance = float(t.legend_chip_w + t.legend_chip_to_name_dx)
    box_w = 2.0 * t.legend_padding + chip_advance + name_w
    box_h = 2.0 * t.legend_padding + t.legend_row_h * len(entries)

    right = rect.right() - float(t.legend_margin)
    top = rect.top() + float(t.legend_margin)
    box = skia.Rect().MakeLTRB(max(rect.left(), right - box_w), top, right, top + box_h)

    canvas.drawRect(box, skia.Paint(Color=t.legend_bg))  # type: ignore[arg-type]
    canvas.drawRect(box, skia.Paint(Style=skia.Paint.kStroke_Style, Color=t.legend_border,
                                    StrokeWidth=1.0))  # type: ignore[arg-type]

    text_paint = skia.Paint(AntiAlias=True, Color=t.legend_text)
    chip_dy = (t.legend_row_h - t.legend_chip_h) / 2.0
    for row_idx, entry in enumerate(entries):
      x = box.left() + float(t.legend_padding)
      y_row = box.top() + float(t.legend_padding + row_idx * t.legend_row_h)
      canvas.drawRect(
        skia.Rect().MakeLTRB(x, y_row + chip_dy, x + float(t.legend_chip_w), y_row + chip_dy + float(t.legend_chip_h)),
        skia.Paint(Color=_skia_color(entry.color))
      )  # type: ignore[arg-type]
      canvas.drawString(entry.label, x + chip_advance, y_row + float(t.legend_baseline_dy), font, text_paint)

  def _render_image_core(
      self,
      series_list: Sequence[Series],
      t_from: datetime,
      t_to: datetime,
      width: int,
      height: int,
      template: Optional[str] = None,
      tz: Optional[tzinfo] = None,
  ) -> skia.Image:
    if width <= 0 or height <= 0:
      raise DrawingFailure(f"invalid image size {width}x{height}")
    layout = self._make_layout(width, height)
    plot_rect = layout.plot_rect
    if plot_rect.width() <= 0 or plot_rect.height() <= 0:
      raise DrawingFailure(f"image {width}x{height} leaves no room for the plot area")

    tz = tz or self.settings.tz
    label_renderer = make_label_renderer(template)

    x_range = iter_to_range(all_timestamps(series_list), self.settings.x_epsilon, AxisRange(t_from, t_to))
    y_range = iter_to_range(finite_values(series_list), self.settings.y_epsilon, self.settings.y_fallback)
    xfmt = date_format(t_from, t_to, width, tz)
    logger.debug("render %dx%d series=%d x=[%s, %s) y=[%s, %s) xfmt=%r", width, height, len(series_list),
                 x_range.start, x_range.end, y_range.start, y_range.end, xfmt)

    t = self.theme
    try:
      tf = skia.Typeface(t.font_family)
      font = skia.Font(tf, t.font_size)
      legend_font = skia.Font(tf, t.legend_font_size)

      surface = skia.Surface(width, height)
      canvas = surface.getCanvas()
      canvas.clear(t.bg_color)

      self._draw_frame(canvas, plot_rect)
      self._draw_y_ticks_and_labels(canvas, plot_rect, y_range, font)
      self._draw_x_ticks_and_labels(canvas, plot_rect, x_range, xfmt, font, tz)

      entries: List[LegendEntry] = []
      canvas.save()
      canvas.clipRect(plot_rect)
      for series, color in zip(series_list, colors()):
        self._draw_series_line(canvas, plot_rect, series, color, x_range, y_range)
        entries.append(LegendEntry(color=color, label=label_renderer.render(series.labels)))
        logger.debug("series %r: %d points, color #%s", entries[-1].label, len(series), color_hex(color))
      canvas.restore()

      self._draw_legend(canvas, plot_rect, entries, legend_font)
      image = surface.makeImageSnapshot()
    except (RuntimeError, ValueError, TypeError) as e:
      raise DrawingFailure(f"failed to draw chart: {e}") from e
    if image is None:
      raise DrawingFailure("failed to snapshot chart surface")
    return image

  def render(
      self,
      series_list: Sequence[Series],
      t_from: datetime,
      t_to: datetime,
      width: int,
      height: int,
      template: Optional[str] = None,
      tz: Optional[tzinfo] = None,
  ) -> bytes:
    """
    Render series as a line chart.
    Returns raw RGB bytes, row-major from the top-left corner, len == width * height * 3.
    """
    image = self._render_image_core(series_list, t_from, t_to, width, height, template, tz)
    try:
      rgba = image.toarray(colorType=skia.kRGBA_8888_ColorType)
    except (RuntimeError, ValueError) as e:
      raise DrawingFailure(f"failed to read chart pixels: {e}") from e
    rgb = np.ascontiguousarray(rgba[:, :, :3], dtype=np.uint8)
    buf = rgb.tobytes()
    if len(buf) != width * height * 3:
      raise DrawingFailure(f"pixel buffer has {len(buf)} bytes, expected {width * height * 3}")
    return buf

  def render_png(
      self,
      series_list: Sequence[Series],
      t_from: datetime,
      t_to: datetime,
      width: int,
      height: int,
      template: Optional[str] = None,
      tz: Optional[tzinfo] = None,
  ) -> bytes:
    image = self._render_image_core(series_list, t_from, t_to, width, height, template, tz)
    data = image.encodeToData(skia.kPNG, 100)
    if data is None:
      raise DrawingFailure("PNG encoding failed")
    return bytes(data)

  def render_request(self, req: RenderRequest, tz: Optional[tzinfo] = None) -> bytes:
    return self.render(req.series, req.t_from, req.t_to, req.width, req.height, req.template, tz)
