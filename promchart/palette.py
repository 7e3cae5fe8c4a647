from __future__ import annotations

import itertools
from typing import Iterator, Tuple

from hsluv import hsluv_to_rgb

RGB = Tuple[int, int, int]

# HSLuv is perceptually uniform, so equal steps look equally far apart.
BASE_HUE_COUNT = 5
BASE_HUE_STEP = 360.0 / BASE_HUE_COUNT  # 72 deg
# Later rounds sit between the hues of the first one.
HUE_OFFSETS = (0.0, BASE_HUE_STEP / 3.0, 2.0 * BASE_HUE_STEP / 3.0)
LIGHTNESS_LEVELS = (70.0, 55.0, 85.0)
SATURATION = 80.0

PALETTE_SIZE = len(HUE_OFFSETS) * len(LIGHTNESS_LEVELS) * BASE_HUE_COUNT


def _channel(c: float) -> int:
  return max(0, min(255, int(c * 255.0)))


def hsluv_color(hue: float, saturation: float, lightness: float) -> RGB:
  r, g, b = hsluv_to_rgb([hue % 360.0, saturation, lightness])
  return _channel(r), _channel(g), _channel(b)


def _build_palette() -> Tuple[RGB, ...]:
  out = []
  for offset in HUE_OFFSETS:
    for lightness in LIGHTNESS_LEVELS:
      for i in range(BASE_HUE_COUNT):
        out.append(hsluv_color(offset + i * BASE_HUE_STEP, SATURATION, lightness))
  return tuple(out)


PALETTE: Tuple[RGB, ...] = _build_palette()


def palette_color(n: int) -> RGB:
  return PALETTE[n % PALETTE_SIZE]


def colors() -> Iterator[RGB]:
  """Endless series colors; every call starts over from the first color."""
  return itertools.cycle(PALETTE)


def color_hex(rgb: RGB) -> str:
  return "{:02x}{:02x}{:02x}".format(*rgb)
