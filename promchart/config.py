import os


def _float(val: str, default: float) -> float:
  try:
    return float(val)
  except (TypeError, ValueError):
    return default


# Image defaults
IMG_WIDTH = int(os.getenv("IMG_WIDTH", "800"))
IMG_HEIGHT = int(os.getenv("IMG_HEIGHT", "480"))
FONT_FAMILY = os.getenv("FONT_FAMILY", "DejaVu Sans")
DEFAULT_TZ = os.getenv("DEFAULT_TZ", "UTC")

# Legend label template, e.g. "{{instance}} {{mode}}"; empty means name{k="v",...}
LEGEND_TEMPLATE = os.getenv("LEGEND_TEMPLATE", "")

# Axis padding applied when a series set has a single point
Y_EPSILON = _float(os.getenv("Y_EPSILON"), 0.5)
X_EPSILON_SEC = int(os.getenv("X_EPSILON_SEC", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
