class PromchartError(Exception):
  pass


class RenderError(PromchartError):
  """Base for failures of a single render call. A render never returns a partial buffer."""


class DrawingFailure(RenderError):
  pass


class TemplateFailure(RenderError):
  pass


class UnsupportedTimeSpan(RenderError, ValueError):
  """Start and end of a time range differ only below one-second resolution."""


class QueryResultError(PromchartError):
  def __init__(self, message: str, error_type: str = ""):
    super().__init__(message)
    self.error_type = error_type
