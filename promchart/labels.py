from __future__ import annotations

from typing import Dict, Optional, Protocol

import jinja2
from jinja2.sandbox import SandboxedEnvironment

from promchart.errors import TemplateFailure
from promchart.series import NAME_LABEL


class LabelRenderer(Protocol):
  def render(self, labels: Dict[str, str]) -> str:
    ...


def escape_label_value(value: str) -> str:
  return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class CanonicalLabelRenderer:
  """Renders labels as name{key="value",...}, the form metric selectors use."""

  def render(self, labels: Dict[str, str]) -> str:
    name = labels.get(NAME_LABEL, "")
    pairs = ",".join(f'{k}="{escape_label_value(v)}"' for k, v in labels.items() if k != NAME_LABEL)
    return f"{name}{{{pairs}}}"


class TemplateLabelRenderer:
  """Renders a Jinja2 template with each label available as a variable: "{{instance}} ({{mode}})"."""

  # sandboxed: templates come from dashboard requests
  _env = SandboxedEnvironment(undefined=jinja2.StrictUndefined, autoescape=False, keep_trailing_newline=True)

  def __init__(self, template: str):
    self.source = template
    try:
      self._template = self._env.from_string(template)
    except jinja2.TemplateSyntaxError as e:
      raise TemplateFailure(f"bad legend template at line {e.lineno}: {e.message}") from e

  def render(self, labels: Dict[str, str]) -> str:
    try:
      return self._template.render(labels)
    except Exception as e:
      raise TemplateFailure(f"legend template failed for {CanonicalLabelRenderer().render(labels)}: {e}") from e


def make_label_renderer(template: Optional[str] = None) -> LabelRenderer:
  if template:
    return TemplateLabelRenderer(template)
  return CanonicalLabelRenderer()


def format_labels(labels: Dict[str, str], template: Optional[str] = None) -> str:
  return make_label_renderer(template).render(labels)
