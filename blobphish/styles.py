"""Theme registry: semantic roles mapped to rich styles."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict

import yaml
from rich.style import Style

DEFAULT_THEME_YAML = """\
# Kanagawa palette
palette:
  background: "#1F1F28"
  foreground: "#DCD7BA"
  selection: "#2D4F67"
  comment: "#727169"
  red: "#C34043"
  green: "#76946A"
  yellow: "#C0A36E"
  blue: "#7E9CD8"
  purple: "#957FB8"
  cyan: "#6A9589"
  orange: "#FFA066"

# role -> color / bgcolor (palette name or literal color), bold
roles:
  title: {color: blue, bold: true}
  ascii: {color: purple, bold: true}
  error: {color: red, bold: true}
  help: {color: comment}
  status_bar: {color: foreground, bgcolor: selection}
  command_bar: {color: green}
  option_continue: {color: green}
  option_skip: {color: yellow}
  option_danger: {color: red}
"""


@dataclass(frozen=True)
class Styles:
    title: Style
    ascii: Style
    error: Style
    help: Style
    status_bar: Style
    command_bar: Style
    option_continue: Style
    option_skip: Style
    option_danger: Style


def _resolve(palette: Dict[str, str], value):
    if value is None:
        return None
    return palette.get(str(value), str(value))


def _build_style(role: str, entry, palette: Dict[str, str]) -> Style:
    if not isinstance(entry, dict):
        raise ValueError(f"theme role '{role}' must be a mapping")
    try:
        return Style(
            color=_resolve(palette, entry.get("color")),
            bgcolor=_resolve(palette, entry.get("bgcolor")),
            bold=entry.get("bold"),
        )
    except Exception as exc:
        raise ValueError(f"theme role '{role}': {exc}") from exc


def load_styles(document: str = DEFAULT_THEME_YAML) -> Styles:
    try:
        data = yaml.safe_load(document) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid theme document: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("theme document must be a mapping")

    palette = {str(k): str(v) for k, v in (data.get("palette") or {}).items()}
    roles = data.get("roles") or {}

    built = {}
    for f in fields(Styles):
        if f.name not in roles:
            raise ValueError(f"theme is missing role '{f.name}'")
        built[f.name] = _build_style(f.name, roles[f.name], palette)
    return Styles(**built)
