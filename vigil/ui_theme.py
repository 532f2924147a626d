"""UI theme definitions and selection helpers.

Themes are plain ANSI palettes for the dashboard chrome and status colors.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the renderer."""

    name: str
    reset: str
    banner: str
    path: str
    branch: str
    heading: str
    status_modified: str
    status_added: str
    status_deleted: str
    status_renamed: str
    status_untracked: str
    status_other: str
    file: str
    label: str
    ahead: str
    behind: str
    absent: str
    help: str
    message: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    banner="\033[1;38;5;205m",
    path="\033[38;5;245m",
    branch="\033[1;38;5;42m",
    heading="\033[1m",
    status_modified="\033[38;5;214m",
    status_added="\033[38;5;42m",
    status_deleted="\033[38;5;196m",
    status_renamed="\033[38;5;39m",
    status_untracked="\033[38;5;245m",
    status_other="\033[38;5;252m",
    file="\033[38;5;252m",
    label="\033[2;38;5;250m",
    ahead="\033[38;5;42m",
    behind="\033[38;5;214m",
    absent="\033[2;38;5;245m",
    help="\033[38;5;241m",
    message="\033[38;5;203m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    banner="\033[1;38;5;45m",
    path="\033[38;5;110m",
    branch="\033[1;38;5;81m",
    heading="\033[1;38;5;153m",
    status_modified="\033[38;5;221m",
    status_added="\033[38;5;79m",
    status_deleted="\033[38;5;203m",
    status_renamed="\033[38;5;117m",
    status_untracked="\033[38;5;73m",
    status_other="\033[38;5;252m",
    file="\033[38;5;255m",
    label="\033[2;38;5;110m",
    ahead="\033[38;5;79m",
    behind="\033[38;5;221m",
    absent="\033[2;38;5;73m",
    help="\033[2;38;5;31m",
    message="\033[38;5;209m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    banner="",
    path="",
    branch="",
    heading="",
    status_modified="",
    status_added="",
    status_deleted="",
    status_renamed="",
    status_untracked="",
    status_other="",
    file="",
    label="",
    ahead="",
    behind="",
    absent="",
    help="",
    message="",
)

_THEMES: dict[str, UITheme] = {theme.name: theme for theme in (DEFAULT_THEME, OCEAN_THEME, PLAIN_THEME)}


def available_theme_names() -> tuple[str, ...]:
    return tuple(_THEMES)


def resolve_theme(name: str | None, no_color: bool | None = None) -> UITheme:
    """Look up a theme by name, falling back to the default palette.

    ``no_color`` defaults to whether the ``NO_COLOR`` environment variable is
    set; when true the plain theme wins regardless of ``name``.
    """
    if no_color is None:
        no_color = bool(os.environ.get("NO_COLOR"))
    if no_color:
        return PLAIN_THEME
    if not name:
        return DEFAULT_THEME
    return _THEMES.get(name.strip().lower(), DEFAULT_THEME)
