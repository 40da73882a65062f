"""Color & style helpers.

Decisions:
- Truecolor when COLORTERM advertises it; otherwise the 256-color cube.
- Disabled automatically when stdout is not a TTY unless FORCE_COLOR=1.
- NO_COLOR disables everything.
- Row colours are keyed by ColorClass; hex values come from config.Palette.
"""
from __future__ import annotations
import os
import sys
from typing import Dict, Mapping, Optional

from config import Palette
from models import ColorClass

RESET = '0'
BOLD = '1'
DIM = '2'
REVERSE = '7'


def _hex_to_rgb(hex_code: str) -> tuple[int, int, int]:
    h = hex_code.lstrip('#')
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    return f"38;5;{16 + 36 * to_6(r) + 6 * to_6(g) + to_6(b)}"


def color_enabled(environ: Optional[Mapping[str, str]] = None, isatty: Optional[bool] = None) -> bool:
    env = os.environ if environ is None else environ
    if env.get("NO_COLOR") is not None:
        return False
    if env.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}:
        return True
    return sys.stdout.isatty() if isatty is None else isatty


class Theme:
    def __init__(self, palette: Palette = Palette(), enabled: bool = True, truecolor: bool = False):
        self.enabled = enabled
        self.truecolor = truecolor
        self.primary = self._fg(palette.primary)
        self.row_colors: Dict[ColorClass, str] = {
            ColorClass.NORMAL: self._fg(palette.normal),
            ColorClass.OVERDUE: self._fg(palette.overdue) + ';' + BOLD,
            ColorClass.COMPLETE: self._fg(palette.complete) + ';' + DIM,
        }

    @classmethod
    def detect(cls, palette: Palette, environ: Optional[Mapping[str, str]] = None) -> "Theme":
        env = os.environ if environ is None else environ
        colorterm = env.get("COLORTERM", "").lower()
        return cls(palette,
                   enabled=color_enabled(env),
                   truecolor=any(tok in colorterm for tok in ("truecolor", "24bit")))

    @classmethod
    def plain(cls) -> "Theme":
        return cls(enabled=False)

    def _fg(self, hex_code: str) -> str:
        r, g, b = _hex_to_rgb(hex_code)
        if self.truecolor:
            return f"38;2;{r};{g};{b}"
        return _fg_256(r, g, b)

    def style(self, text: str, *parts: str) -> str:
        """Wrap text in one SGR sequence built from the given parts."""
        if not self.enabled or not parts:
            return text
        return f"\033[{';'.join(parts)}m{text}\033[{RESET}m"

    def row(self, text: str, color: ColorClass, selected: bool = False) -> str:
        parts = [self.row_colors[color]]
        if selected:
            parts.append(REVERSE)
        return self.style(text, *parts)

    def header(self, text: str) -> str:
        return self.style(text, self.primary, BOLD)
