"""Color & style helpers.

Decisions:
- Truecolor preferred; falls back to 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
- Priority palette overridable via environment or project .env file.
"""
from __future__ import annotations
import os, sys
from pathlib import Path

from dotenv import dotenv_values

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_COLORTERM = os.environ.get("COLORTERM", "").lower()
_USE_TRUECOLOR = _ENABLE and any(tok in _COLORTERM for tok in ("truecolor", "24bit"))

def _code(part: str) -> str:
    """Generate ANSI escape code for a given style part."""
    return f"\033[{part}m" if _ENABLE else ''

def _hex_to_rgb(hex_code: str) -> tuple[int,int,int]:
    """Convert a hex color code to an RGB tuple."""
    h = hex_code.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def _fg_truecolor(r: int, g: int, b: int) -> str:
    """Generate ANSI escape code for truecolor foreground."""
    return f"\033[38;2;{r};{g};{b}m"

def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    idx = 16 + 36 * r6 + 6 * g6 + b6
    return f"\033[38;5;{idx}m"

def _from_hex(hex_code: str) -> str:
    """Convert a hex color code to an ANSI escape sequence."""
    if not _ENABLE:
        return ''
    r, g, b = _hex_to_rgb(hex_code)
    if _USE_TRUECOLOR:
        return _fg_truecolor(r, g, b)
    return _fg_256(r, g, b)

def _valid_hex(value: str) -> bool:
    h = value.lstrip('#')
    return len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h)

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')
STRIKE = _code('9')

HEX_ACCENT_DEFAULT = '#6366F1'
HEX_HIGH_DEFAULT = '#EF4444'
HEX_MEDIUM_DEFAULT = '#F59E0B'
HEX_LOW_DEFAULT = '#10B981'

_PALETTE_KEYS = ('QUICKTASK_ACCENT', 'QUICKTASK_HIGH', 'QUICKTASK_MEDIUM', 'QUICKTASK_LOW')
_env_path = Path(__file__).resolve().parent.parent / '.env'
_ENV_OVERRIDES: dict[str, str] = {}
if _env_path.exists():
    for k, v in dotenv_values(_env_path).items():
        if k in _PALETTE_KEYS and v and _valid_hex(v):
            _ENV_OVERRIDES[k] = '#' + v.lstrip('#')

def _resolve(key: str, default: str) -> str:
    """Real env var > .env override > default."""
    value = os.environ.get(key)
    if value and _valid_hex(value):
        return '#' + value.lstrip('#')
    return _ENV_OVERRIDES.get(key, default)

HEX_ACCENT = _resolve('QUICKTASK_ACCENT', HEX_ACCENT_DEFAULT)
HEX_HIGH = _resolve('QUICKTASK_HIGH', HEX_HIGH_DEFAULT)
HEX_MEDIUM = _resolve('QUICKTASK_MEDIUM', HEX_MEDIUM_DEFAULT)
HEX_LOW = _resolve('QUICKTASK_LOW', HEX_LOW_DEFAULT)

ACCENT = _from_hex(HEX_ACCENT)

PRIORITY_COLOR = {
    'high': _from_hex(HEX_HIGH),
    'medium': _from_hex(HEX_MEDIUM),
    'low': _from_hex(HEX_LOW),
}

HEADER_COLOR = ACCENT
ID_COLOR = ACCENT + BOLD
CATEGORY_COLOR = ACCENT
OVERDUE_COLOR = PRIORITY_COLOR['high'] + BOLD
DONE_COLOR = DIM + STRIKE
EMPTY_COLOR = DIM + ACCENT

def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET

__all__ = [
    'color','RESET','BOLD','DIM','STRIKE','PRIORITY_COLOR','HEADER_COLOR','ID_COLOR',
    'CATEGORY_COLOR','OVERDUE_COLOR','DONE_COLOR','EMPTY_COLOR',
    'HEX_ACCENT','HEX_HIGH','HEX_MEDIUM','HEX_LOW','_ENABLE','_USE_TRUECOLOR','_FORCE'
]
