"""Runtime settings from environment variables plus an optional .env file.

Priority: real environment variable > .env entry > default. Command-line
options in cli.py override whatever ends up here.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

ENV_PREFIX = "TODO"
DEFAULT_DOTENV = Path('.env')

HEX_COMPLETE_DEFAULT = '#A7E399'
HEX_OVERDUE_DEFAULT = '#E06C75'
HEX_NORMAL_DEFAULT = '#D8DEE9'
HEX_PRIMARY_DEFAULT = '#476EAE'


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def truthy(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def valid_hex(value: Optional[str], default: str) -> str:
    if not value:
        return default
    h = value.strip().lstrip('#')
    if len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h):
        return '#' + h
    return default


@dataclass(frozen=True)
class Palette:
    complete: str = HEX_COMPLETE_DEFAULT
    overdue: str = HEX_OVERDUE_DEFAULT
    normal: str = HEX_NORMAL_DEFAULT
    primary: str = HEX_PRIMARY_DEFAULT


@dataclass(frozen=True)
class Settings:
    data_file: Path = Path('todos.json')
    alt_screen: bool = True
    log_file: Optional[Path] = None
    log_level: str = "INFO"
    palette: Palette = Palette()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 dotenv_path: Optional[Union[str, Path]] = None) -> "Settings":
        env_file = Path(dotenv_path) if dotenv_path is not None else DEFAULT_DOTENV
        merged = {}
        if env_file.is_file():
            merged.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        merged.update(os.environ if environ is None else environ)

        log_file = merged.get(_k("LOG_FILE"), "").strip()
        return cls(
            data_file=Path(merged.get(_k("FILE"), "").strip() or 'todos.json').expanduser(),
            alt_screen=truthy(merged.get(_k("ALT_SCREEN")), True),
            log_file=Path(log_file).expanduser() if log_file else None,
            log_level=(merged.get(_k("LOG_LEVEL")) or "INFO").strip().upper(),
            palette=Palette(
                complete=valid_hex(merged.get(_k("COLOR_COMPLETE")), HEX_COMPLETE_DEFAULT),
                overdue=valid_hex(merged.get(_k("COLOR_OVERDUE")), HEX_OVERDUE_DEFAULT),
                normal=valid_hex(merged.get(_k("COLOR_NORMAL")), HEX_NORMAL_DEFAULT),
                primary=valid_hex(merged.get(_k("COLOR_PRIMARY")), HEX_PRIMARY_DEFAULT),
            ),
        )
