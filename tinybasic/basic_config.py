"""
Interpreter settings, optionally read from a YAML file.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

import yaml

from tinybasic.basic_datatypes import ConfigError

CONFIG_ENV_VAR = "TINYBASIC_CONFIG"


@dataclass
class InterpreterConfig:
    """Settings for one interpreter session."""
    prompt: str = ":"
    # Abort RUN after this many executed lines; None means no limit.
    max_steps: Optional[int] = None
    trace: bool = False
    source_context: bool = True

    def __post_init__(self):
        if not isinstance(self.prompt, str):
            raise ConfigError(f"prompt must be a string, not {type(self.prompt).__name__}")
        if self.max_steps is not None:
            if isinstance(self.max_steps, bool) or not isinstance(self.max_steps, int) or self.max_steps < 1:
                raise ConfigError(f"max_steps must be a positive integer or null, not {self.max_steps!r}")
        for name in ('trace', 'source_context'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false, not {getattr(self, name)!r}")

    @classmethod
    def from_dict(cls, data: dict) -> 'InterpreterConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(k) for k in set(data) - known)
        if unknown:
            raise ConfigError(f"unknown config key(s): {', '.join(unknown)}")
        return cls(**data)


def load_config(path: Union[str, Path, None] = None) -> InterpreterConfig:
    """Loads settings from `path`, else from $TINYBASIC_CONFIG, else defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return InterpreterConfig()

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config file {str(p)!r}: {e.strerror or e}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {str(p)!r}: {e}") from e

    if data is None:
        return InterpreterConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"config file {str(p)!r} must contain a mapping")
    return InterpreterConfig.from_dict(data)
