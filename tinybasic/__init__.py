"""
A small line-numbered Tiny BASIC interpreter.
"""

from tinybasic.basic_config import InterpreterConfig, load_config
from tinybasic.basic_datatypes import (
    BasicError, LexError, ParseError, BasicRuntimeError, ConfigError,
)
from tinybasic.basic_io import InterpreterIO, StandardIO, RecordingIO
from tinybasic.basic_runtime import Interpreter, ExecutionResult

__all__ = [
    "Interpreter", "ExecutionResult",
    "InterpreterIO", "StandardIO", "RecordingIO",
    "InterpreterConfig", "load_config",
    "BasicError", "LexError", "ParseError", "BasicRuntimeError", "ConfigError",
]
