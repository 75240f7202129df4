"""
The interpreter session: reads lines from the I/O capability, parses them,
and either executes them or stores them in the program.
"""

import traceback
from dataclasses import dataclass
from typing import Literal, Optional

from tinybasic.basic_config import InterpreterConfig
from tinybasic.basic_datatypes import LexError, ParseError, BasicRuntimeError, ParsedLine
from tinybasic.basic_interpreter import Context, Evaluator
from tinybasic.basic_io import InterpreterIO, StandardIO
from tinybasic.basic_lexer import Lexer
from tinybasic.basic_parser import Parser


@dataclass
class ExecutionResult:
    """The structured result of processing one input line."""
    status: Literal['success', 'error']
    parsed: Optional[ParsedLine] = None
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    # Program line that was executing when a runtime error happened.
    line_number: Optional[int] = None

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return str(self.error_message or "Unknown error")


class Interpreter:
    """One Tiny BASIC session.

    Owns the variables and the stored program for its whole lifetime and
    routes every failure to the I/O capability's error channel.
    """

    def __init__(self, io: Optional[InterpreterIO] = None, config: Optional[InterpreterConfig] = None):
        self.config = config or InterpreterConfig()
        self.io = io if io is not None else StandardIO(prompt=self.config.prompt)
        self.context = Context(trace=self.config.trace)
        self.lexer = Lexer()
        self.parser = Parser()
        self.evaluator = Evaluator(self._write, read_line=self.read_input_line,
                                   max_steps=self.config.max_steps)

    @property
    def variables(self):
        return self.context.variables

    @property
    def program(self):
        return self.context.program

    # -----------------------------------------------------------------
    # Input
    # -----------------------------------------------------------------

    def read_input_line(self) -> Optional[str]:
        """Reads one line from the input capability.

        Returns None at end of input. Tabs become spaces and other control
        characters (including a CR before the LF) are dropped.
        """
        c = self.io.get_input_char()
        if c is None:
            return None
        chars = []
        while c is not None and c != "\n":
            if c == "\t":
                chars.append(" ")
            elif c.isprintable():
                chars.append(c)
            c = self.io.get_input_char()
        return "".join(chars)

    def interpret_input(self):
        """Prompts for, reads and processes lines until input runs out."""
        while True:
            self.io.show_prompt()
            line = self.read_input_line()
            if line is None:
                break
            self.handle_line(line)

    # -----------------------------------------------------------------
    # Processing
    # -----------------------------------------------------------------

    def handle_line(self, text: str) -> ExecutionResult:
        """The main entry point to process one line of input."""
        parsed = None
        try:
            # 1. Lex and parse the whole line before touching any state
            parsed = self.parser.parse_line(self.lexer.tokenize(text))
            if parsed is None:
                return ExecutionResult(status='success')

            # 2. Execute or store
            if parsed.is_immediate:
                self.evaluator.execute(parsed.statement, self.context)
            elif parsed.statement is None:
                self.evaluator._dbg("store: delete", parsed.line_number)
                self.program.delete(parsed.line_number)
            else:
                self.evaluator._dbg("store: put", parsed.line_number, parsed.statement)
                self.program.put(parsed.line_number, parsed.statement)
            return ExecutionResult(status='success', parsed=parsed)

        except (LexError, ParseError) as e:
            msg = self._format_syntax_error(e, text)
            return self._report(ExecutionResult(status='error', parsed=parsed, error_message=msg,
                                                error_kind=e.kind))
        except BasicRuntimeError as e:
            msg = self._format_runtime_error(e)
            return self._report(ExecutionResult(status='error', parsed=parsed, error_message=msg,
                                                error_kind=e.kind, line_number=e.line_number))
        except Exception as e:
            self.evaluator._dbg(traceback.format_exc())
            msg = f"InternalError: {e}"
            return self._report(ExecutionResult(status='error', parsed=parsed, error_message=msg,
                                                error_kind="InternalError"))

    def _report(self, result: ExecutionResult) -> ExecutionResult:
        self.io.show_error(result.format_error())
        return result

    def _write(self, text: str):
        for c in text:
            self.io.put_output_char(c)

    def _format_syntax_error(self, e, source: str) -> str:
        if e.col is None:
            return f"{e.kind}: {e.message}"
        msg = f"{e.kind}: {e.message} (col {e.col})"
        if self.config.source_context:
            msg += "\n" + self._source_context(source, e.col)
        return msg

    def _format_runtime_error(self, e: BasicRuntimeError) -> str:
        if e.line_number is not None:
            return f"{e.kind}: {e.message} (line {e.line_number})"
        return f"{e.kind}: {e.message}"

    def _source_context(self, source: str, col: int) -> str:
        caret = " " * max(col - 1, 0)
        return f"> {source}\n  {caret}^"
