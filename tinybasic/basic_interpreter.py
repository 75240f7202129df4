"""
The Tiny BASIC execution engine: expression evaluation, statement execution
and the RUN/GOTO control-flow state machine.
"""

import enum
import os
import string
import sys
from typing import Callable, Optional

from tinybasic.basic_datatypes import (
    BasicError, BasicRuntimeError, Value,
    Expression, NumberLiteral, StringLiteral, VariableReference, UnaryOp, BinaryOp,
    Statement, Print, Let, If, Goto, Input, Rem, List, Run, End, Tron, Troff,
)
from tinybasic.basic_lexer import Lexer
from tinybasic.basic_parser import Parser
from tinybasic.basic_printer import Printer
from tinybasic.basic_program import Program

VARIABLE_NAMES = tuple(string.ascii_uppercase)


class Variables:
    """The 26 variables A-Z. Every variable reads as 0 until assigned."""

    def __init__(self):
        self.bindings: dict[str, int] = {}

    def __getitem__(self, name: str) -> int:
        return self.bindings.get(self._normalize(name), 0)

    def __setitem__(self, name: str, value: int):
        self.bindings[self._normalize(name)] = value

    def _normalize(self, name: str) -> str:
        key = name.upper()
        if key not in VARIABLE_NAMES:
            raise KeyError(f"'{name}' is not a variable name")
        return key

    def as_dict(self) -> dict[str, int]:
        return {n: self[n] for n in VARIABLE_NAMES}

    def __repr__(self) -> str:
        bound = ', '.join(f"{k}={v}" for k, v in sorted(self.bindings.items()))
        return f"<Variables {bound}>"


class Context:
    """Mutable state owned by one interpreter session.

    The engine reads and writes only the context it is handed.
    """

    def __init__(self, trace: bool = False):
        self.variables = Variables()
        self.program = Program()
        self.trace = trace


class RunState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class Evaluator:
    """The Tiny BASIC execution engine."""

    def __init__(self, write: Callable[[str], None],
                 read_line: Optional[Callable[[], Optional[str]]] = None,
                 max_steps: Optional[int] = None):
        self.write = write
        self.read_line = read_line
        self.max_steps = max_steps
        self.printer = Printer()
        self.state = RunState.STOPPED
        # Line being executed while RUNNING.
        self.cursor: Optional[int] = None
        # Set by GOTO (or a nested RUN) to redirect the cursor after the current line.
        self._jump: Optional[int] = None
        self._input_lexer = Lexer()
        self._input_parser = Parser()

    def _dbg(self, *parts):
        if os.environ.get("TINYBASIC_DEBUG"):
            try:
                print("[DBG]", *parts, file=sys.stderr)
            except Exception:
                pass

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    # -----------------------------------------------------------------
    # Expressions
    # -----------------------------------------------------------------

    def eval(self, node: Expression, ctx: Context) -> Value:
        match node:
            case NumberLiteral():
                return node.value
            case StringLiteral():
                return node.text
            case VariableReference():
                return ctx.variables[node.name]
            case UnaryOp():
                operand = self._number(self.eval(node.operand, ctx), node.sign)
                return -operand if node.sign == '-' else operand
            case BinaryOp():
                lhs = self._number(self.eval(node.left, ctx), node.op)
                rhs = self._number(self.eval(node.right, ctx), node.op)
                return self._apply(node.op, lhs, rhs)
            case _:
                raise TypeError(f"not an expression: {node!r}")

    def _number(self, value: Value, op: str) -> int:
        if not isinstance(value, int):
            raise BasicRuntimeError(f"type mismatch: cannot apply '{op}' to a string")
        return value

    def _apply(self, op: str, lhs: int, rhs: int) -> int:
        match op:
            case '+': return lhs + rhs
            case '-': return lhs - rhs
            case '*': return lhs * rhs
            case '/':
                if rhs == 0:
                    raise BasicRuntimeError("division by zero")
                # Integer division truncates toward zero.
                quotient = abs(lhs) // abs(rhs)
                return quotient if (lhs < 0) == (rhs < 0) else -quotient
        raise ValueError(f"unknown operator {op!r}")

    def format_value(self, value: Value) -> str:
        return str(value)

    # -----------------------------------------------------------------
    # Statements
    # -----------------------------------------------------------------

    def execute(self, stmt: Statement, ctx: Context):
        """Executes one statement, immediately or as the current RUN line."""
        match stmt:
            case Print():
                self._print(stmt, ctx)
            case Let():
                value = self.eval(stmt.value, ctx)
                if not isinstance(value, int):
                    raise BasicRuntimeError(f"type mismatch: cannot assign a string to {stmt.name}")
                ctx.variables[stmt.name] = value
            case If():
                if self._condition(stmt, ctx):
                    self.execute(stmt.then, ctx)
            case Goto():
                self._goto(stmt, ctx)
            case Input():
                self._input(stmt, ctx)
            case Rem():
                pass
            case List():
                self._list(stmt, ctx)
            case Run():
                if self.is_running:
                    self._dbg("RUN inside program: restarting at", ctx.program.first_line())
                    self._jump = ctx.program.first_line()
                else:
                    self.run(ctx)
            case End():
                if self.is_running:
                    self.state = RunState.STOPPED
            case Tron():
                ctx.trace = True
            case Troff():
                ctx.trace = False
            case _:
                raise TypeError(f"not a statement: {stmt!r}")

    def _print(self, stmt: Print, ctx: Context):
        # Build the whole line first so a failing item prints nothing.
        out = []
        for i, item in enumerate(stmt.items):
            out.append(self.format_value(self.eval(item, ctx)))
            if i < len(stmt.separators):
                out.append('\t' if stmt.separators[i] == ',' else '')
        match stmt.trailing:
            case ',':
                out.append('\t')
            case ';':
                pass
            case _:
                out.append('\n')
        self.write("".join(out))

    def _condition(self, stmt: If, ctx: Context) -> bool:
        lhs = self.eval(stmt.left, ctx)
        rhs = self.eval(stmt.right, ctx)
        if isinstance(lhs, int) != isinstance(rhs, int):
            raise BasicRuntimeError(
                f"type mismatch: cannot compare a number with a string using '{stmt.comparator.value}'")
        return stmt.comparator.holds(lhs, rhs)

    def _goto(self, stmt: Goto, ctx: Context):
        target = self._number(self.eval(stmt.target, ctx), 'GOTO')
        if not self.is_running:
            raise BasicRuntimeError("GOTO is only valid in a running program")
        if target not in ctx.program:
            raise BasicRuntimeError(f"GOTO {target} - no line with that number")
        self._dbg("GOTO", self.cursor, "->", target)
        self._jump = target

    def _input(self, stmt: Input, ctx: Context):
        text = self.read_line() if self.read_line is not None else None
        if text is None:
            raise BasicRuntimeError("INPUT - unable to read input stream")
        try:
            exprs = self._input_parser.parse_expression_list(self._input_lexer.tokenize(text))
        except BasicError as e:
            raise BasicRuntimeError(f"INPUT - unable to parse expression: {e.message}") from e
        if len(exprs) < len(stmt.names):
            raise BasicRuntimeError(
                f"INPUT - expected {len(stmt.names)} value(s) but got {len(exprs)}")
        # Assign left to right; a later value may refer to an earlier variable.
        for name, expr in zip(stmt.names, exprs):
            value = self.eval(expr, ctx)
            if not isinstance(value, int):
                raise BasicRuntimeError(f"INPUT - type mismatch: cannot assign a string to {name}")
            ctx.variables[name] = value

    def _list(self, stmt: List, ctx: Context):
        program = ctx.program
        if stmt.first is None:
            lines = program.ascending_lines()
        else:
            first = self._number(self.eval(stmt.first, ctx), 'LIST')
            last = first if stmt.last is None else self._number(self.eval(stmt.last, ctx), 'LIST')
            lines = program.lines_in_range(first, last)
        for number, line_stmt in lines:
            self.write(self.printer.format_line(number, line_stmt) + "\n")

    # -----------------------------------------------------------------
    # RUN
    # -----------------------------------------------------------------

    def run(self, ctx: Context):
        """Runs the stored program from its lowest line until END.

        Running past the last line without END still keeps everything the
        program did, but raises once the run is over.
        """
        program = ctx.program
        if not len(program):
            raise BasicRuntimeError("RUN - no program in memory")

        self.state = RunState.RUNNING
        self.cursor = program.first_line()
        steps = 0
        try:
            while self.state is RunState.RUNNING:
                if self.cursor is None:
                    raise BasicRuntimeError("RUN - program does not terminate with END")
                if self.max_steps is not None and steps >= self.max_steps:
                    raise BasicRuntimeError(f"step limit of {self.max_steps} exceeded", self.cursor)
                steps += 1

                stmt = program.get(self.cursor)
                if ctx.trace:
                    self.write(f"[{self.cursor}]")
                self._dbg("line", self.cursor, stmt)
                self._jump = None
                try:
                    self.execute(stmt, ctx)
                except BasicRuntimeError as e:
                    if e.line_number is None:
                        e.line_number = self.cursor
                    raise

                if self._jump is not None:
                    self.cursor = self._jump
                else:
                    self.cursor = program.next_line_after(self.cursor)
        finally:
            self._dbg("run stopped at", self.cursor, "variables", ctx.variables.as_dict())
            self.state = RunState.STOPPED
            self.cursor = None
            self._jump = None
