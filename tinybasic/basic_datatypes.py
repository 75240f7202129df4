"""
Defines the core data types for the Tiny BASIC interpreter.

This module provides the token type produced by the lexer, the expression
and statement variants produced by the parser, and the error taxonomy
shared by every stage of the interpreter.
"""

import enum
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

# =================================================================
# Errors
# =================================================================

class BasicError(Exception):
    """Base class for every error the interpreter reports to the user."""
    kind = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LexError(BasicError):
    """A malformed token, e.g. an unterminated string literal."""
    kind = "LexError"

    def __init__(self, message: str, col: Optional[int] = None):
        super().__init__(message)
        self.col = col


class ParseError(BasicError):
    """A grammar violation on the current input line."""
    kind = "ParseError"

    def __init__(self, message: str, col: Optional[int] = None):
        super().__init__(message)
        self.col = col


class BasicRuntimeError(BasicError):
    """An error raised while executing a statement.

    `line_number` is the stored program line that was executing, or None
    for an immediate statement. The session fills it in when the error
    escapes a RUN.
    """
    kind = "RuntimeError"

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line_number = line_number


class ConfigError(BasicError):
    kind = "ConfigError"


# =================================================================
# Tokens
# =================================================================

class Token:
    """A single lexical token.

    kind is one of 'number', 'string', 'keyword', 'variable', 'op',
    'comma', 'semicolon', 'lparen', 'rparen', 'remark' or 'eol'.
    `col` is the 1-based column of the token's first character.
    """
    __slots__ = ('kind', 'value', 'col')

    def __init__(self, kind: str, value: Any, col: int):
        self.kind = kind
        self.value = value
        self.col = col

    def is_op(self, *symbols: str) -> bool:
        return self.kind == 'op' and self.value in symbols

    def is_keyword(self, *names: str) -> bool:
        return self.kind == 'keyword' and self.value in names

    def describe(self) -> str:
        """Human-readable form used in error messages."""
        if self.kind == 'eol':
            return "end of line"
        if self.kind == 'string':
            return f'"{self.value}"'
        return f"'{self.value}'"

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, col={self.col})"

    def __eq__(self, other):
        return (isinstance(other, Token) and self.kind == other.kind
                and self.value == other.value and self.col == other.col)


# =================================================================
# Expressions
# =================================================================

class Expression(ABC):
    """Abstract base class for all expression nodes.

    `parens` counts the pairs of parentheses that wrapped the expression in
    the source, so that listing reproduces them exactly.
    """
    parens: int = 0

    @abstractmethod
    def _fields(self) -> tuple:
        raise NotImplementedError

    def __eq__(self, other):
        return (type(self) is type(other) and self.parens == other.parens
                and self._fields() == other._fields())

    def __hash__(self):
        return hash((type(self).__name__, self.parens, self._fields()))


class NumberLiteral(Expression):
    def __init__(self, value: int, parens: int = 0):
        self.value = value
        self.parens = parens

    def _fields(self):
        return (self.value,)

    def __repr__(self) -> str:
        return f"NumberLiteral({self.value!r})"


class StringLiteral(Expression):
    """A double-quoted string. The text is kept without the quotes."""
    def __init__(self, text: str, parens: int = 0):
        self.text = text
        self.parens = parens

    def _fields(self):
        return (self.text,)

    def __repr__(self) -> str:
        return f"StringLiteral({self.text!r})"


class VariableReference(Expression):
    def __init__(self, name: str, parens: int = 0):
        self.name = name.upper()
        self.parens = parens

    def _fields(self):
        return (self.name,)

    def __repr__(self) -> str:
        return f"VariableReference({self.name!r})"


class UnaryOp(Expression):
    def __init__(self, sign: str, operand: Expression, parens: int = 0):
        self.sign = sign
        self.operand = operand
        self.parens = parens

    def _fields(self):
        return (self.sign, self.operand)

    def __repr__(self) -> str:
        return f"UnaryOp({self.sign!r}, {self.operand!r})"


class BinaryOp(Expression):
    def __init__(self, op: str, left: Expression, right: Expression, parens: int = 0):
        self.op = op
        self.left = left
        self.right = right
        self.parens = parens

    def _fields(self):
        return (self.op, self.left, self.right)

    def __repr__(self) -> str:
        return f"BinaryOp({self.op!r}, {self.left!r}, {self.right!r})"


# =================================================================
# Comparators
# =================================================================

class Comparator(enum.Enum):
    """The six relational operators usable in an IF condition.

    The value is the canonical spelling; `><` is read as NE.
    """
    EQ = "="
    NE = "<>"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    def holds(self, lhs, rhs) -> bool:
        match self:
            case Comparator.EQ: return lhs == rhs
            case Comparator.NE: return lhs != rhs
            case Comparator.LT: return lhs < rhs
            case Comparator.LE: return lhs <= rhs
            case Comparator.GT: return lhs > rhs
            case Comparator.GE: return lhs >= rhs


# =================================================================
# Statements
# =================================================================

class Statement(ABC):
    """Abstract base class for all statement nodes."""

    def _fields(self) -> tuple:
        return ()

    def __eq__(self, other):
        return type(self) is type(other) and self._fields() == other._fields()

    def __hash__(self):
        return hash((type(self).__name__, self._fields()))

    def __repr__(self) -> str:
        fields = ", ".join(repr(f) for f in self._fields())
        return f"{type(self).__name__}({fields})"


class Print(Statement):
    """PRINT item (sep item)* [sep]

    `separators[i]` sits between `items[i]` and `items[i + 1]` and is either
    ',' (emit a tab) or ';' (emit nothing). `trailing` is the optional
    separator after the last item; when present no newline is written.
    """
    def __init__(self, items: list[Expression], separators: Optional[list[str]] = None,
                 trailing: Optional[str] = None):
        self.items = list(items)
        self.separators = list(separators) if separators is not None else [','] * max(len(self.items) - 1, 0)
        self.trailing = trailing
        if len(self.separators) != max(len(self.items) - 1, 0):
            raise ValueError("Print needs exactly one separator between consecutive items")

    def _fields(self):
        return (tuple(self.items), tuple(self.separators), self.trailing)


class Let(Statement):
    def __init__(self, name: str, value: Expression):
        self.name = name.upper()
        self.value = value

    def _fields(self):
        return (self.name, self.value)


class If(Statement):
    def __init__(self, left: Expression, comparator: Comparator, right: Expression, then: Statement):
        self.left = left
        self.comparator = comparator
        self.right = right
        self.then = then

    def _fields(self):
        return (self.left, self.comparator, self.right, self.then)


class Goto(Statement):
    def __init__(self, target: Expression):
        self.target = target

    def _fields(self):
        return (self.target,)


class Input(Statement):
    def __init__(self, names: list[str]):
        self.names = [n.upper() for n in names]

    def _fields(self):
        return (tuple(self.names),)


class Rem(Statement):
    """A comment. `text` is everything after the REM keyword, verbatim."""
    def __init__(self, text: str = ""):
        self.text = text

    def _fields(self):
        return (self.text,)


class List(Statement):
    """LIST [first [, last]]"""
    def __init__(self, first: Optional[Expression] = None, last: Optional[Expression] = None):
        self.first = first
        self.last = last

    def _fields(self):
        return (self.first, self.last)


class Run(Statement):
    pass


class End(Statement):
    pass


class Tron(Statement):
    pass


class Troff(Statement):
    pass


# =================================================================
# Parsed lines
# =================================================================

class ParsedLine:
    """Result of parsing one input line.

    A line without a line number is an immediate statement. A line number
    without a statement asks for that line to be deleted from the program.
    """
    def __init__(self, line_number: Optional[int], statement: Optional[Statement]):
        self.line_number = line_number
        self.statement = statement

    @property
    def is_immediate(self) -> bool:
        return self.line_number is None

    def __repr__(self) -> str:
        return f"ParsedLine({self.line_number!r}, {self.statement!r})"

    def __eq__(self, other):
        return (isinstance(other, ParsedLine) and self.line_number == other.line_number
                and self.statement == other.statement)


Value = Union[int, str]
