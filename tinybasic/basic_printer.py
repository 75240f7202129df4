"""
Renders parsed Tiny BASIC back to canonical source text, as shown by LIST.
"""

from tinybasic.basic_datatypes import (
    NumberLiteral, StringLiteral, VariableReference, UnaryOp, BinaryOp,
    Print, Let, If, Goto, Input, Rem, List, Run, End, Tron, Troff, Statement,
)


class Printer:
    """Formats expressions and statements into normalized source text.

    Keywords and variable names come out uppercase, binary operators get one
    space on each side, commas are followed by one space, and parentheses
    appear exactly where the source had them.
    """

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format an expression or statement."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            raise TypeError(f"cannot format {type(obj).__name__}")
        text = handler(obj)
        parens = getattr(obj, 'parens', 0)
        return "(" * parens + text + ")" * parens

    def format_line(self, line_number: int, statement: Statement) -> str:
        """One LIST output line, without the trailing newline."""
        return f"{line_number} {self.pformat(statement)}"

    def _create_handlers(self):
        return {
            NumberLiteral: self._pformat_number,
            StringLiteral: self._pformat_string,
            VariableReference: self._pformat_variable,
            UnaryOp: self._pformat_unary,
            BinaryOp: self._pformat_binary,
            Print: self._pformat_print,
            Let: self._pformat_let,
            If: self._pformat_if,
            Goto: self._pformat_goto,
            Input: self._pformat_input,
            Rem: self._pformat_rem,
            List: self._pformat_list,
            Run: lambda s: "RUN",
            End: lambda s: "END",
            Tron: lambda s: "TRON",
            Troff: lambda s: "TROFF",
        }

    # Expressions

    def _pformat_number(self, obj):
        return str(obj.value)

    def _pformat_string(self, obj):
        return f'"{obj.text}"'

    def _pformat_variable(self, obj):
        return obj.name

    def _pformat_unary(self, obj):
        return f"{obj.sign}{self.pformat(obj.operand)}"

    def _pformat_binary(self, obj):
        return f"{self.pformat(obj.left)} {obj.op} {self.pformat(obj.right)}"

    # Statements

    def _pformat_print(self, obj):
        if not obj.items:
            return "PRINT"
        parts = [self.pformat(obj.items[0])]
        for sep, item in zip(obj.separators, obj.items[1:]):
            parts.append(f"{sep} {self.pformat(item)}")
        return "PRINT " + "".join(parts) + (obj.trailing or "")

    def _pformat_let(self, obj):
        return f"LET {obj.name} = {self.pformat(obj.value)}"

    def _pformat_if(self, obj):
        return (f"IF {self.pformat(obj.left)} {obj.comparator.value} "
                f"{self.pformat(obj.right)} THEN {self.pformat(obj.then)}")

    def _pformat_goto(self, obj):
        return f"GOTO {self.pformat(obj.target)}"

    def _pformat_input(self, obj):
        return "INPUT " + ", ".join(obj.names)

    def _pformat_rem(self, obj):
        return f"REM{obj.text}"

    def _pformat_list(self, obj):
        if obj.first is None:
            return "LIST"
        if obj.last is None:
            return f"LIST {self.pformat(obj.first)}"
        return f"LIST {self.pformat(obj.first)}, {self.pformat(obj.last)}"
