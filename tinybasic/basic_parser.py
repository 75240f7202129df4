"""
Recursive-descent parser turning a token list into a ParsedLine.

Grammar (one statement per line):

    line       := [number] [statement]
    statement  := PRINT [printlist] | LET var '=' expr
                | IF expr relop expr THEN statement | GOTO expr
                | INPUT var (',' var)* | REM text
                | LIST [expr [',' expr]] | RUN | END | TRON | TROFF
    printlist  := expr ((',' | ';') expr)* [',' | ';']
    expr       := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := ['+' | '-'] primary
    primary    := number | string | var | '(' expr ')'
"""

from typing import Optional

from tinybasic.basic_datatypes import (
    Token, ParseError, ParsedLine, Comparator,
    Expression, NumberLiteral, StringLiteral, VariableReference, UnaryOp, BinaryOp,
    Statement, Print, Let, If, Goto, Input, Rem, List, Run, End, Tron, Troff,
)

# Second character that turns a one-character comparator into a two-character one.
_COMPOUND_COMPARATORS = {
    ('<', '='): Comparator.LE,
    ('<', '>'): Comparator.NE,
    ('>', '='): Comparator.GE,
    ('>', '<'): Comparator.NE,
}

_SIMPLE_COMPARATORS = {
    '=': Comparator.EQ,
    '<': Comparator.LT,
    '>': Comparator.GT,
}

# Deepest nesting of parentheses, or of IF inside IF, accepted on one line.
MAX_NESTING = 100

_NULLARY = {
    'RUN': Run,
    'END': End,
    'TRON': Tron,
    'TROFF': Troff,
}


class Parser:
    """Parses the tokens of one input line.

    The parser never touches interpreter state; a line is either parsed in
    full or rejected with a ParseError.
    """

    def __init__(self):
        self._tokens: list[Token] = []
        self._pos = 0
        self._depth = 0

    # -----------------------------------------------------------------
    # Entry points
    # -----------------------------------------------------------------

    def parse_line(self, tokens: list[Token]) -> Optional[ParsedLine]:
        """Parses a whole line. Returns None for a blank line."""
        self._reset(tokens)
        if self._peek().kind == 'eol':
            return None

        line_number = None
        if self._peek().kind == 'number':
            tok = self._advance()
            if tok.value < 1:
                raise ParseError("line number must be a positive integer", tok.col)
            line_number = tok.value
            if self._peek().kind == 'eol':
                return ParsedLine(line_number, None)

        stmt = self.statement()
        self._expect_eol()
        return ParsedLine(line_number, stmt)

    def parse_expression_list(self, tokens: list[Token]) -> list[Expression]:
        """Parses `expr (',' expr)*`, the reply to an INPUT statement."""
        self._reset(tokens)
        exprs = [self.expression()]
        while self._peek().kind == 'comma':
            self._advance()
            exprs.append(self.expression())
        self._expect_eol()
        return exprs

    # -----------------------------------------------------------------
    # Statements
    # -----------------------------------------------------------------

    def statement(self) -> Statement:
        tok = self._peek()
        if tok.kind != 'keyword':
            raise ParseError(f"not a valid statement: unexpected {tok.describe()}", tok.col)
        self._advance()
        match tok.value:
            case 'PRINT':
                return self._print_arguments()
            case 'LET':
                return self._let_arguments()
            case 'IF':
                return self._if_arguments()
            case 'GOTO':
                return Goto(self.expression())
            case 'INPUT':
                return self._input_arguments()
            case 'REM':
                remark = self._peek()
                self._advance()
                return Rem(remark.value if remark.kind == 'remark' else "")
            case 'LIST':
                return self._list_arguments()
            case name if name in _NULLARY:
                return _NULLARY[name]()
            case _:
                raise ParseError(f"not a valid statement: unexpected {tok.describe()}", tok.col)

    def _print_arguments(self) -> Print:
        if self._at_statement_end():
            return Print([])
        items = [self.expression()]
        separators: list[str] = []
        while self._peek().kind in ('comma', 'semicolon'):
            sep = self._advance().value
            if self._at_statement_end():
                return Print(items, separators, trailing=sep)
            separators.append(sep)
            items.append(self.expression())
        return Print(items, separators)

    def _let_arguments(self) -> Let:
        name = self._variable_name("LET")
        tok = self._peek()
        if not tok.is_op('='):
            raise ParseError(f"LET - expected '=' but found {tok.describe()}", tok.col)
        self._advance()
        return Let(name, self.expression())

    def _if_arguments(self) -> If:
        lhs = self.expression()
        relop = self.comparator()
        rhs = self.expression()
        tok = self._peek()
        if not tok.is_keyword('THEN'):
            raise ParseError(f"IF - expected THEN but found {tok.describe()}", tok.col)
        self._advance()
        if self._peek().kind == 'eol':
            raise ParseError("IF - missing statement after THEN", self._peek().col)
        self._enter("IF statements", tok.col)
        then = self.statement()
        self._depth -= 1
        return If(lhs, relop, rhs, then)

    def _input_arguments(self) -> Input:
        names = [self._variable_name("INPUT")]
        while self._peek().kind == 'comma':
            self._advance()
            names.append(self._variable_name("INPUT"))
        return Input(names)

    def _list_arguments(self) -> List:
        if self._at_statement_end():
            return List()
        first = self.expression()
        if self._peek().kind != 'comma':
            return List(first)
        self._advance()
        return List(first, self.expression())

    def _variable_name(self, context: str) -> str:
        tok = self._peek()
        if tok.kind != 'variable':
            raise ParseError(f"{context} - expected a variable name but found {tok.describe()}", tok.col)
        self._advance()
        return tok.value

    # -----------------------------------------------------------------
    # Expressions
    # -----------------------------------------------------------------

    def comparator(self) -> Comparator:
        """Reads a relational operator, merging two adjacent operator tokens.

        Whitespace was already dropped by the lexer, so `< =` arrives as the
        same two tokens as `<=`.
        """
        tok = self._peek()
        if tok.kind != 'op' or tok.value not in _SIMPLE_COMPARATORS:
            raise ParseError(f"IF - expected a comparison operator but found {tok.describe()}", tok.col)
        self._advance()
        nxt = self._peek()
        if nxt.kind == 'op' and (tok.value, nxt.value) in _COMPOUND_COMPARATORS:
            self._advance()
            return _COMPOUND_COMPARATORS[(tok.value, nxt.value)]
        return _SIMPLE_COMPARATORS[tok.value]

    def expression(self) -> Expression:
        node = self.term()
        while self._peek().is_op('+', '-'):
            op = self._advance().value
            node = BinaryOp(op, node, self.term())
        return node

    def term(self) -> Expression:
        node = self.factor()
        while self._peek().is_op('*', '/'):
            op = self._advance().value
            node = BinaryOp(op, node, self.factor())
        return node

    def factor(self) -> Expression:
        if self._peek().is_op('+', '-'):
            sign = self._advance().value
            return UnaryOp(sign, self.primary())
        return self.primary()

    def primary(self) -> Expression:
        tok = self._peek()
        match tok.kind:
            case 'number':
                self._advance()
                return NumberLiteral(tok.value)
            case 'string':
                self._advance()
                return StringLiteral(tok.value)
            case 'variable':
                self._advance()
                return VariableReference(tok.value)
            case 'lparen':
                self._advance()
                self._enter("expression", tok.col)
                inner = self.expression()
                self._depth -= 1
                closing = self._peek()
                if closing.kind != 'rparen':
                    raise ParseError(f"missing ')' to match '(' at col {tok.col}", closing.col)
                self._advance()
                inner.parens += 1
                return inner
            case _:
                raise ParseError(f"expected an expression but found {tok.describe()}", tok.col)

    # -----------------------------------------------------------------
    # Token stream helpers
    # -----------------------------------------------------------------

    def _reset(self, tokens: list[Token]):
        if not tokens or tokens[-1].kind != 'eol':
            raise ValueError("token list must end with an 'eol' token")
        self._tokens = tokens
        self._pos = 0
        self._depth = 0

    def _enter(self, what: str, col: int):
        self._depth += 1
        if self._depth > MAX_NESTING:
            raise ParseError(f"{what} too deeply nested", col)

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.kind != 'eol':
            self._pos += 1
        return tok

    def _at_statement_end(self) -> bool:
        return self._peek().kind == 'eol'

    def _expect_eol(self):
        tok = self._peek()
        if tok.kind != 'eol':
            raise ParseError(f"unexpected {tok.describe()} following complete statement", tok.col)
