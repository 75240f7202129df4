"""
Splits one line of Tiny BASIC source text into tokens.
"""

import string

from tinybasic.basic_datatypes import Token, LexError

# Canonical keyword for every accepted spelling.
KEYWORDS = {
    'PRINT': 'PRINT',
    'PR': 'PRINT',
    'LET': 'LET',
    'IF': 'IF',
    'THEN': 'THEN',
    'GOTO': 'GOTO',
    'INPUT': 'INPUT',
    'REM': 'REM',
    'LIST': 'LIST',
    'RUN': 'RUN',
    'END': 'END',
    'TRON': 'TRON',
    'TROFF': 'TROFF',
}

# Longest spellings first so that greedy matching prefers PRINT over PR.
_KEYWORDS_BY_LENGTH = sorted(KEYWORDS, key=len, reverse=True)

DIGITS = frozenset(string.digits)
OPERATORS = frozenset('+-*/=<>')

_PUNCTUATION = {
    ',': 'comma',
    ';': 'semicolon',
    '(': 'lparen',
    ')': 'rparen',
}


class Lexer:
    """Turns a line of text into a list of tokens ending with an 'eol' token.

    Whitespace between tokens is discarded. Two-character comparators are
    emitted as two single-character 'op' tokens; the parser merges them.
    Letters are matched case-insensitively. A run of letters is split into
    the longest keyword it starts with, or else a one-letter variable, so
    `IFX<5THENPRINTX` lexes the same as `IF X < 5 THEN PRINT X`.
    Blanks inside a keyword are skipped too, so `G O T O` is GOTO.
    """

    def tokenize(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        i = 0
        n = len(text)
        while i < n:
            c = text[i]
            col = i + 1
            if c in ' \t':
                i += 1
            elif c in DIGITS:
                start = i
                while i < n and text[i] in DIGITS:
                    i += 1
                tokens.append(Token('number', int(text[start:i]), col))
            elif c == '"':
                end = text.find('"', i + 1)
                if end < 0:
                    raise LexError("unterminated string literal", col)
                tokens.append(Token('string', text[i + 1:end], col))
                i = end + 1
            elif c == '?':
                tokens.append(Token('keyword', 'PRINT', col))
                i += 1
            elif c.isalpha() and c.isascii():
                keyword, end = self._match_keyword(text, i)
                if keyword is None:
                    tokens.append(Token('variable', c.upper(), col))
                    i += 1
                    continue
                tokens.append(Token('keyword', KEYWORDS[keyword], col))
                i = end
                if keyword == 'REM':
                    # The rest of the line is the comment, kept verbatim.
                    tokens.append(Token('remark', text[i:], i + 1))
                    i = n
            elif c in OPERATORS:
                tokens.append(Token('op', c, col))
                i += 1
            elif c in _PUNCTUATION:
                tokens.append(Token(_PUNCTUATION[c], c, col))
                i += 1
            else:
                raise LexError(f"unexpected character {c!r}", col)
        tokens.append(Token('eol', None, n + 1))
        return tokens

    def _match_keyword(self, text: str, pos: int):
        """Returns (keyword, end) for the longest keyword starting at `pos`.

        Blanks between the letters of a keyword are skipped, so `G O T O`
        matches GOTO. `end` is the index just past the keyword's last letter.
        """
        for keyword in _KEYWORDS_BY_LENGTH:
            end = self._match_spelling(text, pos, keyword)
            if end is not None:
                return keyword, end
        return None, pos

    def _match_spelling(self, text: str, pos: int, spelling: str):
        i = pos
        for letter in spelling:
            while i < len(text) and text[i] in ' \t':
                i += 1
            if i >= len(text) or text[i].upper() != letter:
                return None
            i += 1
        return i
