"""
I/O capability used by the interpreter.

The interpreter talks to the outside world only through an InterpreterIO:
it pulls input one character at a time, pushes output one character at a
time, asks for a prompt before reading a line, and hands over one message
per error.
"""

import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO


class InterpreterIO(ABC):
    """The required base class for any object the interpreter reads and writes through."""

    @abstractmethod
    def get_input_char(self) -> Optional[str]:
        """Returns the next input character, or None at end of input."""
        raise NotImplementedError

    @abstractmethod
    def put_output_char(self, c: str):
        raise NotImplementedError

    @abstractmethod
    def show_prompt(self):
        raise NotImplementedError

    @abstractmethod
    def show_error(self, message: str):
        raise NotImplementedError


class StandardIO(InterpreterIO):
    """Reads stdin, writes stdout, and sends error messages to stderr."""

    def __init__(self, prompt: str = ":", stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None,
                 interactive: bool = True):
        self.prompt = prompt
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.interactive = interactive

    def get_input_char(self) -> Optional[str]:
        c = self.stdin.read(1)
        return c if c else None

    def put_output_char(self, c: str):
        self.stdout.write(c)
        if c == "\n":
            self.stdout.flush()

    def show_prompt(self):
        if self.interactive:
            self.stdout.write(self.prompt)
            self.stdout.flush()

    def show_error(self, message: str):
        print(message, file=self.stderr, flush=True)


class RecordingIO(InterpreterIO):
    """Serves input from a string and records everything the interpreter does.

    Useful for tests and for embedding the interpreter.
    """

    def __init__(self, input_text: str = ""):
        self.input_text = input_text
        self.output_chars: list[str] = []
        self.errors: list[str] = []
        self.prompt_count = 0

    @property
    def input_text(self) -> str:
        return self._input_text

    @input_text.setter
    def input_text(self, value: str):
        self._input_text = value
        self._input_index = 0

    @property
    def output(self) -> str:
        return "".join(self.output_chars)

    @property
    def first_error(self) -> str:
        """The first recorded error message, or '' when there were none."""
        return self.errors[0] if self.errors else ""

    def get_input_char(self) -> Optional[str]:
        if self._input_index < len(self._input_text):
            c = self._input_text[self._input_index]
            self._input_index += 1
            return c
        return None

    def put_output_char(self, c: str):
        self.output_chars.append(c)

    def show_prompt(self):
        self.prompt_count += 1

    def show_error(self, message: str):
        self.errors.append(message)
