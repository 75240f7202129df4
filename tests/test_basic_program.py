import pytest

from tinybasic.basic_program import Program
from tinybasic.basic_datatypes import Print, End, Run, NumberLiteral


@pytest.fixture
def program():
    p = Program()
    p.put(30, End())
    p.put(10, Print([NumberLiteral(1)]))
    p.put(20, Print([NumberLiteral(2)]))
    return p


def test_lines_come_back_in_ascending_order(program):
    assert [n for n, _ in program.ascending_lines()] == [10, 20, 30]
    assert [n for n, _ in program] == [10, 20, 30]


def test_put_replaces_existing_line(program):
    program.put(20, Run())
    assert program.get(20) == Run()
    assert len(program) == 3


def test_get_missing_line_is_none(program):
    assert program.get(15) is None
    assert 15 not in program
    assert 10 in program


def test_delete(program):
    assert program.delete(20) is True
    assert program.delete(20) is False
    assert [n for n, _ in program] == [10, 30]


def test_lines_in_range_is_inclusive(program):
    assert [n for n, _ in program.lines_in_range(10, 20)] == [10, 20]
    assert [n for n, _ in program.lines_in_range(11, 29)] == [20]
    assert program.lines_in_range(31, 99) == []


def test_cursor_helpers(program):
    assert program.first_line() == 10
    assert program.next_line_after(10) == 20
    assert program.next_line_after(25) == 30
    assert program.next_line_after(30) is None
    assert Program().first_line() is None
