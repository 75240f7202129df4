import pytest

from tinybasic.basic_interpreter import Evaluator, Context, Variables, RunState
from tinybasic.basic_lexer import Lexer
from tinybasic.basic_parser import Parser
from tinybasic.basic_datatypes import (
    BasicRuntimeError, NumberLiteral as N, StringLiteral, VariableReference as V,
    UnaryOp, BinaryOp, Print, Let, Goto, End,
)


@pytest.fixture
def out():
    return []


@pytest.fixture
def evaluator(out):
    """Returns a new Evaluator for each test, writing into `out`."""
    return Evaluator(out.append)


@pytest.fixture
def ctx():
    return Context()


def load(ctx, source):
    """Stores numbered lines of `source` into the context's program."""
    lexer, parser = Lexer(), Parser()
    for text in source.strip().splitlines():
        line = parser.parse_line(lexer.tokenize(text))
        ctx.program.put(line.line_number, line.statement)


def output(out):
    return "".join(out)


# Expressions

@pytest.mark.parametrize("expr, expected", [
    (BinaryOp('+', N(12), N(3)), 15),
    (BinaryOp('-', N(2), N(9)), -7),
    (BinaryOp('*', N(12), N(3)), 36),
    (BinaryOp('/', N(12), N(3)), 4),
    (BinaryOp('/', N(9), N(4)), 2),
    (BinaryOp('/', UnaryOp('-', N(7)), N(2)), -3),
    (BinaryOp('/', N(7), UnaryOp('-', N(2))), -3),
    (BinaryOp('/', UnaryOp('-', N(8)), UnaryOp('-', N(2))), 4),
    (UnaryOp('+', N(4)), 4),
    (UnaryOp('-', N(0)), 0),
], ids=["add", "sub", "mul", "div", "div_truncates", "neg_div_truncates_toward_zero",
        "div_by_negative", "neg_by_neg", "unary_plus", "negative_zero"])
def test_arithmetic(evaluator, ctx, expr, expected):
    assert evaluator.eval(expr, ctx) == expected


def test_unbound_variable_is_zero(evaluator, ctx):
    assert evaluator.eval(V('q'), ctx) == 0


def test_string_literal_evaluates_to_text(evaluator, ctx):
    assert evaluator.eval(StringLiteral("hi"), ctx) == "hi"


def test_division_by_zero(evaluator, ctx):
    with pytest.raises(BasicRuntimeError, match="division by zero"):
        evaluator.eval(BinaryOp('/', N(1), N(0)), ctx)


@pytest.mark.parametrize("expr", [
    BinaryOp('+', StringLiteral("a"), N(1)),
    BinaryOp('*', N(2), StringLiteral("b")),
    UnaryOp('-', StringLiteral("c")),
])
def test_arithmetic_on_strings_is_a_type_mismatch(evaluator, ctx, expr):
    with pytest.raises(BasicRuntimeError, match="type mismatch"):
        evaluator.eval(expr, ctx)


# Variables

def test_variables_are_case_insensitive_and_default_to_zero():
    v = Variables()
    v['x'] = 15
    assert v['X'] == 15
    assert v['A'] == 0
    assert v.as_dict()['X'] == 15
    assert len(v.as_dict()) == 26


def test_variables_reject_bad_names():
    with pytest.raises(KeyError):
        Variables()['AB'] = 1


# Statements

def test_print_joins_with_tabs(evaluator, ctx, out):
    evaluator.execute(Print([StringLiteral("one"), N(1), StringLiteral("two"), N(2)]), ctx)
    assert output(out) == "one\t1\ttwo\t2\n"


def test_print_separators_and_trailing(evaluator, ctx, out):
    evaluator.execute(Print([N(1), N(2)], [';'], trailing=','), ctx)
    evaluator.execute(Print([N(3)], [], trailing=';'), ctx)
    evaluator.execute(Print([]), ctx)
    assert output(out) == "12\t3\n"


def test_failing_print_item_prints_nothing(evaluator, ctx, out):
    with pytest.raises(BasicRuntimeError):
        evaluator.execute(Print([N(1), BinaryOp('/', N(1), N(0))]), ctx)
    assert out == []


def test_let_binds_variable(evaluator, ctx):
    evaluator.execute(Let('x', BinaryOp('+', N(1), N(2))), ctx)
    assert ctx.variables['X'] == 3


def test_let_rejects_strings(evaluator, ctx):
    with pytest.raises(BasicRuntimeError, match="type mismatch"):
        evaluator.execute(Let('x', StringLiteral("s")), ctx)


def test_goto_outside_run_is_an_error(evaluator, ctx):
    load(ctx, "10 END")
    with pytest.raises(BasicRuntimeError, match="only valid in a running program"):
        evaluator.execute(Goto(N(10)), ctx)


def test_end_in_immediate_mode_does_nothing(evaluator, ctx, out):
    evaluator.execute(End(), ctx)
    assert evaluator.state is RunState.STOPPED
    assert out == []


def test_if_compares_strings(evaluator, ctx, out):
    load(ctx, '10 IF "abc" < "abd" THEN PRINT "yes"\n20 END')
    evaluator.run(ctx)
    assert output(out) == "yes\n"


def test_if_rejects_mixed_kinds(evaluator, ctx):
    load(ctx, '10 IF "1" = 1 THEN PRINT "yes"\n20 END')
    with pytest.raises(BasicRuntimeError, match="type mismatch") as exc:
        evaluator.run(ctx)
    assert exc.value.line_number == 10


# RUN

def test_run_executes_in_ascending_order_until_end(evaluator, ctx, out):
    load(ctx, '30 END\n20 PRINT "world"\n10 PRINT "hello"\n40 PRINT "never"')
    evaluator.run(ctx)
    assert output(out) == "hello\nworld\n"
    assert evaluator.state is RunState.STOPPED
    assert evaluator.cursor is None


def test_goto_skips_lines(evaluator, ctx, out):
    load(ctx, '10 PRINT "hello"\n15 GOTO 30\n20 PRINT "world"\n30 END')
    evaluator.run(ctx)
    assert output(out) == "hello\n"


def test_loop_with_if_then_goto(evaluator, ctx, out):
    load(ctx, """
10 LET I = 1
20 PRINT I
30 LET I = I + 1
40 IF I <= 3 THEN GOTO 20
50 END
""")
    evaluator.run(ctx)
    assert output(out) == "1\n2\n3\n"
    assert ctx.variables['I'] == 4


def test_falling_off_the_end_keeps_output_then_raises(evaluator, ctx, out):
    load(ctx, '10 PRINT "hello"\n20 LET A = 5')
    with pytest.raises(BasicRuntimeError, match="does not terminate with END") as exc:
        evaluator.run(ctx)
    assert exc.value.line_number is None
    assert output(out) == "hello\n"
    assert ctx.variables['A'] == 5
    assert evaluator.state is RunState.STOPPED


def test_goto_missing_line(evaluator, ctx, out):
    load(ctx, '10 PRINT 1\n20 GOTO 5 + 94\n30 END')
    with pytest.raises(BasicRuntimeError, match="GOTO 99 - no line with that number") as exc:
        evaluator.run(ctx)
    assert exc.value.line_number == 20
    assert output(out) == "1\n"


def test_run_with_empty_program(evaluator, ctx):
    with pytest.raises(BasicRuntimeError, match="no program in memory"):
        evaluator.run(ctx)


def test_step_limit(out, ctx):
    evaluator = Evaluator(out.append, max_steps=5)
    load(ctx, "10 GOTO 10")
    with pytest.raises(BasicRuntimeError, match="step limit of 5 exceeded") as exc:
        evaluator.run(ctx)
    assert exc.value.line_number == 10


def test_trace_writes_line_numbers(evaluator, ctx, out):
    load(ctx, '10 PRINT "a"\n20 END')
    ctx.trace = True
    evaluator.run(ctx)
    assert output(out) == "[10]a\n[20]"


def test_list_ranges(evaluator, ctx, out):
    load(ctx, "10 PRINT 1\n20 PRINT 2\n30 END")
    execute = lambda text: evaluator.execute(Parser().parse_line(Lexer().tokenize(text)).statement, ctx)
    execute("LIST 20")
    execute("LIST 15, 99")
    assert output(out) == "20 PRINT 2\n20 PRINT 2\n30 END\n"


# INPUT

def test_input_reads_values(out, ctx):
    replies = iter(["3, 4 * 2"])
    evaluator = Evaluator(out.append, read_line=lambda: next(replies, None))
    load(ctx, "10 INPUT A, B\n20 PRINT A + B\n30 END")
    evaluator.run(ctx)
    assert output(out) == "11\n"


@pytest.mark.parametrize("reply, fragment", [
    (None, "unable to read input stream"),
    ("1", "expected 2 value(s) but got 1"),
    ("1, (", "unable to parse expression"),
    ('1, "x"', "type mismatch"),
])
def test_input_errors(out, ctx, reply, fragment):
    evaluator = Evaluator(out.append, read_line=lambda: reply)
    load(ctx, "10 INPUT A, B\n20 END")
    with pytest.raises(BasicRuntimeError) as exc:
        evaluator.run(ctx)
    assert fragment in exc.value.message
    assert exc.value.line_number == 10
