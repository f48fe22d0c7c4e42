"""
End-to-end interpreter tests for LIFO Script.

Tests cover:
  - Push instructions and their operand errors
  - Per-instruction error kinds from the stack engine
  - Forward jumps (JUMP / JUMPI), skip mode and label declarations
  - Unresolved labels at end of input
  - LOG side channel
  - Recognizer errors (InvalidToken / InvalidOpcode / InvalidLabel)
  - A full program exercising every instruction
"""

import logging

import pytest
from lifoscript import (
    ErrorKind,
    Interpreter,
    RunOptions,
    ScriptError,
    TokenType,
    format_stack,
    run_source,
)
from lifoscript.jumps import ResolverState


def _run(source: str, **kwargs) -> list:
    """Run source and return the final stack as top-first Python values."""
    return run_source(source, **kwargs).values()


def _error(source: str, **kwargs) -> ScriptError:
    with pytest.raises(ScriptError) as exc:
        run_source(source, **kwargs)
    return exc.value


# ─── Push ─────────────────────

class TestPush:
    def test_push_literals(self):
        assert _run('PUSH 69 PUSH true PUSH "hi"') == ["hi", True, 69]

    def test_typed_pushes(self):
        assert _run('PUSH_INT 1 PUSH_BOOL false PUSH_STR "s"') == ["s", False, 1]

    def test_push_int_goes_on_top(self):
        assert _run("PUSH 1 PUSH_INT 2") == [2, 1]

    def test_push_origin(self):
        result = run_source("PUSH_INT 3")
        assert result.stack[0].origin is TokenType.PUSH_INT

    @pytest.mark.parametrize("source, kind, detail", [
        ("PUSH test", ErrorKind.INVALID_PUSH, "test"),
        ("PUSH_INT true", ErrorKind.INVALID_INTEGER, "true"),
        ("PUSH_BOOL 69", ErrorKind.INVALID_BOOL, "69"),
        ('PUSH_STR 5', ErrorKind.INVALID_STRING, "5"),
        ("INDEX x", ErrorKind.INVALID_INTEGER, "x"),
        ("PUSH ADD", ErrorKind.INVALID_PUSH, "ADD"),
    ])
    def test_bad_operand(self, source, kind, detail):
        err = _error(source)
        assert err.kind is kind
        assert err.detail == detail

    def test_string_escapes_kept_as_written(self):
        assert _run(r'PUSH "a\nb" SIZE') == [4]
        assert _run(r'PUSH "a\nb" INDEX 1') == ["\\"]

    def test_missing_operand_names_instruction(self):
        err = _error("PUSH_INT 1 PUSH")
        assert err.kind is ErrorKind.INVALID_PUSH
        assert err.detail == "PUSH"


# ─── Stack instructions ─────────────────────

class TestStackInstructions:
    def test_add(self):
        assert _run("PUSH_INT 6 PUSH_INT 5 ADD") == [11]

    def test_sub(self):
        assert _run("PUSH 69 PUSH 21 SUB") == [48]

    def test_sub_underflow(self):
        err = _error("PUSH 20 PUSH 25 SUB")
        assert err.kind is ErrorKind.SUB_ERROR
        assert "underflow" in err.detail

    def test_arithmetic_chain(self):
        assert _run("PUSH 20 PUSH 5 ADD PUSH 4 MUL PUSH 50 SUB") == [50]

    def test_concat(self):
        assert _run('PUSH "hello " PUSH "world" CONCAT') == ["worldhello "]

    def test_vector_insert(self):
        assert _run("EMPTY_VECTOR PUSH 69 INSERT PUSH 420 INSERT") == [[69, 420]]

    def test_empty_vector(self):
        result = run_source("EMPTY_VECTOR")
        assert result.stack[0].origin is TokenType.EMPTY_VECTOR
        assert result.values() == [[]]
        assert _run("JUMP end EMPTY_VECTOR end:") == []

    def test_vector_type_mismatch(self):
        err = _error("EMPTY_VECTOR PUSH 69 INSERT PUSH true INSERT")
        assert err.kind is ErrorKind.INSERT_ERROR
        assert err.detail == "Cannot insert value of type bool into vector of type vector<int>"

    def test_size_and_index(self):
        assert _run('PUSH "hello world" SIZE') == [11]
        assert _run('PUSH "hello world" INDEX 6') == ["w"]
        assert _run("EMPTY_VECTOR PUSH 69 INSERT PUSH 420 INSERT INDEX 1") == [420]

    def test_index_out_of_bounds(self):
        err = _error('PUSH "abc" INDEX 3')
        assert err.kind is ErrorKind.INDEX_ERROR

    @pytest.mark.parametrize("source, kind", [
        ("PUSH 69 PUSH false ADD", ErrorKind.ADD_ERROR),
        ("PUSH 20 PUSH true SUB", ErrorKind.SUB_ERROR),
        ("PUSH 20 PUSH true MUL", ErrorKind.MUL_ERROR),
        ("DUP", ErrorKind.DUP_ERROR),
        ("PUSH 20 PUSH true EQ", ErrorKind.EQ_ERROR),
        ("PUSH 20 NEQ", ErrorKind.NEQ_ERROR),
        ("POP", ErrorKind.POP_ERROR),
        ("PUSH 69 SWAP", ErrorKind.SWAP_ERROR),
        ('PUSH "world" PUSH 69 CONCAT', ErrorKind.CONCAT_ERROR),
        ("EMPTY_VECTOR INSERT", ErrorKind.INSERT_ERROR),
        ("PUSH false SIZE", ErrorKind.SIZE_ERROR),
        ("PUSH 5 INDEX 0", ErrorKind.INDEX_ERROR),
    ])
    def test_error_kinds(self, source, kind):
        assert _error(source).kind is kind

    def test_arity_message(self):
        err = _error("PUSH 20 EQ")
        assert err.detail == "Stack must be at least 2 elements deep"

    def test_error_position(self):
        err = _error("PUSH 1\n    POP POP")
        assert err.kind is ErrorKind.POP_ERROR
        assert (err.line, err.col) == (2, 9)
        assert str(err) == "PopError: Stack must be at least 1 element deep (line 2, col 9)"

    def test_no_partial_results_on_error(self):
        interp = Interpreter("PUSH 1 PUSH true ADD")
        with pytest.raises(ScriptError):
            interp.run()
        # the failed ADD did not touch the stack
        assert [el.value.data for el in interp.state.stack] == [True, 1]


# ─── Jumps ─────────────────────

class TestJumps:
    def test_jump_skips(self):
        source = '''
            PUSH "hello world"
            JUMP test
            PUSH 69
            test:
                PUSH 420
        '''
        assert _run(source) == [420, "hello world"]

    def test_jumpi_true(self):
        assert _run("PUSH true JUMPI target PUSH 1 target: PUSH 2") == [2]

    def test_jumpi_false(self):
        assert _run("PUSH false JUMPI target PUSH 1 target: PUSH 2") == [2, 1]

    def test_jumpi_pops_condition(self):
        assert _run("PUSH 7 PUSH false JUMPI end end:") == [7]

    def test_jumpi_needs_bool(self):
        err = _error("PUSH 1 JUMPI target target:")
        assert err.kind is ErrorKind.JUMPI_ERROR
        assert err.detail == "Top element must be a boolean value"

    def test_jumpi_needs_stack(self):
        err = _error("JUMPI target target:")
        assert err.kind is ErrorKind.JUMPI_ERROR
        assert err.detail == "Stack must be at least 1 element deep"

    def test_other_declarations_are_skipped(self):
        source = "JUMP end PUSH 1 middle: PUSH 2 end: PUSH 3"
        assert _run(source) == [3]

    def test_skip_mode_ignores_stack_errors(self):
        assert _run("JUMP end POP ADD PUSH 1 INSERT end:") == []

    def test_skip_mode_still_validates_tokens(self):
        err = _error("JUMP end PUSH_INT true end:")
        assert err.kind is ErrorKind.INVALID_INTEGER

    def test_jump_inside_skipped_region(self):
        assert _run("JUMP a JUMP b PUSH 1 a: PUSH 2 b:") == [2]

    def test_label_with_digits_is_invalid_label(self):
        err = _error('PUSH "hello world" JUMP test2 PUSH 69 test2: PUSH 420')
        assert err.kind is ErrorKind.INVALID_LABEL
        assert err.detail == "test2"

    def test_jumpi_checks_condition_before_label(self):
        assert _error("JUMPI 5").kind is ErrorKind.JUMPI_ERROR
        assert _error("PUSH true JUMPI 5").kind is ErrorKind.INVALID_LABEL

    def test_jump_to_keyword(self):
        err = _error("JUMP PUSH")
        assert err.kind is ErrorKind.INVALID_LABEL

    def test_bad_declaration_while_skipping(self):
        err = _error('PUSH "hello world" JUMP test PUSH 69 test2: PUSH 420')
        assert err.kind is ErrorKind.INVALID_TOKEN
        assert err.detail == "test2:"

    def test_unset_label(self):
        err = _error('PUSH "hello world" PUSH 69 test: PUSH 420')
        assert err.kind is ErrorKind.UNSET_LABEL
        assert err.detail == "test:"

    def test_unresolved_label_is_error(self):
        err = _error("PUSH 1 JUMP nowhere PUSH 2")
        assert err.kind is ErrorKind.UNRESOLVED_LABEL
        assert "nowhere" in err.detail

    def test_unresolved_label_allowed(self):
        result = run_source("PUSH 1 JUMP nowhere PUSH 2", strict_labels=False)
        assert result.values() == [1]
        assert result.pending_label == "nowhere"

    def test_resolver_state_while_stepping(self):
        interp = Interpreter("JUMP done PUSH 1 done: PUSH 2")
        resolver = interp.state.resolver
        assert resolver.state is ResolverState.NORMAL
        interp.step()                     # JUMP done
        assert resolver.state is ResolverState.PENDING
        assert resolver.pending == "done"
        interp.step()                     # PUSH 1 (skipped)
        assert interp.state.stack == ()
        interp.step()                     # done:
        assert resolver.state is ResolverState.NORMAL
        interp.step()                     # PUSH 2
        assert interp.step() is False
        assert interp.state.prev_op is TokenType.PUSH


# ─── Recognizer errors ─────────────────────

class TestRecognizerErrors:
    def test_invalid_token(self):
        err = _error("PUSH 1 FOO")
        assert err.kind is ErrorKind.INVALID_TOKEN
        assert err.detail == "FOO"

    def test_bare_label_name(self):
        err = _error("PUSH 1 stray")
        assert err.kind is ErrorKind.INVALID_OPCODE
        assert err.detail == "stray"

    def test_stray_literals_ignored(self):
        assert _run('PUSH 1 2 true "s"') == [1]

    def test_unterminated_comment(self):
        assert _error("PUSH 1 /* open").kind is ErrorKind.INVALID_TOKEN

    def test_empty_program(self):
        assert _run("") == []
        assert _run("/* only a comment */") == []


# ─── LOG ─────────────────────

class TestLog:
    def test_log_callback(self):
        seen = []
        result = run_source("PUSH 1 LOG PUSH 2", on_log=seen.append)
        assert len(seen) == 1
        assert format_stack(seen[0]) == "[1 : int]"
        assert result.values() == [2, 1]

    def test_log_records(self, caplog):
        with caplog.at_level(logging.INFO, logger="lifoscript"):
            run_source('PUSH "a" PUSH 2 LOG')
        assert 'current stack: [2 : int, "a" : string]' in caplog.text

    def test_log_reports_while_skipping(self):
        seen = []
        result = run_source("PUSH 1 JUMP end LOG PUSH 2 end:", on_log=seen.append)
        assert [format_stack(s) for s in seen] == ["[1 : int]"]
        assert result.values() == [1]

    def test_options_object(self):
        seen = []
        Interpreter("LOG", RunOptions(on_log=seen.append)).run()
        assert seen == [()]


# ─── Full program ─────────────────────

class TestFullProgram:
    def test_everything(self):
        source = r'''
            EMPTY_VECTOR                    /* [] */
            PUSH "hello "                   /* "hello ", [] */
            INSERT                          /* ["hello "] */
            PUSH "world"                    /* "world", ["hello "] */
            INSERT                          /* ["hello ", "world"] */
            DUP                             /* v, v */
            INDEX 1                         /* "world", v */
            SWAP                            /* v, "world" */
            INDEX 0                         /* "hello ", "world" */
            JUMP test
            PUSH 69
            PUSH_INT 420
            test:
                CONCAT                      /* "hello world" */
                DUP                         /* "hello world", "hello world" */
                SIZE                        /* 11, "hello world" */
                PUSH 11                     /* 11, 11, "hello world" */
                EQ                          /* true, "hello world" */
                POP                         /* "hello world" */
                PUSH "hello world"          /* "hello world", "hello world" */
                EQ                          /* true */
                PUSH_BOOL false             /* false, true */
                NEQ                         /* true */
        '''
        assert _run(source) == [True]
