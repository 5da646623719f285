"""Tests for shared CLI context helpers."""

from __future__ import annotations

import pytest

from ai_manager.cli.context import (
    EXIT_CANCELLED,
    EXIT_INVALID_DATA,
    EXIT_USER_ERROR,
    CliContext,
    handle_errors,
    run_async,
)
from ai_manager.core.errors import (
    NotInitializedError,
    SchemaError,
    SelectionCancelledError,
    TemplateError,
    UnknownItemError,
    Violation,
)


class TestCheckIds:
    def test_filters_and_dedupes(self):
        ids = CliContext.check_ids("skill", ["b", "a", "b"], ["a", "b"], ["a", "b", "c"])
        assert ids == ["b", "a"]

    def test_skips_unavailable(self, capsys):
        assert CliContext.check_ids("harness", ["c"], ["a"], ["a", "c"]) == []
        assert "Skipping harness c" in capsys.readouterr().out

    def test_unknown_raises(self):
        with pytest.raises(UnknownItemError) as exc_info:
            CliContext.check_ids("skill", ["z"], ["a"], ["a"])
        assert exc_info.value.item_id == "z"
        assert "Available: a" in str(exc_info.value)


class TestRunAsync:
    def test_returns_value(self):
        async def ok():
            return 42

        assert run_async(ok()) == 42

    @pytest.mark.parametrize(("error", "code"), [
        (SelectionCancelledError(), EXIT_CANCELLED),
        (
            SchemaError("skill.json", [Violation("id", "required field missing")]),
            EXIT_INVALID_DATA,
        ),
        (TemplateError("t.j2", "unexpected end", 3), EXIT_INVALID_DATA),
        (NotInitializedError("/repo"), EXIT_USER_ERROR),
        (UnknownItemError("skill", "x", []), EXIT_USER_ERROR),
    ])
    def test_exit_codes(self, error, code):
        async def fail():
            raise error

        with pytest.raises(SystemExit) as exc_info:
            run_async(fail())
        assert exc_info.value.code == code

    def test_other_errors_propagate(self):
        async def boom():
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            run_async(boom())


class TestHandleErrors:
    def test_passes_through_on_success(self):
        with handle_errors():
            value = 1
        assert value == 1

    def test_cancel_outside_event_loop(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            with handle_errors():
                raise SelectionCancelledError()
        assert exc_info.value.code == EXIT_CANCELLED
        assert "Nothing was changed" in capsys.readouterr().out

    def test_unknown_item(self):
        with pytest.raises(SystemExit) as exc_info:
            with handle_errors():
                CliContext.check_ids("skill", ["z"], ["a"], ["a"])
        assert exc_info.value.code == EXIT_USER_ERROR


def test_template_error_message():
    assert str(TemplateError("t.j2", "oops", 3)) == "Template error in t.j2:3: oops"
    assert str(TemplateError("t.j2", "oops")) == "Template error in t.j2: oops"
