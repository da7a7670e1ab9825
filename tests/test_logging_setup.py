from __future__ import annotations

import io
import logging

import pytest

from finance_tracker import logging_setup
from finance_tracker.logging_setup import configure_logging, get_logger, resolve_level
from finance_tracker.normalizers import normalize_rows


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (logging.DEBUG, logging.DEBUG),
        ("info", logging.INFO),
        (" Error ", logging.ERROR),
        ("15", 15),
        ("chatty", logging.WARNING),
        (None, logging.WARNING),
    ],
)
def test_resolve_level(raw, expected):
    assert resolve_level(raw) == expected


def test_resolve_level_reads_environment(monkeypatch):
    monkeypatch.setenv(logging_setup.LEVEL_ENV_VAR, "debug")
    assert resolve_level() == logging.DEBUG
    assert resolve_level("error") == logging.ERROR


def test_unconfigured_package_logger_gets_null_handler():
    get_logger("finance_tracker.tests")
    handlers = logging.getLogger("finance_tracker").handlers
    assert [type(h) for h in handlers] == [logging.NullHandler]


def test_reconfiguring_keeps_a_single_handler():
    first, second = io.StringIO(), io.StringIO()

    get_logger("finance_tracker.tests")
    configure_logging("info", stream=first)
    pkg = configure_logging("debug", stream=second, fmt="%(levelname)s %(message)s")

    assert len(pkg.handlers) == 1
    assert pkg.level == logging.DEBUG
    assert pkg.propagate is False

    get_logger("finance_tracker.tests").debug("ping:n=%d", 1)
    assert first.getvalue() == ""
    assert second.getvalue() == "DEBUG ping:n=1\n"


def test_invalid_rows_are_logged_as_warnings():
    stream = io.StringIO()
    configure_logging(stream=stream, fmt="%(name)s %(message)s")

    normalize_rows([{"date": "never", "description": "x", "amount": "1"}])

    lines = stream.getvalue().splitlines()
    assert lines == ["finance_tracker.normalizers normalize_rows:row_invalid row=1 errors=1"]
