"""Unit tests for matins.logging helpers."""

from __future__ import annotations

import typing as typ

import pytest

from matins.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class _FakeLogger:
    """Logger double recording ``log`` calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("input_level", "expected_level", "expected_invalid"),
    [
        ("debug", "DEBUG", False),
        (" warn ", "WARN", False),
        ("Critical", "CRITICAL", False),
        ("", "INFO", True),
        (None, "INFO", True),
        ("verbose", "INFO", True),
    ],
)
def test_normalize_log_level(
    input_level: str | None,
    expected_level: str,
    *,
    expected_invalid: bool,
) -> None:
    """Levels are upper-cased; unusable input falls back to INFO."""
    level, invalid = normalize_log_level(input_level)
    assert level == expected_level, (
        f"Expected {input_level!r} to normalize to {expected_level}."
    )
    assert invalid is expected_invalid


def test_format_log_message_uses_percent_formatting() -> None:
    """Percent formatting produces the expected message."""
    assert format_log_message("%d doc(s) for %s", 2, "PROJ") == "2 doc(s) for PROJ"


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_debug, "DEBUG"),
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_level_helpers(helper: cabc.Callable[..., None], level: str) -> None:
    """Each helper formats its message and emits the matching level."""
    logger = _FakeLogger()

    helper(logger, "rendered %s", "PROJ")

    assert logger.calls == [(level, "rendered PROJ", None, False)], (
        f"Expected a single {level} entry with the formatted message."
    )


def test_log_warning_forwards_exc_info() -> None:
    """log_warning forwards exc_info to the logger."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_warning(logger, "attempt %d failed", 2, exc_info=exc)

    assert logger.calls == [("WARNING", "attempt 2 failed", exc, False)]


def test_log_exception_passes_exc_info() -> None:
    """log_exception forwards the exception payload at ERROR level."""
    logger = _FakeLogger()
    exc = KeyError("missing")

    log_exception(logger, "generation failed", exc)

    assert logger.calls == [("ERROR", "generation failed", exc, False)]


def test_configure_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """configure_logging applies the normalized level to femtologging."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("matins.logging.basicConfig", fake_basic_config)

    assert configure_logging("nope") == ("INFO", True)
    assert captured == {"level": "INFO", "force": False}
