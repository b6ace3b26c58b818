"""Unit tests for femtologging integration helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from repomirror.logging import (
    configure_logging,
    format_event,
    log_debug,
    log_error,
    log_event,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

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
        (None, "INFO", True),
        ("", "INFO", True),
        ("verbose", "INFO", True),
    ],
)
def test_normalize_log_level(
    input_level: str | None, expected_level: str, *, expected_invalid: bool
) -> None:
    """Known levels are upper-cased; anything else falls back to INFO."""
    level, invalid = normalize_log_level(input_level)

    assert level == expected_level, (
        f"Expected {input_level!r} to normalize to {expected_level}."
    )
    assert invalid is expected_invalid


def test_log_info_interpolates_once() -> None:
    """Arguments are interpolated before reaching the logger."""
    logger = _FakeLogger()

    log_info(logger, "cloned %d repositories into %s", 3, "/srv/mirror")

    assert logger.calls == [
        ("INFO", "cloned 3 repositories into /srv/mirror", None, False)
    ]


def test_template_without_args_is_not_interpolated() -> None:
    """A literal percent sign survives when no arguments are given."""
    logger = _FakeLogger()

    log_debug(logger, "100% synced")

    assert logger.calls == [("DEBUG", "100% synced", None, False)]


def test_warning_and_error_forward_exc_info() -> None:
    """exc_info is passed through unchanged."""
    logger = _FakeLogger()
    exc = OSError("read-only filesystem")

    log_warning(logger, "retrying %s", "vim-go", exc_info=exc)
    log_error(logger, "giving up on %s", "vim-go")

    assert logger.calls == [
        ("WARNING", "retrying vim-go", exc, False),
        ("ERROR", "giving up on vim-go", None, False),
    ]


def test_log_exception_attaches_exception() -> None:
    """log_exception logs at ERROR with the exception attached."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_exception(logger, "sync failed", exc)

    assert logger.calls == [("ERROR", "sync failed", exc, False)]


def test_configure_logging_passes_normalized_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """configure_logging hands the normalized level to basicConfig."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("repomirror.logging.basicConfig", fake_basic_config)

    normalized, invalid = configure_logging("error", force=True)

    assert (normalized, invalid) == ("ERROR", False)
    assert captured == {"level": "ERROR", "force": True}


def test_format_event_renders_fields_in_order() -> None:
    """Events render as a bracketed type followed by key=value pairs."""
    line = format_event(
        "sync.plan.started",
        query="org:fatih language:go",
        local_repositories=2,
        duration_seconds=0.25,
    )

    assert line == (
        "[sync.plan.started] query='org:fatih language:go' "
        "local_repositories=2 duration_seconds=0.250"
    )


def test_log_event_uses_requested_level() -> None:
    """log_event forwards the rendered line at the given level."""
    logger = _FakeLogger()

    log_event(logger, "WARNING", "sync.repo.skipped", nwo="fatih/vim-go", branch="")

    assert logger.calls == [
        ("WARNING", "[sync.repo.skipped] nwo=fatih/vim-go branch=''", None, False)
    ]
