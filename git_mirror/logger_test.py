import contextlib

from loguru import logger
import pytest
from pytest import LogCaptureFixture

from .logger import describe, header, log_level_name
from .test_utils import logged_messages


@pytest.fixture
def log_level() -> str:
    return "TRACE"


@pytest.fixture(autouse=True)
def log_cleanly(log_cleanly: None) -> None: ...


@pytest.mark.typed
def test_logger_context_manager_success_trace(caplog: LogCaptureFixture) -> None:
    def log() -> None:
        logger.info("working")

    with describe("context test"):
        log()
    assert logged_messages(caplog) == ["context test ...", "working", "context test [done]"]


@pytest.mark.typed
def test_logger_context_manager_failure_trace(caplog: LogCaptureFixture) -> None:
    def log() -> None:
        logger.info("working")
        raise RuntimeError("not working")

    with pytest.raises(RuntimeError), describe("context test"):
        log()
    assert logged_messages(caplog) == ["context test ...", "working", "context test [failed]"]


# Override log level for this test.
@pytest.mark.parametrize("log_level", ["INFO"])
def test_logger_context_manager_level(caplog: LogCaptureFixture) -> None:
    def log() -> None:
        logger.info("working")

    with describe("info test", level="INFO"):
        log()
    with describe("debug test", level="DEBUG"):
        log()

    assert logged_messages(caplog) == ["info test ...", "working", "info test [done]", "working"]


# Override log level for this test.
@pytest.mark.parametrize("log_level", ["INFO"])
def test_logger_context_manager_error_level(caplog: LogCaptureFixture) -> None:
    def log() -> None:
        logger.info("failing")
        raise RuntimeError()

    with (
        contextlib.suppress(RuntimeError),
        describe("error test", level="INFO", error_level="ERROR"),
    ):
        log()
    with (
        contextlib.suppress(RuntimeError),
        describe("debug test", level="ERROR", error_level="DEBUG"),
    ):
        log()

    assert logged_messages(caplog) == [
        "error test ...",
        "failing",
        "error test [failed]",
        "debug test ...",
        "failing",
    ]


@pytest.mark.typed
def test_logger_wrap_success_trace(caplog: LogCaptureFixture) -> None:
    def log(x: int) -> int:
        logger.info("doing")
        return x + 1

    assert describe("wrap test")(log)(3) == 4
    assert logged_messages(caplog) == ["wrap test ...", "doing", "wrap test [done]"]


@pytest.mark.parametrize(
    "message",
    [
        # plain
        "Mirroring manageiq",
        # markup-like characters are not interpreted
        "Syncing <feature> to </master>",
    ],
)
def test_header_strips_colors(message: str, caplog: LogCaptureFixture) -> None:
    header(message, color="cyan")
    assert logged_messages(caplog) == [f"==== {message} ===="]


@pytest.mark.parametrize(
    "quiet, verbose, expected",
    [
        (0, 0, "INFO"),
        (1, 0, "WARNING"),
        (2, 0, "ERROR"),
        (3, 0, "CRITICAL"),
        (4, 0, 50),
        (0, 1, "DEBUG"),
        (0, 2, "TRACE"),
        (0, 3, 0),
        (2, 2, "INFO"),
    ],
)
def test_log_level_name(quiet: int, verbose: int, expected: str | int) -> None:
    assert log_level_name(quiet, verbose) == expected


def test_logger_context_manager_banner(caplog: LogCaptureFixture) -> None:
    with describe("Fetching for product-foo", level="INFO", color="green"):
        logger.info("working")
    with contextlib.suppress(RuntimeError), describe("Cloning", color="cyan", error_level="DEBUG"):
        raise RuntimeError()
    assert logged_messages(caplog) == [
        "==== Fetching for product-foo ====",
        "working",
        "Fetching for product-foo [done]",
        "==== Cloning ====",
        "Cloning [failed]",
    ]
