from collections.abc import Callable
from dataclasses import KW_ONLY, dataclass
import functools
import inspect
import sys
from types import TracebackType

from loguru import logger

from .constants import DONE_SUFFIX, FAILURE_SUFFIX, LOADING_SUFFIX

# From -qqq to -vv.
VERBOSITY_LEVELS: tuple[str, ...] = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE")
DEFAULT_LEVEL = "INFO"


def _caller_depth() -> int:
    """Return the depth of the first frame outside this file."""
    for depth, frameinfo in enumerate(inspect.stack(), start=-1):
        if frameinfo.filename != __file__:
            return depth
    return 0


@dataclass(frozen=True, slots=True)
class describe:  # noqa: N801
    """Narrate a block of work, as a context manager or a decorator.

    The block opens with `message ...`, or with a `==== message ====` banner
    when a `color` is given, and closes with `message [done]` at `level` or
    `message [failed]` at `error_level`.
    """

    message: str
    _: KW_ONLY
    level: str = "TRACE"
    error_level: str = "ERROR"
    color: str | None = None

    def announce(self) -> None:
        if self.color is None:
            self._log(self.level, f"{self.message} {LOADING_SUFFIX}")
            return
        # Markup only applies to the template, so the message is never parsed for tags.
        logger.opt(colors=True, depth=_caller_depth()).log(
            self.level, f"<bold><{self.color}>==== {{}} ====</{self.color}></bold>", self.message
        )

    def _log(self, level: str, message: str, /) -> None:
        logger.opt(depth=_caller_depth()).log(level, message)

    def __enter__(self) -> None:
        self.announce()

    def __exit__(
        self,
        type_: type[BaseException] | None,
        value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if type_ is None:
            self._log(self.level, f"{self.message} {DONE_SUFFIX}")
        else:
            self._log(self.error_level, f"{self.message} {FAILURE_SUFFIX}")

    def __call__[**P, R](self, fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def logging_fn(*args: P.args, **kwargs: P.kwargs) -> R:
            with self:
                return fn(*args, **kwargs)

        return logging_fn


def header(message: str, *, color: str = "green", level: str = "INFO") -> None:
    describe(message, level=level, color=color).announce()


def log_level_name(quiet: int, verbose: int) -> str | int:
    index = VERBOSITY_LEVELS.index(DEFAULT_LEVEL) + verbose - quiet
    if index < 0:
        return logger.level("CRITICAL").no
    if index >= len(VERBOSITY_LEVELS):
        # Everything, including custom levels below TRACE.
        return 0
    return VERBOSITY_LEVELS[index]


def setup_logger(quiet: int, verbose: int) -> None:
    logger.remove()
    logger.add(sys.stdout, level=log_level_name(quiet, verbose), format="<level>{message}</level>")
