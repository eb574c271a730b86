import functools
import gzip
import inspect
import logging
import logging.handlers
import os
import shutil
import sys
from gzip import GzipFile
from pathlib import Path
from typing import Any, Callable, ParamSpec, TypeVar

from .config import settings

logger = logging.getLogger("online_monitor")
logger.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    "%(asctime)s %(levelname)s [%(module)s:%(funcName)s:%(lineno)d] %(message)s"
)

logs_dir = Path(settings.logs_dir)
logs_dir.mkdir(parents=True, exist_ok=True)


def rotator(source, dest):
    with open(source, "rb") as f_in:
        with gzip.open(dest + ".gz", "wb") as f_out:
            assert isinstance(f_out, GzipFile)
            shutil.copyfileobj(f_in, f_out)
    os.remove(source)


log_file_handler = logging.handlers.TimedRotatingFileHandler(
    logs_dir / "online_monitor.log", when="midnight"
)
log_file_handler.setFormatter(formatter)
log_file_handler.rotator = rotator
logger.addHandler(log_file_handler)

log_stream_handler = logging.StreamHandler(sys.stdout)
log_stream_handler.setFormatter(formatter)
logger.addHandler(log_stream_handler)


def _bind_arguments(
    sig: inspect.Signature, func_name: str, args: tuple, kwargs: dict
) -> tuple[dict[str, Any], str]:
    """Bind call arguments to parameter names.

    Returns:
        (bound_arguments_dict, "[name=value, ...] " string for the log line)
    """
    try:
        bound = sig.bind(*args, **kwargs)
        bound.apply_defaults()
        arguments = {k: v for k, v in bound.arguments.items() if k != "self"}
        params = ", ".join(f"{k}={v!r}" for k, v in arguments.items())
        return arguments, f"[{params}] " if params else ""
    except TypeError as e:
        logger.warning(
            f"Failed to bind arguments for function {func_name}: {e}",
            stacklevel=4,  # _bind_arguments -> _log_failure -> wrapper -> user code
        )
        parts = []
        if args:
            parts.append(f"args={args!r}")
        if kwargs:
            parts.append(f"kwargs={kwargs!r}")
        return {}, f"[{', '.join(parts)}] " if parts else ""


def _format_prefix(prefix: str, arguments: dict[str, Any]) -> str:
    """Substitute {param} placeholders in the prefix with bound arguments."""
    if not prefix:
        return ""
    if "{" in prefix and "}" in prefix:
        try:
            return f"{prefix.format_map(arguments)}: "
        except (KeyError, ValueError, IndexError) as e:
            logger.warning(
                f"Failed to format prefix '{prefix}' with arguments: {e}",
                stacklevel=4,
            )
    return f"{prefix}: "


P = ParamSpec("P")
R = TypeVar("R")


def log_exception(
    prefix: str = "",
    default_return: R | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator that turns a raised exception into an ERROR log line plus a default value.

    This is the error boundary of every store operation: storage failures after
    startup must degrade statistics, never the caller. Works for sync and async
    functions; the logged location is the decorated function's caller.

    Args:
        prefix: Message prefix. May reference parameters, e.g. "Closing session for {player_name}"
        default_return: Value returned when the wrapped call raises. Mutable defaults
            (dict, list, set) are shallow-copied per call.

    Usage:
        @log_exception("Recording snapshot", default_return=None)
        async def record_snapshot(self, online_count: int) -> None:
            ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        sig = inspect.signature(func)
        func_name = func.__qualname__

        def fallback() -> R:
            if isinstance(default_return, (dict, list, set)):
                return default_return.copy()  # type: ignore[return-value]
            return default_return  # type: ignore[return-value]

        def log_failure(e: Exception, args: tuple, kwargs: dict) -> None:
            arguments, args_str = _bind_arguments(sig, func_name, args, kwargs)
            prefix_str = _format_prefix(prefix, arguments)
            logger.error(
                f"{args_str}{prefix_str}{type(e).__name__}: {e}",
                exc_info=True,
                stacklevel=3,  # log_failure -> wrapper -> user code
            )

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    log_failure(e, args, kwargs)
                    return fallback()

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log_failure(e, args, kwargs)
                return fallback()

        return sync_wrapper

    return decorator
