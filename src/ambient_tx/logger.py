# ambient_tx/logger.py
"""
Logger interface + the two built-in implementations
──────────────────────────────────────────────
• EmptyLogger   → default, swallows everything
• ConsoleLogger → prints to stdout/stderr (enable_logging=True)

Any object with log/error/warn (and optionally debug/verbose) can be
passed as `custom_logger`.
"""
from __future__ import annotations

import sys
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LoggerProtocol(Protocol):
    def log(self, message: Any, *params: Any) -> Any: ...

    def error(self, message: Any, *params: Any) -> Any: ...

    def warn(self, message: Any, *params: Any) -> Any: ...


class EmptyLogger:
    def log(self, message: Any, *params: Any) -> None:
        pass

    def error(self, message: Any, *params: Any) -> None:
        pass

    def warn(self, message: Any, *params: Any) -> None:
        pass

    def debug(self, message: Any, *params: Any) -> None:
        pass

    def verbose(self, message: Any, *params: Any) -> None:
        pass


class ConsoleLogger:
    def log(self, message: Any, *params: Any) -> None:
        print(f"ℹ️  {message}", *params, flush=True)

    def error(self, message: Any, *params: Any) -> None:
        print(f"❌ {message}", *params, file=sys.stderr, flush=True)

    def warn(self, message: Any, *params: Any) -> None:
        print(f"⚠️  {message}", *params, file=sys.stderr, flush=True)

    def debug(self, message: Any, *params: Any) -> None:
        print(f"🔍 {message}", *params, flush=True)

    def verbose(self, message: Any, *params: Any) -> None:
        print(f"🔍 {message}", *params, flush=True)


def log_verbose(logger: Any, message: str, *params: Any) -> None:
    """Call logger.verbose() if the logger implements it."""
    fn = getattr(logger, "verbose", None)
    if fn is not None:
        fn(message, *params)
