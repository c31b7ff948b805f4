import logging
import typing as t
from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def setup_logging(level: int = logging.DEBUG) -> None:
    logging.basicConfig(level=level, format="%(message)s")
    logging.getLogger("rpcbatch").setLevel(level)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=True),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@contextmanager
def logging_context(*, url: str, method: str | None = None, **extra: t.Any) -> Iterator[None]:
    """
    Bind the endpoint and remote method to every log event in the block.

    Keys already bound by an enclosing block keep their value, so a CLI command
    that binds its own ``method`` is not overridden by the client's
    ``system.multicall`` round trip.
    """
    context = {"url": url, "method": method, **extra}
    current = structlog.contextvars.get_contextvars()
    to_bind = {k: v for k, v in context.items() if v is not None and k not in current}

    with structlog.contextvars.bound_contextvars(**to_bind):
        yield
