"""structlog configuration for the API server and the CLI.

One processor chain (context vars, level, stack info, ISO timestamp) feeds
either a coloured console renderer or a JSON renderer.  JSON is used when
``APP_ENV=production`` or when the caller forces it.  Standard-library
``logging`` records from httpx, openai and uvicorn are routed through the
same chain so a deployment sees one log format.
"""

import logging
import os
import sys

import structlog

# Loggers that are chatty at DEBUG.  openai logs request bodies there, which
# would put chunk text into the logs.
_NOISY_LOGGERS = ("openai", "httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer(json_output: bool) -> structlog.types.Processor:
    if json_output or os.environ.get("APP_ENV", "development") == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _route_stdlib_logging(
    level: int,
    shared: list[structlog.types.Processor],
    renderer: structlog.types.Processor,
) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.INFO, level))


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR (case-insensitive).
        json_output: Force the JSON renderer regardless of ``APP_ENV``.

    Returns:
        A logger bound to the new configuration.
    """
    level = logging.getLevelName(log_level.upper())
    shared = _shared_processors()
    renderer = _select_renderer(json_output)

    structlog.configure(
        processors=[*shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # Uncached loggers pick up the current sys.stdout, so a redirected
        # stream (CLI piping, captured output) never points at a closed file.
        cache_logger_on_first_use=False,
    )
    _route_stdlib_logging(level, shared, renderer)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger tagged with *name*, applying default config if none exists yet."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
