import logging

import structlog


def setup_logging(*, level: str = "warning", json_output: bool = True) -> None:
    min_level = logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(
            pad_event=30, pad_level=False,
        ))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Third-party libraries (httpx, telegram, uvicorn) log through stdlib.
    logging.basicConfig(level=min_level, format="%(levelname)s %(name)s: %(message)s")
