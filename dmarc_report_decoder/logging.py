import logging
import logging.config
from typing import Any, Dict, List, Union, cast

import structlog

_log_levels = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def configure_logging(overrides: dict, *, debug: bool):
    """Route structlog and stdlib logging through the same handlers.

    ``overrides`` is a partial :func:`logging.config.dictConfig` dictionary
    (usually the ``logging`` section of the configuration file). It may
    replace handlers and configure loggers, but the ``plain``, ``colored``
    and ``json`` formatters are always provided. Log output goes to stderr,
    stdout is reserved for decoded reports.
    """
    log_level = (
        logging.DEBUG
        if debug
        else parse_log_level(overrides.get("root", {}).get("level", logging.INFO))
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging_config: Dict[str, Any] = {
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "colored",
            },
        },
        "root": {},
    }
    logging_config.update(overrides)
    logging_config.update(
        {
            "version": 1,
            "incremental": False,
            "formatters": _formatters(),
        }
    )
    root = cast(dict, logging_config["root"])
    if "handlers" not in root:
        root.update({"handlers": ["default"]})
    root.update({"level": log_level})
    logging.config.dictConfig(logging_config)


def _formatters() -> Dict[str, Any]:
    foreign_pre_chain: List[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.format_exc_info,
    ]
    console_processors: List[Any] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
    ]

    def formatter(processors: List[Any]) -> Dict[str, Any]:
        return {
            "()": structlog.stdlib.ProcessorFormatter,
            "processors": processors,
            "foreign_pre_chain": foreign_pre_chain,
        }

    return {
        "plain": formatter(
            console_processors + [structlog.dev.ConsoleRenderer(colors=False)]
        ),
        "colored": formatter(
            console_processors + [structlog.dev.ConsoleRenderer(colors=True)]
        ),
        "json": formatter(
            [
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        ),
    }


def parse_log_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        try:
            return _log_levels[level.lower()]
        except KeyError:
            raise ValueError("invalid log level") from None
    return level
