import logging
import logging.config
import sys
from typing import Any, Dict, List, Mapping, Union, cast

import structlog

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def parse_log_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError as err:
        raise ValueError(f"invalid log level: {level}") from err


def _build_formatters() -> Dict[str, Any]:
    foreign_pre_chain = [
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


def configure_logging(overrides: Mapping[str, Any], *, debug: bool = False):
    """Route structlog and stdlib logging through one ``dictConfig``.

    ``overrides`` is merged into the configuration and may replace handlers,
    the root logger or configure individual loggers. Log output goes to
    stderr; stdout is reserved for the analysis output.
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

    default_formatter = "colored" if sys.stderr.isatty() else "plain"
    logging_config: Dict[str, Any] = {
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": default_formatter,
            },
        },
        "root": {},
    }
    logging_config.update(overrides)
    logging_config.update(
        {"version": 1, "incremental": False, "formatters": _build_formatters()}
    )
    root = cast(dict, logging_config["root"])
    root.setdefault("handlers", ["default"])
    root["level"] = log_level
    logging.config.dictConfig(logging_config)
