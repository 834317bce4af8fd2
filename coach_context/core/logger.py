"""Logger configuration for the coaching context engine.

Components prefix their messages with a bracketed tag (``[CONTEXT]``,
``[CACHE]``, ``[REPO]``). A patcher moves the tag into
``record["extra"]["component"]`` so sinks print it as its own column and
can filter on it.
"""

import re
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

from coach_context.config.settings import Settings, settings

COMPONENTS = ("CONTEXT", "CACHE", "REPO")
UNTAGGED = "-"

_TAG_PATTERN = re.compile(r"^\[([A-Z]+)\]\s*")

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[component]: <7}</magenta> | <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]: <7} | {name}:{line} - {message}"


def tag_component(record: dict) -> None:
    """Move a leading ``[TAG]`` out of the message into ``extra["component"]``."""
    match = _TAG_PATTERN.match(record["message"])
    if match:
        record["extra"]["component"] = match.group(1)
        record["message"] = record["message"][match.end() :]
    else:
        record["extra"].setdefault("component", UNTAGGED)


def component_filter(components: Iterable[str]) -> Callable[[dict], bool] | None:
    """Build a sink filter keeping only the given components.

    Untagged messages (CLI output, errors from outside the engine) always pass.
    Returns None when no components are selected.
    """
    wanted = {c.strip().upper() for c in components if c.strip()}
    if not wanted:
        return None

    def _filter(record: dict) -> bool:
        component = record["extra"].get("component", UNTAGGED)
        return component == UNTAGGED or component in wanted

    return _filter


def setup_logger(config: Settings | None = None, *, level: str | None = None) -> None:
    """Configure loguru from settings.

    Args:
        config: Settings carrying log_level, log_file, log_rotation, log_retention,
            log_json and log_components (default: module settings)
        level: Override for config.log_level (e.g. DEBUG from a --debug flag)
    """
    config = config or settings
    level = (level or config.log_level).upper()
    record_filter = component_filter(config.log_components)

    logger.remove()
    logger.configure(patcher=tag_component, extra={"component": UNTAGGED})

    logger.add(
        sys.stderr,
        format=_CONSOLE_FORMAT,
        level=level,
        filter=record_filter,
        colorize=True,
    )

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=_FILE_FORMAT,
            level=level,
            filter=record_filter,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
            serialize=config.log_json,
        )

    components = ",".join(sorted(config.log_components)) or "all"
    logger.debug(f"Logging configured: level={level} file={config.log_file or 'none'} components={components}")
