import sys
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

# ============================================================================
# Context Management Constants
# ============================================================================


class LogPhases:
    """
    Predefined constants for processing phases so log filters can rely on
    consistent names.

    1. Loading records from an export
    2. Screening a deal
    3. Scoring goals and KPIs
    4. Rendering results
    """

    LOADING = "loading"
    SCREENING = "screening"
    SCORING = "scoring"
    REPORTING = "reporting"


class EngineNames:
    """Names of the analytics engines as they appear in log context."""

    STRUCTURING = "StructuringEngine"
    SCORECARD = "ScorecardEngine"


# Valid context field names
VALID_CONTEXT_FIELDS = {"deal_name", "phase", "engine"}

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}"


def format_record(record):
    """
    Custom format function to include context fields if present.
    """
    format_string = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"

    if record["extra"].get("deal_name"):
        format_string += " | <yellow>DEAL:{extra[deal_name]}</yellow>"
    if record["extra"].get("phase"):
        format_string += " | <magenta>{extra[phase]}</magenta>"
    if record["extra"].get("engine"):
        format_string += " | <blue>{extra[engine]}</blue>"

    format_string += " - <level>{message}</level>\n"

    if record["exception"]:
        format_string += "{exception}\n"

    return format_string


def setup_logging(
    log_level: str = "INFO",
    log_dir: str = "logs",
    retention_days: int = 30,
    console: bool = True,
    file: bool = True,
):
    """
    Configure logging for the application using Loguru.

    Args:
        log_level: The logging level for the console (default: "INFO")
        log_dir: Directory to store log files (default: "logs")
        retention_days: How long rotated log files are kept
        console: Add the colorized stderr sink
        file: Add the daily and error file sinks
    """
    if log_dir is None:
        log_dir = "logs"

    log_path = Path(log_dir)
    if file:
        log_path.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    if console:
        logger.add(sys.stderr, format=format_record, level=log_level, colorize=True)

    if file:
        # Daily rotation, everything from DEBUG up
        logger.add(
            log_path / "{time:YYYY-MM-DD}.log",
            rotation="1 day",
            retention=f"{retention_days} days",
            format=FILE_FORMAT,
            level="DEBUG",
            encoding="utf-8",
        )

        logger.add(
            log_path / "errors.log",
            level="ERROR",
            format=FILE_FORMAT,
            rotation="10 MB",
            retention=f"{retention_days} days",
            encoding="utf-8",
            backtrace=True,
            diagnose=True,
        )

    logger.debug(f"Logging initialized. Level: {log_level}, Dir: {log_path}")


@contextmanager
def log_context(**kwargs) -> Generator[None, None, None]:
    """
    Bind contextual fields to every log message emitted inside the block.

    Uses Loguru's contextualize(), which is backed by contextvars, so nested
    blocks combine their fields and nothing leaks once a block exits.

    Supported Context Fields:
        deal_name (str): Deal being screened
        phase (str): Current phase (see LogPhases)
        engine (str): Engine doing the work (see EngineNames)

    Raises:
        ValueError: If an invalid field name is provided (not in VALID_CONTEXT_FIELDS)

    Usage:

        with log_context(phase=LogPhases.SCORING, engine=EngineNames.SCORECARD):
            logger.info("Building scorecard")
    """
    invalid_fields = set(kwargs.keys()) - VALID_CONTEXT_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid context field(s): {invalid_fields}. " f"Valid fields are: {VALID_CONTEXT_FIELDS}")

    with logger.contextualize(**kwargs):
        yield
