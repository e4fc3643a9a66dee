"""
Console and file logging for Strategy Matrix runs.

Every message is echoed to stdout and appended to LOG_FILE with a UTC
timestamp, so an analysis can be reviewed after the terminal is gone.
"""

import sys
from datetime import datetime, timezone

from settings import LOG_FILE


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def log(message: str, end: str = "\n") -> None:
    """
    Echo a message and append it to the analysis log.

    Args:
        message: Text to show; blank lines are written without a timestamp
        end: Line ending, as for print()
    """
    print(message, end=end)

    entry = f"[{_utc_now()}] {message}{end}" if message.strip() else f"{message}{end}"

    try:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(entry)
    except IOError as e:
        # An unwritable log never stops an analysis
        print(f"Warning: Failed to write to log file: {e}", file=sys.stderr)


def log_separator() -> None:
    log("=" * 60)


def log_session_start() -> None:
    """Banner opening one CLI run."""
    log_separator()
    log(f"Analysis session started: {_utc_now()}")
    log_separator()


def log_session_end() -> None:
    """Banner closing one CLI run."""
    log_separator()
    log(f"Analysis session ended: {_utc_now()}")
    log_separator()
    log("")
