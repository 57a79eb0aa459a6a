"""Configure application logging to a file and stderr."""

import logging
import os
import sys

# Set by setup_logging(); main logs it after a failure so users can find the details.
LOG_FILE_PATH: str | None = None


def setup_logging(verbose: bool = False) -> None:
    """Configure package logger: file in temp dir + stderr at INFO (DEBUG if verbose)."""
    root = logging.getLogger("mp3_player")
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    global LOG_FILE_PATH
    log_path = None
    try:
        log_dir = os.path.join(os.environ.get("TEMP", os.path.expanduser("~")), "MP3Player")
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, "player.log")
        LOG_FILE_PATH = log_path
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)
    except OSError:
        pass

    eh = logging.StreamHandler(sys.stderr)
    eh.setLevel(logging.DEBUG if verbose else logging.INFO)
    eh.setFormatter(fmt)
    root.addHandler(eh)

    root.info("Logging started; file: %s", log_path or "(none)")
