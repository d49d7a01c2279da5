import logging
import os
import sys
from datetime import datetime


def setup_logger(log_dir: str = ".partial_stage/logs",
                 verbose: bool = False) -> logging.Logger:
    """Creates a file logger. All verbose output goes here.

    With *verbose*, INFO and above is echoed to stderr as well.
    """
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"stage_{timestamp}.log")

    logger = logging.getLogger("partial_stage")
    logger.setLevel(logging.DEBUG)

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    if verbose:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(logging.INFO)
        sh.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(sh)

    return logger


def print_apply_result(result, stream=None) -> None:
    """Summarise an :class:`~partial_stage.editing.ApplyResult` for the user."""
    stream = stream or sys.stdout
    if result.whole_file:
        print(f"  staged {result.path} (whole file)", file=stream)
        return

    if result.success:
        print(f"  staged {result.path} "
              f"({len(result.applied_sections)} section(s))", file=stream)
        return

    print(f"  partially staged {result.path}:", file=stream)
    for number in result.applied_sections:
        print(f"    section {number}: staged", file=stream)
    for number in result.failed_sections:
        print(f"    section {number}: FAILED  {result.errors.get(number, '')}",
              file=stream)
