import logging
from typing import Callable

# called as observer(stage, index, total) with a 1 based index
ProgressObserver = Callable[[str, int, int], None]


def log_progress(stage: str, index: int, total: int) -> None:
    """default observer, writes progress to the log"""
    logging.info(f"stage={stage}, index={index}, total={total}")

