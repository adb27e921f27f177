import logging
import os
import shutil
import time
import traceback
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Union

import psutil

MdValues = Optional[Union[str, int, float, bool, date, BaseException, List[str]]]

# fields written by the logger itself, metadata can not overwrite them
RESERVED_FIELDS = frozenset(
    [
        "parent",
        "process_name",
        "process_id",
        "uuid",
        "status",
        "duration",
        "error_type",
        "free_disk_mb",
        "free_mem_pct",
        "print_log",
    ]
)


def host_resources() -> Dict[str, int]:
    """free disk space (mb) and free memory (percent) of the machine running the build"""
    free_disk_bytes = shutil.disk_usage("/").free
    return {
        "free_disk_mb": int(free_disk_bytes / (1000 * 1000)),
        "free_mem_pct": int(100 - psutil.virtual_memory().percent),
    }


class ProcessLogger:
    """
    Writes one key=value log line per event of a build step (start, metadata,
    warning, completion, failure) so every step of a feed build can be
    followed and timed from the logs.
    """

    def __init__(self, process_name: str, **metadata: MdValues) -> None:
        """
        create a logger for the step process_name. nothing is written until
        the step is started, either explicitly or by the first event.
        """
        logging.getLogger().setLevel("INFO")

        self.fields: Dict[str, Any] = {
            "parent": os.environ.get("SERVICE_NAME", "unknown"),
            "process_name": process_name,
        }
        self.metadata: Dict[str, str] = {}
        self.start_time = 0.0

        self.add_metadata(**metadata, print_log=False)

    @property
    def started(self) -> bool:
        """True once log_start ran"""
        return "uuid" in self.fields

    def elapsed(self) -> str:
        """seconds since log_start, formatted for the duration field"""
        return f"{time.monotonic() - self.start_time:.2f}"

    def _log_string(self) -> str:
        self.fields.update(host_resources())
        pairs = [f"{key}={value}" for key, value in self.fields.items()]
        pairs += [f"{key}={value}" for key, value in self.metadata.items()]
        return ", ".join(pairs)

    def add_metadata(self, **metadata: MdValues) -> None:
        """
        attach metadata to every following log line

        :param print_log: if True(default), write a log line with the new metadata
        """
        print_log = bool(metadata.pop("print_log", True))
        self.metadata.update(
            {str(key): str(value) for key, value in metadata.items() if key not in RESERVED_FIELDS}
        )

        if not print_log:
            return
        if not self.started:
            self.log_start()
        self.fields["status"] = "add_metadata"
        logging.info(self._log_string())

    def log_start(self) -> None:
        """log the start of a step and reset its timer"""
        self.fields.pop("duration", None)
        self.fields.pop("error_type", None)
        self.fields.update(uuid=uuid.uuid4(), process_id=os.getpid(), status="started")

        self.start_time = time.monotonic()

        logging.info(self._log_string())

    def log_complete(self) -> None:
        """log the completion of a step with its duration"""
        self.fields.update(status="complete", duration=self.elapsed())

        logging.info(self._log_string())

    def log_warning(self, exception: BaseException) -> None:
        """
        log a recoverable problem with exception type and message. the step
        keeps running, so no traceback is written.
        """
        if not self.started:
            self.log_start()

        self.fields.update(status="warning", error_type=type(exception).__name__)
        logging.warning(f"{self._log_string()}, error_message={exception}")
        self.fields.pop("error_type", None)

    def log_failure(self, exception: BaseException) -> None:
        """log the failure of a step with exception type and traceback"""
        if not self.started:
            self.log_start()

        self.fields.update(status="failed", duration=self.elapsed(), error_type=type(exception).__name__)
        prefix = f"uuid={self.fields['uuid']}"

        # exceptions that were never raised have no traceback
        for frame in traceback.format_tb(exception.__traceback__):
            for line in frame.strip("\n").split("\n"):
                logging.error(f"{prefix}, {line.strip()}")

        for line in traceback.format_exception_only(type(exception), exception):
            logging.error(f"{prefix}, {line.strip()}")

        logging.error(self._log_string(), exc_info=exception if exception.__traceback__ else None)
