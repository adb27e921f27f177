import os
from typing import List, Optional

from .process_logger import ProcessLogger


def validate_environment(
    required_variables: List[str],
    optional_variables: Optional[List[str]] = None,
) -> None:
    """
    check the environment of a feed build before any provider request is
    made. every variable that is set is logged in a single line, a missing
    required variable (SERVICE_NAME always is) fails the build.

    :raises EnvironmentError: if a required variable is not set
    """
    process_logger = ProcessLogger("validate_env")
    process_logger.log_start()

    required = required_variables + ["SERVICE_NAME"]
    found = {
        key: os.environ[key] for key in required + (optional_variables or []) if os.environ.get(key) is not None
    }
    missing = [key for key in required if key not in found]

    process_logger.add_metadata(**found)

    if missing:
        exception = EnvironmentError(f"Missing required environment variables {missing}")
        process_logger.log_failure(exception)
        raise exception

    process_logger.log_complete()
