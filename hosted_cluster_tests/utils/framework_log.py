import functools
import logging
import pathlib as pl
import time

from hosted_cluster_tests.utils import temptools


@functools.cache
def get_framework_log_path() -> pl.Path:
    return temptools.get_workdir() / "framework.log"


@functools.cache
def framework_logger() -> logging.Logger:
    """Get logger for the `framework.log` file.

    The logger is configured once per process. It is used for logging (and later reporting)
    events like a failure to clean up a test workspace, which would leave resources behind
    on the management cluster.
    """

    class UTCFormatter(logging.Formatter):
        converter = time.gmtime  # type: ignore[assignment]

    formatter = UTCFormatter("%(asctime)s %(levelname)s %(message)s")
    handler = logging.FileHandler(get_framework_log_path())
    handler.setFormatter(formatter)

    logger = logging.getLogger("framework")
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)

    return logger
