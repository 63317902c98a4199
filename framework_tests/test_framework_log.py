import logging
import pathlib as pl
import typing as tp

import pytest

from hosted_cluster_tests.utils import framework_log
from hosted_cluster_tests.utils import temptools


@pytest.fixture
def worker_tmp(monkeypatch: pytest.MonkeyPatch, tmp_path: pl.Path) -> tp.Iterator[pl.Path]:
    monkeypatch.setattr(temptools.PytestTempDirs, "pytest_worker_tmp", tmp_path)
    framework_log.get_framework_log_path.cache_clear()
    framework_log.framework_logger.cache_clear()
    yield tmp_path

    logger = logging.getLogger("framework")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    framework_log.get_framework_log_path.cache_clear()
    framework_log.framework_logger.cache_clear()


def test_workdir_outside_pytest(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(temptools.PytestTempDirs, "pytest_worker_tmp", None)
    assert temptools.get_workdir() == temptools.get_basetemp()
    with pytest.raises(RuntimeError, match="not initialized"):
        temptools.get_pytest_worker_tmp()


def test_framework_log(worker_tmp: pl.Path):
    assert framework_log.get_framework_log_path() == worker_tmp / "framework.log"

    framework_log.framework_logger().error("Namespace 'e2e-abc' was not cleaned up")
    for handler in framework_log.framework_logger().handlers:
        handler.flush()

    log_content = (worker_tmp / "framework.log").read_text()
    assert "ERROR Namespace 'e2e-abc' was not cleaned up" in log_content
