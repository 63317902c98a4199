import functools
import tempfile
from pathlib import Path
from typing import Optional

from _pytest.tmpdir import TempPathFactory


class PytestTempDirs:
    """Pytest temporary directories that are used accross the framework.

    The class is initialized in `conftest.py` where we have access to the `tmp_path_factory`
    fixture.
    """

    pytest_worker_tmp: Optional[Path] = None

    _err_init_str = "PytestTempDirs are not initialized"

    @classmethod
    def init(cls, tmp_path_factory: TempPathFactory) -> None:
        cls.pytest_worker_tmp = Path(tmp_path_factory.getbasetemp())


def get_pytest_worker_tmp() -> Path:
    """Return Pytest temporary directory for the current worker."""
    if PytestTempDirs.pytest_worker_tmp is None:
        raise RuntimeError(PytestTempDirs._err_init_str)
    return PytestTempDirs.pytest_worker_tmp


@functools.cache
def get_basetemp() -> Path:
    """Return base temporary directory for tests artifacts."""
    basetemp = Path(tempfile.gettempdir()) / "hosted-cluster-tests"
    basetemp.mkdir(mode=0o700, parents=True, exist_ok=True)
    return basetemp


def get_workdir() -> Path:
    """Return directory for files created during a run (e.g. guest kubeconfigs).

    Use the Pytest worker directory when running under pytest, the base temporary directory
    otherwise.
    """
    if PytestTempDirs.pytest_worker_tmp is not None:
        return PytestTempDirs.pytest_worker_tmp
    return get_basetemp()
