import argparse
import base64
import contextlib
import functools
import inspect
import logging
import os
import subprocess
import types as tt

from hosted_cluster_tests.utils import types as ttypes

LOGGER = logging.getLogger(__name__)

GITHUB_URL = "https://github.com/openshift/hypershift"


def run_command(
    command: str | list,
    *,
    workdir: ttypes.FileType = "",
    ignore_fail: bool = False,
) -> bytes:
    """Run command."""
    cmd: list
    if isinstance(command, str):
        cmd = command.split()
        cmd_str = command
    else:
        cmd = command
        cmd_str = " ".join(command)

    LOGGER.debug("Running `%s`", cmd_str)

    with subprocess.Popen(
        cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, cwd=workdir or None
    ) as p:
        stdout, stderr = p.communicate()
        retcode = p.returncode

    if not ignore_fail and retcode != 0:
        err_dec = stderr.decode()
        err_dec = err_dec or stdout.decode()
        msg = f"An error occurred while running `{cmd_str}`: {err_dec}"
        raise RuntimeError(msg)

    return stdout


@functools.cache
def get_current_commit() -> str:
    return os.environ.get("GIT_REVISION") or run_command("git rev-parse HEAD").decode().strip()


def get_line_str_from_frame(frame: tt.FrameType) -> str:
    lineno = frame.f_lineno
    fpath = frame.f_globals["__file__"]
    line_str = f"{fpath}#L{lineno}"
    return line_str


def get_vcs_link() -> str:
    """Return link to the current line in GitHub."""
    calling_frame = None
    with contextlib.suppress(AttributeError):
        calling_frame = inspect.currentframe().f_back  # type: ignore

    if not calling_frame:
        msg = "Couldn't get the calling frame."
        raise ValueError(msg)

    line_str = get_line_str_from_frame(frame=calling_frame)
    loc_part = line_str[line_str.find("hosted_cluster_tests") :]
    url = f"{GITHUB_URL}/blob/{get_current_commit()}/{loc_part}"
    return url


def check_positive_int_arg(value: str) -> int:
    """Check that the value passed as argparse parameter is a positive integer."""
    try:
        num = int(value)
    except ValueError as exc:
        msg = f"check_positive_int_arg: '{value}' is not an integer"
        raise argparse.ArgumentTypeError(msg) from exc
    if num < 1:
        msg = f"check_positive_int_arg: '{value}' must be >= 1"
        raise argparse.ArgumentTypeError(msg)
    return num


def b64encode_str(data: bytes) -> str:
    """Encode bytes the way Kubernetes expects values of Secret `data`."""
    return base64.b64encode(data).decode("ascii")


def b64decode_str(data: str) -> bytes:
    """Decode a value of Secret `data`."""
    return base64.b64decode(data.encode("ascii"), validate=True)
