"""Cluster API client implemented on top of the `kubectl` binary."""

import dataclasses
import hashlib
import json
import logging
import pathlib as pl
import subprocess
import time

from hosted_cluster_tests.utils import configuration
from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import kube
from hosted_cluster_tests.utils import temptools
from hosted_cluster_tests.utils import types as ttypes

LOGGER = logging.getLogger(__name__)

NOT_FOUND_STR = "(NotFound)"
# Errors worth re-running the command right away; anything else is left to the caller
FLAKY_STRS = ("connection reset by peer", "TLS handshake timeout")


@dataclasses.dataclass(frozen=True)
class CLIOut:
    stdout: bytes
    stderr: bytes


class KubectlError(errors.KubeClientError):
    pass


class KubectlNotFoundError(KubectlError, errors.NotFoundError):
    pass


class KubectlClient:
    """Client for a single API server, described by a kubeconfig file."""

    def __init__(
        self, kubeconfig: ttypes.FileType, kubectl_bin: str = configuration.KUBECTL_BIN
    ) -> None:
        self.kubeconfig = pl.Path(kubeconfig)
        self.kubectl_bin = kubectl_bin

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: kubeconfig={self.kubeconfig}>"

    def cli_base(self, cli_args: list[str], stdin: bytes = b"") -> CLIOut:
        """Run a command.

        Args:
            cli_args: A list consisting of command and it's arguments.
            stdin: Data passed to the command standard input (optional).

        Returns:
            CLIOut: A data container containing command stdout and stderr.
        """
        cmd_str = " ".join(cli_args)
        LOGGER.debug("Running `%s`", cmd_str)

        err_msg = ""
        for __ in range(3):
            with subprocess.Popen(
                cli_args,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            ) as p:
                stdout, stderr = p.communicate(input=stdin or None)

                if p.returncode == 0:
                    return CLIOut(stdout or b"", stderr or b"")

            stderr_dec = stderr.decode()
            err_msg = f"An error occurred running a CLI command `{cmd_str}`: {stderr_dec}"
            if NOT_FOUND_STR in stderr_dec:
                raise KubectlNotFoundError(err_msg)
            if any(s in stderr_dec for s in FLAKY_STRS):
                LOGGER.warning(err_msg)
                time.sleep(0.4)
                continue
            raise KubectlError(err_msg)

        raise KubectlError(err_msg)

    def cli(self, cli_args: list[str], stdin: bytes = b"") -> CLIOut:
        """Run the `kubectl` command against the API server of this client."""
        cmd = [self.kubectl_bin, "--kubeconfig", str(self.kubeconfig), *cli_args]
        return self.cli_base(cmd, stdin=stdin)

    def _cli_json(self, cli_args: list[str], stdin: bytes = b"") -> ttypes.KubeObject:
        cli_out = self.cli([*cli_args, "-o", "json"], stdin=stdin)
        try:
            return json.loads(cli_out.stdout.decode("utf-8"))
        except json.JSONDecodeError as exc:
            msg = f"Unexpected output from `kubectl {' '.join(cli_args)}`: {exc}"
            raise KubectlError(msg) from exc

    @staticmethod
    def _ns_args(namespace: str) -> list[str]:
        return ["--namespace", namespace] if namespace else []

    def check_connection(self) -> None:
        """Check that the API server is reachable."""
        self.cli(["version", "-o", "json"])

    def create(self, obj: ttypes.KubeObject) -> ttypes.KubeObject:
        return self._cli_json(["create", "-f", "-"], stdin=json.dumps(obj).encode("utf-8"))

    def get(self, kind: str, key: kube.ObjectKey) -> ttypes.KubeObject:
        return self._cli_json(["get", kind, key.name, *self._ns_args(key.namespace)])

    def delete(self, obj: ttypes.KubeObject) -> None:
        key = kube.object_key(obj)
        self.cli(["delete", obj["kind"], key.name, *self._ns_args(key.namespace), "--wait=false"])

    def list(self, kind: str, namespace: str = "") -> ttypes.KubeObjectList:
        out = self._cli_json(["get", kind, *self._ns_args(namespace)])
        return list(out.get("items") or [])


class KubectlClientFactory:
    """Create `KubectlClient`s, making sure the API server is reachable."""

    def __init__(
        self, kubectl_bin: str = configuration.KUBECTL_BIN, workdir: pl.Path | None = None
    ) -> None:
        self.kubectl_bin = kubectl_bin
        self.workdir = workdir

    def _write_kubeconfig(self, kubeconfig: bytes) -> pl.Path:
        """Store the kubeconfig blob, one file per distinct content."""
        workdir = self.workdir or temptools.get_workdir()
        digest = hashlib.blake2b(kubeconfig, digest_size=8).hexdigest()
        kubeconfig_file = workdir / f"kubeconfig_{digest}"
        if not kubeconfig_file.exists():
            kubeconfig_file.write_bytes(kubeconfig)
            kubeconfig_file.chmod(0o600)
        return kubeconfig_file

    def from_path(self, kubeconfig_file: ttypes.FileType) -> KubectlClient:
        kubeconfig_path = pl.Path(kubeconfig_file).expanduser()
        if not kubeconfig_path.is_file():
            msg = f"failed to create kube client: kubeconfig '{kubeconfig_path}' doesn't exist"
            raise errors.ClientInitError(msg)

        client = KubectlClient(kubeconfig=kubeconfig_path, kubectl_bin=self.kubectl_bin)
        try:
            client.check_connection()
        except (errors.KubeClientError, OSError) as exc:
            msg = f"failed to create kube client: {exc}"
            raise errors.ClientInitError(msg) from exc

        return client

    def new(self, kubeconfig: bytes) -> KubectlClient:
        if not kubeconfig:
            msg = "failed to create kube client: kubeconfig is empty"
            raise errors.ClientInitError(msg)
        return self.from_path(self._write_kubeconfig(kubeconfig))
