"""Validation of raw user input and assembly of the quick start run input."""

import dataclasses
import logging
import pathlib as pl
import typing as tp

from hosted_cluster_tests.utils import configuration
from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import kube
from hosted_cluster_tests.utils import types as ttypes

LOGGER = logging.getLogger(__name__)


class ImageResolver(tp.Protocol):
    def lookup(self) -> str:
        """Return the default release image."""
        ...


class PrimaryClientFactory(tp.Protocol):
    def from_path(self, kubeconfig_file: ttypes.FileType) -> kube.Client: ...


@dataclasses.dataclass(frozen=True)
class QuickStartInput:
    """Validated input for running the quick start."""

    client: kube.Client
    release_image: str
    aws_credentials: bytes
    pull_secret: bytes
    ssh_key: bytes


def _read_required(file_path: ttypes.FileType, field: str) -> bytes:
    """Read a file that must exist and must not be empty."""
    try:
        content = pl.Path(file_path).expanduser().read_bytes()
    except OSError as exc:
        msg = f"couldn't read {field} file '{file_path}': {exc}"
        raise errors.MissingInputError(field=field, reason=msg) from exc

    if not content:
        raise errors.MissingInputError(field=field)

    return content


@dataclasses.dataclass(frozen=True)
class QuickStartOptions:
    """Raw user input used to construct the run input."""

    aws_credentials_file: ttypes.FileType = ""
    pull_secret_file: ttypes.FileType = ""
    ssh_key_file: ttypes.FileType = configuration.DEFAULT_SSH_KEY_FILE
    release_image: str = ""

    def get_context(
        self,
        *,
        client_factory: PrimaryClientFactory,
        image_resolver: ImageResolver,
        kubeconfig: ttypes.FileType = configuration.KUBECONFIG,
    ) -> QuickStartInput:
        """Validate the options and build `QuickStartInput` from them."""
        pull_secret = _read_required(self.pull_secret_file, field="pull secret")
        aws_credentials = _read_required(self.aws_credentials_file, field="AWS credentials")
        ssh_key = _read_required(self.ssh_key_file, field="SSH key")

        release_image = self.release_image
        if not release_image:
            try:
                release_image = image_resolver.lookup()
            except errors.ResolutionError:
                raise
            except Exception as exc:
                msg = f"couldn't look up default OCP version: {exc}"
                raise errors.ResolutionError(msg) from exc
            LOGGER.info(f"Using default release image '{release_image}'")
        if not release_image:
            raise errors.MissingInputError(field="release image")

        try:
            client = client_factory.from_path(kubeconfig)
        except errors.ClientInitError:
            raise
        except Exception as exc:
            msg = f"failed to create kube client: {exc}"
            raise errors.ClientInitError(msg) from exc

        return QuickStartInput(
            client=client,
            release_image=release_image,
            aws_credentials=aws_credentials,
            pull_secret=pull_secret,
            ssh_key=ssh_key,
        )
