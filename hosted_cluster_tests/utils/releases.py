"""Lookup of the default OCP release image."""

import dataclasses
import logging

import requests

from hosted_cluster_tests.utils import configuration
from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import http_client

LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, order=True)
class OCPVersion:
    name: str
    pull_spec: str
    download_url: str = ""


class ReleaseStreamResolver:
    """Resolve the latest release of a release stream."""

    def __init__(
        self, url: str = configuration.RELEASE_STREAM_URL, timeout: int = configuration.HTTP_TIMEOUT
    ) -> None:
        self.url = url
        self.timeout = timeout

    def get_latest(self) -> OCPVersion:
        try:
            response = http_client.get_session().get(self.url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            msg = f"couldn't look up default OCP version from '{self.url}': {exc}"
            raise errors.ResolutionError(msg) from exc

        if not isinstance(data, dict):
            msg = f"couldn't look up default OCP version: unexpected response from '{self.url}'"
            raise errors.ResolutionError(msg)

        ocp_version = OCPVersion(
            name=data.get("name") or "",
            pull_spec=data.get("pullSpec") or "",
            download_url=data.get("downloadURL") or "",
        )
        LOGGER.debug(f"Latest release from '{self.url}': {ocp_version}")
        return ocp_version

    def lookup(self) -> str:
        """Return pull spec of the latest release image."""
        return self.get_latest().pull_spec
