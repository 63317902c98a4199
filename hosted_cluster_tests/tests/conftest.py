import logging
import typing as tp

import pytest
from _pytest.config import Config
from _pytest.tmpdir import TempPathFactory
from pytest_metadata.plugin import metadata_key

from hosted_cluster_tests.utils import configuration
from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import helpers
from hosted_cluster_tests.utils import kubectl
from hosted_cluster_tests.utils import releases
from hosted_cluster_tests.utils import run_context
from hosted_cluster_tests.utils import temptools

LOGGER = logging.getLogger(__name__)

AWS_CREDENTIALS_ARG = "--quick-start-aws-credentials-file"
PULL_SECRET_ARG = "--quick-start-pull-secret-file"
SSH_KEY_ARG = "--quick-start-ssh-key-file"
RELEASE_IMAGE_ARG = "--quick-start-release-image"
KUBECONFIG_ARG = "--quick-start-kubeconfig"


def pytest_addoption(parser: tp.Any) -> None:
    parser.addoption(
        AWS_CREDENTIALS_ARG,
        action="store",
        default="",
        help="Path to AWS credentials",
    )
    parser.addoption(
        PULL_SECRET_ARG,
        action="store",
        default="",
        help="Path to pull secret",
    )
    parser.addoption(
        SSH_KEY_ARG,
        action="store",
        default=str(configuration.DEFAULT_SSH_KEY_FILE),
        help="Path to SSH public key",
    )
    parser.addoption(
        RELEASE_IMAGE_ARG,
        action="store",
        default="",
        help="OCP release image to test",
    )
    parser.addoption(
        KUBECONFIG_ARG,
        action="store",
        default=str(configuration.KUBECONFIG),
        help="Path to kubeconfig of the management cluster",
    )


def pytest_configure(config: Config) -> None:
    config.stash[metadata_key]["KUBECONFIG"] = str(config.getvalue("quick_start_kubeconfig"))
    config.stash[metadata_key]["kubectl exe"] = configuration.KUBECTL_BIN
    config.stash[metadata_key]["RELEASE_STREAM_URL"] = configuration.RELEASE_STREAM_URL
    config.stash[metadata_key]["NODE_POOL_REPLICAS"] = str(configuration.NODE_POOL_REPLICAS)
    config.stash[metadata_key]["hosted-cluster-tests url"] = (
        f"{helpers.GITHUB_URL}/tree/{helpers.get_current_commit()}"
    )


@pytest.fixture(scope="session")
def init_pytest_temp_dirs(tmp_path_factory: TempPathFactory) -> None:
    """Init `PytestTempDirs`."""
    temptools.PytestTempDirs.init(tmp_path_factory=tmp_path_factory)


@pytest.fixture(scope="session")
def client_factory(init_pytest_temp_dirs: None) -> kubectl.KubectlClientFactory:  # noqa: ARG001
    # pylint: disable=unused-argument
    return kubectl.KubectlClientFactory()


@pytest.fixture(scope="session")
def quick_start_input(
    request: pytest.FixtureRequest, client_factory: kubectl.KubectlClientFactory
) -> run_context.QuickStartInput:
    """Validated input for the quick start tests."""
    config = request.config
    options = run_context.QuickStartOptions(
        aws_credentials_file=config.getvalue("quick_start_aws_credentials_file"),
        pull_secret_file=config.getvalue("quick_start_pull_secret_file"),
        ssh_key_file=config.getvalue("quick_start_ssh_key_file"),
        release_image=config.getvalue("quick_start_release_image"),
    )
    try:
        run_input = options.get_context(
            client_factory=client_factory,
            image_resolver=releases.ReleaseStreamResolver(),
            kubeconfig=config.getvalue("quick_start_kubeconfig"),
        )
    except errors.QuickStartError as exc:
        pytest.fail(f"failed to create test context: {exc}")

    config.stash[metadata_key]["release image"] = run_input.release_image
    return run_input
