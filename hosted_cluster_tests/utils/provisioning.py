"""Provisioning of a hosted cluster and verification of its readiness.

The run is a linear pipeline:

* create a test namespace (the workspace scoping everything else)
* create the pull secret, AWS credentials, SSH key and the HostedCluster
* wait for the guest kubeconfig to be published
* connect to the guest API server
* wait until the requested number of guest nodes is ready
* delete the test namespace and wait until it's gone (always)
"""

import dataclasses
import logging
import types as tt

from hosted_cluster_tests.utils import configuration
from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import kube
from hosted_cluster_tests.utils import manifests
from hosted_cluster_tests.utils import polling
from hosted_cluster_tests.utils import run_context
from hosted_cluster_tests.utils import types as ttypes

LOGGER = logging.getLogger(__name__)

STAGE_KUBECONFIG = "guest kubeconfig"
STAGE_GUEST_CLIENT = "guest client"
STAGE_NODES_READY = "nodes ready"


@dataclasses.dataclass(frozen=True)
class StageTimeouts:
    kubeconfig: polling.PollSettings = polling.PollSettings(interval=1, timeout=5 * 60)
    guest_client: polling.PollSettings = polling.PollSettings(interval=5, timeout=5 * 60)
    nodes_ready: polling.PollSettings = polling.PollSettings(interval=5, timeout=10 * 60)
    workspace_deletion: polling.PollSettings = polling.PollSettings(interval=1, timeout=10 * 60)


def create_workspace(client: kube.Client) -> str:
    """Create a test namespace and return its generated name."""
    try:
        namespace = client.create(manifests.namespace_manifest())
    except errors.KubeClientError as exc:
        raise errors.CreateError(resource="namespace", reason=str(exc)) from exc

    name = kube.get_name(namespace)
    if not name:
        raise errors.CreateError(resource="namespace", reason="generated namespace has no name")

    LOGGER.info(f"Created test namespace {name}")
    return name


def create_resources(client: kube.Client, resources: manifests.ExampleResources) -> None:
    """Create the secrets and the HostedCluster, stop on the first failure."""
    for desc, obj in resources.ordered():
        try:
            client.create(obj)
        except errors.KubeClientError as exc:
            raise errors.CreateError(resource=desc, reason=str(exc)) from exc
        LOGGER.info(f"Created test {desc}: {kube.describe(obj)}")


def wait_for_guest_kubeconfig(
    client: kube.Client, cluster: ttypes.KubeObject, poll_settings: polling.PollSettings
) -> bytes:
    """Wait for the HostedCluster to publish guest kubeconfig and return its content."""
    LOGGER.info("Waiting for guest kubeconfig to become available")
    cluster_key = kube.object_key(cluster)
    found: dict = {}

    def _kubeconfig_available() -> bool:
        try:
            current_cluster = client.get(cluster["kind"], cluster_key)
        except errors.KubeClientError as exc:
            LOGGER.warning(f"error getting cluster: {exc}")
            return False

        secret_name = manifests.get_kubeconfig_secret_name(current_cluster)
        if not secret_name:
            return False

        secret_key = kube.ObjectKey(
            name=secret_name, namespace=kube.get_namespace(current_cluster) or cluster_key.namespace
        )
        try:
            found["secret"] = client.get("Secret", secret_key)
        except errors.KubeClientError as exc:
            LOGGER.warning(f"failed to get guest kubeconfig secret {secret_key}: {exc}")
            return False
        return True

    try:
        polling.poll_with(_kubeconfig_available, settings=poll_settings, desc=STAGE_KUBECONFIG)
    except errors.PollTimeoutError as exc:
        msg = f"guest kubeconfig didn't become available: {exc}"
        raise errors.ReadinessTimeoutError(stage=STAGE_KUBECONFIG, reason=msg) from exc

    secret = found["secret"]
    try:
        return kube.get_secret_value(secret, manifests.KUBECONFIG_KEY)
    except (KeyError, TypeError, ValueError) as exc:
        raise errors.MalformedSecretError(
            secret=str(kube.object_key(secret)), key=manifests.KUBECONFIG_KEY
        ) from exc


def connect_guest_client(
    client_factory: kube.ClientFactory, kubeconfig: bytes, poll_settings: polling.PollSettings
) -> kube.Client:
    """Establish a connection to the guest API server."""
    LOGGER.info("Establishing a connection to the guest apiserver")
    found: dict = {}

    def _connected() -> bool:
        try:
            found["client"] = client_factory.new(kubeconfig)
        except errors.ClientInitError as exc:
            LOGGER.warning(f"failed to create guest kube client: {exc}")
            return False
        return True

    try:
        polling.poll_with(_connected, settings=poll_settings, desc=STAGE_GUEST_CLIENT)
    except errors.PollTimeoutError as exc:
        msg = f"failed to establish a connection to the guest apiserver: {exc}"
        raise errors.ReadinessTimeoutError(stage=STAGE_GUEST_CLIENT, reason=msg) from exc

    guest_client: kube.Client = found["client"]
    return guest_client


def wait_for_nodes_ready(
    guest_client: kube.Client, replicas: int, poll_settings: polling.PollSettings
) -> list[str]:
    """Wait until exactly `replicas` guest nodes are ready, return their names."""
    LOGGER.info("Ensuring guest nodes become ready")
    found: dict = {}

    def _nodes_ready() -> bool:
        try:
            nodes = guest_client.list("Node")
        except errors.KubeClientError as exc:
            LOGGER.warning(f"failed to list nodes: {exc}")
            return False
        if not kube.nodes_match_replicas(nodes, replicas):
            return False
        found["nodes"] = kube.get_ready_nodes(nodes)
        return True

    try:
        polling.poll_with(_nodes_ready, settings=poll_settings, desc=STAGE_NODES_READY)
    except errors.PollTimeoutError as exc:
        msg = f"failed to ensure guest nodes became ready: {exc}"
        raise errors.ReadinessTimeoutError(stage=STAGE_NODES_READY, reason=msg) from exc

    ready_nodes: list[str] = found["nodes"]
    LOGGER.info(f"found {len(ready_nodes)} ready nodes")
    return ready_nodes


def teardown_workspace(
    client: kube.Client, name: str, poll_settings: polling.PollSettings
) -> None:
    """Delete the test namespace and wait until it's gone.

    A namespace that is already gone is not an error.
    """
    namespace = manifests.namespace_manifest()
    namespace["metadata"] = {"name": name}
    try:
        client.delete(namespace)
    except errors.KubeClientError as exc:
        if not errors.is_not_found(exc):
            raise errors.CleanupError(workspace=name, reason=str(exc)) from exc
        LOGGER.info(f"Test namespace {name} is already deleted")

    LOGGER.info(f"Waiting for the test namespace {name} to be deleted")
    key = kube.ObjectKey(name=name)

    def _deleted() -> bool:
        try:
            client.get("Namespace", key)
        except errors.KubeClientError as exc:
            if errors.is_not_found(exc):
                return True
            LOGGER.warning(f"failed to get namespace {name}: {exc}")
        return False

    try:
        polling.poll_with(_deleted, settings=poll_settings, desc=f"deletion of namespace {name}")
    except errors.PollTimeoutError as exc:
        raise errors.CleanupTimeoutError(workspace=name, reason=str(exc)) from exc


class Workspace:
    """Test namespace that is deleted when leaving the context, no matter how.

    When the body of the `with` block fails and the cleanup fails as well, the body exception
    propagates and the cleanup failure is kept in `cleanup_error`.
    """

    def __init__(self, client: kube.Client, deletion_poll: polling.PollSettings) -> None:
        self.client = client
        self.deletion_poll = deletion_poll
        self.name = ""
        self.cleanup_error: errors.CleanupError | None = None

    def __enter__(self) -> "Workspace":
        self.name = create_workspace(self.client)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: tt.TracebackType | None,
    ) -> None:
        try:
            teardown_workspace(self.client, self.name, poll_settings=self.deletion_poll)
        except errors.CleanupError as exc:
            self.cleanup_error = exc
            if exc_value is None:
                raise
            LOGGER.error(f"Cleanup failed after the run already failed: {exc}")  # noqa: TRY400


@dataclasses.dataclass
class QuickStartResult:
    workspace: str = ""
    ready_nodes: list[str] = dataclasses.field(default_factory=list)
    error: errors.QuickStartError | None = None
    cleanup_error: errors.CleanupError | None = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.cleanup_error is None

    def failure_summary(self) -> str:
        """Return a description of all failures of the run."""
        lines = []
        if self.error:
            lines.append(f"quick start failed: {self.error}")
        if self.cleanup_error:
            lines.append(f"cleanup failed: {self.cleanup_error}")
        return "\n".join(lines)


def provision_and_verify(
    run_input: run_context.QuickStartInput,
    *,
    namespace: str,
    client_factory: kube.ClientFactory,
    timeouts: StageTimeouts,
    node_pool_replicas: int,
) -> list[str]:
    """Create the hosted cluster in `namespace` and wait until it's usable."""
    example = manifests.ExampleOptions(
        namespace=namespace,
        name=f"example-{namespace}",
        release_image=run_input.release_image,
        pull_secret=run_input.pull_secret,
        aws_credentials=run_input.aws_credentials,
        ssh_key=run_input.ssh_key,
        node_pool_replicas=node_pool_replicas,
    ).resources()
    create_resources(run_input.client, example)

    LOGGER.info("Ensuring the guest cluster exposes a valid kubeconfig")
    kubeconfig = wait_for_guest_kubeconfig(
        run_input.client, example.cluster, poll_settings=timeouts.kubeconfig
    )
    guest_client = connect_guest_client(
        client_factory, kubeconfig, poll_settings=timeouts.guest_client
    )
    return wait_for_nodes_ready(
        guest_client,
        replicas=manifests.get_initial_replicas(example.cluster),
        poll_settings=timeouts.nodes_ready,
    )


def run_quick_start(
    run_input: run_context.QuickStartInput,
    *,
    client_factory: kube.ClientFactory,
    timeouts: StageTimeouts | None = None,
    node_pool_replicas: int = configuration.NODE_POOL_REPLICAS,
) -> QuickStartResult:
    """Create a basic hosted cluster, check that it works and delete it again.

    Failures of the run and of the cleanup are both reported in the returned result.
    """
    timeouts = timeouts or StageTimeouts()
    result = QuickStartResult()
    LOGGER.info(f"Testing OCP release image {run_input.release_image}")

    workspace = Workspace(client=run_input.client, deletion_poll=timeouts.workspace_deletion)
    try:
        with workspace:
            result.workspace = workspace.name
            result.ready_nodes = provision_and_verify(
                run_input,
                namespace=workspace.name,
                client_factory=client_factory,
                timeouts=timeouts,
                node_pool_replicas=node_pool_replicas,
            )
    except errors.CleanupError as exc:
        result.cleanup_error = exc
    except errors.QuickStartError as exc:
        result.error = exc
        result.cleanup_error = workspace.cleanup_error

    return result
