import pytest

from hosted_cluster_tests.utils import polling
from hosted_cluster_tests.utils import provisioning

FAST_POLL = polling.PollSettings(interval=0.01, timeout=0.1)


@pytest.fixture
def fast_timeouts() -> provisioning.StageTimeouts:
    """Stage timeouts short enough for the stages that are expected to time out."""
    return provisioning.StageTimeouts(
        kubeconfig=FAST_POLL,
        guest_client=FAST_POLL,
        nodes_ready=FAST_POLL,
        workspace_deletion=FAST_POLL,
    )


@pytest.fixture
def no_wait_timeouts() -> provisioning.StageTimeouts:
    """Stage timeouts for runs that are expected to pass."""
    no_wait = polling.PollSettings(interval=0, timeout=5)
    return provisioning.StageTimeouts(
        kubeconfig=no_wait,
        guest_client=no_wait,
        nodes_ready=no_wait,
        workspace_deletion=no_wait,
    )
