"""Management cluster and test environment configuration."""

import os
import pathlib as pl

# Kubeconfig of the management cluster where the hosted cluster gets created
KUBECONFIG = pl.Path(
    os.environ.get("KUBECONFIG") or pl.Path.home() / ".kube" / "config"
).expanduser()

KUBECTL_BIN = os.environ.get("KUBECTL_BIN") or "kubectl"

# Release stream used when no release image was passed explicitly
RELEASE_STREAM_URL = (
    os.environ.get("RELEASE_STREAM_URL")
    or "https://amd64.ocp.releases.ci.openshift.org/api/v1/releasestream/4-stable/latest"
)

HTTP_TIMEOUT = int(os.environ.get("HTTP_TIMEOUT") or 30)
if HTTP_TIMEOUT < 1:
    msg = f"Invalid HTTP_TIMEOUT '{HTTP_TIMEOUT}': must be >= 1"
    raise RuntimeError(msg)

NODE_POOL_REPLICAS = int(os.environ.get("NODE_POOL_REPLICAS") or 2)
if NODE_POOL_REPLICAS < 1:
    msg = f"Invalid NODE_POOL_REPLICAS '{NODE_POOL_REPLICAS}': must be >= 1"
    raise RuntimeError(msg)

WORKSPACE_PREFIX = os.environ.get("WORKSPACE_PREFIX") or "e2e-"

DEFAULT_SSH_KEY_FILE = pl.Path.home() / ".ssh" / "id_rsa.pub"
