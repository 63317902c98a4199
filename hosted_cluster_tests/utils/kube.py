"""Interfaces of the cluster API clients and helpers for working with API objects."""

import dataclasses
import logging
import typing as tp

from hosted_cluster_tests.utils import helpers
from hosted_cluster_tests.utils import types as ttypes

LOGGER = logging.getLogger(__name__)

NODE_READY = "Ready"
CONDITION_TRUE = "True"


@dataclasses.dataclass(frozen=True, order=True)
class ObjectKey:
    name: str
    namespace: str = ""

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


class Client(tp.Protocol):
    """Generic CRUD client of a cluster API server.

    All methods raise `errors.KubeClientError`. A missing object is reported by
    `errors.NotFoundError`.
    """

    def create(self, obj: ttypes.KubeObject) -> ttypes.KubeObject:
        """Create the object and return it as stored by the server."""
        ...

    def get(self, kind: str, key: ObjectKey) -> ttypes.KubeObject: ...

    def delete(self, obj: ttypes.KubeObject) -> None: ...

    def list(self, kind: str, namespace: str = "") -> ttypes.KubeObjectList: ...


class ClientFactory(tp.Protocol):
    def new(self, kubeconfig: bytes) -> Client:
        """Return a client for the API server described by `kubeconfig`.

        Raise `errors.ClientInitError` when the client can't be constructed.
        """
        ...


def get_name(obj: ttypes.KubeObject) -> str:
    return obj.get("metadata", {}).get("name") or ""


def get_namespace(obj: ttypes.KubeObject) -> str:
    return obj.get("metadata", {}).get("namespace") or ""


def object_key(obj: ttypes.KubeObject) -> ObjectKey:
    return ObjectKey(name=get_name(obj), namespace=get_namespace(obj))


def describe(obj: ttypes.KubeObject) -> str:
    """Return `Kind namespace/name` string for log messages."""
    return f"{obj.get('kind', 'Object')} {object_key(obj)}"


def is_node_ready(node: ttypes.KubeObject) -> bool:
    """Check if the node reports the `Ready` condition with status `True`."""
    conditions = node.get("status", {}).get("conditions") or []
    return any(
        c.get("type") == NODE_READY and c.get("status") == CONDITION_TRUE for c in conditions
    )


def get_ready_nodes(nodes: ttypes.KubeObjectList) -> list[str]:
    """Return names of ready nodes."""
    return [get_name(n) for n in nodes if is_node_ready(n)]


def nodes_match_replicas(nodes: ttypes.KubeObjectList, replicas: int) -> bool:
    """Check that exactly `replicas` nodes are ready.

    More ready nodes than requested is not a match either, so over-provisioning is caught
    the same way as nodes that never became ready.
    """
    if not nodes:
        return False
    return len(get_ready_nodes(nodes)) == replicas


def get_secret_value(secret: ttypes.KubeObject, key: str) -> bytes:
    """Return decoded value stored under `key` in Secret `data`.

    Raise `KeyError` when the key is missing, `TypeError` when the value is not a string
    and `ValueError` when the value is not valid base64.
    """
    data = secret.get("data") or {}
    value = data[key]
    if not isinstance(value, str):
        msg = f"value of `{key}` is not a string"
        raise TypeError(msg)
    return helpers.b64decode_str(value)
