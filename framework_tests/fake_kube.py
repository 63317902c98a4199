"""In-memory stand-ins for the management and guest cluster API servers."""

import typing as tp

from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import kube
from hosted_cluster_tests.utils import manifests

GUEST_KUBECONFIG = b"apiVersion: v1\nkind: Config\nclusters: []\n"


def make_node(name: str, ready: bool = True) -> dict:
    return {
        "kind": "Node",
        "metadata": {"name": name},
        "status": {
            "conditions": [
                {"type": "MemoryPressure", "status": "False"},
                {"type": "Ready", "status": "True" if ready else "False"},
            ]
        },
    }


def make_nodes(ready: int, not_ready: int = 0) -> list[dict]:
    nodes = [make_node(f"node-{i}") for i in range(ready)]
    nodes.extend(make_node(f"node-nr-{i}", ready=False) for i in range(not_ready))
    return nodes


class FakeManagementClient:
    """Management cluster where the HostedCluster publishes kubeconfig after a few polls.

    Args:
        namespace_name: A name assigned to the generated namespace.
        kubeconfig_after: A number of HostedCluster reads before the kubeconfig is published;
            `None` means never.
        kubeconfig_key: A key under which the kubeconfig is stored in the secret.
        raw_kubeconfig: A value stored in the secret `data` as is instead of the encoded
            kubeconfig.
        create_errors: Exceptions raised when creating an object of the given kind/name
            (the namespace is matched by "Namespace").
        get_errors: Exceptions raised (one per call) by `get` before it starts to work.
        delete_error: An exception raised by `delete`.
        deleted_after: A number of Namespace reads after delete before it's gone; `None` means
            never.
    """

    def __init__(
        self,
        namespace_name: str = "e2e-abc",
        kubeconfig_after: int | None = 2,
        kubeconfig_key: str = manifests.KUBECONFIG_KEY,
        raw_kubeconfig: tp.Any = "",
        create_errors: dict[str, Exception] | None = None,
        get_errors: list[Exception] | None = None,
        delete_error: Exception | None = None,
        deleted_after: int | None = 1,
    ) -> None:
        self.namespace_name = namespace_name
        self.kubeconfig_after = kubeconfig_after
        self.kubeconfig_key = kubeconfig_key
        self.raw_kubeconfig = raw_kubeconfig
        self.create_errors = create_errors or {}
        self.get_errors = list(get_errors or [])
        self.delete_error = delete_error
        self.deleted_after = deleted_after

        self.objects: dict[tuple[str, kube.ObjectKey], dict] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.cluster_reads = 0
        self.namespace_reads_after_delete = 0
        self.namespace_deleted = False

    def _record(self, op: str, kind: str, name: str) -> None:
        self.calls.append((op, kind, name))

    def count_calls(self, op: str, kind: str) -> int:
        return sum(1 for c in self.calls if c[0] == op and c[1] == kind)

    def create(self, obj: dict) -> dict:
        kind = obj["kind"]
        created = {**obj, "metadata": dict(obj["metadata"])}
        if kind == "Namespace":
            created["metadata"].pop("generateName", None)
            created["metadata"]["name"] = self.namespace_name
        name = kube.get_name(created)
        self._record("create", kind, name)

        err = self.create_errors.get(kind) or self.create_errors.get(name)
        if err:
            raise err

        self.objects[(kind, kube.object_key(created))] = created
        return created

    def _publish_kubeconfig(self, cluster: dict) -> None:
        namespace = kube.get_namespace(cluster)
        secret_name = f"{kube.get_name(cluster)}-admin-kubeconfig"
        secret = manifests.secret_manifest(
            namespace=namespace, name=secret_name, data={self.kubeconfig_key: GUEST_KUBECONFIG}
        )
        if self.raw_kubeconfig != "":
            secret["data"][self.kubeconfig_key] = self.raw_kubeconfig
        self.objects[("Secret", kube.object_key(secret))] = secret
        cluster["status"] = {"kubeconfig": {"name": secret_name}}

    def get(self, kind: str, key: kube.ObjectKey) -> dict:
        self._record("get", kind, key.name)
        if self.get_errors:
            raise self.get_errors.pop(0)

        if kind == "Namespace" and self.namespace_deleted:
            self.namespace_reads_after_delete += 1
            if (
                self.deleted_after is not None
                and self.namespace_reads_after_delete >= self.deleted_after
            ):
                msg = f'namespaces "{key.name}" not found (NotFound)'
                raise errors.NotFoundError(msg)

        obj = self.objects.get((kind, key))
        if obj is None:
            msg = f'{kind} "{key}" not found'
            raise errors.NotFoundError(msg)

        if kind == manifests.HOSTED_CLUSTER_KIND:
            self.cluster_reads += 1
            if (
                self.kubeconfig_after is not None
                and self.cluster_reads >= self.kubeconfig_after
                and "status" not in obj
            ):
                self._publish_kubeconfig(obj)

        return obj

    def delete(self, obj: dict) -> None:
        self._record("delete", obj["kind"], kube.get_name(obj))
        if self.delete_error:
            raise self.delete_error
        if obj["kind"] == "Namespace":
            self.namespace_deleted = True

    def list(self, kind: str, namespace: str = "") -> list[dict]:
        self._record("list", kind, namespace)
        return [
            o for (k, key), o in self.objects.items() if k == kind and key.namespace == namespace
        ]


class FakeGuestClient:
    """Guest cluster reporting a sequence of node lists; the last one is repeated."""

    def __init__(
        self, node_lists: list[list[dict]], list_errors: list[Exception] | None = None
    ) -> None:
        self.node_lists = node_lists
        self.list_errors = list(list_errors or [])
        self.list_calls = 0
        self.served = 0

    def create(self, obj: dict) -> dict:
        return obj

    def get(self, kind: str, key: kube.ObjectKey) -> dict:
        msg = f'{kind} "{key}" not found'
        raise errors.NotFoundError(msg)

    def delete(self, obj: dict) -> None:
        pass

    def list(self, kind: str, namespace: str = "") -> list[dict]:
        self.list_calls += 1
        if self.list_errors:
            raise self.list_errors.pop(0)
        idx = min(self.served, len(self.node_lists) - 1)
        self.served += 1
        return self.node_lists[idx]


class FakeClientFactory:
    """Hand out the prepared clients.

    Args:
        guest_client: A client returned by `new`.
        primary_client: A client returned by `from_path`.
        fail_new: A number of failed `new` calls before it succeeds; `None` means always fail.
        primary_error: An exception raised by `from_path`.
    """

    def __init__(
        self,
        guest_client: tp.Any = None,
        primary_client: tp.Any = None,
        fail_new: int | None = 0,
        primary_error: Exception | None = None,
    ) -> None:
        self.guest_client = guest_client
        self.primary_client = primary_client
        self.fail_new = fail_new
        self.primary_error = primary_error
        self.new_calls: list[bytes] = []
        self.from_path_calls: list[str] = []

    def new(self, kubeconfig: bytes) -> tp.Any:
        self.new_calls.append(kubeconfig)
        if self.fail_new is None or len(self.new_calls) <= self.fail_new:
            msg = "failed to create kube client: connection refused"
            raise errors.ClientInitError(msg)
        return self.guest_client

    def from_path(self, kubeconfig_file: tp.Any) -> tp.Any:
        self.from_path_calls.append(str(kubeconfig_file))
        if self.primary_error:
            raise self.primary_error
        return self.primary_client
