"""Manifests of the objects created for a quick start run."""

import dataclasses
import typing as tp

from hosted_cluster_tests.utils import configuration
from hosted_cluster_tests.utils import helpers
from hosted_cluster_tests.utils import types as ttypes

HOSTED_CLUSTER_API_VERSION = "hypershift.openshift.io/v1alpha1"
HOSTED_CLUSTER_KIND = "HostedCluster"

PULL_SECRET_KEY = ".dockerconfigjson"
PROVIDER_CREDS_KEY = "credentials"
SSH_KEY_KEY = "id_rsa.pub"
KUBECONFIG_KEY = "kubeconfig"


def namespace_manifest(generate_name: str = configuration.WORKSPACE_PREFIX) -> ttypes.KubeObject:
    """Return a Namespace with a name generated by the server."""
    return {
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": {"generateName": generate_name},
    }


def secret_manifest(
    *, namespace: str, name: str, data: dict[str, bytes], secret_type: str = "Opaque"
) -> ttypes.KubeObject:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "type": secret_type,
        "metadata": {"namespace": namespace, "name": name},
        "data": {k: helpers.b64encode_str(v) for k, v in data.items()},
    }


def get_kubeconfig_secret_name(cluster: ttypes.KubeObject) -> str:
    """Return name of the guest kubeconfig secret published in the HostedCluster status."""
    kubeconfig_ref = (cluster.get("status") or {}).get("kubeconfig") or {}
    return kubeconfig_ref.get("name") or ""


def get_initial_replicas(cluster: ttypes.KubeObject) -> int:
    return int(cluster["spec"]["initialComputeReplicas"])


@dataclasses.dataclass(frozen=True)
class ExampleResources:
    pull_secret: ttypes.KubeObject
    aws_credentials: ttypes.KubeObject
    ssh_key: ttypes.KubeObject
    cluster: ttypes.KubeObject

    def ordered(self) -> list[tuple[str, ttypes.KubeObject]]:
        """Return the objects in creation order together with their description.

        The cluster references the secrets by name, so it goes last.
        """
        return [
            ("pull secret", self.pull_secret),
            ("aws credentials secret", self.aws_credentials),
            ("ssh key secret", self.ssh_key),
            ("hostedcluster", self.cluster),
        ]


@dataclasses.dataclass(frozen=True)
class ExampleOptions:
    namespace: str
    name: str
    release_image: str
    pull_secret: bytes
    aws_credentials: bytes
    ssh_key: bytes
    node_pool_replicas: int = 2

    def resources(self) -> ExampleResources:
        pull_secret = secret_manifest(
            namespace=self.namespace,
            name=f"{self.name}-pull-secret",
            data={PULL_SECRET_KEY: self.pull_secret},
            secret_type="kubernetes.io/dockerconfigjson",
        )
        aws_credentials = secret_manifest(
            namespace=self.namespace,
            name=f"{self.name}-provider-creds",
            data={PROVIDER_CREDS_KEY: self.aws_credentials},
        )
        ssh_key = secret_manifest(
            namespace=self.namespace,
            name=f"{self.name}-ssh-key",
            data={SSH_KEY_KEY: self.ssh_key},
        )

        cluster: dict[str, tp.Any] = {
            "apiVersion": HOSTED_CLUSTER_API_VERSION,
            "kind": HOSTED_CLUSTER_KIND,
            "metadata": {"namespace": self.namespace, "name": self.name},
            "spec": {
                "release": {"image": self.release_image},
                "initialComputeReplicas": self.node_pool_replicas,
                "pullSecret": {"name": pull_secret["metadata"]["name"]},
                "providerCreds": {"name": aws_credentials["metadata"]["name"]},
                "sshKey": {"name": ssh_key["metadata"]["name"]},
            },
        }

        return ExampleResources(
            pull_secret=pull_secret,
            aws_credentials=aws_credentials,
            ssh_key=ssh_key,
            cluster=cluster,
        )
