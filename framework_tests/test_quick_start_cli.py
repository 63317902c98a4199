import pathlib as pl
import sys

import pytest

import fake_kube
from hosted_cluster_tests import quick_start
from hosted_cluster_tests.utils import provisioning


@pytest.fixture
def cli_args(tmp_path: pl.Path) -> list[str]:
    pull_secret = tmp_path / "pull-secret.json"
    pull_secret.write_bytes(b"p" * 40)
    aws_credentials = tmp_path / "credentials"
    aws_credentials.write_bytes(b"a" * 40)
    ssh_key = tmp_path / "id_rsa.pub"
    ssh_key.write_bytes(b"ssh-rsa AAAA foo@bar")
    kubeconfig = tmp_path / "kubeconfig"
    kubeconfig.write_text("apiVersion: v1\n")

    return [
        "quick_start",
        "--pull-secret-file",
        str(pull_secret),
        "--aws-credentials-file",
        str(aws_credentials),
        "--ssh-key-file",
        str(ssh_key),
        "--release-image",
        "example:v1",
        "--kubeconfig",
        str(kubeconfig),
        "--node-pool-replicas",
        "2",
    ]


@pytest.fixture
def use_factory(monkeypatch: pytest.MonkeyPatch) -> fake_kube.FakeClientFactory:
    factory = fake_kube.FakeClientFactory(
        primary_client=fake_kube.FakeManagementClient(),
        guest_client=fake_kube.FakeGuestClient(node_lists=[fake_kube.make_nodes(ready=2)]),
    )
    monkeypatch.setattr(quick_start.kubectl, "KubectlClientFactory", lambda: factory)
    return factory


def test_main_passed(
    monkeypatch: pytest.MonkeyPatch,
    cli_args: list[str],
    use_factory: fake_kube.FakeClientFactory,
    no_wait_timeouts: provisioning.StageTimeouts,
):
    monkeypatch.setattr(sys, "argv", cli_args)
    assert quick_start.main(timeouts=no_wait_timeouts) == 0
    assert use_factory.from_path_calls == [cli_args[-3]]
    assert use_factory.primary_client.count_calls("delete", "Namespace") == 1


def test_main_nodes_not_ready(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
    cli_args: list[str],
    use_factory: fake_kube.FakeClientFactory,
    fast_timeouts: provisioning.StageTimeouts,
):
    cli_args[-1] = "3"
    monkeypatch.setattr(sys, "argv", cli_args)
    assert quick_start.main(timeouts=fast_timeouts) == 1
    assert use_factory.primary_client.count_calls("delete", "Namespace") == 1
    assert "quick start failed" in caplog.text


def test_main_missing_input(
    monkeypatch: pytest.MonkeyPatch, cli_args: list[str], use_factory: fake_kube.FakeClientFactory
):
    pl.Path(cli_args[2]).unlink()
    monkeypatch.setattr(sys, "argv", cli_args)
    assert quick_start.main() == 1
    assert not use_factory.from_path_calls


def test_main_invalid_replicas(monkeypatch: pytest.MonkeyPatch, cli_args: list[str]):
    cli_args[-1] = "0"
    monkeypatch.setattr(sys, "argv", cli_args)
    with pytest.raises(SystemExit):
        quick_start.main()
