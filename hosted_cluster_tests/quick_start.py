#!/usr/bin/env python3
"""Create a basic hosted cluster the same way as described in the HyperShift quick start.

The hosted cluster and all the objects created for it are deleted at the end of the run.
"""

import argparse
import logging
import sys

from hosted_cluster_tests.utils import configuration
from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import helpers
from hosted_cluster_tests.utils import kubectl
from hosted_cluster_tests.utils import provisioning
from hosted_cluster_tests.utils import releases
from hosted_cluster_tests.utils import run_context

LOGGER = logging.getLogger(__name__)


def get_args() -> argparse.Namespace:
    """Get command line arguments."""
    parser = argparse.ArgumentParser(description=(__doc__ or "").split("\n", maxsplit=1)[0])
    parser.add_argument(
        "-a",
        "--aws-credentials-file",
        default="",
        help="Path to AWS credentials.",
    )
    parser.add_argument(
        "-p",
        "--pull-secret-file",
        default="",
        help="Path to pull secret.",
    )
    parser.add_argument(
        "-s",
        "--ssh-key-file",
        default=str(configuration.DEFAULT_SSH_KEY_FILE),
        help="Path to SSH public key.",
    )
    parser.add_argument(
        "-r",
        "--release-image",
        default="",
        help="OCP release image to test; the latest stable release is used when not set.",
    )
    parser.add_argument(
        "-k",
        "--kubeconfig",
        default=str(configuration.KUBECONFIG),
        help="Path to kubeconfig of the management cluster.",
    )
    parser.add_argument(
        "-n",
        "--node-pool-replicas",
        type=helpers.check_positive_int_arg,
        default=configuration.NODE_POOL_REPLICAS,
        help="Number of guest nodes that need to become ready.",
    )
    return parser.parse_args()


def main(timeouts: provisioning.StageTimeouts | None = None) -> int:
    logging.basicConfig(format="%(levelname)s:%(message)s", level=logging.INFO)
    args = get_args()

    options = run_context.QuickStartOptions(
        aws_credentials_file=args.aws_credentials_file,
        pull_secret_file=args.pull_secret_file,
        ssh_key_file=args.ssh_key_file,
        release_image=args.release_image,
    )
    client_factory = kubectl.KubectlClientFactory()

    try:
        run_input = options.get_context(
            client_factory=client_factory,
            image_resolver=releases.ReleaseStreamResolver(),
            kubeconfig=args.kubeconfig,
        )
    except errors.QuickStartError as exc:
        LOGGER.error(f"failed to create test context: {exc}")  # noqa: TRY400
        return 1

    result = provisioning.run_quick_start(
        run_input,
        client_factory=client_factory,
        timeouts=timeouts,
        node_pool_replicas=args.node_pool_replicas,
    )
    if not result.passed:
        for line in result.failure_summary().splitlines():
            LOGGER.error(line)
        return 1

    LOGGER.info(f"Quick start passed, ready nodes: {', '.join(result.ready_nodes)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
