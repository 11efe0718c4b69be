# steps/cluster.py
# GKE cluster, instance group wiring and Kubernetes objects.
from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import (
    BACKEND_SERVICE_NAME,
    CLUSTER_IPV4_CIDR,
    CLUSTER_NAME,
    DEPLOYMENT_IMAGE_TOKEN,
    DEPLOYMENT_PROJECT_TOKEN,
    HEALTH_CHECK_NAME,
    HEALTH_CHECK_PORT,
    INSTANCE_GROUP_SIZE,
    K8S_SECRET_NAME,
    NODE_PORT,
    ZONE,
)
from ..errors import EmptyOutputError
from ..tabular import resolve_instance_group_name
from ..templates import with_mutation

if TYPE_CHECKING:
    from ..runner import RunContext


def create_cluster(ctx: RunContext) -> None:
    # TODO: enable node autoscaling (--enable-autoscaling) once load numbers are known
    ctx.run(
        "gcloud", "container", "clusters", "create", CLUSTER_NAME,
        "--zone", ZONE,
        f"--num-nodes={INSTANCE_GROUP_SIZE}",
        "--image-type=COS",
        f"--cluster-ipv4-cidr={CLUSTER_IPV4_CIDR}",
    )


def set_kubectl_context(ctx: RunContext) -> None:
    ctx.run("gcloud", "container", "clusters", "get-credentials", CLUSTER_NAME, "--zone", ZONE)
    current = ctx.run("kubectl", "config", "current-context", echo=False)
    ctx.env["KubectlContext"] = current.output.strip()


def gate_only(ctx: RunContext) -> None:
    """Nothing to run; the step is its confirmation prompt."""


def create_health_check(ctx: RunContext) -> None:
    ctx.run(
        "gcloud", "compute", "http-health-checks", "create", HEALTH_CHECK_NAME,
        f"--port={HEALTH_CHECK_PORT}", "--request-path=/healthz",
    )

    # The instance group is named by GKE during cluster creation; read it back
    groups = ctx.run("gcloud", "compute", "instance-groups", "list", echo=False)
    ctx.console.print_info(f"Instance groups: \n{groups.output}")
    try:
        name = resolve_instance_group_name(groups.output)
    except EmptyOutputError:
        raise EmptyOutputError("Cluster did not create instance group as expected") from None
    ctx.env["InstanceGroupName"] = name


def set_named_port(ctx: RunContext) -> None:
    ctx.run(
        "gcloud", "compute", "instance-groups", "set-named-ports", ctx.env["InstanceGroupName"],
        f"--named-ports=http:{NODE_PORT}", f"--zone={ZONE}",
    )


def create_backend_service(ctx: RunContext) -> None:
    ctx.env["BackendServiceName"] = BACKEND_SERVICE_NAME
    ctx.run(
        "gcloud", "compute", "backend-services", "create", ctx.env["BackendServiceName"],
        "--port=80", "--port-name=http", "--protocol=HTTP", "--global",
        f"--http-health-checks={HEALTH_CHECK_NAME}",
    )


def add_instance_group_backend(ctx: RunContext) -> None:
    ctx.run(
        "gcloud", "compute", "backend-services", "add-backend", ctx.env["BackendServiceName"],
        f"--instance-group={ctx.env['InstanceGroupName']}",
        "--balancing-mode=UTILIZATION", "--global",
        f"--instance-group-zone={ZONE}",
    )


def create_service_account_key(ctx: RunContext) -> None:
    key_path = Path(tempfile.mkdtemp(prefix="gkesetup-")) / "key.json"
    ctx.env["ServiceAccountKeyPath"] = str(key_path)
    ctx.run(
        "gcloud", "iam", "service-accounts", "keys", "create", str(key_path),
        f"--iam-account={ctx.env['ServiceAccountEmail']}",
    )


def import_credentials_secret(ctx: RunContext) -> None:
    key_path = Path(ctx.env["ServiceAccountKeyPath"])
    try:
        ctx.run(
            "kubectl", "create", "secret", "generic", K8S_SECRET_NAME,
            f"--from-file=key.json={key_path}",
        )
    finally:
        # The key never outlives this step
        shutil.rmtree(key_path.parent, ignore_errors=True)


def create_api_service(ctx: RunContext) -> None:
    ctx.run("kubectl", "create", "-f", str(ctx.layout.api_service))


def create_api_deployment(ctx: RunContext) -> None:
    ctx.env["Image"] = ctx.settings.image
    substitutions = [
        (DEPLOYMENT_IMAGE_TOKEN, ctx.env["Image"]),
        (DEPLOYMENT_PROJECT_TOKEN, ctx.env["ProjectID"]),
    ]
    with_mutation(
        ctx.layout.api_deployment,
        substitutions,
        lambda manifest: ctx.run("kubectl", "create", "-f", str(manifest)),
    )
