"""The fixed sequence of steps that provisions one GKE environment."""

from __future__ import annotations

from typing import List

from ..config import BACKEND_SERVICE_NAME
from ..model import ProvisioningStep
from . import cluster, network, project, storage


def build_steps() -> List[ProvisioningStep]:
    """
    Every step of a run, in execution order.

    `{Key}` placeholders are EnvironmentContext keys and are filled in when the
    step starts, so a step may only name keys produced by earlier steps.
    """
    return [
        ProvisioningStep(
            "Creating project {ProjectID}",
            project.create_project,
            requires_confirmation=True,
            prompt="Creating project {ProjectID}. Continue (y/N)? ",
        ),
        ProvisioningStep(
            "Changing your default project for gcloud to {ProjectID}",
            project.set_default_project,
            requires_confirmation=True,
            prompt="Changing your default project for gcloud to {ProjectID}. Continue (y/N)? ",
        ),
        ProvisioningStep("Creating a service account for IAM", project.create_service_account),
        ProvisioningStep("Setting up IAM policy and ownership permissions", project.apply_iam_policy),
        ProvisioningStep("Enabling billing", project.link_billing),
        ProvisioningStep("Enabling APIs", project.enable_apis),
        ProvisioningStep("Installing SSL certificate", storage.install_ssl_certificate),
        ProvisioningStep("Creating GCS 'static' bucket", storage.create_static_bucket),
        ProvisioningStep("Creating backend 'static' bucket", storage.create_backend_bucket),
        ProvisioningStep(
            "Creating GCS 'app-data' bucket for storing encrypted app secrets",
            storage.create_app_data_bucket,
        ),
        ProvisioningStep(
            "Granting service account {ServiceAccountEmail} viewer privileges to 'app-data' bucket",
            storage.grant_app_data_read,
        ),
        ProvisioningStep("Creating a key to encrypt app secrets", storage.create_secrets_key),
        ProvisioningStep(
            "Creating GKE cluster. This will create a VM instance group automatically.",
            cluster.create_cluster,
        ),
        ProvisioningStep("Setting kubectl context for {ProjectID}", cluster.set_kubectl_context),
        ProvisioningStep(
            "Confirming Kubernetes context",
            cluster.gate_only,
            requires_confirmation=True,
            prompt=(
                "Confirm we are using the correct Kubernetes context for {ProjectID}. "
                "Current context is:\n{KubectlContext}.\nContinue (y/N)? "
            ),
        ),
        ProvisioningStep(
            "Creating health check for backend service and instance group",
            cluster.create_health_check,
        ),
        ProvisioningStep(
            "Setting named port 'http' on instance group {InstanceGroupName}",
            cluster.set_named_port,
        ),
        ProvisioningStep(
            f"Creating GCP backend service '{BACKEND_SERVICE_NAME}'",
            cluster.create_backend_service,
        ),
        ProvisioningStep(
            "Adding instance group {InstanceGroupName} as a backend to {BackendServiceName}",
            cluster.add_instance_group_backend,
        ),
        ProvisioningStep(
            "Creating credentials for service account to access GCP APIs",
            cluster.create_service_account_key,
        ),
        ProvisioningStep(
            "Importing the credentials as a Kubernetes Secret",
            cluster.import_credentials_secret,
        ),
        ProvisioningStep("Creating Kubernetes service portability.api", cluster.create_api_service),
        ProvisioningStep("Creating load balancer", network.create_url_map),
        ProvisioningStep("Reserving a static external IP", network.reserve_external_ip),
        ProvisioningStep("Creating HTTPS proxy to our load balancer", network.create_https_proxy),
        ProvisioningStep(
            "Creating global forwarding rule, i.e. load balancer 'frontend'",
            network.create_forwarding_rule,
        ),
        ProvisioningStep("Creating a Kubernetes deployment", cluster.create_api_deployment),
        ProvisioningStep(
            "Opening up VM firewall rule to allow requests from load balancer and health checkers",
            network.open_vm_firewall,
        ),
        ProvisioningStep(
            "Checking if there are any project-specific post processing steps",
            network.run_postprocess_hook,
        ),
    ]
