# config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from .errors import PreflightError

# Variables that must be exported before a run (see init_project_vars_example.sh)
REQUIRED_VARS = {
    "BASE_PROJECT_ID": "Prefix to use for all project IDs. Used with -ENV_NAME (e.g. dev, prod) as suffix.",
    "ORGANIZATION_ID": "ID of GCP organization",
    "BILLING_ACCOUNT_ID": "ID of GCP billing account",
    "OWNERS": 'Project owners (comma separated list e.g. "user:foo@foo.com","group:bar-group@baz.com")',
}

# Constants
ZONE = "us-central1-a"
INSTANCE_GROUP_SIZE = 2  # Number of VMs to run for our GKE jobs
NODE_PORT = 30580  # If this changes, change nodePort in k8s/api-service.yaml too
HEALTH_CHECK_PORT = 10256
CLUSTER_NAME = "portability-api-cluster"
CLUSTER_IPV4_CIDR = "10.4.0.0/14"
STATIC_BUCKET_NAME = "static-bucket"
HEALTH_CHECK_NAME = "portability-health-check"
BACKEND_SERVICE_NAME = "api-backend-service"
LB_NAME = "portability-load-balancer"
LB_EXTERNAL_IP_NAME = "load-balancer-external-ip"
LB_HTTPS_PROXY_NAME = "load-balancer-https-proxy"
LB_FORWARDING_RULE_NAME = "portability-forwarding-rule"
SSL_CERT_NAME = "portability-cert"
KMS_KEYRING = "portability_secrets"
KMS_KEY = "portability_secrets_key"
K8S_SECRET_NAME = "portability-service-account-creds"

HEALTH_CHECKER_IP_RANGES = ["209.85.152.0/22", "209.85.204.0/22", "35.191.0.0/16"]
LB_IP_RANGE = "130.211.0.0/22"
NETWORK_IP_RANGE = "10.128.0.0/9"
VMS_FIREWALL_SUFFIX = "-vms"

ENABLED_APIS = [
    "compute.googleapis.com",  # gcloud compute
    "containerregistry.googleapis.com",  # container images
    "datastore.googleapis.com",  # job state in Cloud DataStore
    "cloudkms.googleapis.com",  # encrypting app secrets
]

# Placeholders in the template artifacts
IAM_SERVICE_ACCOUNT_TOKEN = "SERVICE_ACCOUNT"
IAM_OWNERS_TOKEN = '"OWNERS"'
DEPLOYMENT_IMAGE_TOKEN = "IMAGE # Replaced by script"
DEPLOYMENT_PROJECT_TOKEN = "PROJECT-ID # Replaced by script"


@dataclass(frozen=True)
class Settings:
    environment: str
    base_project_id: str = ""
    organization_id: str = ""
    billing_account_id: str = ""
    owners: str = ""

    @property
    def project_id(self) -> str:
        return f"{self.base_project_id}-{self.environment}"

    @property
    def service_account(self) -> str:
        return f"{self.project_id}@{self.project_id}.iam.gserviceaccount.com"

    @property
    def image(self) -> str:
        return f"gcr.io/{self.project_id}/portability-api:v1"

    def describe(self) -> dict[str, tuple[str, str]]:
        values = {
            "BASE_PROJECT_ID": self.base_project_id,
            "ORGANIZATION_ID": self.organization_id,
            "BILLING_ACCOUNT_ID": self.billing_account_id,
            "OWNERS": self.owners,
        }
        return {name: (values[name], text) for name, text in REQUIRED_VARS.items()}


def load_settings(
    environment: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[Settings, List[str]]:
    """
    Build Settings from the process environment.

    Missing variables are reported as warnings and left empty; the run is not
    stopped for them.

    Returns:
        (settings, warnings)
    """
    if environ is None:
        environ = os.environ
    if not environment:
        raise PreflightError("Must provide an environment, e.g. 'qa', 'test', or 'prod'")

    missing = [name for name in REQUIRED_VARS if not environ.get(name)]
    warnings: List[str] = []
    if missing:
        warnings.append(
            f"Please make sure all variables for your project are set: missing {', '.join(missing)}. "
            "See init_project_vars_example.sh."
        )

    settings = Settings(
        environment=environment,
        base_project_id=environ.get("BASE_PROJECT_ID", ""),
        organization_id=environ.get("ORGANIZATION_ID", ""),
        billing_account_id=environ.get("BILLING_ACCOUNT_ID", ""),
        owners=environ.get("OWNERS", ""),
    )
    return settings, warnings


@dataclass(frozen=True)
class ProjectLayout:
    """Where the files a run reads and mutates live, relative to the gcp/ directory."""
    gcp_dir: Path
    k8s_dir: Optional[Path] = None

    def __post_init__(self):
        # k8s/ is a sibling of gcp/ unless given explicitly
        # (frozen dataclass, hence object.__setattr__)
        if self.k8s_dir is None:
            object.__setattr__(self, "k8s_dir", self.gcp_dir.parent / "k8s")

    @classmethod
    def from_gcp_dir(cls, path: str | Path = ".") -> "ProjectLayout":
        gcp_dir = Path(path).expanduser().resolve()
        if gcp_dir.name != "gcp":
            raise PreflightError(
                f"Please run out of the gcp/ directory (got {gcp_dir}).",
                hint="cd into gcp/ or pass --gcp-dir path/to/gcp",
            )
        return cls(gcp_dir=gcp_dir)

    @property
    def iam_policy(self) -> Path:
        return self.gcp_dir / "iam-policy.json"

    @property
    def postprocess_script(self) -> Path:
        return self.gcp_dir / "postprocess_project.sh"

    @property
    def api_service(self) -> Path:
        return self.k8s_dir / "api-service.yaml"

    @property
    def api_deployment(self) -> Path:
        return self.k8s_dir / "api-deployment.yaml"
