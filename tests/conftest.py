from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence

import pytest

from gkesetup.config import ProjectLayout, Settings
from gkesetup.model import CommandResult
from gkesetup.ui.console import Console

IAM_POLICY = """{
  "bindings": [
    {"members": ["serviceAccount:SERVICE_ACCOUNT"], "role": "roles/editor"},
    {"members": ["OWNERS"], "role": "roles/owner"}
  ]
}
"""

API_DEPLOYMENT = """apiVersion: apps/v1
kind: Deployment
spec:
  template:
    spec:
      containers:
      - name: portability-api
        image: IMAGE # Replaced by script
        env:
        - name: PROJECT_ID
          value: PROJECT-ID # Replaced by script
"""

INSTANCE_GROUPS = (
    "NAME                           LOCATION       SCOPE  NETWORK  MANAGED  INSTANCES\n"
    "foo-clus-default-pool-bar-grp  us-central1-a  zone   default  Yes      2\n"
)

ADDRESSES = (
    "NAME                       REGION  ADDRESS         STATUS\n"
    "load-balancer-external-ip          35.201.127.254  IN_USE\n"
)

FIREWALL_RULES = (
    "NAME                           NETWORK  DIRECTION  PRIORITY  ALLOW                         DENY  DISABLED\n"
    "default-allow-icmp             default  INGRESS    65534     icmp                                False\n"
    "gke-portability-abc123-vms     default  INGRESS    1000      tcp:1-65535,udp:1-65535,icmp        False\n"
)


class FakeExecutor:
    """
    Stands in for CommandExecutor: records argv, answers from canned output
    keyed by argv prefix, and snapshots any file handed to a command so tests
    can see what was on disk while it ran.
    """

    def __init__(self, outputs: Dict[tuple, str] | None = None, statuses: Dict[tuple, int] | None = None):
        self.outputs = outputs or {}
        self.statuses = statuses or {}
        self.calls: List[List[str]] = []
        self.snapshots: Dict[str, str] = {}
        self.strict = False

    def _lookup(self, table, argv):
        for prefix, value in table.items():
            if tuple(argv[: len(prefix)]) == prefix:
                return value
        return None

    def run(self, args: Sequence[str], *, echo=True, check=None, cwd=None) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        for arg in argv:
            path = Path(arg.split("=", 1)[-1])
            if path.suffix in (".json", ".yaml") and path.is_file():
                self.snapshots[str(path)] = path.read_text(encoding="utf-8")
        output = self._lookup(self.outputs, argv) or ""
        status = self._lookup(self.statuses, argv) or 0
        return CommandResult(args=argv, output=output, exit_status=status)

    def commands_starting(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]


@pytest.fixture
def console() -> Console:
    return Console(debug=False)


@pytest.fixture
def layout(tmp_path) -> ProjectLayout:
    gcp_dir = tmp_path / "project" / "gcp"
    k8s_dir = tmp_path / "project" / "k8s"
    gcp_dir.mkdir(parents=True)
    k8s_dir.mkdir()
    (gcp_dir / "iam-policy.json").write_text(IAM_POLICY, encoding="utf-8")
    (k8s_dir / "api-deployment.yaml").write_text(API_DEPLOYMENT, encoding="utf-8")
    (k8s_dir / "api-service.yaml").write_text("kind: Service\n", encoding="utf-8")
    return ProjectLayout.from_gcp_dir(gcp_dir)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="qa",
        base_project_id="portability",
        organization_id="1234",
        billing_account_id="AAAA-BBBB",
        owners='"user:foo@foo.com","group:bar-group@baz.com"',
    )


@pytest.fixture
def cert_files(tmp_path):
    crt = tmp_path / "fullchain.pem"
    key = tmp_path / "privkey.pem"
    crt.write_text("cert", encoding="utf-8")
    key.write_text("key", encoding="utf-8")
    return crt, key


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor(
        outputs={
            ("gcloud", "compute", "instance-groups", "list"): INSTANCE_GROUPS,
            ("gcloud", "compute", "addresses", "list"): ADDRESSES,
            ("gcloud", "compute", "firewall-rules", "list"): FIREWALL_RULES,
            ("kubectl", "config", "current-context"): "gke_portability-qa_us-central1-a_portability-api-cluster\n",
        }
    )


def answers(*responses: str):
    """Reader that replays canned operator input, one line per prompt."""
    queue = list(responses)
    prompts: List[str] = []

    def reader(prompt: str) -> str:
        prompts.append(prompt)
        if not queue:
            raise AssertionError(f"Unexpected prompt: {prompt!r}")
        return queue.pop(0)

    reader.prompts = prompts
    return reader
