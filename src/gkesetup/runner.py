# runner.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .config import ProjectLayout, Settings
from .errors import PreflightError
from .executor import CommandExecutor
from .model import CommandResult, EnvironmentContext, ProvisioningStep
from .sequencer import StepSequencer
from .steps import build_steps
from .ui.console import Console, get_console

CERTIFICATE_NOTICE = (
    "This will install an SSL certificate on the project from your local filesystem soon.\n"
    "You should get the cert ready now. It takes about 5 minutes.\n"
    "Continue (y/N)? "
)

# Getting a free Let's Encrypt certificate (about 5 minutes):
#   certbot certonly --agree-tos --renew-by-default --manual --preferred-challenges=dns \
#       -d your-domain-name.net,www.your-domain-name.net
# Add the DNS TXT records, wait 1-2 minutes and confirm. The files land in
# /etc/letsencrypt/live/<domain>/fullchain.pem and privkey.pem; copying them to
# a temporary location first avoids fighting their default permissions.


@dataclass
class RunContext:
    """Everything a step action gets: settings, paths, derived identifiers, tools."""
    settings: Settings
    layout: ProjectLayout
    env: EnvironmentContext
    executor: CommandExecutor
    sequencer: StepSequencer
    console: Console

    def run(self, *args: str, echo: bool = True, check: Optional[bool] = None, cwd=None) -> CommandResult:
        return self.executor.run(list(args), echo=echo, check=check, cwd=cwd)


def _existing_file(sequencer: StepSequencer, prompt: str) -> Path:
    answer = sequencer.ask(prompt).strip()
    path = Path(answer).expanduser()
    if not answer or not path.exists():
        raise PreflightError(f"No file found at {answer}. Aborting.")
    return path


def collect_certificate(sequencer: StepSequencer) -> Tuple[Path, Path]:
    """
    Ask for the SSL certificate and private key before anything is created.

    Raises:
        UserAbort: if the operator does not have a certificate ready
        PreflightError: if either path does not exist
    """
    sequencer.require_confirmation(CERTIFICATE_NOTICE)
    certificate = _existing_file(sequencer, "Please enter the path to the certificate file (.crt or .pem): ")
    private_key = _existing_file(sequencer, "Please enter the path to the key file (.key or .pem): ")
    return certificate, private_key


def run_provisioning(
    settings: Settings,
    layout: ProjectLayout,
    *,
    executor: CommandExecutor,
    reader: Optional[Callable[[str], str]] = None,
    console: Optional[Console] = None,
    steps: Optional[List[ProvisioningStep]] = None,
) -> Dict[int, str]:
    """
    Provision one environment end to end.

    Returns:
        step ordinal -> final state ("executed" for every step on success)

    Raises:
        UserAbort, PreflightError, ResourceLookupError, ExternalCommandFailure
    """
    console = console or get_console()
    if steps is None:
        steps = build_steps()

    sequencer = StepSequencer(len(steps), console=console, reader=reader)
    env = EnvironmentContext()
    env["ProjectID"] = settings.project_id

    certificate, private_key = collect_certificate(sequencer)
    env["CertificatePath"] = str(certificate)
    env["PrivateKeyPath"] = str(private_key)

    console.print_run_started(
        project_id=settings.project_id,
        environment=settings.environment,
        step_count=len(steps),
    )
    ctx = RunContext(
        settings=settings,
        layout=layout,
        env=env,
        executor=executor,
        sequencer=sequencer,
        console=console,
    )
    try:
        states = sequencer.run(steps, ctx)
    finally:
        console.print_results(sequencer.states, sequencer.total)

    console.print_next_steps(settings.project_id, env.get("ExternalIPAddress", "(not reserved)"))
    return states
