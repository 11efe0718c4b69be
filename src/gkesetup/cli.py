# cli.py
from __future__ import annotations

import sys

import click

from gkesetup.config import ProjectLayout, load_settings
from gkesetup.errors import (
    ExternalCommandFailure,
    PreflightError,
    ProvisioningError,
    ResourceLookupError,
    UserAbort,
)
from gkesetup.executor import CommandExecutor, require_tools
from gkesetup.runner import run_provisioning
from gkesetup.ui.console import Console, set_console

ERROR_TITLES = {
    PreflightError: "Preflight check failed",
    ResourceLookupError: "Resource lookup failed",
}


def _error_title(exc: ProvisioningError) -> str:
    for cls, title in ERROR_TITLES.items():
        if isinstance(exc, cls):
            return title
    return "Provisioning failed"


@click.command()
@click.argument("environment")
@click.option(
    "--gcp-dir",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="The project's gcp/ directory (holds iam-policy.json; k8s/ must be its sibling)",
)
@click.option(
    "--strict/--no-strict",
    default=False,
    show_default=True,
    help="Stop on the first gcloud/gsutil/kubectl call that exits non-zero",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show executed commands and stack traces)",
)
def cli(environment, gcp_dir, strict, debug):
    """Set up a GKE environment (and its GCP project) named ENVIRONMENT, e.g. qa or prod."""
    console = Console(debug=debug)
    set_console(console)

    try:
        layout = ProjectLayout.from_gcp_dir(gcp_dir)

        settings, warnings = load_settings(environment)
        console.print_settings(settings.describe())
        for warning in warnings:
            console.print_warning(warning)

        require_tools()

        executor = CommandExecutor(strict=strict, console=console)
        run_provisioning(settings, layout, executor=executor, console=console)

    except UserAbort:
        console.print_info("Aborting")
        sys.exit(0)
    except ProvisioningError as e:
        console.print_error(_error_title(e), e.message, suggestion=e.hint)
        sys.exit(1)
    except ExternalCommandFailure as e:
        console.print_error(
            "Command failed",
            str(e),
            suggestion="Re-run without --strict to continue past failing commands.",
        )
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except click.Abort:
        # stdin closed at a prompt; click reports it
        raise
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


if __name__ == "__main__":
    cli()
