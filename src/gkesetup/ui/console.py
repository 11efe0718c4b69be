"""Console output formatting utilities for gkesetup."""

from __future__ import annotations

import shlex
import sys
from typing import Optional, Sequence


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show executed commands and stack traces
        """
        self.debug = debug

    def print_run_started(
        self,
        project_id: str,
        environment: str,
        step_count: int,
    ) -> None:
        """Print run start information."""
        print("\nPROVISIONING STARTED")
        print(f"Environment: {environment}")
        print(f"Project: {project_id}")
        print(f"Steps: {step_count}")
        print()

    def print_settings(self, settings: dict[str, tuple[str, str]]) -> None:
        """
        Print the configuration values a run was started with.

        Args:
            settings: Variable name -> (value, explanation)
        """
        print("Set project vars:")
        for name, (value, explanation) in settings.items():
            print(f"{name}: {value}")
            print(f"  {explanation}")
        print()

    def print_step(self, number: int, total: int, description: str) -> None:
        """Print step progress line, e.g. '3/27. Enabling billing'."""
        print(f"\n{number}/{total}. {description}")

    def print_command(self, args: Sequence[str]) -> None:
        """Print an external command before it runs (debug mode only)."""
        if self.debug:
            print(f"+ {shlex.join(args)}", file=sys.stderr)

    def print_output(self, text: str) -> None:
        """Echo captured output of an external command."""
        if text:
            print(text.rstrip("\n"))

    def print_warning(self, message: str) -> None:
        """Print a warning that does not stop the run."""
        print(f"WARNING: {message}", file=sys.stderr)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_results(self, states: dict[int, str], total: int) -> None:
        """Print the per-step outcome of a run."""
        executed = sum(1 for s in states.values() if s == "executed")
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        print(f"  Executed: {executed}/{total}")
        for number, state in states.items():
            if state != "executed":
                print(f"  Step {number}: {state.upper()}")

    def print_next_steps(self, project_id: str, external_ip: str) -> None:
        """Print the manual follow-ups that cannot be scripted."""
        print(f"\nDone creating project {project_id}!")
        print("Next steps, not done by this tool, are:")
        print("1. Set the health check on the instance group. This can't be scripted yet.")
        print(f"2. Point the domain to the external IP {external_ip}")
        print("3. Select a region for DataStore at https://console.cloud.google.com/datastore/setup")
        print("4. Encrypt and upload app secrets (encrypt_and_upload_app_secrets.sh)")
        print("5. Upload the latest static content to the bucket with build_and_deploy_static_content.sh")
        print("6. Upload the latest docker image to the GKE cluster with build_and_upload_docker_image.sh")
        print("   (This depends on secrets from step 4 and index.html generated in step 5).")
        print("7. Deploy the image you just loaded in Kubernetes Engine -> Workloads -> portability-api")
        print("   -> Actions -> Rolling Update")
        print("8. (Optional) Enable IAP to whitelist only select users to view the app")

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
