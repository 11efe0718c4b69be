# steps/project.py
# Project, service account, IAM and API setup.
from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import ENABLED_APIS, IAM_OWNERS_TOKEN, IAM_SERVICE_ACCOUNT_TOKEN
from ..templates import TemplateMutation

if TYPE_CHECKING:
    from ..runner import RunContext


def create_project(ctx: RunContext) -> None:
    project_id = ctx.env["ProjectID"]
    ctx.run(
        "gcloud", "projects", "create", project_id,
        f"--name={project_id}",
        f"--organization={ctx.settings.organization_id}",
    )


def set_default_project(ctx: RunContext) -> None:
    # gcloud/gsutil commands that take no project flag fall back to this
    ctx.run("gcloud", "config", "set", "project", ctx.env["ProjectID"])


def create_service_account(ctx: RunContext) -> None:
    project_id = ctx.env["ProjectID"]
    ctx.run(
        "gcloud", "iam", "--project", project_id,
        "service-accounts", "create", project_id,
        "--display-name", f"{project_id} service account",
    )
    ctx.env["ServiceAccountEmail"] = ctx.settings.service_account
    ctx.console.print_info("\nCreated service account:")
    ctx.run(
        "gcloud", "iam", "--project", project_id,
        "service-accounts", "describe", ctx.env["ServiceAccountEmail"],
    )


def apply_iam_policy(ctx: RunContext) -> None:
    """Fill iam-policy.json, show it, and apply it once the operator agrees."""
    substitutions = [
        (IAM_SERVICE_ACCOUNT_TOKEN, ctx.env["ServiceAccountEmail"]),
        (IAM_OWNERS_TOKEN, ctx.settings.owners),
    ]
    with TemplateMutation(ctx.layout.iam_policy, substitutions) as policy:
        ctx.console.print_info("Setting the following IAM policy\n")
        ctx.console.print_info(policy.read_text(encoding="utf-8"))
        ctx.sequencer.require_confirmation("\nContinue (Y/n)? ")
        ctx.run("gcloud", "projects", "set-iam-policy", ctx.env["ProjectID"], str(policy))


def link_billing(ctx: RunContext) -> None:
    # Billing is needed before an SSL certificate can be installed
    ctx.run(
        "gcloud", "alpha", "billing", "projects", "link", ctx.env["ProjectID"],
        f"--billing-account={ctx.settings.billing_account_id}",
    )


def enable_apis(ctx: RunContext) -> None:
    for api in ENABLED_APIS:
        ctx.run("gcloud", "services", "--project", ctx.env["ProjectID"], "enable", api)
