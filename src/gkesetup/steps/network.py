# steps/network.py
# Load balancer frontend, external IP and the VM firewall rule.
from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from ..config import (
    HEALTH_CHECK_PORT,
    HEALTH_CHECKER_IP_RANGES,
    LB_EXTERNAL_IP_NAME,
    LB_FORWARDING_RULE_NAME,
    LB_HTTPS_PROXY_NAME,
    LB_IP_RANGE,
    LB_NAME,
    NETWORK_IP_RANGE,
    NODE_PORT,
    SSL_CERT_NAME,
    STATIC_BUCKET_NAME,
    VMS_FIREWALL_SUFFIX,
)
from ..errors import EmptyOutputError
from ..firewall import merge, parse_firewall_rules, update_command
from ..tabular import resolve_external_ip

if TYPE_CHECKING:
    from ..runner import RunContext


def create_url_map(ctx: RunContext) -> None:
    backend = ctx.env["BackendServiceName"]
    ctx.run("gcloud", "compute", "url-maps", "create", LB_NAME, "--default-service", backend)
    ctx.run(
        "gcloud", "compute", "url-maps", "add-path-matcher", LB_NAME,
        "--default-service", backend,
        "--path-matcher-name", "static-bucket-mapping",
        "--backend-bucket-path-rules", f"/static/*={STATIC_BUCKET_NAME}",
    )


def reserve_external_ip(ctx: RunContext) -> None:
    ctx.run("gcloud", "compute", "addresses", "create", LB_EXTERNAL_IP_NAME, "--global")
    addresses = ctx.run("gcloud", "compute", "addresses", "list", echo=False)
    try:
        address = resolve_external_ip(addresses.output)
    except EmptyOutputError:
        raise EmptyOutputError("Could not reserve external IP") from None
    ctx.env["ExternalIPAddress"] = address
    ctx.console.print_info(f"\nReserved external IP address: {address}")


def create_https_proxy(ctx: RunContext) -> None:
    ctx.run(
        "gcloud", "compute", "target-https-proxies", "create", LB_HTTPS_PROXY_NAME,
        f"--url-map={LB_NAME}", f"--ssl-certificates={SSL_CERT_NAME}",
    )


def create_forwarding_rule(ctx: RunContext) -> None:
    ctx.run(
        "gcloud", "compute", "forwarding-rules", "create", LB_FORWARDING_RULE_NAME,
        "--address", ctx.env["ExternalIPAddress"],
        "--ip-protocol", "TCP", "--ports=443", "--global",
        "--target-https-proxy", LB_HTTPS_PROXY_NAME,
    )


def open_vm_firewall(ctx: RunContext) -> None:
    """
    Let the load balancer and health checkers reach the cluster VMs.

    GKE tags the VMs and creates a rule ending in "-vms" for them; that rule
    gets the node/health-check ports and the checker/LB source ranges added.
    """
    listing = ctx.run("gcloud", "compute", "firewall-rules", "list", echo=False)
    try:
        rules = parse_firewall_rules(listing.output)
    except EmptyOutputError:
        rules = []

    updated = merge(
        rules,
        VMS_FIREWALL_SUFFIX,
        [f"tcp:{HEALTH_CHECK_PORT}", f"tcp:{NODE_PORT}"],
        [NETWORK_IP_RANGE, *HEALTH_CHECKER_IP_RANGES, LB_IP_RANGE],
    )
    ctx.console.print_info(f"Found vms firewall rule: {updated.name}")
    cmd = update_command(updated)
    ctx.console.print_info(shlex.join(cmd))
    ctx.executor.run(cmd)


def run_postprocess_hook(ctx: RunContext) -> None:
    script = ctx.layout.postprocess_script
    if not script.exists():
        return
    ctx.console.print_info(f"Found {script.name}. Running it...")
    ctx.run(str(script), cwd=ctx.layout.gcp_dir)
    ctx.console.print_info("Done")
