# firewall.py
from __future__ import annotations

from typing import List, Sequence

from .errors import NoMatchingRuleError
from .model import FirewallRule
from .tabular import parse
from .ui.console import get_console

# `gcloud compute firewall-rules list` columns:
#   NAME  NETWORK  DIRECTION  PRIORITY  ALLOW  DENY  DISABLED
NAME_COLUMN = 0
ALLOW_COLUMN = 4


def parse_firewall_rules(raw_text: str) -> List[FirewallRule]:
    """
    Read `gcloud compute firewall-rules list` output into FirewallRule records.

    Positional like the rest of the table handling: token 0 is the name,
    token 4 the comma-joined allow list. The list view does not show source
    ranges, so they come back empty.
    """
    rules: List[FirewallRule] = []
    for row in parse(raw_text):
        if row[NAME_COLUMN] == "NAME":
            continue
        allowed = row[ALLOW_COLUMN].split(",") if len(row) > ALLOW_COLUMN else []
        rules.append(FirewallRule(name=row[NAME_COLUMN], allowed=allowed))
    return rules


def find_rule(rules: Sequence[FirewallRule], suffix: str) -> FirewallRule:
    """First rule whose name ends with suffix; extra matches are warned about."""
    matches = [rule for rule in rules if rule.name.endswith(suffix)]
    if len(matches) > 1:
        skipped = ", ".join(rule.name for rule in matches[1:])
        get_console().print_warning(
            f"{len(matches)} firewall rules end in '{suffix}'; only {matches[0].name} is updated. "
            f"Not updated: {skipped}"
        )
    if matches:
        return matches[0]
    names = ", ".join(r.name for r in rules) or "(none)"
    raise NoMatchingRuleError(
        f"No firewall rule ending in '{suffix}'. Rules found: {names}",
        hint="GKE normally creates a '<cluster>-vms' rule when the cluster is created.",
    )


def merge(
    rules: Sequence[FirewallRule],
    suffix: str,
    new_allowed: Sequence[str],
    new_source_ranges: Sequence[str],
) -> FirewallRule:
    """
    Widen the rule whose name ends with `suffix`.

    Existing entries come first, new ones are appended. Nothing is
    deduplicated: merging the same entries twice lists them twice.

    Raises:
        NoMatchingRuleError: if no rule name ends with suffix
    """
    rule = find_rule(rules, suffix)
    return FirewallRule(
        name=rule.name,
        allowed=list(rule.allowed) + list(new_allowed),
        source_ranges=list(rule.source_ranges) + list(new_source_ranges),
    )


def update_command(rule: FirewallRule) -> List[str]:
    """argv that writes `rule` back with gcloud."""
    return [
        "gcloud", "compute", "firewall-rules", "update", rule.name,
        f"--allow={','.join(rule.allowed)}",
        f"--source-ranges={','.join(rule.source_ranges)}",
    ]
