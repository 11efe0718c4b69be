from .model import EnvironmentContext, FirewallRule, ProvisioningStep, CommandResult
from .executor import CommandExecutor, require_tools
from .sequencer import StepSequencer
from .tabular import parse, tokenize, resolve, resolve_instance_group_name, resolve_external_ip
from .templates import TemplateMutation, with_mutation
from .firewall import merge, parse_firewall_rules
from .runner import run_provisioning

__all__ = [
    "EnvironmentContext", "FirewallRule", "ProvisioningStep", "CommandResult",
    "CommandExecutor", "require_tools", "StepSequencer",
    "parse", "tokenize", "resolve", "resolve_instance_group_name", "resolve_external_ip",
    "TemplateMutation", "with_mutation", "merge", "parse_firewall_rules", "run_provisioning",
]
