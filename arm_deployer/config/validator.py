"""
Azure naming rules for generated and configured names.
"""

import re
from typing import List, Optional

RESOURCE_GROUP_NAME = re.compile(r"^[-\w.()]{1,90}$")
DEPLOYMENT_NAME = re.compile(r"^[-\w.()]{1,64}$")
DNS_LABEL = re.compile(r"^[a-z][a-z0-9-]{1,61}[a-z0-9]$")


def validate_resource_group_name(name: str) -> Optional[str]:
    """Return an error message when ``name`` is not a valid resource group name."""
    if not RESOURCE_GROUP_NAME.match(name or "") or name.endswith("."):
        return (f"Invalid resource group name '{name}': use 1-90 letters, digits, "
                f"'_', '-', '.', '(' or ')' and do not end with '.'")
    return None


def validate_deployment_name(name: str) -> Optional[str]:
    if not DEPLOYMENT_NAME.match(name or ""):
        return (f"Invalid deployment name '{name}': use 1-64 letters, digits, "
                f"'_', '-', '.', '(' or ')'")
    return None


def validate_dns_label(label: str) -> Optional[str]:
    if not DNS_LABEL.match(label or ""):
        return (f"Invalid DNS label prefix '{label}': use 3-63 lowercase letters, digits "
                f"or '-', starting with a letter and not ending with '-'")
    return None


def name_errors(resource_group_name: str, deployment_name: str, dns_label_prefix: str) -> List[str]:
    """Validate all generated/configured names at once."""
    checks = [
        validate_resource_group_name(resource_group_name),
        validate_deployment_name(deployment_name),
        validate_dns_label(dns_label_prefix),
    ]
    return [message for message in checks if message]
