"""
Deployment parameter building and validation.

This module turns loaded artifacts and generated names into the
``{"name": {"value": ...}}`` parameter mapping a template expects, checks
the values against the template's parameter declarations with
JSON Schema, and assembles the final deployment request.
"""

import copy
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from .models import DEPLOYMENT_MODE_INCREMENTAL, DeploymentRequest, ParameterValidationError
from ..utils.logger import get_logger, log_operation

# ARM parameter types mapped to JSON Schema types (ARM type names are case-insensitive)
ARM_TYPE_MAP = {
    "string": "string",
    "securestring": "string",
    "int": "integer",
    "bool": "boolean",
    "object": "object",
    "secureobject": "object",
    "array": "array",
}


def parameters_schema(declarations: Dict[str, Any]) -> Dict[str, Any]:
    """
    Derive a JSON schema for parameter values from ARM parameter declarations.

    Args:
        declarations: The template's ``parameters`` section

    Returns:
        Draft 7 JSON schema describing a ``{name: value}`` mapping

    Raises:
        ParameterValidationError: If a declaration has an unknown type
    """
    properties = {}
    required = []

    for name, declaration in declarations.items():
        if not isinstance(declaration, dict):
            raise ParameterValidationError(
                f"Parameter '{name}' declaration must be an object, got {type(declaration).__name__}"
            )
        arm_type = str(declaration.get("type", "")).lower()
        if arm_type not in ARM_TYPE_MAP:
            raise ParameterValidationError(
                f"Parameter '{name}' declares unsupported type '{declaration.get('type')}'"
            )

        prop: Dict[str, Any] = {"type": ARM_TYPE_MAP[arm_type]}
        if "allowedValues" in declaration:
            prop["enum"] = declaration["allowedValues"]
        if "minLength" in declaration:
            prop["minLength" if prop["type"] == "string" else "minItems"] = declaration["minLength"]
        if "maxLength" in declaration:
            prop["maxLength" if prop["type"] == "string" else "maxItems"] = declaration["maxLength"]
        if "minValue" in declaration:
            prop["minimum"] = declaration["minValue"]
        if "maxValue" in declaration:
            prop["maximum"] = declaration["maxValue"]

        properties[name] = prop
        if "defaultValue" not in declaration:
            required.append(name)

    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False
    }


class DeploymentParameterBuilder:
    """
    Builds deployment parameters and requests from loaded artifacts.

    Building is a pure transformation: no disk or network access, and
    the template passed in is never modified.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def build(self, template: Dict[str, Any], public_key: str, vm_name: str,
              dns_label_prefix: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Dict[str, Any]]:
        """
        Build the parameter mapping for ``template``.

        Only parameters the template declares are emitted, each wrapped as
        ``{"value": <v>}``. Declared parameters that have a default and
        were not supplied are left to the template.

        Args:
            template: Parsed template document
            public_key: SSH public key text (``sshKeyData``)
            vm_name: Virtual machine name (``vmName``)
            dns_label_prefix: Public IP DNS label (``dnsLabelPrefix``)
            extra: Additional parameter values by name

        Returns:
            Parameter mapping ready for the deployment request

        Raises:
            ParameterValidationError: If a value violates its declaration
                or a parameter without default is missing

        Example:
            >>> builder = DeploymentParameterBuilder()
            >>> builder.build(template, "ssh-rsa AAAA...", "vm1", "testdnslable42")["vmName"]
            {'value': 'vm1'}
        """
        declarations = template.get("parameters", {})
        supplied = {
            "sshKeyData": public_key,
            "vmName": vm_name,
            "dnsLabelPrefix": dns_label_prefix,
        }
        supplied.update(extra or {})

        values = {name: value for name, value in supplied.items() if name in declarations}
        dropped = sorted(set(supplied) - set(values))
        if dropped:
            self.logger.debug(f"Template does not declare parameters {dropped}; not passing them")

        self.validate(values, declarations)

        return {name: {"value": copy.deepcopy(value)} for name, value in values.items()}

    def validate(self, values: Dict[str, Any], declarations: Dict[str, Any]) -> None:
        """
        Validate parameter values against template declarations.

        Raises:
            ParameterValidationError: With every violation in one message
        """
        validator = Draft7Validator(parameters_schema(declarations))
        errors = sorted(validator.iter_errors(values), key=lambda e: list(e.absolute_path))
        if not errors:
            return

        messages: List[str] = []
        for error in errors:
            if error.validator == "required":
                messages.append(f"Missing required parameter: {error.message}")
            elif error.absolute_path:
                messages.append(f"Parameter '{error.absolute_path[0]}': {error.message}")
            else:
                messages.append(error.message)

        raise ParameterValidationError("; ".join(messages))

    def build_request(self, resource_group_name: str, deployment_name: str,
                      template: Dict[str, Any], parameters: Dict[str, Dict[str, Any]]) -> DeploymentRequest:
        """Attach template and incremental mode to parameters."""
        request = DeploymentRequest(
            resource_group_name=resource_group_name,
            deployment_name=deployment_name,
            template=copy.deepcopy(template),
            parameters=parameters,
            mode=DEPLOYMENT_MODE_INCREMENTAL
        )

        log_operation(
            self.logger, "BUILD_REQUEST",
            f"resource_group={resource_group_name}, deployment={deployment_name}, "
            f"parameters={sorted(parameters)}, mode={request.mode}"
        )

        return request
