"""
JSON Schema for the optional YAML settings file.

This module holds the settings-file schema and turns jsonschema
validation failures into readable messages.
"""

from typing import Any, Dict, List

from jsonschema import Draft7Validator


SETTINGS_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "location": {"type": "string", "minLength": 1},
        "resource_group_name": {"type": "string"},
        "deployment_name": {"type": "string"},
        "dns_label_prefix": {"type": "string"},
        "vm_name": {"type": "string", "minLength": 1},
        "tags": {
            "type": "object",
            "additionalProperties": {"type": "string"}
        },
        "template_path": {"type": "string", "minLength": 1},
        "public_key_path": {"type": "string", "minLength": 1},
        "create_resource_group": {"type": "boolean"}
    }
}


def schema_errors(data: Dict[str, Any], schema: Dict[str, Any] = SETTINGS_SCHEMA) -> List[str]:
    """
    Validate data against a JSON schema and describe every failure.
    
    Args:
        data: Data to validate
        schema: JSON schema to validate against
        
    Returns:
        Human-readable error messages; empty when data is valid
        
    Example:
        >>> schema_errors({"location": 5})
        ["Value at 'location' has wrong type: 5 is not of type 'string'"]
    """
    messages = []
    validator = Draft7Validator(schema)
    
    for e in sorted(validator.iter_errors(data), key=lambda err: list(err.absolute_path)):
        path = " -> ".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"
        
        if e.validator == "additionalProperties":
            messages.append(f"Unknown setting at '{path}': {e.message}")
        elif e.validator == "type":
            messages.append(f"Value at '{path}' has wrong type: {e.message}")
        else:
            messages.append(f"Validation failed at '{path}': {e.message}")
            
    return messages
