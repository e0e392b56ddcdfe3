"""
Unit tests for deployment parameter building and validation.
"""

import copy
import json
import unittest

from arm_deployer.deployment.models import ParameterValidationError
from arm_deployer.deployment.parameters import DeploymentParameterBuilder, parameters_schema
from arm_deployer.deployment.template_loader import DEFAULT_TEMPLATE_PATH


PUBLIC_KEY = "ssh-rsa AAAAB3NzaC1yc2E test@example"

TEMPLATE = {
    "contentVersion": "1.0.0.0",
    "parameters": {
        "sshKeyData": {"type": "string"},
        "vmName": {"type": "string", "maxLength": 64},
        "dnsLabelPrefix": {"type": "string", "minLength": 3}
    },
    "resources": []
}


class TestDeploymentParameterBuilder(unittest.TestCase):
    """Test cases for DeploymentParameterBuilder."""

    def setUp(self):
        self.builder = DeploymentParameterBuilder()

    def test_build_wraps_values(self):
        parameters = self.builder.build(TEMPLATE, PUBLIC_KEY, "vm1", "testdnslable42")

        self.assertEqual(parameters, {
            "sshKeyData": {"value": PUBLIC_KEY},
            "vmName": {"value": "vm1"},
            "dnsLabelPrefix": {"value": "testdnslable42"}
        })

    def test_build_emits_exactly_declared_parameters(self):
        """Values the template does not declare are not passed."""
        template = {"parameters": {"sshKeyData": {"type": "string"}, "vmName": {"type": "string"}}}

        parameters = self.builder.build(template, PUBLIC_KEY, "vm1", "testdnslable42")

        self.assertEqual(set(parameters), set(template["parameters"]))
        for value in parameters.values():
            self.assertEqual(list(value), ["value"])

    def test_defaulted_parameters_left_to_template(self):
        template = copy.deepcopy(TEMPLATE)
        template["parameters"]["adminUsername"] = {"type": "string", "defaultValue": "azureuser"}

        parameters = self.builder.build(template, PUBLIC_KEY, "vm1", "testdnslable42")

        self.assertNotIn("adminUsername", parameters)

    def test_extra_values(self):
        template = copy.deepcopy(TEMPLATE)
        template["parameters"]["vmSize"] = {
            "type": "string", "defaultValue": "Standard_B1s",
            "allowedValues": ["Standard_B1s", "Standard_B2s"]
        }

        parameters = self.builder.build(
            template, PUBLIC_KEY, "vm1", "testdnslable42", extra={"vmSize": "Standard_B2s"}
        )

        self.assertEqual(parameters["vmSize"], {"value": "Standard_B2s"})

    def test_disallowed_value(self):
        template = copy.deepcopy(TEMPLATE)
        template["parameters"]["vmSize"] = {"type": "string", "allowedValues": ["Standard_B1s"]}

        with self.assertRaises(ParameterValidationError) as context:
            self.builder.build(template, PUBLIC_KEY, "vm1", "testdnslable42", extra={"vmSize": "huge"})

        self.assertIn("vmSize", str(context.exception))

    def test_missing_required_parameter(self):
        template = copy.deepcopy(TEMPLATE)
        template["parameters"]["adminPassword"] = {"type": "securestring"}

        with self.assertRaises(ParameterValidationError) as context:
            self.builder.build(template, PUBLIC_KEY, "vm1", "testdnslable42")

        self.assertIn("adminPassword", str(context.exception))

    def test_length_violation(self):
        with self.assertRaises(ParameterValidationError) as context:
            self.builder.build(TEMPLATE, PUBLIC_KEY, "v" * 65, "ab")

        message = str(context.exception)
        self.assertIn("vmName", message)
        self.assertIn("dnsLabelPrefix", message)

    def test_unsupported_parameter_type(self):
        template = {"parameters": {"vmName": {"type": "datetime"}}}

        with self.assertRaises(ParameterValidationError):
            self.builder.build(template, PUBLIC_KEY, "vm1", "testdnslable42")

    def test_parameter_declaration_must_be_object(self):
        template = {"parameters": {"sshKeyData": "string"}}

        with self.assertRaises(ParameterValidationError) as context:
            self.builder.build(template, PUBLIC_KEY, "vm1", "testdnslable42")

        self.assertIn("sshKeyData", str(context.exception))

    def test_template_not_mutated(self):
        template = copy.deepcopy(TEMPLATE)

        parameters = self.builder.build(template, PUBLIC_KEY, "vm1", "testdnslable42")
        request = self.builder.build_request("testrg4811", "testdeployment42", template, parameters)
        request.template["resources"].append({"type": "Microsoft.Network/publicIPAddresses"})

        self.assertEqual(template, TEMPLATE)

    def test_request_body(self):
        parameters = self.builder.build(TEMPLATE, PUBLIC_KEY, "vm1", "testdnslable42")

        request = self.builder.build_request("testrg4811", "testdeployment42", TEMPLATE, parameters)
        body = request.to_body()

        self.assertEqual(request.mode, "Incremental")
        self.assertEqual(body, {
            "properties": {
                "template": TEMPLATE,
                "parameters": parameters,
                "mode": "Incremental"
            }
        })

    def test_bundled_template(self):
        with open(DEFAULT_TEMPLATE_PATH, 'r', encoding='utf-8') as file:
            template = json.load(file)

        parameters = self.builder.build(template, PUBLIC_KEY, "azure-deployment-sample-vm", "testdnslable42")

        self.assertEqual(sorted(parameters), ["dnsLabelPrefix", "sshKeyData", "vmName"])


class TestParametersSchema(unittest.TestCase):
    """Test cases for parameters_schema."""

    def test_type_mapping(self):
        schema = parameters_schema({
            "count": {"type": "int", "minValue": 1, "maxValue": 3},
            "enabled": {"type": "Bool", "defaultValue": True},
            "zones": {"type": "array", "maxLength": 2},
            "settings": {"type": "secureObject"}
        })

        self.assertEqual(schema["properties"]["count"], {"type": "integer", "minimum": 1, "maximum": 3})
        self.assertEqual(schema["properties"]["enabled"], {"type": "boolean"})
        self.assertEqual(schema["properties"]["zones"], {"type": "array", "maxItems": 2})
        self.assertEqual(schema["properties"]["settings"], {"type": "object"})
        self.assertEqual(sorted(schema["required"]), ["count", "settings", "zones"])


if __name__ == '__main__':
    unittest.main()
