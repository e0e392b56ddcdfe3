"""
Unit tests for the TemplateLoader class.

This module tests template parsing, public key reading with home
directory expansion, and the failure modes of both.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from arm_deployer.deployment.models import KeyLoadError, TemplateLoadError
from arm_deployer.deployment.template_loader import DEFAULT_TEMPLATE_PATH, TemplateLoader


class TestTemplateLoader(unittest.TestCase):
    """Test cases for TemplateLoader."""

    def setUp(self):
        """Create a template and key in a temporary directory."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

        self.template = {
            "$schema": "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#",
            "contentVersion": "1.0.0.0",
            "parameters": {
                "sshKeyData": {"type": "string"},
                "vmName": {"type": "string"}
            },
            "resources": []
        }
        self.template_file = self.temp_path / "template.json"
        self.template_file.write_text(json.dumps(self.template), encoding="utf-8")

        self.key_file = self.temp_path / "id_rsa.pub"
        self.key_file.write_text("ssh-rsa AAAAB3NzaC1yc2E test@example\n", encoding="utf-8")

        self.loader = TemplateLoader()

    def tearDown(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    def test_load(self):
        artifacts = self.loader.load(self.template_file, self.key_file)

        self.assertEqual(artifacts.template, self.template)
        self.assertEqual(artifacts.public_key, "ssh-rsa AAAAB3NzaC1yc2E test@example")
        self.assertEqual(artifacts.template_path, self.template_file)
        self.assertEqual(artifacts.public_key_path, self.key_file.resolve())
        self.assertEqual(sorted(artifacts.declared_parameters), ["sshKeyData", "vmName"])

    def test_home_directory_expansion(self):
        """A leading ~ in the key path resolves against the home directory."""
        ssh_dir = self.temp_path / ".ssh"
        ssh_dir.mkdir()
        (ssh_dir / "id_rsa.pub").write_text("ssh-rsa AAAA home@example", encoding="utf-8")

        with patch.dict(os.environ, {"HOME": str(self.temp_path)}):
            artifacts = self.loader.load(self.template_file, "~/.ssh/id_rsa.pub")

        self.assertEqual(artifacts.public_key, "ssh-rsa AAAA home@example")
        self.assertTrue(artifacts.public_key_path.is_absolute())

    def test_malformed_template(self):
        self.template_file.write_text('{"parameters": {"vmName": ', encoding="utf-8")

        with self.assertRaises(TemplateLoadError) as context:
            self.loader.load(self.template_file, self.key_file)

        self.assertIsInstance(context.exception.cause, json.JSONDecodeError)

    def test_missing_template(self):
        with self.assertRaises(TemplateLoadError) as context:
            self.loader.load(self.temp_path / "missing.json", self.key_file)

        self.assertIsInstance(context.exception.cause, FileNotFoundError)

    def test_template_must_be_object(self):
        self.template_file.write_text("[1, 2, 3]", encoding="utf-8")

        with self.assertRaises(TemplateLoadError):
            self.loader.load(self.template_file, self.key_file)

    def test_parameters_section_must_be_object(self):
        self.template_file.write_text('{"parameters": ["vmName"]}', encoding="utf-8")

        with self.assertRaises(TemplateLoadError):
            self.loader.load(self.template_file, self.key_file)

    def test_parameter_declarations_must_be_objects(self):
        self.template_file.write_text('{"parameters": {"sshKeyData": "string"}}', encoding="utf-8")

        with self.assertRaises(TemplateLoadError) as context:
            self.loader.load(self.template_file, self.key_file)

        self.assertIn("sshKeyData", str(context.exception))

    def test_missing_public_key(self):
        with self.assertRaises(KeyLoadError) as context:
            self.loader.load(self.template_file, self.temp_path / "nope.pub")

        self.assertIsInstance(context.exception.cause, FileNotFoundError)

    def test_empty_public_key(self):
        self.key_file.write_text("\n", encoding="utf-8")

        with self.assertRaises(KeyLoadError):
            self.loader.load(self.template_file, self.key_file)

    def test_bad_template_fails_before_key_is_read(self):
        """No partial result: the first failure ends the load."""
        self.template_file.write_text("not json", encoding="utf-8")

        with patch.object(self.loader, "load_public_key") as load_public_key:
            with self.assertRaises(TemplateLoadError):
                self.loader.load(self.template_file, self.key_file)

        load_public_key.assert_not_called()

    def test_bundled_template(self):
        """The bundled template declares the parameters the builder supplies."""
        artifacts = self.loader.load(DEFAULT_TEMPLATE_PATH, self.key_file)

        declared = artifacts.declared_parameters
        for name in ("sshKeyData", "vmName", "dnsLabelPrefix"):
            self.assertEqual(declared[name]["type"], "string")


if __name__ == '__main__':
    unittest.main()
