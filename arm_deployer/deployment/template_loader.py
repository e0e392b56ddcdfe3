"""
Template and public key loading for deployments.

This module reads the ARM template and the SSH public key from local
storage. Both must load for the result to be usable; any read or parse
failure is fatal and is raised before a deployment request is built.
"""

import json
from pathlib import Path
from typing import Union

from .models import KeyLoadError, LoadedArtifacts, TemplateLoadError
from ..utils.helpers import expand_path, validate_file_exists
from ..utils.logger import get_logger, log_operation, log_error


DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / "template.json"
DEFAULT_PUBLIC_KEY_PATH = "~/.ssh/id_rsa.pub"


class TemplateLoader:
    """
    Loads a declarative template and the public key it is deployed with.

    The template is parsed into a dictionary and returned as-is; the
    loader never rewrites template content.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def load(self, template_path: Union[str, Path],
             public_key_path: Union[str, Path] = DEFAULT_PUBLIC_KEY_PATH) -> LoadedArtifacts:
        """
        Load template and public key.

        Args:
            template_path: Path to the JSON template
            public_key_path: Path to the public key; ``~`` is expanded

        Returns:
            LoadedArtifacts with the parsed template and key text

        Raises:
            TemplateLoadError: If the template cannot be read or parsed
            KeyLoadError: If the public key cannot be read

        Example:
            >>> loader = TemplateLoader()
            >>> artifacts = loader.load(DEFAULT_TEMPLATE_PATH, "~/.ssh/id_rsa.pub")
            >>> sorted(artifacts.declared_parameters)
            ['adminUsername', 'dnsLabelPrefix', 'sshKeyData', 'vmName', 'vmSize']
        """
        template_file = Path(template_path)
        template = self.load_template(template_file)
        key_file, public_key = self.load_public_key(public_key_path)

        log_operation(
            self.logger, "LOAD_TEMPLATE",
            f"template={template_file}, public_key={key_file}, "
            f"parameters={sorted(template.get('parameters', {}))}"
        )

        return LoadedArtifacts(
            template=template,
            public_key=public_key,
            template_path=template_file,
            public_key_path=key_file
        )

    def load_template(self, template_path: Path) -> dict:
        """Read and parse the template file."""
        try:
            with open(template_path, 'r', encoding='utf-8') as file:
                template = json.load(file)
        except (OSError, UnicodeDecodeError) as e:
            log_error(self.logger, "LOAD_TEMPLATE", e, f"path={template_path}")
            raise TemplateLoadError(f"Cannot read template file {template_path}: {e}") from e
        except json.JSONDecodeError as e:
            log_error(self.logger, "LOAD_TEMPLATE", e, f"path={template_path}")
            raise TemplateLoadError(f"Invalid JSON in template file {template_path}: {e}") from e

        if not isinstance(template, dict):
            raise TemplateLoadError(
                f"Template must contain a JSON object, got {type(template).__name__}: {template_path}"
            )

        if not isinstance(template.get("parameters", {}), dict):
            raise TemplateLoadError(f"Template 'parameters' section must be an object: {template_path}")

        malformed = sorted(
            name for name, declaration in template.get("parameters", {}).items()
            if not isinstance(declaration, dict)
        )
        if malformed:
            raise TemplateLoadError(
                f"Template parameter declarations must be objects: {', '.join(malformed)} ({template_path})"
            )

        return template

    def load_public_key(self, public_key_path: Union[str, Path]):
        """Read the public key, returning the resolved path and key text."""
        try:
            key_file = expand_path(public_key_path)
            validate_file_exists(key_file, "Public key file")
            with open(key_file, 'r', encoding='utf-8') as file:
                public_key = file.read().strip()
        except (OSError, ValueError) as e:
            log_error(self.logger, "LOAD_PUBLIC_KEY", e, f"path={public_key_path}")
            raise KeyLoadError(f"Cannot read public key {public_key_path}: {e}") from e

        if not public_key:
            raise KeyLoadError(f"Public key file is empty: {key_file}")

        return key_file, public_key
