"""
Run settings for the deployment workflow.

This module builds the immutable settings a run is configured with. The
service principal identity comes from the process environment; everything
else has defaults that an optional YAML settings file and explicit
overrides (usually CLI options) can replace, in that order.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .schema import schema_errors
from .validator import name_errors
from ..deployment.identifiers import IdentifierGenerator
from ..deployment.models import ConfigurationError
from ..deployment.template_loader import DEFAULT_PUBLIC_KEY_PATH, DEFAULT_TEMPLATE_PATH
from ..utils.helpers import deep_merge, safe_load_yaml
from ..utils.logger import get_logger, log_operation, log_error


REQUIRED_ENVIRONMENT_VARIABLES = ("CLIENT_ID", "DOMAIN", "APPLICATION_SECRET", "AZURE_SUBSCRIPTION_ID")

RESOURCE_GROUP_PREFIX = "testrg"
DEPLOYMENT_PREFIX = "testdeployment"
DNS_LABEL_PREFIX = "testdnslable"

SETTINGS_FIELDS = (
    "resource_group_name", "deployment_name", "dns_label_prefix", "location", "vm_name",
    "tags", "template_path", "public_key_path", "create_resource_group",
)

# Relative values in a settings file are taken from the file's directory
FILE_PATH_SETTINGS = ("template_path", "public_key_path")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "location": "westus",
    "vm_name": "azure-deployment-sample-vm",
    "tags": {"sampletag": "sampleValue"},
    "template_path": str(DEFAULT_TEMPLATE_PATH),
    "public_key_path": DEFAULT_PUBLIC_KEY_PATH,
    "create_resource_group": True,
}

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentityCredentials:
    """Service principal identity and the subscription it deploys into."""
    client_id: str
    tenant_domain: str
    secret: str = field(repr=False)
    subscription_id: str

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> 'IdentityCredentials':
        """
        Read the identity from environment variables.

        Raises:
            ConfigurationError: Listing every missing variable
        """
        environ = os.environ if environ is None else environ
        missing = [name for name in REQUIRED_ENVIRONMENT_VARIABLES if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                f"please set/export the following environment variables: {', '.join(missing)}"
            )

        return cls(
            client_id=environ["CLIENT_ID"],
            tenant_domain=environ["DOMAIN"],
            secret=environ["APPLICATION_SECRET"],
            subscription_id=environ["AZURE_SUBSCRIPTION_ID"]
        )


@dataclass(frozen=True)
class DeploymentSettings:
    """Everything one workflow run needs, fixed at startup."""
    identity: IdentityCredentials
    resource_group_name: str
    deployment_name: str
    dns_label_prefix: str
    location: str = "westus"
    vm_name: str = "azure-deployment-sample-vm"
    tags: Dict[str, str] = field(default_factory=dict)
    template_path: Path = DEFAULT_TEMPLATE_PATH
    public_key_path: str = DEFAULT_PUBLIC_KEY_PATH
    create_resource_group: bool = True

    @property
    def cleanup_command(self) -> str:
        return cleanup_command(self.resource_group_name, self.deployment_name)


def cleanup_command(resource_group_name: str, deployment_name: Optional[str] = None) -> str:
    """Command line an operator runs to remove what a run created."""
    command = f"arm-deploy cleanup --resource-group {resource_group_name}"
    if deployment_name:
        command += f" --deployment {deployment_name}"
    return command


def load_settings_file(config_file: Union[str, Path]) -> Dict[str, Any]:
    """
    Load and validate a YAML settings file.

    Relative ``template_path`` and ``public_key_path`` values are resolved
    against the directory holding the file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    path = Path(config_file)
    try:
        data = safe_load_yaml(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        log_error(logger, "LOAD_SETTINGS", e, f"path={path}")
        raise ConfigurationError(f"Cannot load settings file {path}: {e}") from e

    errors = schema_errors(data)
    if errors:
        raise ConfigurationError(f"Invalid settings file {path}: {'; '.join(errors)}")

    return _resolve_file_paths(data, path.parent)


def _resolve_file_paths(data: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    """Anchor relative file paths in a settings file to the file's directory."""
    resolved = dict(data)
    for key in FILE_PATH_SETTINGS:
        value = resolved.get(key)
        if value and not str(value).startswith("~") and not Path(value).is_absolute():
            resolved[key] = str(base_dir / value)
    return resolved


def load_settings(environ: Optional[Mapping[str, str]] = None,
                  config_file: Optional[Union[str, Path]] = None,
                  generator: Optional[IdentifierGenerator] = None,
                  **overrides: Any) -> DeploymentSettings:
    """
    Build run settings from the environment, a settings file and overrides.

    The identity is checked before anything else is read, so a missing
    variable fails the run before any file or network access.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)
        config_file: Optional YAML settings file
        generator: Identifier generator for names left unset
        **overrides: Setting values that win over file and defaults;
            ``None`` values are ignored

    Returns:
        Immutable DeploymentSettings

    Raises:
        ConfigurationError: If identity, settings file or names are invalid

    Example:
        >>> settings = load_settings(os.environ, resource_group_name="testrg4811")
        >>> settings.cleanup_command
        'arm-deploy cleanup --resource-group testrg4811 --deployment testdeployment317'
    """
    identity = IdentityCredentials.from_environment(environ)

    values = dict(DEFAULT_SETTINGS)
    if config_file:
        values = deep_merge(values, load_settings_file(config_file))
    values = deep_merge(values, {key: value for key, value in overrides.items() if value is not None})

    unknown = sorted(set(values) - set(SETTINGS_FIELDS))
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")

    generator = generator or IdentifierGenerator()
    for key, prefix in (("resource_group_name", RESOURCE_GROUP_PREFIX),
                        ("deployment_name", DEPLOYMENT_PREFIX),
                        ("dns_label_prefix", DNS_LABEL_PREFIX)):
        if values.get(key):
            generator.reserve(values[key])
        else:
            values[key] = generator.generate(prefix)

    errors = name_errors(values["resource_group_name"], values["deployment_name"], values["dns_label_prefix"])
    if errors:
        raise ConfigurationError("; ".join(errors))

    settings = DeploymentSettings(
        identity=identity,
        resource_group_name=values["resource_group_name"],
        deployment_name=values["deployment_name"],
        dns_label_prefix=values["dns_label_prefix"],
        location=values["location"],
        vm_name=values["vm_name"],
        tags=dict(values["tags"]),
        template_path=Path(values["template_path"]),
        public_key_path=str(values["public_key_path"]),
        create_resource_group=bool(values["create_resource_group"])
    )

    log_operation(
        logger, "LOAD_SETTINGS",
        f"resource_group={settings.resource_group_name}, deployment={settings.deployment_name}, "
        f"location={settings.location}, create_resource_group={settings.create_resource_group}"
    )

    return settings

