"""
ARM template deployment package.

This package provides the workflow data models and exceptions, name
generation, template loading and parameter building. The orchestrator
and the Azure SDK collaborators live in ``orchestrator`` and
``azure_client`` and are imported from there.
"""

from .identifiers import IdentifierGenerator, generate_identifier
from .models import (
    AuthenticationError, ConfigurationError, DeploymentError, DeploymentOutcome,
    DeploymentRequest, DeploymentStage, ExitCode, KeyLoadError, LoadedArtifacts,
    ParameterValidationError, RemoteOperationError, TemplateLoadError
)
from .parameters import DeploymentParameterBuilder
from .template_loader import TemplateLoader

__all__ = [
    "IdentifierGenerator",
    "generate_identifier",
    "DeploymentParameterBuilder",
    "TemplateLoader",
    "AuthenticationError",
    "ConfigurationError",
    "DeploymentError",
    "DeploymentOutcome",
    "DeploymentRequest",
    "DeploymentStage",
    "ExitCode",
    "KeyLoadError",
    "LoadedArtifacts",
    "ParameterValidationError",
    "RemoteOperationError",
    "TemplateLoadError"
]
