"""
Data models for the ARM template deployment workflow.

This module defines the data structures passed between workflow stages,
the terminal outcome of a run, and the exception hierarchy used to
report stage failures.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


DEPLOYMENT_MODE_INCREMENTAL = "Incremental"


class ExitCode:
    """Process exit codes for the CLI."""
    SUCCESS = 0
    DEPLOYMENT_FAILED = 2
    AUTHENTICATION_FAILED = 3
    CONFIGURATION_ERROR = 4
    TEMPLATE_ERROR = 5
    UNKNOWN_ERROR = 99
    INTERRUPTED = 130


class DeploymentStage(Enum):
    """Workflow stages in execution order."""
    AUTHENTICATING = "authenticating"
    CREATING_GROUP = "creating_group"
    LOADING_TEMPLATE = "loading_template"
    DEPLOYING = "deploying"
    DELETING_DEPLOYMENT = "deleting_deployment"
    DELETING_GROUP = "deleting_group"
    DONE = "done"
    FAILED = "failed"


class DeploymentError(Exception):
    """Base exception for deployment workflow errors."""

    @property
    def cause(self) -> Optional[BaseException]:
        """The underlying exception this error was raised from, if any."""
        return self.__cause__


class ConfigurationError(DeploymentError):
    """Required identity or settings values are missing or invalid."""
    pass


class AuthenticationError(DeploymentError):
    """The credential exchange was rejected."""
    pass


class TemplateLoadError(DeploymentError):
    """The template file could not be read or parsed."""
    pass


class KeyLoadError(DeploymentError):
    """The public key file could not be read."""
    pass


class ParameterValidationError(DeploymentError):
    """Deployment parameters do not satisfy the template's declarations."""
    pass


class RemoteOperationError(DeploymentError):
    """The provider rejected a resource group or deployment request."""
    pass


@dataclass(frozen=True)
class LoadedArtifacts:
    """Template and public key read from local storage."""
    template: Dict[str, Any]
    public_key: str
    template_path: Optional[Path] = None
    public_key_path: Optional[Path] = None

    @property
    def declared_parameters(self) -> Dict[str, Any]:
        """Parameter declarations of the template."""
        return self.template.get("parameters", {})


@dataclass
class DeploymentRequest:
    """A complete deployment request for one resource group."""
    resource_group_name: str
    deployment_name: str
    template: Dict[str, Any]
    parameters: Dict[str, Dict[str, Any]]
    mode: str = DEPLOYMENT_MODE_INCREMENTAL

    def to_body(self) -> Dict[str, Any]:
        """Request body in the shape the Resource Manager API expects."""
        return {
            "properties": {
                "template": copy.deepcopy(self.template),
                "parameters": copy.deepcopy(self.parameters),
                "mode": self.mode
            }
        }


@dataclass
class DeploymentOutcome:
    """Terminal result of a workflow run."""
    success: bool
    resource_group_name: str
    deployment_name: Optional[str] = None
    body: Any = None
    error: Optional[DeploymentError] = None
    failed_stage: Optional[DeploymentStage] = None
    stages_completed: List[DeploymentStage] = field(default_factory=list)
    dry_run: bool = False
    cleanup_guidance: str = ""
    duration: float = 0.0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def stage(self) -> DeploymentStage:
        """Terminal stage of the run."""
        return DeploymentStage.DONE if self.success else DeploymentStage.FAILED

    def fail(self, stage: DeploymentStage, error: DeploymentError) -> None:
        """Record the first failure; later calls are ignored."""
        if self.error is not None:
            return
        self.success = False
        self.failed_stage = stage
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary for serialization."""
        body = self.body
        if hasattr(body, "as_dict"):
            body = body.as_dict()
        return {
            "success": self.success,
            "stage": self.stage.value,
            "resource_group_name": self.resource_group_name,
            "deployment_name": self.deployment_name,
            "dry_run": self.dry_run,
            "stages_completed": [stage.value for stage in self.stages_completed],
            "failed_stage": self.failed_stage.value if self.failed_stage else None,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "body": body,
            "cleanup_guidance": self.cleanup_guidance,
            "duration": self.duration,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None
        }
