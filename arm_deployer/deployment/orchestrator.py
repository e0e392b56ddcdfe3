"""
Deployment workflow orchestrator.

This module provides the DeploymentOrchestrator class that runs the
provisioning stages in a fixed order (authenticate, create the resource
group, load the template, deploy) and stops at the first failing stage.
"""

import time
from datetime import datetime
from typing import Any, Callable, Optional

from .azure_client import ServicePrincipalCredentialProvider, create_resource_client
from .models import DeploymentError, DeploymentOutcome, DeploymentStage
from .parameters import DeploymentParameterBuilder
from .template_loader import TemplateLoader
from ..config.settings import DeploymentSettings, cleanup_command
from ..utils.logger import get_logger, log_operation, log_error


class DeploymentOrchestrator:
    """
    Runs the deployment workflow for one set of settings.

    Stages execute strictly in order and each one finishes before the
    next starts. The first stage that raises a DeploymentError ends the
    run; nothing already created is rolled back. Cleanup guidance naming
    the resource group and deployment is emitted after every run,
    whatever its outcome.
    """

    def __init__(self, settings: DeploymentSettings,
                 credential_provider: Optional[ServicePrincipalCredentialProvider] = None,
                 client_factory: Optional[Callable[[Any, str], Any]] = None,
                 template_loader: Optional[TemplateLoader] = None,
                 parameter_builder: Optional[DeploymentParameterBuilder] = None,
                 create_resource_group: Optional[bool] = None):
        """
        Initialize deployment orchestrator.

        Args:
            settings: Run settings
            credential_provider: Exchanges the identity for a credential
            client_factory: Builds a resource client from credential and subscription id
            template_loader: Loads template and public key
            parameter_builder: Builds parameters and the deployment request
            create_resource_group: Include the resource group stage; defaults
                to ``settings.create_resource_group``

        Example:
            >>> settings = load_settings(os.environ)
            >>> orchestrator = DeploymentOrchestrator(settings)
            >>> outcome = orchestrator.run()
        """
        self.settings = settings
        self.credential_provider = credential_provider or ServicePrincipalCredentialProvider()
        self.client_factory = client_factory or create_resource_client
        self.template_loader = template_loader or TemplateLoader()
        self.parameter_builder = parameter_builder or DeploymentParameterBuilder()
        self.create_resource_group = (
            settings.create_resource_group if create_resource_group is None else create_resource_group
        )
        self.logger = get_logger(__name__)

        log_operation(
            self.logger, "INIT_ORCHESTRATOR",
            f"resource_group={settings.resource_group_name}, deployment={settings.deployment_name}, "
            f"create_resource_group={self.create_resource_group}"
        )

    def run(self, dry_run: bool = False) -> DeploymentOutcome:
        """
        Run the workflow once.

        Args:
            dry_run: Validate the deployment with the provider instead of
                applying it

        Returns:
            DeploymentOutcome with the provider's deployment result on
            success, or the first error on failure
        """
        settings = self.settings
        start_time = time.time()

        outcome = DeploymentOutcome(
            success=False,
            resource_group_name=settings.resource_group_name,
            deployment_name=settings.deployment_name,
            dry_run=dry_run,
            started_at=datetime.now()
        )
        stage = DeploymentStage.AUTHENTICATING

        try:
            log_operation(
                self.logger, "START_DEPLOYMENT",
                f"resource_group={settings.resource_group_name}, "
                f"deployment={settings.deployment_name}, dry_run={dry_run}"
            )

            self.logger.info("Stage 1: Authenticating...")
            credential = self.credential_provider.authenticate(settings.identity)
            client = self.client_factory(credential, settings.identity.subscription_id)
            outcome.stages_completed.append(stage)

            if self.create_resource_group:
                stage = DeploymentStage.CREATING_GROUP
                self.logger.info(f"Stage 2: Creating resource group {settings.resource_group_name}...")
                client.create_or_update_resource_group(
                    settings.resource_group_name, settings.location, dict(settings.tags)
                )
                outcome.stages_completed.append(stage)

            stage = DeploymentStage.LOADING_TEMPLATE
            self.logger.info(f"Stage 3: Loading template from {settings.template_path}...")
            artifacts = self.template_loader.load(settings.template_path, settings.public_key_path)
            outcome.stages_completed.append(stage)

            stage = DeploymentStage.DEPLOYING
            self.logger.info(f"Stage 4: Deploying {settings.deployment_name}...")
            parameters = self.parameter_builder.build(
                artifacts.template, artifacts.public_key,
                settings.vm_name, settings.dns_label_prefix
            )
            request = self.parameter_builder.build_request(
                settings.resource_group_name, settings.deployment_name,
                artifacts.template, parameters
            )
            if dry_run:
                outcome.body = client.validate_deployment(request)
            else:
                outcome.body = client.create_or_update_deployment(request)
            outcome.stages_completed.append(stage)

            outcome.success = True
            log_operation(
                self.logger, "DEPLOYMENT_SUCCESS",
                f"resource_group={settings.resource_group_name}, deployment={settings.deployment_name}"
            )

        except DeploymentError as e:
            outcome.fail(stage, e)
            log_error(
                self.logger, "DEPLOYMENT_FAILED", e,
                f"stage={stage.value}, resource_group={settings.resource_group_name}"
            )

        finally:
            outcome.duration = time.time() - start_time
            outcome.completed_at = datetime.now()
            outcome.cleanup_guidance = self._emit_cleanup_guidance(
                settings.resource_group_name, settings.deployment_name
            )

        return outcome

    def destroy(self, resource_group_name: Optional[str] = None,
                deployment_name: Optional[str] = None,
                deployment_only: bool = False) -> DeploymentOutcome:
        """
        Remove what a previous run created.

        Deletes the deployment record when ``deployment_name`` is given,
        then the resource group unless ``deployment_only`` is set. Deleting
        the resource group removes every resource in it.

        Args:
            resource_group_name: Resource group to clean up (defaults to the settings')
            deployment_name: Deployment record to delete first
            deployment_only: Keep the resource group

        Returns:
            DeploymentOutcome describing the cleanup
        """
        resource_group_name = resource_group_name or self.settings.resource_group_name
        start_time = time.time()

        outcome = DeploymentOutcome(
            success=False,
            resource_group_name=resource_group_name,
            deployment_name=deployment_name,
            started_at=datetime.now()
        )
        stage = DeploymentStage.AUTHENTICATING

        try:
            log_operation(
                self.logger, "START_DESTROY",
                f"resource_group={resource_group_name}, deployment={deployment_name}, "
                f"deployment_only={deployment_only}"
            )

            credential = self.credential_provider.authenticate(self.settings.identity)
            client = self.client_factory(credential, self.settings.identity.subscription_id)
            outcome.stages_completed.append(stage)

            if deployment_name:
                stage = DeploymentStage.DELETING_DEPLOYMENT
                client.delete_deployment(resource_group_name, deployment_name)
                outcome.stages_completed.append(stage)

            if not deployment_only:
                stage = DeploymentStage.DELETING_GROUP
                client.delete_resource_group(resource_group_name)
                outcome.stages_completed.append(stage)

            outcome.success = True
            log_operation(
                self.logger, "DESTROY_COMPLETE",
                f"resource_group={resource_group_name}, deployment={deployment_name}"
            )

        except DeploymentError as e:
            outcome.fail(stage, e)
            outcome.cleanup_guidance = self._emit_cleanup_guidance(resource_group_name, deployment_name)
            log_error(
                self.logger, "DESTROY_FAILED", e,
                f"stage={stage.value}, resource_group={resource_group_name}"
            )

        outcome.duration = time.time() - start_time
        outcome.completed_at = datetime.now()
        return outcome

    def _emit_cleanup_guidance(self, resource_group_name: str, deployment_name: Optional[str]) -> str:
        """Log and return the command that removes this run's resources."""
        guidance = (
            f"Resource group '{resource_group_name}' and deployment '{deployment_name}' may exist "
            f"in subscription {self.settings.identity.subscription_id}. "
            f"Please execute the following command for cleanup:\n"
            f"{cleanup_command(resource_group_name, deployment_name)}"
        )
        log_operation(self.logger, "CLEANUP_GUIDANCE", guidance.replace("\n", " "))
        return guidance
