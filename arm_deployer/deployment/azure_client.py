"""
Azure collaborators for the deployment workflow.

This module wraps the Azure SDK pieces the orchestrator calls: the
service principal credential exchange and the Resource Manager client
for resource groups and deployments. SDK errors are translated into the
workflow's exception hierarchy with the original error chained.
"""

from typing import Any, Dict, Optional

from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.identity import ClientSecretCredential
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources.models import (
    Deployment, DeploymentMode, DeploymentProperties, ResourceGroup
)

from .models import AuthenticationError, DeploymentRequest, RemoteOperationError
from ..config.settings import IdentityCredentials
from ..utils.logger import get_logger, log_operation, log_error


ARM_SCOPE = "https://management.azure.com/.default"


def _remote_error(operation: str, error: AzureError) -> RemoteOperationError:
    message = getattr(error, "message", None) or str(error)
    return RemoteOperationError(f"{operation} failed: {message}")


class ServicePrincipalCredentialProvider:
    """
    Exchanges a service principal identity for an Azure credential.

    The token is requested eagerly so that a rejected identity fails the
    authentication stage rather than the first resource call.
    """

    def __init__(self, scope: str = ARM_SCOPE):
        self.scope = scope
        self.logger = get_logger(__name__)

    def authenticate(self, identity: IdentityCredentials) -> ClientSecretCredential:
        """
        Authenticate and return a credential usable by the resource client.

        Raises:
            AuthenticationError: If the credential exchange is rejected
        """
        log_operation(
            self.logger, "AUTHENTICATE",
            f"client_id={identity.client_id}, tenant={identity.tenant_domain}"
        )
        credential = ClientSecretCredential(
            tenant_id=identity.tenant_domain,
            client_id=identity.client_id,
            client_secret=identity.secret
        )

        try:
            credential.get_token(self.scope)
        except ClientAuthenticationError as e:
            log_error(self.logger, "AUTHENTICATE", e, f"client_id={identity.client_id}")
            raise AuthenticationError(
                f"Service principal '{identity.client_id}' was rejected by tenant "
                f"'{identity.tenant_domain}': {e.message}"
            ) from e
        except AzureError as e:
            log_error(self.logger, "AUTHENTICATE", e, f"client_id={identity.client_id}")
            raise AuthenticationError(f"Credential exchange failed: {e}") from e

        return credential


class AzureResourceClient:
    """
    Resource Manager operations bound to one subscription.

    Long-running operations block until the provider reports the
    operation finished, not merely accepted.
    """

    def __init__(self, credential: Any, subscription_id: str,
                 client: Optional[ResourceManagementClient] = None):
        self.subscription_id = subscription_id
        self.client = client or ResourceManagementClient(credential, subscription_id)
        self.logger = get_logger(__name__)

    def create_or_update_resource_group(self, name: str, location: str,
                                        tags: Optional[Dict[str, str]] = None) -> Any:
        """Create the resource group, or update it in place if it exists."""
        log_operation(self.logger, "CREATE_GROUP", f"name={name}, location={location}, tags={tags}")
        try:
            return self.client.resource_groups.create_or_update(
                name, ResourceGroup(location=location, tags=tags or {})
            )
        except AzureError as e:
            raise _remote_error(f"Creating resource group '{name}'", e) from e

    def delete_resource_group(self, name: str) -> None:
        log_operation(self.logger, "DELETE_GROUP", f"name={name}")
        try:
            self.client.resource_groups.begin_delete(name).result()
        except AzureError as e:
            raise _remote_error(f"Deleting resource group '{name}'", e) from e

    def create_or_update_deployment(self, request: DeploymentRequest) -> Any:
        """Deploy ``request`` and wait for the provider to finish."""
        log_operation(
            self.logger, "DEPLOY",
            f"resource_group={request.resource_group_name}, deployment={request.deployment_name}"
        )
        try:
            poller = self.client.deployments.begin_create_or_update(
                request.resource_group_name,
                request.deployment_name,
                self._deployment(request)
            )
            return poller.result()
        except AzureError as e:
            raise _remote_error(f"Deployment '{request.deployment_name}'", e) from e

    def validate_deployment(self, request: DeploymentRequest) -> Any:
        """Ask the provider to validate ``request`` without deploying it."""
        log_operation(
            self.logger, "VALIDATE_DEPLOYMENT",
            f"resource_group={request.resource_group_name}, deployment={request.deployment_name}"
        )
        try:
            result = self.client.deployments.begin_validate(
                request.resource_group_name,
                request.deployment_name,
                self._deployment(request)
            ).result()
        except AzureError as e:
            raise _remote_error(f"Validating deployment '{request.deployment_name}'", e) from e

        error = getattr(result, "error", None)
        if error is not None:
            raise RemoteOperationError(
                f"Validating deployment '{request.deployment_name}' failed: "
                f"{getattr(error, 'message', error)}"
            )
        return result

    def delete_deployment(self, resource_group_name: str, deployment_name: str) -> None:
        log_operation(
            self.logger, "DELETE_DEPLOYMENT",
            f"resource_group={resource_group_name}, deployment={deployment_name}"
        )
        try:
            self.client.deployments.begin_delete(resource_group_name, deployment_name).result()
        except AzureError as e:
            raise _remote_error(f"Deleting deployment '{deployment_name}'", e) from e

    @staticmethod
    def _deployment(request: DeploymentRequest) -> Deployment:
        return Deployment(
            properties=DeploymentProperties(
                template=request.template,
                parameters=request.parameters,
                mode=DeploymentMode(request.mode)
            )
        )


def create_resource_client(credential: Any, subscription_id: str) -> AzureResourceClient:
    """Default resource client factory used by the orchestrator."""
    return AzureResourceClient(credential, subscription_id)
