"""
Settings management module.

Provides the immutable run settings, the service principal identity,
settings-file validation and Azure naming rules.
"""

from .settings import DeploymentSettings, IdentityCredentials, cleanup_command, load_settings

__all__ = ["DeploymentSettings", "IdentityCredentials", "cleanup_command", "load_settings"]
