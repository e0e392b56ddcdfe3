"""
Azure Resource Manager template deployment workflow.

Authenticates a service principal, optionally creates a resource group,
loads the bundled ARM template and deploys it in incremental mode.
"""

__version__ = "0.1.0"
