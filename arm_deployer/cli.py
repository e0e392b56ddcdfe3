#!/usr/bin/env python3
"""
ARM template deployment CLI.

This module provides the ``arm-deploy`` command line interface: ``deploy``
runs the provisioning workflow and ``cleanup`` removes what a run
created. Exit codes distinguish success from each class of failure.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table
from rich.text import Text

from .config.settings import DeploymentSettings, load_settings
from .deployment.models import (
    AuthenticationError, ConfigurationError, DeploymentOutcome, ExitCode, KeyLoadError,
    ParameterValidationError, RemoteOperationError, TemplateLoadError
)
from .deployment.orchestrator import DeploymentOrchestrator
from .utils.logger import get_logger, setup_logging

console = Console()

ERROR_EXIT_CODES = (
    (ConfigurationError, ExitCode.CONFIGURATION_ERROR),
    (AuthenticationError, ExitCode.AUTHENTICATION_FAILED),
    (TemplateLoadError, ExitCode.TEMPLATE_ERROR),
    (KeyLoadError, ExitCode.TEMPLATE_ERROR),
    (ParameterValidationError, ExitCode.TEMPLATE_ERROR),
    (RemoteOperationError, ExitCode.DEPLOYMENT_FAILED),
)


def exit_code_for(outcome: DeploymentOutcome) -> int:
    """Map an outcome to the process exit code."""
    if outcome.success:
        return ExitCode.SUCCESS
    for error_type, code in ERROR_EXIT_CODES:
        if isinstance(outcome.error, error_type):
            return code
    return ExitCode.UNKNOWN_ERROR


def setup_orchestrator(settings: DeploymentSettings) -> DeploymentOrchestrator:
    """Setup deployment orchestrator with the Azure collaborators."""
    return DeploymentOrchestrator(settings)


def _body_summary(body: Any) -> Dict[str, Any]:
    if hasattr(body, "as_dict"):
        body = body.as_dict()
    if isinstance(body, dict):
        return body
    return {"result": body}


def show_outcome(outcome: DeploymentOutcome, title: str = "Deployment") -> None:
    """Display the outcome of a run."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Resource group", outcome.resource_group_name)
    table.add_row("Deployment", outcome.deployment_name or "-")
    table.add_row("Stages", ", ".join(stage.value for stage in outcome.stages_completed) or "-")
    table.add_row("Duration", f"{outcome.duration:.1f}s")

    if outcome.success:
        mode = " (dry run)" if outcome.dry_run else ""
        console.print(Panel(table, title=f"✅ {title} succeeded{mode}", border_style="green"))
        if outcome.body is not None:
            console.print(Pretty(_body_summary(outcome.body)))
    else:
        table.add_row("Failed stage", outcome.failed_stage.value if outcome.failed_stage else "-")
        table.add_row("Error", Text(f"{type(outcome.error).__name__}: {outcome.error}", style="red"))
        if outcome.error is not None and outcome.error.cause is not None:
            table.add_row("Cause", Text(str(outcome.error.cause)))
        console.print(Panel(table, title=f"❌ {title} failed", border_style="red"))


def show_cleanup_guidance(guidance: str) -> None:
    console.print("\n[bold]###### Exit ######[/bold]")
    console.print(Panel(Text(guidance), title="🧹 Cleanup", border_style="yellow"))


def write_report(outcome: DeploymentOutcome, report_path: Path) -> None:
    """Write the outcome as JSON."""
    try:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, 'w', encoding='utf-8') as file:
            json.dump(outcome.to_dict(), file, indent=2, default=str)
        console.print(f"📄 Report saved to {report_path}")
    except OSError as e:
        console.print(f"⚠️  Warning: Failed to write report: {e}", style="yellow")


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, verbose):
    """Deploy an ARM template into an Azure resource group."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    setup_logging("DEBUG" if verbose else "INFO")


@cli.command()
@click.option('--public-key', 'public_key', help='SSH public key file (default ~/.ssh/id_rsa.pub)')
@click.option('--resource-group', '-g', help='Resource group name (generated when omitted)')
@click.option('--deployment-name', '-n', help='Deployment name (generated when omitted)')
@click.option('--location', '-l', help='Azure region for the resource group')
@click.option('--skip-group-creation', is_flag=True, help='Deploy into an existing resource group')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), help='YAML settings file')
@click.option('--dry-run', is_flag=True, help='Validate the deployment without applying it')
@click.option('--report', type=click.Path(dir_okay=False), help='Write the outcome as JSON')
@click.pass_context
def deploy(ctx, public_key, resource_group, deployment_name, location, skip_group_creation,
           config_file, dry_run, report):
    """Authenticate, create the resource group, load the template and deploy it."""
    logger = get_logger(__name__)

    try:
        settings = load_settings(
            os.environ,
            config_file=config_file,
            public_key_path=public_key,
            resource_group_name=resource_group,
            deployment_name=deployment_name,
            location=location,
            create_resource_group=False if skip_group_creation else None
        )
    except ConfigurationError as e:
        console.print(f"❌ Configuration error: {e}", style="red", markup=False)
        sys.exit(ExitCode.CONFIGURATION_ERROR)

    console.print(
        f"🚀 Starting deployment: {settings.deployment_name} -> {settings.resource_group_name}"
    )
    if dry_run:
        console.print("📋 Dry run mode - the deployment is validated, not applied")

    try:
        outcome = setup_orchestrator(settings).run(dry_run=dry_run)
    except KeyboardInterrupt:
        console.print("\n🛑 Deployment cancelled by user")
        show_cleanup_guidance(settings.cleanup_command)
        sys.exit(ExitCode.INTERRUPTED)
    except Exception as e:
        logger.error(f"Deployment failed with exception: {e}")
        console.print(f"❌ Deployment failed: {e}", style="red", markup=False)
        show_cleanup_guidance(settings.cleanup_command)
        sys.exit(ExitCode.UNKNOWN_ERROR)

    show_outcome(outcome)
    show_cleanup_guidance(outcome.cleanup_guidance)
    if report:
        write_report(outcome, Path(report))

    sys.exit(exit_code_for(outcome))


@cli.command()
@click.option('--resource-group', '-g', required=True, help='Resource group to remove')
@click.option('--deployment', '-d', 'deployment_name', help='Deployment record to delete first')
@click.option('--deployment-only', is_flag=True, help='Delete the deployment record but keep the group')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def cleanup(ctx, resource_group, deployment_name, deployment_only, yes):
    """Delete a deployment and its resource group."""
    if deployment_only and not deployment_name:
        raise click.UsageError("--deployment-only requires --deployment")

    try:
        settings = load_settings(
            os.environ,
            resource_group_name=resource_group,
            deployment_name=deployment_name
        )
    except ConfigurationError as e:
        console.print(f"❌ Configuration error: {e}", style="red", markup=False)
        sys.exit(ExitCode.CONFIGURATION_ERROR)

    if not deployment_only and not yes:
        click.confirm(
            f"Delete resource group '{resource_group}' and every resource in it?",
            abort=True
        )

    console.print(f"🧹 Cleaning up {resource_group}")
    outcome = setup_orchestrator(settings).destroy(
        resource_group, deployment_name, deployment_only=deployment_only
    )

    show_outcome(outcome, title="Cleanup")
    if not outcome.success:
        show_cleanup_guidance(outcome.cleanup_guidance)

    sys.exit(exit_code_for(outcome))


def main(argv: Optional[list] = None) -> None:
    cli(args=argv, obj={})


if __name__ == '__main__':
    main()
