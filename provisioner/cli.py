# provisioner/cli.py
# -*- coding: utf-8 -*-
"""
Command-line interface for the site provisioner.
"""

import functools
import logging

import click

from common.core_utils import DETAILED_LOG_FORMAT, setup_logging

from . import __version__
from .cli_handler import check_host_tools, format_configuration, format_plan
from .config_loader import load_provision_settings
from .config_models import LOG_PREFIX_DEFAULT
from .sequencer import PreconditionError, ProvisioningSequencer

module_logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def config_options(func):
    """Options shared by every command that resolves the configuration."""

    @click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False),
        default=None,
        help="YAML configuration file (default: ./provision.yaml).",
    )
    @click.option(
        "--project-root",
        type=click.Path(file_okay=False),
        default=None,
        help="Root directory of the project to provision.",
    )
    @click.option("--site-env", default=None, help="Site environment marker, e.g. dev or prod.")
    @click.option(
        "--skip-dump-fetch",
        is_flag=True,
        default=False,
        help="Import the existing local database snapshot instead of downloading a fresh one.",
    )
    @click.option(
        "--services-running/--no-services-running",
        default=None,
        help="Whether the services are already running. Asked from the container runtime when omitted.",
    )
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def _load_settings(config_path, project_root, site_env, skip_dump_fetch, services_running):
    cli_overrides = {
        "project_root": project_root,
        "site_env": site_env,
        # An absent flag must not override ENV/YAML.
        "skip_dump_fetch": True if skip_dump_fetch else None,
        "services_running": services_running,
    }
    return load_provision_settings(
        cli_overrides=cli_overrides,
        config_file_path=config_path,
        current_logger=module_logger,
    )


@click.group()
@click.version_option(__version__, prog_name="provision")
def cli():
    """
    Provision a local development copy of the site.

    Starts the containers, installs dependencies, imports the database
    snapshot and runs the deploy routine, stopping at the first failure.
    """
    pass


@cli.command(name="run")
@config_options
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also append log output to this file.",
)
@click.pass_context
def run_command(
    ctx,
    config_path,
    project_root,
    site_env,
    skip_dump_fetch,
    services_running,
    verbose,
    log_file,
):
    """
    Run all provisioning steps.

    Exits 0 on success. Exits 1 before any step runs when PROJECT_ROOT is
    unset or not a directory, or when DUMP_URL is unset and
    --skip-dump-fetch is not given; also 1 for a failing step that is not
    an external tool. A failing external tool's own exit code is passed
    through, and an interrupt exits 130.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = DETAILED_LOG_FORMAT if verbose else None
    setup_logging(
        log_level=log_level,
        log_file=log_file,
        log_format_str=log_format,
        log_prefix=LOG_PREFIX_DEFAULT,
    )
    settings = _load_settings(
        config_path, project_root, site_env, skip_dump_fetch, services_running
    )
    setup_logging(
        log_level=log_level,
        log_file=log_file,
        log_format_str=log_format,
        log_prefix=settings.log_prefix,
        symbols=settings.symbols,
    )

    try:
        result = ProvisioningSequencer(settings, logger=module_logger).run()
    except PreconditionError as e:
        click.echo(f"Precondition failed: {e}", err=True)
        ctx.exit(1)
    except KeyboardInterrupt:
        click.echo("Provisioning interrupted by user.", err=True)
        ctx.exit(EXIT_INTERRUPTED)

    ctx.exit(result.exit_code)


@cli.command(name="plan")
@config_options
def plan_command(config_path, project_root, site_env, skip_dump_fetch, services_running):
    """Show which steps a run would execute or skip."""
    settings = _load_settings(
        config_path, project_root, site_env, skip_dump_fetch, services_running
    )
    sequencer = ProvisioningSequencer(settings, logger=module_logger)
    click.echo(format_plan(sequencer.plan(), settings))


@cli.command(name="show-config")
@config_options
def show_config_command(config_path, project_root, site_env, skip_dump_fetch, services_running):
    """Print the effective configuration."""
    settings = _load_settings(
        config_path, project_root, site_env, skip_dump_fetch, services_running
    )
    click.echo(format_configuration(settings))


@cli.command(name="doctor")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML configuration file (default: ./provision.yaml).",
)
@click.pass_context
def doctor_command(ctx, config_path):
    """Check that the host-side tools are installed."""
    settings = load_provision_settings(
        config_file_path=config_path, current_logger=module_logger
    )
    symbols = settings.symbols
    missing = 0
    for name, found in check_host_tools(settings):
        if found:
            click.echo(f"{symbols.get('success', '✅')} {name} found on PATH")
        else:
            missing += 1
            click.echo(f"{symbols.get('error', '❌')} {name} not found on PATH")
    ctx.exit(1 if missing else 0)


if __name__ == "__main__":
    cli()
