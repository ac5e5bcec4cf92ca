"""
Command-line interface for gitsemver.

Prints the next semantic version of the repository in the current
directory, optionally in GitHub Actions format, and can tag HEAD with it.
"""

import os
import sys
from pathlib import Path

import click

from gitsemver import __version__
from gitsemver.utils.logging_config import setup_logging


def _emit(version: str, action: bool, output_name: str) -> None:
    if not action:
        click.echo(version)
        return

    click.echo(f"::set-output name={output_name}::{version}")

    # Newer runners read step outputs from this file
    github_output = os.getenv("GITHUB_OUTPUT")
    if github_output:
        with open(github_output, "a") as f:
            f.write(f"{output_name}={version}\n")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.option(
    "--config", "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON configuration file"
)
@click.option(
    "--repo",
    type=click.Path(file_okay=False),
    help="Directory inside the repository (default: current directory)"
)
@click.option(
    "--action",
    is_flag=True,
    help="GitHub Action output format named 'version'"
)
@click.option(
    "--filter-path",
    help="The path to filter commits (in case of a mono-repo)"
)
@click.option(
    "--prefix",
    help="The prefix of the tag (in case of a mono-repo)"
)
@click.option(
    "--release",
    is_flag=True,
    help="Force release tag"
)
@click.option(
    "--main-branch",
    help="Name of the main branch (default: detected from the remote)"
)
@click.option(
    "--remote",
    help="Remote used to detect the main branch (default: origin)"
)
@click.option(
    "--tag",
    is_flag=True,
    help="Commit the tag"
)
@click.pass_context
def cli(
    ctx, verbose, log_file, config_file, repo, action, filter_path,
    prefix, release, main_branch, remote, tag,
):
    """
    Semantic version calculator

    Computes the next version from the latest reachable tag and the
    conventional commits made since.

    Examples:

        gitsemver

        gitsemver --action --release

        gitsemver --prefix api --filter-path services/api/ --tag
    """
    ctx.ensure_object(dict)

    from gitsemver.core.config import Config

    try:
        Config.reset()
        if config_file:
            Config.load_from_file(config_file)
        config = Config.load_from_env()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    verbose = verbose or config.verbose
    ctx.obj["verbose"] = verbose

    log_level = "DEBUG" if verbose else "WARNING"
    setup_logging(level=log_level, log_file=Path(log_file) if log_file else None)

    if ctx.invoked_subcommand is not None:
        return

    if repo is not None:
        config.repository.path = repo
    if main_branch is not None:
        config.repository.main_branch = main_branch
    if remote is not None:
        config.repository.remote = remote
    if prefix is not None:
        config.versioning.prefix = prefix
    if filter_path is not None:
        config.versioning.filter_path = filter_path
    if release:
        config.versioning.release = True
    if action:
        config.output.action = True

    from gitsemver.engine import VersionEngine

    try:
        engine = VersionEngine(config)
        version = engine.run(tag=tag)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    _emit(version, config.output.action, config.output.output_name)


@cli.command()
@click.option(
    "--output", "-o",
    type=click.Path(),
    default="gitsemver.json",
    help="Output path for configuration file"
)
def init(output):
    """
    Initialize configuration file.

    Creates a configuration file from the current settings that can be
    customized and passed back with --config.
    """
    from gitsemver.core.config import Config

    Config.save_to_file(output)
    click.echo(f"Configuration saved to: {output}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
