"""Resolve command implementation for peercompat.

Reads the declared packages of a project (``package.json`` and/or
``--package NAME=VERSION`` options), resolves every TARGET against them and
prints the compatible version ranges.

Typical usage::

    # Resolve against ./package.json
    $ peercompat resolve sass

    # Explicit declared packages, JSON output
    $ peercompat resolve sass -p react=18.2.0 -p next=^13.5.1 --format json

    # Add the resolved packages to package.json
    $ peercompat resolve sass lodash --write
"""

from __future__ import annotations

import json
import click
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from peercompat.constants import MANIFEST_FILE_NAME
from peercompat.exceptions import PeerCompatError
from peercompat.context import pass_context, PeerCompatContext
from peercompat.core import (
    BatchResolver,
    CompatibilityClient,
    ResolutionReport,
    read_manifest,
    write_resolved,
)
from peercompat.utils import (
    HTTPClient,
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.resolve")


def _parse_package_option(
    ctx: click.Context,
    param: click.Parameter,
    values: Tuple[str, ...],
) -> Dict[str, str]:
    """Turn repeated ``NAME=VERSION`` options into a mapping."""
    declared: Dict[str, str] = {}
    for value in values:
        name, sep, specifier = value.rpartition("=")
        if not sep or not name.strip() or not specifier.strip():
            raise click.BadParameter(
                f"expected NAME=VERSION, got {value!r}", ctx=ctx, param=param
            )
        declared[name.strip()] = specifier.strip()
    return declared


@click.command()
@click.argument("targets", nargs=-1, required=True)
@click.option(
    "--manifest",
    "-m",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=f"Manifest with declared packages (default: ./{MANIFEST_FILE_NAME}).",
)
@click.option(
    "--package",
    "-p",
    "packages",
    multiple=True,
    callback=_parse_package_option,
    help="Declared package as NAME=VERSION (repeatable).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--sequential/--concurrent",
    default=None,
    help="Resolve targets one at a time so each sees earlier adoptions.",
)
@click.option(
    "--dev/--no-dev",
    "include_dev",
    default=None,
    help="Treat devDependencies as declared packages.",
)
@click.option("--endpoint", default=None, help="Compatibility service URL.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-request timeout in seconds.",
)
@click.option(
    "--write",
    is_flag=True,
    help="Add resolved packages to the manifest's dependencies.",
)
@pass_context
def resolve(
    ctx: PeerCompatContext,
    targets: Tuple[str, ...],
    manifest: Optional[Path],
    packages: Dict[str, str],
    output_format: str,
    sequential: Optional[bool],
    include_dev: Optional[bool],
    endpoint: Optional[str],
    timeout: Optional[float],
    write: bool,
) -> None:
    """Find versions of TARGETS compatible with the declared packages.

    Declared packages come from the manifest, overridden by ``--package``
    options.  Targets that are already declared are skipped.

    Exits 0 when every target was resolved or skipped, 1 otherwise.
    """
    config = ctx.config
    include_dev = config.include_dev if include_dev is None else include_dev
    sequential = config.sequential if sequential is None else sequential

    if manifest is None and (Path.cwd() / MANIFEST_FILE_NAME).is_file():
        manifest = Path.cwd() / MANIFEST_FILE_NAME

    if write and manifest is None:
        raise click.UsageError("--write needs a manifest")

    try:
        declared: Dict[str, str] = {}
        if manifest is not None:
            declared.update(read_manifest(manifest, include_dev=include_dev))
        declared.update(packages)

        if not declared:
            raise click.UsageError(
                "No declared packages: pass --manifest or --package, "
                f"or run next to a {MANIFEST_FILE_NAME}"
            )

        logger.info(
            "Resolving %d target(s) against %d declared package(s)",
            len(targets),
            len(declared),
        )

        report = asyncio.run(
            _resolve_async(
                declared,
                list(targets),
                endpoint=endpoint or config.endpoint,
                timeout=timeout or config.timeout,
                max_concurrency=config.max_concurrency,
                sequential=sequential,
            )
        )

        if output_format == "json":
            click.echo(json.dumps(report.to_json(), indent=2))
        else:
            _display_table(report)

        if write and report.resolved:
            assert manifest is not None
            backup = write_resolved(manifest, report.resolved)
            if output_format != "json":
                print_success(f"Updated {manifest}")
            if backup is not None:
                logger.info("Backup written to %s", backup)

    except PeerCompatError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(1) from exc

    raise click.exceptions.Exit(0 if report.all_resolved else 1)


async def _resolve_async(
    declared: Dict[str, str],
    targets: List[str],
    *,
    endpoint: str,
    timeout: float,
    max_concurrency: int,
    sequential: bool,
) -> ResolutionReport:
    """Run one batch resolution with a fresh HTTP client."""
    async with HTTPClient(timeout=timeout, max_concurrency=max_concurrency) as http:
        client = CompatibilityClient(http, endpoint=endpoint)
        resolver = BatchResolver(client, sequential=sequential)
        return await resolver.resolve_report(declared, targets)


def _display_table(report: ResolutionReport) -> None:
    """Render the report as a Rich table plus warnings for the rest."""
    rows = [
        {
            "Package": target.name,
            "Oldest": target.version.oldest,
            "Latest": target.version.latest,
            "Adopted": target.adopted_version,
        }
        for target in report.resolved
    ]
    print_table(
        rows,
        title="Compatible Versions",
        column_styles={
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Oldest": {"justify": "center", "style": "dim"},
            "Latest": {"justify": "center", "style": "bold green"},
            "Adopted": {"justify": "center"},
        },
    )

    for name in report.skipped:
        print_warning(f"{name} is already declared", prefix="[SKIP]")
    for name in report.incompatible:
        print_warning(f"No compatible version found for {name}")
    for name, exc in report.failures.items():
        print_warning(f"Lookup failed for {name}: {exc.message}", prefix="[ERROR]")

    if report.all_resolved and report.resolved:
        print_success(f"{len(report.resolved)} package(s) resolved")
