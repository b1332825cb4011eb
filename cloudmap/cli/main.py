"""Click commands: ``cloudmap show`` and ``cloudmap sync``."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from cloudmap.config import load_config
from cloudmap.errors import CloudMapError
from cloudmap.graph.report import RelationshipReport, build_report
from cloudmap.graph.resource_graph import ResourceGraph
from cloudmap.models.config import CloudMapConfig, LookupMode
from cloudmap.models.resources import Resource
from cloudmap.observability.logging import setup_logging
from cloudmap.store.graph_store import GraphStore
from cloudmap.sync.coordinator import SyncCoordinator
from cloudmap.sync.service import JsonFileService


def build_coordinator(config: CloudMapConfig) -> SyncCoordinator:
    """Wire file-backed services and the snapshot store from *config*."""
    if not config.sync.services:
        raise click.ClickException("no services configured; set CLOUDMAP_SERVICES (e.g. 'ec2,iam')")
    source_dir = config.sync.source_dir or Path.cwd()
    services = [JsonFileService(name, source_dir) for name in config.sync.services]
    return SyncCoordinator(
        services,
        GraphStore(config.store.directory),
        max_concurrent_fetches=config.sync.max_concurrent_fetches,
    )


def _label(resource: Resource) -> str:
    return f"{resource.type}[{resource.id}]"


def _format_tree(title: str, entries: list[tuple[Resource, int]]) -> list[str]:
    lines = ["", f"{title}:"]
    for resource, distance in entries:
        lines.append("\t" * distance + _label(resource))
    return lines


def _format_list(title: str, resources: list[Resource]) -> list[str]:
    if not resources:
        return []
    return ["", f"{title}: " + ", ".join(_label(r) for r in resources)]


def format_report(report: RelationshipReport) -> str:
    """Render parents/children as tab-indented trees and the rest as lists."""
    lines: list[str] = []
    lines += _format_tree("Parents", report.parents)
    lines += _format_tree("Children", report.children)
    lines += _format_list("Siblings", report.siblings)
    lines += _format_list("Applied on", report.applied_on)
    lines += _format_list("Depending on", report.depending_on)
    return "\n".join(lines)


def format_header(resource: Resource, service: str) -> str:
    lines = [f"{_label(resource)} ({service})"]
    width = max((len(key) for key in resource.properties), default=0)
    for key in sorted(resource.properties):
        lines.append(f"  {key.ljust(width)}  {resource.properties[key]}")
    return "\n".join(lines)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Inspect cloud resources and their relations from a local graph."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc
    setup_logging(config.log.level, config.log.format)
    ctx.obj = config


@cli.command()
@click.argument("resource_id")
@click.option("--local", "mode", flag_value=LookupMode.LOCAL.value, help="Answer from local snapshots only.")
@click.option("--cached", "mode", flag_value=LookupMode.CACHED.value, help="Sync only when the id is unknown.")
@click.option("--fresh", "mode", flag_value=LookupMode.FRESH.value, help="Resync the owning service first.")
@click.pass_obj
def show(config: CloudMapConfig, resource_id: str, mode: str | None) -> None:
    """Show a resource and its relations: parents, children, siblings, ..."""
    lookup_mode = LookupMode(mode) if mode else config.sync.lookup_mode
    coordinator = build_coordinator(config)

    try:
        found = asyncio.run(coordinator.lookup(resource_id, lookup_mode))
    except CloudMapError as exc:
        raise click.ClickException(str(exc)) from exc

    if found is None:
        click.echo(f"resource with id {resource_id} not found", err=True)
        return

    click.echo(format_header(found.resource, found.service), err=True)
    click.echo(format_report(build_report(found.graph, found.resource)))


@cli.command()
@click.argument("services", nargs=-1)
@click.pass_obj
def sync(config: CloudMapConfig, services: tuple[str, ...]) -> None:
    """Refresh the named services, or every configured service."""
    coordinator = build_coordinator(config)

    async def _run() -> dict[str, ResourceGraph]:
        if not services:
            return await coordinator.full_sync()
        return {name: await coordinator.targeted_sync(name) for name in services}

    try:
        graphs = asyncio.run(_run())
    except CloudMapError as exc:
        raise click.ClickException(str(exc)) from exc

    for name, graph in graphs.items():
        click.echo(f"{name}: {graph.node_count} resources, {graph.edge_count} relations")
