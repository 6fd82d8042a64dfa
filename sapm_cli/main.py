from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer

from sapm_core import InstallOrchestrator, Manifest, OutcomeReport, SapmError, load_config

app = typer.Typer(help="Install and uninstall packages and keep package.json in sync.")


def _orchestrator(ctx: typer.Context, command: str) -> InstallOrchestrator:
    options = ctx.obj or {}
    project = Path(options.get("project") or ".").resolve()
    config = load_config(project)
    registry = options.get("registry")
    if registry:
        config = replace(config, registry_url=str(registry).rstrip("/"))
    try:
        return InstallOrchestrator(project, config=config)
    except SapmError as exc:
        typer.echo(f"[sapm:{command}] {exc}")
        raise typer.Exit(code=1)


def _report(command: str, reports: list[OutcomeReport]) -> None:
    failed = False
    for report in reports:
        if report.ok:
            version = f"@{report.version}" if report.version else ""
            typer.echo(f"[sapm:{command}] {report.status.value} {report.name}{version}")
        else:
            failed = True
            typer.echo(f"[sapm:{command}] failed {report.specifier}: {report.error}: {report.message}")
    if failed:
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    project: Path = typer.Option(Path("."), "--project", "-C", help="Project directory or package.json path"),
    registry: Optional[str] = typer.Option(None, "--registry", help="Registry base URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"project": project, "registry": registry}


@app.command("install")
def install(
    ctx: typer.Context,
    specs: Optional[List[str]] = typer.Argument(None, help="Specifiers such as moment or @scope/name@^1.0.0"),
    save_dev: bool = typer.Option(False, "--save-dev", "-D", help="Record in devDependencies"),
) -> None:
    """Install packages, or everything listed in package.json when none are given."""
    orchestrator = _orchestrator(ctx, "install")
    _report("install", orchestrator.install(*(specs or []), dev=save_dev))


@app.command("uninstall")
def uninstall(
    ctx: typer.Context,
    specs: Optional[List[str]] = typer.Argument(None, help="Packages to remove; all dependencies when omitted"),
) -> None:
    """Uninstall packages and drop them from package.json."""
    orchestrator = _orchestrator(ctx, "uninstall")
    _report("uninstall", orchestrator.uninstall(*(specs or [])))


@app.command("list")
def list_dependencies(ctx: typer.Context) -> None:
    """Show the dependencies recorded in package.json."""
    options = ctx.obj or {}
    try:
        manifest = Manifest.load(Path(options.get("project") or "."), required=False)
    except SapmError as exc:
        typer.echo(f"[sapm:list] {exc}")
        raise typer.Exit(code=1)
    if manifest is None:
        typer.echo("[sapm:list] no package.json found")
        return
    for name, version in sorted(manifest.dependencies.items()):
        typer.echo(f"{name}@{version}")
    for name, version in sorted(manifest.dev_dependencies.items()):
        typer.echo(f"{name}@{version} (dev)")
