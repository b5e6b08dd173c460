"""Command line interface for the Bootstrapper project."""

from __future__ import annotations

import copy
import difflib
import re
from pathlib import Path
from typing import Any, Sequence

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from bootstrapper.capture import BlueprintCapture, CaptureError, SkippedPath
from bootstrapper.community import (
    CatalogError,
    CatalogListing,
    CommunityBlueprint,
    CommunityCatalog,
    RepositoryCoordinates,
)
from bootstrapper.config import (
    BootstrapperConfig,
    ConfigError,
    ConfigManager,
    assign_nested,
    resolve_with_precedence,
)
from bootstrapper.logsetup import configure_logging
from bootstrapper.materialize import (
    MaterializeError,
    ProjectMaterializer,
    validate_project_name,
)
from bootstrapper.repository import (
    Blueprint,
    BlueprintRepository,
    RepositoryError,
    parse_tags,
)

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str = "detail", quiet: bool = False) -> None:
    """Print ``message`` unless quiet mode suppresses it.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active; only errors are printed.
    """

    if quiet and mode != "error":
        return
    console.print(message)


def _load_config() -> tuple[ConfigManager, BootstrapperConfig]:
    """Load the effective configuration and configure logging from it.

    Raises:
        click.ClickException: If the configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        config = manager.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(config.logging, manager.config_dir)
    return manager, config


def _open_repository(config: BootstrapperConfig) -> BlueprintRepository:
    return BlueprintRepository.from_settings(config.storage)


def _resolve_quiet(ctx: click.Context, quiet: bool, config: BootstrapperConfig) -> bool:
    explicit = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    return quiet if explicit else config.cli.quiet_default


def _require_blueprint(
    repository: BlueprintRepository, identifier: str, *, json_output: bool = False
) -> Blueprint:
    """Return the blueprint matching ``identifier`` or abort the command."""
    try:
        blueprint = repository.find(identifier)
    except RepositoryError as exc:
        _handle_cli_error(str(exc), code="lookup_failed", json_output=json_output, original=exc)
        raise  # pragma: no cover - _handle_cli_error always raises
    if blueprint is None:
        message = f"No blueprint found for '{identifier}'."
        _handle_cli_error(message, code="blueprint_not_found", json_output=json_output)
        raise click.ClickException(message)  # pragma: no cover - _handle_cli_error always raises
    return blueprint


def _default_project_name(blueprint: Blueprint) -> str:
    return re.sub(r"[^a-z0-9]", "-", blueprint.name.lower())


def _summary_payload(blueprint: Blueprint) -> dict[str, Any]:
    return {
        "id": blueprint.id,
        "name": blueprint.name,
        "description": blueprint.description,
        "createdAt": blueprint.to_document()["createdAt"],
        "tags": list(blueprint.tags),
        "files": len(blueprint.files),
        "folders": len(blueprint.folders),
    }


def _emit_skipped(skipped: Sequence[SkippedPath], *, quiet: bool) -> None:
    if not skipped:
        return
    _emit_message(f"[yellow]Skipped {len(skipped)} path(s):[/yellow]", mode="warning", quiet=quiet)
    for item in skipped:
        _emit_message(f"  - {item.relative_path}: {item.reason}", mode="warning", quiet=quiet)


def _render_structure(blueprint: Blueprint) -> Tree:
    """Return a rich tree of the blueprint's folders and files."""
    tree = Tree(f"[bold]{blueprint.name}[/bold]")
    nodes: dict[str, Tree] = {"": tree}
    for path in sorted({*blueprint.folders, *blueprint.files}):
        parent_key, _, leaf = path.rpartition("/")
        parent = nodes.get(parent_key, tree)
        if path in blueprint.files:
            parent.add(leaf)
        else:
            nodes[path] = parent.add(f"[blue]{leaf}/[/blue]")
    return tree


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="bootstrapper")
def cli() -> None:
    """Bootstrapper captures project folders as blueprints and creates new projects from them.

    Blueprints are stored under ~/.bootstrapper/blueprints unless storage.blueprints_path is set.
    """


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--name", type=str, help="Blueprint name (defaults to the folder name).")
@click.option("--description", type=str, default=None, help="Blueprint description.")
@click.option("--tags", type=str, default="", help="Comma-separated tags.")
@click.option(
    "--exclude",
    "extra_excludes",
    multiple=True,
    help="Additional exclusion pattern; may be repeated.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the saved summary as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def save(
    ctx: click.Context,
    path: str,
    name: str | None,
    description: str | None,
    tags: str,
    extra_excludes: tuple[str, ...],
    json_output: bool,
    quiet: bool,
) -> None:
    """Capture the folder at PATH and save it as a blueprint."""
    _, config = _load_config()
    quiet_enabled = _resolve_quiet(ctx, quiet, config) and not json_output

    source = Path(path).expanduser().resolve()
    capture = BlueprintCapture.from_settings(config.capture, extra_excludes)
    repository = _open_repository(config)
    try:
        result = capture.capture(
            source,
            name=name,
            description=(
                description if description is not None else f"Blueprint created from {source.name}"
            ),
            tags=parse_tags(tags),
        )
        repository.save(result.blueprint)
    except (CaptureError, RepositoryError) as exc:
        _handle_cli_error(str(exc), code="save_failed", json_output=json_output, original=exc)
        return

    blueprint = result.blueprint
    if json_output:
        payload = _summary_payload(blueprint)
        payload["skipped"] = [
            {"path": item.relative_path, "reason": item.reason} for item in result.skipped
        ]
        console.print_json(data=payload)
        return

    _emit_skipped(result.skipped, quiet=quiet_enabled)
    _emit_message(
        f"[green]Blueprint \"{blueprint.name}\" saved ({blueprint.id}): "
        f"{len(blueprint.files)} files, {len(blueprint.folders)} folders.[/green]",
        mode="summary",
        quiet=quiet_enabled,
    )


@cli.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit blueprints as JSON.")
def list_blueprints(json_output: bool) -> None:
    """List saved blueprints, newest first."""
    _, config = _load_config()
    repository = _open_repository(config)
    try:
        blueprints = repository.list()
    except RepositoryError as exc:
        _handle_cli_error(str(exc), code="list_failed", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=[_summary_payload(item) for item in blueprints])
        return

    if not blueprints:
        console.print(
            "[yellow]No blueprints found. Create one with `bootstrapper save PATH`.[/yellow]"
        )
        return

    table = Table(title=f"Blueprints in {repository.root}")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Created")
    table.add_column("Tags")
    table.add_column("Files", justify="right")
    for item in blueprints:
        table.add_row(
            item.id,
            item.name,
            item.created_at.date().isoformat(),
            ", ".join(item.tags),
            str(len(item.files)),
        )
    console.print(table)


@cli.command()
@click.argument("identifier")
@click.option("--json", "json_output", is_flag=True, help="Emit the full blueprint record as JSON.")
def show(identifier: str, json_output: bool) -> None:
    """Show details and file structure of the blueprint IDENTIFIER (id, id prefix, or name)."""
    _, config = _load_config()
    blueprint = _require_blueprint(_open_repository(config), identifier, json_output=json_output)

    if json_output:
        console.print_json(data=blueprint.to_document())
        return

    console.print(f"[bold]Name:[/bold] {blueprint.name}")
    console.print(f"[bold]ID:[/bold] {blueprint.id}")
    console.print(f"[bold]Description:[/bold] {blueprint.description or 'No description'}")
    console.print(f"[bold]Created:[/bold] {blueprint.created_at.date().isoformat()}")
    console.print(f"[bold]Tags:[/bold] {', '.join(blueprint.tags) or 'No tags'}")
    console.print(f"[bold]Files:[/bold] {len(blueprint.files)}")
    console.print(f"[bold]Folders:[/bold] {len(blueprint.folders)}")
    console.print(_render_structure(blueprint))


@cli.command()
@click.argument("identifier")
@click.argument("destination", type=click.Path(file_okay=False, path_type=str))
@click.option(
    "-p",
    "--project-name",
    type=str,
    help="Name of the new project directory (defaults to a slug of the blueprint name).",
)
@click.option("--force", is_flag=True, help="Replace an existing project directory without asking.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def create(
    ctx: click.Context,
    identifier: str,
    destination: str,
    project_name: str | None,
    force: bool,
    quiet: bool,
) -> None:
    """Create a new project in DESTINATION from the blueprint IDENTIFIER."""
    _, config = _load_config()
    quiet_enabled = _resolve_quiet(ctx, quiet, config)
    blueprint = _require_blueprint(_open_repository(config), identifier)

    name = project_name or _default_project_name(blueprint)
    try:
        validate_project_name(name)
    except MaterializeError as exc:
        raise click.ClickException(str(exc)) from exc

    destination_root = Path(destination).expanduser().resolve()
    target = destination_root / name
    overwrite = force
    if target.exists() and not force:
        overwrite = click.confirm(f'Directory "{name}" already exists. Overwrite?', default=False)
        if not overwrite:
            _emit_message("[yellow]Cancelled; nothing was changed.[/yellow]", quiet=quiet_enabled)
            return

    try:
        project_path = ProjectMaterializer().materialize(
            blueprint, destination_root, name, overwrite=overwrite
        )
    except MaterializeError as exc:
        raise click.ClickException(f"Failed to create project from blueprint: {exc}") from exc

    _emit_message(
        f"[green]Project \"{name}\" created at {project_path}.[/green]",
        mode="summary",
        quiet=quiet_enabled,
    )


@cli.command()
@click.argument("identifier")
@click.option("--name", type=str, default=None, help="New blueprint name.")
@click.option("--description", type=str, default=None, help="New description.")
@click.option("--tags", type=str, default=None, help="Replacement comma-separated tags.")
def edit(identifier: str, name: str | None, description: str | None, tags: str | None) -> None:
    """Edit the name, description, or tags of the blueprint IDENTIFIER."""
    if name is None and description is None and tags is None:
        raise click.UsageError("Provide at least one of --name, --description, or --tags.")

    _, config = _load_config()
    repository = _open_repository(config)
    blueprint = _require_blueprint(repository, identifier)
    try:
        updated = blueprint.with_metadata(name=name, description=description, tags=tags)
        repository.update(updated)
    except RepositoryError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Blueprint \"{updated.name}\" updated successfully.[/green]")


@cli.command()
@click.argument("identifier")
@click.option("--name", type=str, default=None, help="Name for the copy.")
def duplicate(identifier: str, name: str | None) -> None:
    """Save a copy of the blueprint IDENTIFIER under a new id."""
    _, config = _load_config()
    repository = _open_repository(config)
    blueprint = _require_blueprint(repository, identifier)
    clone = blueprint.duplicate(name)
    try:
        repository.save(clone)
    except RepositoryError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Blueprint \"{clone.name}\" created ({clone.id}).[/green]")


@cli.command()
@click.argument("identifier")
@click.option("--yes", is_flag=True, help="Delete without asking for confirmation.")
def delete(identifier: str, yes: bool) -> None:
    """Delete the blueprint IDENTIFIER."""
    _, config = _load_config()
    repository = _open_repository(config)
    try:
        blueprint = repository.find(identifier)
    except RepositoryError as exc:
        raise click.ClickException(str(exc)) from exc

    if blueprint is None:
        console.print(f"[yellow]No blueprint found for '{identifier}'; nothing deleted.[/yellow]")
        return

    if not yes and not click.confirm(
        f'Delete the blueprint "{blueprint.name}"? This cannot be undone.', default=False
    ):
        console.print("[yellow]Cancelled.[/yellow]")
        return

    try:
        removed = repository.delete(blueprint.id)
    except RepositoryError as exc:
        raise click.ClickException(f"Failed to delete blueprint: {exc}") from exc
    if not removed:
        raise click.ClickException(
            f"Blueprint {blueprint.id} has no record in {repository.root}; nothing deleted."
        )
    console.print("[green]Blueprint deleted.[/green]")


@cli.command()
@click.argument("identifier")
@click.argument("output", type=click.Path(dir_okay=True, path_type=str))
def export(identifier: str, output: str) -> None:
    """Export the blueprint IDENTIFIER to OUTPUT (a file path or an existing folder)."""
    _, config = _load_config()
    repository = _open_repository(config)
    blueprint = _require_blueprint(repository, identifier)

    destination = Path(output).expanduser()
    if destination.is_dir():
        destination = destination / f"{blueprint.name}.blueprint.json"
    try:
        written = repository.export(blueprint, destination)
    except RepositoryError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Blueprint exported to {written}.[/green]")


@cli.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=str))
def import_blueprint(source: str) -> None:
    """Import a blueprint file previously written by `export`."""
    _, config = _load_config()
    repository = _open_repository(config)
    try:
        blueprint = repository.import_file(Path(source))
    except RepositoryError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Blueprint \"{blueprint.name}\" imported ({blueprint.id}).[/green]")


@cli.group()
def community() -> None:
    """Browse and download blueprints from the community catalog."""


def _fetch_listing(
    config: BootstrapperConfig, repository: str | None, json_output: bool
) -> tuple[CommunityCatalog, CatalogListing]:
    target = repository or config.community.repository
    try:
        coordinates = RepositoryCoordinates.parse(target)
    except CatalogError as exc:
        _handle_cli_error(
            str(exc), code="invalid_repository", json_output=json_output, original=exc
        )
        raise  # pragma: no cover - _handle_cli_error always raises

    catalog = CommunityCatalog.from_settings(config.community)
    with console.status(f"Fetching blueprints from {coordinates}..."):
        listing = catalog.list_candidates(coordinates)
    if listing.error:
        _handle_cli_error(
            f"Failed to fetch community blueprints: {listing.error}",
            code="catalog_unavailable",
            json_output=json_output,
        )
    return catalog, listing


def _select_candidate(listing: CatalogListing, key: str) -> CommunityBlueprint:
    if key.isdigit():
        index = int(key)
        if 1 <= index <= len(listing.candidates):
            return listing.candidates[index - 1]
    candidate = listing.find(key)
    if candidate is None:
        raise click.ClickException(
            f"No community blueprint matches '{key}'. Run `bootstrapper community list`."
        )
    return candidate


_REPOSITORY_OPTION = click.option(
    "--repository",
    type=str,
    default=None,
    help="Catalog repository as owner/repo (defaults to configuration).",
)


@community.command("list")
@_REPOSITORY_OPTION
@click.option("--json", "json_output", is_flag=True, help="Emit candidates as JSON.")
def community_list(repository: str | None, json_output: bool) -> None:
    """List blueprints published in the community catalog."""
    _, config = _load_config()
    _, listing = _fetch_listing(config, repository, json_output)

    if json_output:
        console.print_json(
            data={
                "repository": str(listing.repository),
                "candidates": [
                    {
                        **item.model_dump(mode="json", exclude={"readme_content"}),
                        "has_readme": item.has_readme,
                    }
                    for item in listing.candidates
                ],
                "skipped": [{"name": item.name, "reason": item.reason} for item in listing.skipped],
            }
        )
        return

    if not listing.candidates:
        console.print("[yellow]No community blueprints found.[/yellow]")
        return

    table = Table(title=f"Community blueprints in {listing.repository}")
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Size", justify="right")
    table.add_column("README")
    for index, item in enumerate(listing.candidates, start=1):
        table.add_row(
            str(index),
            item.name,
            item.description or "No description available",
            f"{item.size / 1024:.1f}KB",
            "yes" if item.has_readme else "",
        )
    console.print(table)


@community.command("download")
@click.argument("key")
@_REPOSITORY_OPTION
def community_download(key: str, repository: str | None) -> None:
    """Download the community blueprint KEY (list number, name, or path) to local storage."""
    _, config = _load_config()
    catalog, listing = _fetch_listing(config, repository, False)
    candidate = _select_candidate(listing, key)

    try:
        with console.status(f"Downloading blueprint: {candidate.name}"):
            blueprint = catalog.import_candidate(candidate, _open_repository(config))
    except (CatalogError, RepositoryError) as exc:
        raise click.ClickException(f"Failed to download blueprint: {exc}") from exc
    console.print(
        f"[green]Community blueprint \"{blueprint.name}\" downloaded ({blueprint.id}).[/green]"
    )


@community.command("readme")
@click.argument("key")
@_REPOSITORY_OPTION
def community_readme(key: str, repository: str | None) -> None:
    """Show the README published with the community blueprint KEY."""
    _, config = _load_config()
    _, listing = _fetch_listing(config, repository, False)
    candidate = _select_candidate(listing, key)
    if not candidate.readme_content:
        console.print("[yellow]No README available for this blueprint.[/yellow]")
        return
    console.print(Markdown(candidate.readme_content))


@cli.group()
def config() -> None:
    """Manage Bootstrapper configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Show file values without BOOTSTRAPPER__ overrides.")
def config_view(no_env: bool) -> None:
    """Print the effective configuration as YAML."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


def _parse_yaml_value(text: str, *, what: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"{what} is not valid YAML: {exc}") from exc


def _store_validated(manager: ConfigManager, data: dict[str, Any]) -> None:
    """Validate ``data`` as the file layer and write it, or abort the command."""
    try:
        resolve_with_precedence(defaults=BootstrapperConfig(), file_overrides=data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    manager.save(data)


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to store at KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE at the dotted KEY, e.g. `community.repository`, and show the diff."""
    segments = [part.strip() for part in key.split(".")]
    if not all(segments):
        raise click.ClickException(
            f"Invalid key {key!r}; use a dotted path like capture.include_gitignore."
        )

    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text()
    try:
        current = manager.load_file_overrides()
        updated = copy.deepcopy(current)
        assign_nested(updated, segments, _parse_yaml_value(value, what="Value"))
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if updated == current:
        console.print(f"[yellow]{key} already has that value; nothing changed.[/yellow]")
        return

    _store_validated(manager, updated)
    diff = difflib.unified_diff(
        before.splitlines(),
        manager.read_text().splitlines(),
        fromfile="config.yaml (before)",
        tofile="config.yaml (after)",
        lineterm="",
    )
    console.print(Syntax("\n".join(diff), "diff"))
    console.print(f"[green]Set {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR; the result is validated before saving."""
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text()
    after = click.edit(before, extension=".yaml")
    if after is None or after == before:
        console.print("[yellow]Edit cancelled or unchanged; configuration left as is.[/yellow]")
        return

    document = _parse_yaml_value(after, what="Edited configuration") or {}
    if not isinstance(document, dict):
        raise click.ClickException("The configuration must be a YAML mapping.")
    _store_validated(manager, document)
    console.print("[green]Configuration updated.[/green]")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
