"""Invoke tasks for day-to-day Bootstrapper development.

Every task shells out through `uv` so the virtual environment declared in
pyproject.toml is used for syncing, building, linting, type checking and tests.
"""

from __future__ import annotations

import shlex
import shutil
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
SOURCE_DIRS = ("src", "tests")


def _uv(ctx: Context, *args: str, echo: bool = True, dry_run: bool = False) -> None:
    """Run ``uv`` with ``args``.

    Args:
        ctx: Invoke execution context.
        args: Arguments placed after the `uv` executable.
        echo: Whether Invoke echoes the command.
        dry_run: Print the command instead of running it.
    """
    command = shlex.join(("uv", *args))
    if dry_run:
        print(f"[dry-run] {command}")
        return
    ctx.run(command, echo=echo, pty=True)


@task(help={"dev": "Install the dev extra (pytest, ruff, mypy, invoke)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Create or refresh the project virtual environment."""
    args: list[str] = ["sync"]
    if dev:
        args.extend(["--extra", "dev"])
    _uv(ctx, *args)


@task(help={"clean": "Empty dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into dist/."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, "build")


@task(
    help={
        "part": "Version component to bump: major, minor, or patch.",
        "dry_run": "Show the new version without writing pyproject.toml.",
    }
)
def bump_version(ctx: Context, part: str = "patch", dry_run: bool = False) -> None:
    """Bump the version recorded in pyproject.toml."""
    args: list[str] = ["version", "--bump", part]
    if dry_run:
        args.append("--dry-run")
    _uv(ctx, *args)


@task(
    help={
        "k": "pytest -k expression.",
        "path": "Test path (defaults to tests/).",
        "options": "Extra pytest flags, passed through unchanged.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite."""
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    args.append(path)
    _uv(ctx, *args)


@task(help={"fix": "Let ruff apply automatic fixes."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with ruff."""
    _uv(ctx, "run", "ruff", "format", "--check", *SOURCE_DIRS)
    args: list[str] = ["run", "ruff", "check", *SOURCE_DIRS]
    if fix:
        args.append("--fix")
    _uv(ctx, *args)


@task
def mypy(ctx: Context) -> None:
    """Type check the package sources."""
    _uv(ctx, "run", "mypy", "src")


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks and tests the way CI does."""
    ctx.invoke(lint)
    ctx.invoke(mypy)
    ctx.invoke(tests)


namespace = Collection(sync, build, bump_version, tests, lint, mypy, ci)
