"""
Command-line interface for dirgit.

One command per verb. Engine errors print their one-line message and
exit with status 1; malformed operands are usage errors (status 2).
"""

import sys
from functools import update_wrapper

import click
from loguru import logger

from .errors import DirgitError
from .report import format_log, format_status
from .repository import Repository
from .store import repository


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _open(ctx: click.Context, *, create: bool = False) -> Repository:
    repo = repository(ctx.obj["path"], create=create)
    ctx.call_on_close(repo.close)
    if not create:
        repo.require_initialized()
    return repo


def reports_errors(f):
    """Turn engine errors into their message plus exit status 1."""

    @click.pass_context
    def wrapper(ctx: click.Context, *args, **kwargs):
        try:
            return f(ctx, *args, **kwargs)
        except DirgitError as e:
            click.echo(str(e))
            ctx.exit(1)

    return update_wrapper(wrapper, f)


class RawOperandsCommand(click.Command):
    """Command that keeps its operands verbatim, ``--`` included."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta["dirgit.operands"] = list(args)
        return super().parse_args(ctx, args)


@click.group()
@click.option(
    "--repo",
    "path",
    default=".",
    envvar="DIRGIT_REPO",
    type=click.Path(file_okay=False),
    help="Working directory root (default: current directory)",
)
@click.option("--verbose", is_flag=True, help="Log engine activity to stderr")
@click.pass_context
def cli(ctx: click.Context, path: str, verbose: bool):
    """A local, single-user version-control system."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["path"] = path


@cli.command()
@click.option("--branch", default="master", help="Name of the initial branch")
@reports_errors
def init(ctx: click.Context, branch: str):
    """Create a new repository in the working directory."""
    _open(ctx, create=True).init(branch)


@cli.command()
@click.argument("file")
@reports_errors
def add(ctx: click.Context, file: str):
    """Stage FILE for the next commit."""
    _open(ctx).add(file)


@cli.command()
@click.argument("message", required=False, default="")
@reports_errors
def commit(ctx: click.Context, message: str):
    """Commit the staged changes with MESSAGE."""
    _open(ctx).commit(message)


@cli.command()
@click.argument("file")
@reports_errors
def rm(ctx: click.Context, file: str):
    """Unstage FILE, or stop tracking and delete it."""
    _open(ctx).rm(file)


@cli.command()
@reports_errors
def log(ctx: click.Context):
    """Show the current branch's history."""
    click.echo(format_log(_open(ctx).log()))


@cli.command("global-log")
@reports_errors
def global_log(ctx: click.Context):
    """Show every commit ever made."""
    click.echo(format_log(_open(ctx).global_log()))


@cli.command()
@click.argument("message")
@reports_errors
def find(ctx: click.Context, message: str):
    """Print the ids of all commits with exactly MESSAGE."""
    for commit_id in _open(ctx).find(message):
        click.echo(commit_id)


@cli.command(cls=RawOperandsCommand)
@click.argument("operands", nargs=-1)
@reports_errors
def checkout(ctx: click.Context, operands: tuple[str, ...]):
    """Switch branches or restore a file.

    \b
    dirgit checkout BRANCH
    dirgit checkout -- FILE
    dirgit checkout COMMIT -- FILE
    """
    raw = ctx.meta.get("dirgit.operands", list(operands))
    repo = _open(ctx)
    if len(raw) == 1 and raw[0] != "--":
        repo.checkout_branch(raw[0])
    elif len(raw) == 2 and raw[0] == "--":
        repo.checkout_file(raw[1])
    elif len(raw) == 3 and raw[1] == "--":
        repo.checkout_file(raw[2], commit=raw[0])
    else:
        raise click.UsageError("Incorrect operands.", ctx)


@cli.command()
@click.argument("name")
@reports_errors
def branch(ctx: click.Context, name: str):
    """Create branch NAME at the current head."""
    _open(ctx).branch(name)


@cli.command("rm-branch")
@click.argument("name")
@reports_errors
def rm_branch(ctx: click.Context, name: str):
    """Delete branch NAME (its commits are kept)."""
    _open(ctx).rm_branch(name)


@cli.command()
@click.argument("commit_id")
@reports_errors
def reset(ctx: click.Context, commit_id: str):
    """Move the current branch to COMMIT_ID and check it out."""
    _open(ctx).reset(commit_id)


@cli.command()
@reports_errors
def status(ctx: click.Context):
    """Show branches, staged, removed, modified and untracked files."""
    click.echo(format_status(_open(ctx).status()), nl=False)


@cli.command()
@click.argument("name")
@reports_errors
def merge(ctx: click.Context, name: str):
    """Merge branch NAME into the current branch."""
    result = _open(ctx).merge(name)
    if result.strategy == "fast_forward":
        click.echo("Current branch fast-forwarded.")
    elif result.has_conflicts:
        click.echo("Encountered a merge conflict.")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
