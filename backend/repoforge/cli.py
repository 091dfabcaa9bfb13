"""
repoforge CLI - provision project repositories from the command line.

Usage:
    repoforge init-db
    repoforge create-user alice alice@example.com
    repoforge create-project alice --name Demo --path demo --code demo
    repoforge write-hooks demo
    repoforge destroy-project demo
"""

import asyncio
import logging
import sys

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from sqlalchemy import select

from repoforge.config import get_settings
from repoforge.database import async_session, engine, init_db
from repoforge.exceptions import NotFoundError, ProjectValidationError
from repoforge.models import Project, User
from repoforge.schemas import ProjectCreate
from repoforge.services.introspection import RepositoryIntrospector
from repoforge.services.provisioner import ProvisioningOutcome, get_provisioner
from repoforge.services.repo_paths import get_resolver
from repoforge.services.validation import validate_project

console = Console()


def run(coro):
    """Run a coroutine and dispose of the engine afterwards."""
    async def wrapper():
        try:
            return await coro
        finally:
            await engine.dispose()
    return asyncio.run(wrapper())


async def find_project(session, path: str) -> Project | None:
    return await session.scalar(select(Project).where(Project.path == path))


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """repoforge - provision git repositories for hosted projects."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@cli.command("init-db")
def init_db_command():
    """Create the database tables."""
    run(init_db())
    console.print(f"[green]Database ready:[/green] {get_settings().database_url}")


@cli.command("create-user")
@click.argument("username")
@click.argument("email")
@click.option("--projects-limit", type=int, default=None, help="Maximum owned projects")
def create_user(username: str, email: str, projects_limit: int | None):
    """Register a user who can own projects."""
    async def _create():
        async with async_session() as session:
            user = User(
                username=username,
                email=email,
                projects_limit=projects_limit if projects_limit is not None else get_settings().default_projects_limit,
            )
            session.add(user)
            await session.commit()
            return user.id

    user_id = run(_create())
    console.print(f"Created user [cyan]{username}[/cyan] ({user_id})")


@cli.command("create-project")
@click.argument("owner")
@click.option("--name", "-n", required=True, help="Display name")
@click.option("--path", "-p", "path_", required=True, help="Repository path segment")
@click.option("--code", "-c", required=True, help="Short code used in URLs")
@click.option("--description", "-d", default="", help="Project description")
@click.option("--public", is_flag=True, help="Make the project public")
@click.option("--default-branch", default="master", show_default=True)
def create_project(owner: str, name: str, path_: str, code: str, description: str, public: bool, default_branch: str):
    """Create a project owned by OWNER and provision its repository."""
    try:
        attrs = ProjectCreate(
            name=name,
            path=path_,
            code=code,
            description=description,
            private_flag=not public,
            default_branch=default_branch,
        ).model_dump()
    except ValidationError as e:
        for error in e.errors():
            console.print(f"[red]{'.'.join(str(p) for p in error['loc'])}:[/red] {error['msg']}")
        sys.exit(1)

    async def _create():
        async with async_session() as session:
            user = await session.scalar(select(User).where(User.username == owner))
            await validate_project(session, attrs, user)
            return await get_provisioner().create_project(session, attrs, user)

    try:
        result = run(_create())
    except ProjectValidationError as e:
        for message in e.messages:
            console.print(f"[red]Error:[/red] {message}")
        sys.exit(1)

    if result.outcome == ProvisioningOutcome.ACCESS_CONTROL_DENIED:
        console.print("[red]Error:[/red] the repository host denied access. Check the gateway permissions.")
        sys.exit(1)
    if result.outcome == ProvisioningOutcome.PERSISTENCE_FAILURE:
        for message in result.errors:
            console.print(f"[red]Error:[/red] {message}")
        sys.exit(1)

    location = get_resolver().resolve(path_)
    console.print(Panel(
        f"Created [cyan]{name}[/cyan]\n"
        f"Repository: {location.path}\n"
        f"Clone URL: {location.url_to_repo}",
        title="Project created",
    ))
    for hook in result.hook_results:
        style = "red" if not hook.ok else "green"
        console.print(f"  hook [bold]{hook.hook}[/bold]: [{style}]{hook.status.value}[/{style}]")


@cli.command("destroy-project")
@click.argument("path")
@click.option("--keep-record", is_flag=True, help="Only remove the repository, keep the project row")
def destroy_project(path: str, keep_record: bool):
    """Delete a project and remove its repository."""
    async def _destroy():
        async with async_session() as session:
            project = await find_project(session, path)
            if not project:
                return None
            provisioner = get_provisioner()
            if keep_record:
                return await provisioner.destroy_project(project)
            return await provisioner.delete_project(session, project)

    result = run(_destroy())
    if result is None:
        console.print(f"[red]Error:[/red] no project with path {path!r}")
        sys.exit(1)
    if not result.ok:
        console.print(f"[red]Error:[/red] could not remove repository ({result.outcome.value})")
        sys.exit(1)
    console.print(f"Removed [cyan]{path}[/cyan]")


@cli.command("write-hooks")
@click.argument("path")
def write_hooks(path: str):
    """(Re)install the managed hooks of a project's repository."""
    async def _lookup():
        async with async_session() as session:
            return await find_project(session, path)

    project = run(_lookup())
    if not project:
        console.print(f"[red]Error:[/red] no project with path {path!r}")
        sys.exit(1)

    results = get_provisioner().ensure_hooks(project)
    if not results:
        console.print(f"[yellow]Repository for {path!r} does not exist yet[/yellow]")
        sys.exit(1)
    for hook in results:
        line = f"{hook.hook}: {hook.status.value}"
        if hook.reason:
            line += f" ({hook.reason})"
        console.print(line)
    if not all(hook.ok for hook in results):
        sys.exit(1)


@cli.command()
@click.argument("path")
def tags(path: str):
    """List tags of a repository, newest-looking first."""
    location = get_resolver().resolve(path)
    try:
        names = RepositoryIntrospector().tags(location)
    except NotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    for name in names:
        console.print(name)


@cli.command()
@click.argument("path")
def branches(path: str):
    """List branches of a repository."""
    introspector = RepositoryIntrospector()
    location = get_resolver().resolve(path)
    if not introspector.exists(location):
        console.print(f"[yellow]Repository {path!r} has no branches yet[/yellow]")
        return

    table = Table(title=path)
    table.add_column("Branch", style="cyan")
    table.add_column("Commit")
    for head in introspector.heads(location):
        table.add_row(head.name, head.commit_id[:8])
    console.print(table)


@cli.command()
@click.argument("path")
@click.argument("tree_path", required=False)
@click.option("--ref", "-r", default="HEAD", show_default=True, help="Branch, tag or commit")
def ls(path: str, tree_path: str | None, ref: str):
    """List a directory of a repository at a given ref."""
    location = get_resolver().resolve(path)
    try:
        tree = RepositoryIntrospector().tree(location, ref, tree_path)
    except NotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if not hasattr(tree, "items"):
        console.print(f"[yellow]{tree_path} is a file[/yellow]")
        return
    for entry in tree.items():
        console.print(entry.path.decode("utf-8", errors="replace"))


def main():
    cli()


if __name__ == "__main__":
    main()
