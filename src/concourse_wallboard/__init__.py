"""Wall-display dashboard for the downstream jobs of a Concourse resource."""

import asyncio
import logging
from functools import partial

import click
import uvicorn
from dotenv import load_dotenv

from .app import create_app
from .auth import login
from .config import DashboardConfig, parse_jobs
from .credentials import CredentialStore
from .exceptions import ConcourseError, ConfigError
from .log_utils import init_logging
from .models.targets import Target

logger = logging.getLogger(__name__)

DEFAULT_TARGET_NAME = "bonus-miles"


def _resolve_target(
    store: CredentialStore,
    target_name: str | None,
    username: str | None,
    password: str | None,
    teamname: str | None,
    url: str | None,
    insecure: bool,
    save_as: str,
) -> Target:
    """Load a saved target, or log in with a username and password and save a new one."""
    login_flags = [
        flag
        for flag, value in (
            ("--username", username),
            ("--password", password),
            ("--teamname", teamname),
            ("--url", url),
        )
        if value
    ]
    if target_name and login_flags:
        msg = f"Please provide either --target or {', '.join(login_flags)}, not both"
        raise ConfigError(msg)
    if not target_name and not username:
        msg = "Please provide either --target or --username and --password"
        raise ConfigError(msg)

    if target_name:
        return store.load(target_name)

    missing = [
        flag
        for flag, value in (("--password", password), ("--teamname", teamname), ("--url", url))
        if not value
    ]
    if missing:
        msg = f"--username also requires {', '.join(missing)}"
        raise ConfigError(msg)

    logger.info("Logging in to %s as %s", url, username)
    return asyncio.run(
        login(store, save_as, url.rstrip("/"), teamname, username, password, insecure=insecure)
    )


def _read_jobs(jobs: str | None) -> list[str]:
    if jobs is not None:
        return parse_jobs(jobs)
    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        return []
    return parse_jobs(stdin.read(), sep="\n")


def _announce(url: str, auto_open: bool) -> None:
    click.echo(f"Server running at: {url}")
    if auto_open:
        click.launch(url)


@click.command()
@click.option("-t", "--target", "target_name", help="Saved Concourse target")
@click.option("-u", "--username", help="Username")
@click.option("-p", "--password", help="Password")
@click.option(
    "--teamname",
    help="Concourse team name (only needed when logging in with username and password)",
)
@click.option(
    "--url", help="Concourse URL (only needed when logging in with username and password)"
)
@click.option("-k", "--insecure", is_flag=True, help="Skip TLS verification for a new login")
@click.option(
    "--save-as",
    default=DEFAULT_TARGET_NAME,
    show_default=True,
    help="Target name to save a new login under",
)
@click.option("-n", "--pipeline", required=True, help="Pipeline")
@click.option("-r", "--resource", required=True, help="Resource to track")
@click.option("-j", "--jobs", help="Pipe-separated job names (default: read lines from stdin)")
@click.option("--limit", default=5, show_default=True, type=click.IntRange(min=1))
@click.option("-l", "--local", is_flag=True, help="Serve on 127.0.0.1:12345 instead of $PORT")
@click.option("-a", "--open", "auto_open", is_flag=True, help="Automatically open browser window.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
def main(
    target_name: str | None,
    username: str | None,
    password: str | None,
    teamname: str | None,
    url: str | None,
    insecure: bool,
    save_as: str,
    pipeline: str,
    resource: str,
    jobs: str | None,
    limit: int,
    local: bool,
    auto_open: bool,
    log_level: str,
) -> None:
    """Serve a self-refreshing status board for one Concourse resource."""
    load_dotenv()
    init_logging(log_level)

    try:
        target = _resolve_target(
            CredentialStore(),
            target_name,
            username,
            password,
            teamname,
            url,
            insecure,
            save_as,
        )
        config = DashboardConfig.from_env(
            pipeline=pipeline,
            resource=resource,
            jobs=_read_jobs(jobs),
            version_limit=limit,
            local=local,
        )
        config.validate()
    except ConcourseError as e:
        raise click.ClickException(f"{type(e).__name__}: {e}") from e
    except ValueError as e:
        raise click.ClickException(f"ConfigError: {e}") from e

    logger.info("Target: %r", target)
    if not config.jobs:
        logger.warning("No jobs given; the board will only list versions")

    app = create_app(config, target, announce=partial(_announce, config.url, auto_open))
    uvicorn.run(app, host=config.host, port=config.bind_port, log_level=log_level.lower())


if __name__ == "__main__":
    main()
