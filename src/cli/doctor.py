"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

PROBES: tuple[tuple[str, str], ...] = (
    ("Facebook Graph", "https://graph.facebook.com"),
    ("Instagram", "https://www.instagram.com"),
    ("Twitter syndication", "https://syndication.twitter.com"),
    ("unavatar.io", "https://unavatar.io"),
    ("Placeholder service", "https://ui-avatars.com"),
)


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


async def _check_all(settings: AppSettings) -> list[tuple[str, bool, str]]:
    results = await asyncio.gather(*(_check_http(url, settings) for _, url in PROBES))
    return [(name, ok, detail) for (name, _), (ok, detail) in zip(PROBES, results)]


@app.command()
def run() -> None:
    """Show effective settings and probe every upstream host."""

    settings = AppSettings()

    table = Table(title="avatar-fetch Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    env_file = get_user_env_file()
    table.add_row("User .env", "OK" if env_file.exists() else "OPTIONAL", str(env_file))
    table.add_row("Download retries", "OK", f"{settings.download_retries} x {settings.download_timeout_seconds}s")
    table.add_row("Placeholder base", "OK", settings.placeholder_base_url)
    table.add_row(
        "Unchecked mirrors",
        "ON" if settings.assume_unchecked_mirrors else "OFF",
        "avatar.vercel.sh accepted without probing" if settings.assume_unchecked_mirrors else "probed like unavatar",
    )

    # Connectivity (best-effort)
    for name, ok, detail in asyncio.run(_check_all(settings)):
        table.add_row(name, "OK" if ok else "FAIL", detail)

    _console.print(table)
