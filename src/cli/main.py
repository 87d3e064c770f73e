"""CLI principal (Typer + Rich).

Comandos:
- `fetch`: link de perfil -> plataforma/username -> cadena de estrategias -> (descarga).
- `resolve`: igual, pero con plataforma y username explícitos.
- `download`: solo egress + guardado en disco.
- `doctor`: diagnóstico de entorno.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable

import typer
from rich.console import Console

from adapters.file_save import save_avatar
from adapters.image_egress import download_avatar
from adapters.json_exporter import export_result_json, result_to_json
from cli import doctor
from cli.ui_components import build_attempts_table, build_result_panel, print_banner
from core.config import AppSettings
from core.domain.errors import AvatarFetchError, EgressFailure, UnsupportedProfileUrlError
from core.domain.models import DownloadedAvatar, RetrievalResult
from core.logger import configure_logging
from core.services.platform_router import route_profile_url
from core.services.resolution_chain import AvatarResolver, ChainHooks

app = typer.Typer(no_args_is_help=True, help="Download Facebook, Instagram and Twitter profile pictures.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


async def _resolve(
    settings: AppSettings,
    lookup: Callable[[AvatarResolver], Awaitable[RetrievalResult]],
) -> tuple[RetrievalResult, list[tuple[str, str, str]]]:
    attempts: list[tuple[str, str, str]] = []
    hooks = ChainHooks(
        miss=lambda _label, name, reason: attempts.append((name, "miss", reason)),
        hit=lambda _label, name, url: attempts.append((name, "hit", url)),
    )
    result = await lookup(AvatarResolver(settings, hooks=hooks))
    return result, attempts


async def _download_with_fallback(url: str, settings: AppSettings) -> DownloadedAvatar:
    try:
        return await download_avatar(url, settings)
    except EgressFailure as exc:
        _console.print(f"[yellow]Download failed ({exc.reason}); using placeholder instead.[/yellow]")
        return await download_avatar(exc.fallback_url, settings)


def _report(
    result: RetrievalResult,
    attempts: list[tuple[str, str, str]],
    *,
    json_path: Path | None,
    quiet: bool,
    verbose: bool,
) -> None:
    if json_path is not None:
        if str(json_path) == "-":
            typer.echo(result_to_json(result), nl=False)
        else:
            export_result_json(result=result, output_path=json_path)
    if quiet:
        return
    if verbose and attempts:
        _console.print(build_attempts_table(attempts))
    _console.print(build_result_panel(result))


def _save(result: RetrievalResult, settings: AppSettings, output_dir: Path | None) -> None:
    if not result.avatar_url:
        return
    try:
        avatar = asyncio.run(_download_with_fallback(result.avatar_url, settings))
    except AvatarFetchError as exc:
        _console.print(f"[red]Download failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    path = save_avatar(
        avatar,
        platform=result.platform or "social",
        username=result.username or "user",
        output_dir=output_dir or settings.output_dir,
    )
    _console.print(f"[green]Saved avatar to:[/green] {path}")


@app.command()
def fetch(
    profile_url: str = typer.Argument(..., help="Facebook, Instagram or Twitter/X profile link."),
    download: bool = typer.Option(False, "--download", "-d", help="Download the resolved image."),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Where to save the image."),
    json_path: Path | None = typer.Option(None, "--json", help="Write the result as JSON ('-' for stdout)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every strategy attempt."),
) -> None:
    """Resolve the avatar behind a profile link."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    quiet = json_path is not None and str(json_path) == "-"

    try:
        request = route_profile_url(profile_url)
    except UnsupportedProfileUrlError as exc:
        _console.print(f"[red]Unsupported link:[/red] {exc.reason}")
        raise typer.Exit(code=2) from exc

    if not quiet:
        print_banner(_console)
        _console.print(f"Detected [bold]{request.platform.label()}[/bold] profile for [bold]{request.username}[/bold]")

    result, attempts = asyncio.run(_resolve(settings, lambda resolver: resolver.resolve_request(request)))
    _report(result, attempts, json_path=json_path, quiet=quiet, verbose=verbose)

    if download and result.ok:
        _save(result, settings, output_dir)


@app.command()
def resolve(
    platform: str = typer.Argument(..., help="facebook, instagram or twitter (x)."),
    username: str = typer.Argument(..., help="Username, vanity name or numeric ID."),
    download: bool = typer.Option(False, "--download", "-d", help="Download the resolved image."),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Where to save the image."),
    json_path: Path | None = typer.Option(None, "--json", help="Write the result as JSON ('-' for stdout)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every strategy attempt."),
) -> None:
    """Resolve an avatar from an explicit platform and username."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    quiet = json_path is not None and str(json_path) == "-"

    result, attempts = asyncio.run(_resolve(settings, lambda resolver: resolver.resolve(platform, username)))
    _report(result, attempts, json_path=json_path, quiet=quiet, verbose=verbose)

    if not result.ok:
        raise typer.Exit(code=2)
    if download:
        _save(result, settings, output_dir)


@app.command(name="download")
def download_cmd(
    url: str = typer.Argument(..., help="Avatar URL to download."),
    platform: str = typer.Option("social", "--platform", "-p", help="Platform used in the file name."),
    username: str = typer.Option("user", "--username", "-u", help="Username used in the file name."),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Where to save the image."),
) -> None:
    """Download an avatar URL through the retrying egress client."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    result = RetrievalResult(avatar_url=url, platform=platform, username=username)
    _save(result, settings, output_dir)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
