"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `fetch` y `resolve`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import RetrievalResult


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (se omite en modo `--json`)."""

    title = Text("avatar-fetch", style="bold cyan")
    subtitle = Text("Facebook • Instagram • Twitter profile pictures", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_result_panel(result: RetrievalResult) -> Panel:
    """Panel con el resultado de la cadena: verde si es foto real, amarillo si es fallback."""

    if not result.ok:
        body = Text(result.error or "No avatar found", style="red")
        return Panel(body, title=Text("Error", style="bold red"), border_style="red")

    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", no_wrap=True)
    table.add_column(style="white")
    table.add_row("Platform", result.platform or "-")
    table.add_row("Username", result.username or "-")
    table.add_row("Strategy", result.strategy or "-")
    table.add_row("Avatar", Text(result.avatar_url or "", style="magenta"))
    if result.warning:
        table.add_row("Warning", Text(result.warning, style="yellow"))

    style = "yellow" if result.is_placeholder else "green"
    title = "Partial success" if result.is_placeholder else "Success"
    return Panel(table, title=Text(title, style=f"bold {style}"), border_style=style)


def build_attempts_table(rows: list[tuple[str, str, str]]) -> Table:
    """Tabla de intentos de estrategia (`--verbose`)."""

    table = Table(title="Strategy attempts")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Outcome", style="white")
    table.add_column("Detail", style="dim")
    for name, outcome, detail in rows:
        style = "green" if outcome == "hit" else "red"
        table.add_row(name, Text(outcome, style=style), detail)
    return table
