"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import DoesNotExist, Exists, MultipleResolution, SubUnit


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("CONSULTA DE PARTIDAS", style="bold cyan")
    subtitle = Text("Catastro CABA • Deuda ABL • Notificación", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_sub_units_table(units: Iterable[SubUnit]) -> Table:
    table = Table(title="Unidades funcionales")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Partida", style="cyan", no_wrap=True)
    table.add_column("Piso", style="white")
    table.add_column("Dpto", style="white")
    for index, unit in enumerate(units, start=1):
        table.add_row(str(index), unit.sub_parcel_id, unit.floor, unit.unit)
    return table


def build_resolution_panel(result) -> Panel:
    """Panel para `SingleResolution` / `MultipleResolution`."""

    if isinstance(result, MultipleResolution):
        header = Text(f"Propiedad horizontal: {len(result.sub_units)} unidades", style="bold")
        return Panel(Group(header, build_sub_units_table(result.sub_units)), border_style="green")

    body = Text.assemble(("Partida matriz: ", "bold"), (result.matrix_parcel_id, "cyan"))
    return Panel(body, border_style="green")


def build_existence_panel(result) -> Panel:
    """Panel para `Exists` / `DoesNotExist` / `Indeterminate`."""

    if isinstance(result, Exists):
        parts: list = [Text(result.message, style="bold green")]
        if result.matrix_parcel_id:
            parts.append(Text.assemble(("Partida matriz: ", "bold"), (result.matrix_parcel_id, "cyan")))
        if result.sub_units:
            parts.append(build_sub_units_table(result.sub_units))
        return Panel(Group(*parts), title="Verificación", border_style="green")

    if isinstance(result, DoesNotExist):
        return Panel(Text(result.message, style="bold red"), title="Verificación", border_style="red")

    body = Text.assemble((result.message, "bold yellow"), "\n", (result.reason, "dim"))
    return Panel(body, title="Verificación", border_style="yellow")
