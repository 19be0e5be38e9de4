import asyncio
import re

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Header, Footer, DataTable, Static, TabbedContent, TabPane
from textual.containers import Vertical
from textual.binding import Binding
from rich.text import Text

from summit.agenda_manager import ToggleOutcome
from summit.models import AgendaEntry
from summit.views import (
    agenda_view,
    attraction_count_label,
    format_date_header,
    format_date_short,
    format_time_range,
    type_label,
    type_style,
)

EMPTY_AGENDA = (
    "[bold]Sua agenda está vazia[/bold]\n"
    "Comece adicionando atrações que deseja participar.\n"
    "Pressione [bold]1[/bold] para ver as atrações disponíveis."
)


def pane_id(event_date: str) -> str:
    """Tab pane id for a date, stable across re-renders."""
    return "agenda-day-" + re.sub(r"[^A-Za-z0-9_-]", "-", event_date)


class AgendaScreen(Screen):
    """The user's agenda, one tab per event date."""

    BINDINGS = [
        Binding("r", "remove_attraction", "Remover", show=True),
        Binding("enter", "view_detail", "Detalhes", show=True),
        Binding("escape", "go_back", "Voltar", show=True),
    ]

    def __init__(self):
        super().__init__()
        self._groups: dict[str, list[AgendaEntry]] = {}
        self._loaded = False
        self._render_lock = asyncio.Lock()

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="agenda-content"):
            yield Static("Carregando sua agenda...", id="agenda-header")
            yield TabbedContent(id="agenda-tabs")
        yield Footer()

    def on_mount(self) -> None:
        self.run_worker(self._load_data(), exclusive=True, group="load")

    def on_screen_resume(self) -> None:
        # the initial load renders on its own
        if self._loaded:
            self.run_worker(self._render_agenda(), group="render")

    async def _load_data(self):
        """Refresh memberships from the repository, then render."""
        if not self.app.loader.attractions:
            await self.app.loader.load_attractions()
        await self.app.agenda_manager.load_memberships()
        await self._render_agenda()
        self._loaded = True

    def _update_header(self, count: int):
        header = self.query_one("#agenda-header", Static)
        if count == 0:
            header.update(EMPTY_AGENDA)
            return
        header.update(f"[bold]Minha Agenda[/bold] - {attraction_count_label(count)}")

    async def _render_agenda(self):
        """Rebuild the date tabs from the current memberships.

        Renders are serialized: clearing and re-adding panes must not
        interleave with another render.
        """
        async with self._render_lock:
            await self._rebuild_tabs()

    async def _rebuild_tabs(self):
        entries = self.app.agenda_manager.agenda_entries(self.app.loader.attractions)
        self._groups = agenda_view(entries)
        self._update_header(len(entries))

        tabs = self.query_one("#agenda-tabs", TabbedContent)
        active = tabs.active
        await tabs.clear_panes()
        tabs.display = bool(self._groups)

        for event_date, day_entries in self._groups.items():
            table = DataTable(cursor_type="row")
            pane = TabPane(
                format_date_short(event_date),
                Static(
                    f"[bold]{format_date_header(event_date)}[/bold]\n"
                    f"{attraction_count_label(len(day_entries))}",
                    classes="day-header",
                ),
                table,
                id=pane_id(event_date),
                name=event_date,
            )
            await tabs.add_pane(pane)
            table.add_columns("Horário", "Título", "Palestrante", "Tipo", "Local")
            for entry in day_entries:
                attraction = entry.attraction
                table.add_row(
                    format_time_range(attraction.start_time, attraction.end_time),
                    attraction.title,
                    attraction.speaker,
                    Text(type_label(attraction.type), style=type_style(attraction.type)),
                    attraction.location,
                    key=attraction.id,
                )

        if active and tabs.query(f"#{active}"):
            tabs.active = active

    def _get_active_table(self) -> DataTable | None:
        tabs = self.query_one("#agenda-tabs", TabbedContent)
        active_id = tabs.active
        if not active_id:
            return None
        pane = tabs.query_one(f"#{active_id}", TabPane)
        tables = pane.query(DataTable)
        return tables.first() if tables else None

    def _selected_id(self) -> str | None:
        table = self._get_active_table()
        if not table or table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    def action_remove_attraction(self) -> None:
        attraction_id = self._selected_id()
        if attraction_id is None or self.app.agenda_manager.is_pending(attraction_id):
            self.app.bell()
            return
        self.run_worker(self._remove(attraction_id), group="toggle")

    async def _remove(self, attraction_id: str):
        outcome = await self.app.agenda_manager.remove(attraction_id)
        if outcome is ToggleOutcome.REMOVED:
            await self._render_agenda()

    def action_view_detail(self) -> None:
        attraction_id = self._selected_id()
        if attraction_id is None:
            return
        from summit.screens.attraction_detail import AttractionDetailScreen
        self.app.push_screen(AttractionDetailScreen(attraction_id))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        from summit.screens.attraction_detail import AttractionDetailScreen
        self.app.push_screen(AttractionDetailScreen(event.row_key.value))

    def action_go_back(self) -> None:
        self.app.pop_screen()
