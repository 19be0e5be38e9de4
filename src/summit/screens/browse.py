from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Header, Footer, DataTable, Input, Label, Static
from textual.containers import Horizontal, Vertical
from textual.binding import Binding
from rich.text import Text

from summit.agenda_manager import ToggleOutcome
from summit.models import Attraction
from summit.views import (
    ALL_TYPES,
    TYPE_FILTERS,
    TYPE_FILTER_LABELS,
    browse_filter,
    format_date_short,
    format_time_range,
    type_label,
    type_style,
)

PENDING_MARK = Text("…", style="bold yellow")


def agenda_mark(selected: bool, pending: bool) -> Text:
    if pending:
        return PENDING_MARK
    if selected:
        return Text("✓", style="bold green")
    return Text("")


class BrowseScreen(Screen):
    """All attractions, filterable by text and type."""

    BINDINGS = [
        Binding("slash", "focus_search", "Buscar", show=True),
        Binding("a", "toggle_agenda", "Adicionar/Remover", show=True),
        Binding("t", "cycle_type", "Filtrar tipo", show=True),
        Binding("enter", "view_detail", "Detalhes", show=True),
        Binding("escape", "clear_search", "Limpar", show=False),
    ]

    def __init__(self):
        super().__init__()
        self._search_text: str = ""
        self._type_idx: int = 0
        self._loaded = False

    @property
    def type_filter(self) -> str:
        return TYPE_FILTERS[self._type_idx]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="browse-content"):
            yield Static("[bold]Atrações do Evento[/bold]", id="browse-title")
            with Horizontal(id="search-bar"):
                yield Label("Buscar:")
                yield Input(
                    placeholder="Buscar por título, palestrante ou descrição...",
                    id="search-input",
                )
                yield Static(TYPE_FILTER_LABELS[ALL_TYPES], id="type-filter")
            yield Static("Carregando atrações...", id="browse-status")
            yield DataTable(id="attractions-table")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#attractions-table", DataTable)
        table.add_column("Agenda", key="mark")
        table.add_columns("Data", "Horário", "Título", "Palestrante", "Tipo", "Local")
        table.cursor_type = "row"
        self.run_worker(self._load_data(), exclusive=True, group="load")

    def on_screen_resume(self) -> None:
        if self._loaded:
            self._populate_table()

    async def _load_data(self):
        """Fetch attractions and the user's memberships, then fill the table."""
        await self.app.loader.load_attractions()
        await self.app.agenda_manager.load_memberships()
        self._loaded = True
        self._populate_table()
        self.query_one("#attractions-table", DataTable).focus()

    def _filtered_attractions(self) -> list[Attraction]:
        return browse_filter(self.app.loader.attractions, self._search_text, self.type_filter)

    def _build_row(self, attraction: Attraction) -> tuple:
        manager = self.app.agenda_manager
        mark = agenda_mark(manager.is_selected(attraction.id), manager.is_pending(attraction.id))
        return (
            mark,
            format_date_short(attraction.event_date),
            format_time_range(attraction.start_time, attraction.end_time),
            attraction.title,
            attraction.speaker,
            Text(type_label(attraction.type), style=type_style(attraction.type)),
            attraction.location,
        )

    def _populate_table(self):
        """Rebuild the table from the current search text and type filter."""
        table = self.query_one("#attractions-table", DataTable)
        status = self.query_one("#browse-status", Static)
        table.clear()

        attractions = self._filtered_attractions()
        for attraction in attractions:
            table.add_row(*self._build_row(attraction), key=attraction.id)

        if attractions:
            total = self.app.loader.attraction_count()
            counts = ", ".join(
                f"{type_label(t)}: {n}" for t, n in self.app.loader.type_counts().items()
            )
            status.update(f"{len(attractions)} de {total} atrações ({counts})")
        else:
            status.update(
                "[bold]Nenhuma atração encontrada[/bold]\n"
                "Tente ajustar os filtros ou termos de busca"
            )

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self._search_text = event.value
            self._populate_table()

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    def action_clear_search(self) -> None:
        inp = self.query_one("#search-input", Input)
        inp.value = ""
        self._search_text = ""
        self._populate_table()
        self.query_one("#attractions-table", DataTable).focus()

    def action_cycle_type(self) -> None:
        self._type_idx = (self._type_idx + 1) % len(TYPE_FILTERS)
        self.query_one("#type-filter", Static).update(TYPE_FILTER_LABELS[self.type_filter])
        self._populate_table()

    def _selected_id(self) -> str | None:
        table = self.query_one("#attractions-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    def action_toggle_agenda(self) -> None:
        attraction_id = self._selected_id()
        if attraction_id is None or self.app.agenda_manager.is_pending(attraction_id):
            self.app.bell()
            return
        table = self.query_one("#attractions-table", DataTable)
        table.update_cell(attraction_id, "mark", PENDING_MARK)
        self.run_worker(self._toggle(attraction_id), group="toggle")

    async def _toggle(self, attraction_id: str):
        outcome = await self.app.agenda_manager.toggle(attraction_id)
        if outcome is ToggleOutcome.BUSY:
            self.app.bell()
        self._refresh_mark(attraction_id)

    def _refresh_mark(self, attraction_id: str):
        table = self.query_one("#attractions-table", DataTable)
        if attraction_id not in table.rows:
            return
        manager = self.app.agenda_manager
        table.update_cell(
            attraction_id,
            "mark",
            agenda_mark(manager.is_selected(attraction_id), manager.is_pending(attraction_id)),
        )

    def action_view_detail(self) -> None:
        attraction_id = self._selected_id()
        if attraction_id is None:
            return
        from summit.screens.attraction_detail import AttractionDetailScreen
        self.app.push_screen(AttractionDetailScreen(attraction_id))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        from summit.screens.attraction_detail import AttractionDetailScreen
        self.app.push_screen(AttractionDetailScreen(event.row_key.value))
