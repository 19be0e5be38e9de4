from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Header, Footer, Static, Label
from textual.containers import VerticalScroll
from textual.binding import Binding

from summit.agenda_manager import ToggleOutcome
from summit.views import format_date_header, format_time_range, type_label, type_style

IN_AGENDA = "[bold green]✓ Na Agenda[/]"
NOT_IN_AGENDA = "[dim]+ Adicionar à agenda[/dim]"
PENDING = "[bold yellow]… Atualizando agenda[/]"


class AttractionDetailScreen(Screen):
    """Full card for a single attraction."""

    BINDINGS = [
        Binding("a", "toggle_agenda", "Adicionar/Remover", show=True),
        Binding("escape", "go_back", "Voltar", show=True),
    ]

    def __init__(self, attraction_id: str):
        super().__init__()
        self.attraction_id = attraction_id
        self._agenda_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(id="detail-container")
        yield Footer()

    def on_mount(self) -> None:
        self._populate()

    def _agenda_text(self) -> str:
        manager = self.app.agenda_manager
        if manager.is_pending(self.attraction_id):
            return PENDING
        return IN_AGENDA if manager.is_selected(self.attraction_id) else NOT_IN_AGENDA

    def _populate(self):
        """Fill the detail view with attraction data."""
        container = self.query_one("#detail-container", VerticalScroll)

        attraction = self.app.loader.get(self.attraction_id)
        if not attraction:
            container.mount(Static("Atração não encontrada."))
            return

        style = type_style(attraction.type)
        container.mount(Static(f"[{style}] {type_label(attraction.type)} [/]"))
        container.mount(Static(f"[bold]{attraction.title}[/bold]"))

        meta_parts = []
        if attraction.event_date:
            meta_parts.append(f"[bold]Data:[/bold] {format_date_header(attraction.event_date)}")
        if attraction.start_time:
            time_str = format_time_range(attraction.start_time, attraction.end_time)
            meta_parts.append(f"[bold]Horário:[/bold] {time_str}")
        if attraction.location:
            meta_parts.append(f"[bold]Local:[/bold] {attraction.location}")
        if attraction.speaker:
            meta_parts.append(f"[bold]Palestrante:[/bold] {attraction.speaker}")
        container.mount(Static("\n".join(meta_parts)))

        self._agenda_widget = Static(self._agenda_text())
        container.mount(self._agenda_widget)

        if attraction.description:
            container.mount(Static(""))
            container.mount(Label("[bold]Descrição[/bold]"))
            container.mount(Static(attraction.description))

    def action_toggle_agenda(self) -> None:
        if self.app.loader.get(self.attraction_id) is None:
            return
        if self.app.agenda_manager.is_pending(self.attraction_id):
            self.app.bell()
            return
        if self._agenda_widget:
            self._agenda_widget.update(PENDING)
        self.run_worker(self._toggle(), group="toggle")

    async def _toggle(self):
        outcome = await self.app.agenda_manager.toggle(self.attraction_id)
        if outcome is ToggleOutcome.BUSY:
            self.app.bell()
        if self._agenda_widget:
            self._agenda_widget.update(self._agenda_text())

    def action_go_back(self) -> None:
        self.app.pop_screen()
