import logging
from pathlib import Path

from textual.app import App
from textual.binding import Binding

from summit.agenda_manager import AgendaManager
from summit.backend import build_repository, close_repository
from summit.config import Settings, local_user
from summit.data_loader import AttractionLoader
from summit.models import Notification, UserContext
from summit.repository import AttractionRepository

logger = logging.getLogger(__name__)

CSS_PATH = Path(__file__).parent / "styles" / "app.tcss"


class SummitApp(App):
    """Siará Tech Summit companion: browse attractions and build your agenda."""

    TITLE = "Siará Tech Summit"
    SUB_TITLE = "Minha Agenda"
    CSS_PATH = CSS_PATH

    BINDINGS = [
        Binding("1", "show_browse", "Atrações", show=True),
        Binding("2", "show_agenda", "Minha Agenda", show=True),
        Binding("l", "sign_out", "Sair da conta", show=True),
        Binding("q", "quit", "Fechar", show=True),
    ]

    def __init__(self, settings: Settings | None = None):
        super().__init__()
        self.settings = settings or Settings()
        self.user: UserContext | None = None
        self.repository: AttractionRepository | None = None
        self.loader: AttractionLoader | None = None
        self.agenda_manager: AgendaManager | None = None

    def on_mount(self) -> None:
        if self.settings.backend == "local":
            self.start_session(local_user(self.settings))
        else:
            from summit.screens.login import LoginScreen
            self.push_screen(LoginScreen())

    def notify_user(self, notification: Notification) -> None:
        """Forward a core notification to textual's toast area."""
        self.notify(
            notification.message,
            title=notification.title,
            severity=notification.severity.value,
        )

    def start_session(self, user: UserContext) -> None:
        """Wire the repository and core for a signed-in user and show the attractions."""
        from summit.screens.browse import BrowseScreen

        self.user = user
        self.repository = build_repository(self.settings, user)
        self.loader = AttractionLoader(self.repository, self.notify_user)
        self.agenda_manager = AgendaManager(self.repository, user, self.notify_user)
        self.sub_title = user.display_name
        logger.info("Session started for %s", user.user_id)
        if len(self.screen_stack) > 1:
            self.switch_screen(BrowseScreen())
        else:
            self.push_screen(BrowseScreen())

    async def action_show_browse(self) -> None:
        if self.user is None:
            return
        while len(self.screen_stack) > 2:
            await self.pop_screen()

    def action_show_agenda(self) -> None:
        if self.user is None:
            return
        from summit.screens.agenda import AgendaScreen
        if isinstance(self.screen, AgendaScreen):
            return
        self.push_screen(AgendaScreen())

    async def action_sign_out(self) -> None:
        if self.user is None:
            return
        if self.settings.backend == "local":
            self.notify("Modo local: não há conta para sair.", severity="warning")
            return
        from summit.screens.login import LoginScreen

        logger.info("Signing out %s", self.user.user_id)
        await self._end_session()
        while len(self.screen_stack) > 2:
            await self.pop_screen()
        self.switch_screen(LoginScreen())

    async def _end_session(self) -> None:
        if self.repository is not None:
            await close_repository(self.repository)
        self.user = None
        self.repository = None
        self.loader = None
        self.agenda_manager = None
        self.sub_title = self.SUB_TITLE

    async def action_quit(self) -> None:
        await self._end_session()
        self.exit()
