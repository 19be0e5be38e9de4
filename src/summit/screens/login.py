import logging

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Header, Footer, Button, Input, Label, Static, TabbedContent, TabPane
from textual.containers import Vertical

from summit.auth import sign_in, sign_up
from summit.errors import AuthError, ConfigError

logger = logging.getLogger(__name__)


class LoginScreen(Screen):
    """Email/password sign-in and sign-up."""

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="login-container"):
            yield Static(
                "[bold]Siará Tech Summit[/bold]\nSua agenda personalizada do evento",
                id="login-title",
            )
            with TabbedContent(id="login-tabs"):
                with TabPane("Entrar", id="tab-login"):
                    yield Label("Email")
                    yield Input(placeholder="seu@email.com", id="login-email")
                    yield Label("Senha")
                    yield Input(password=True, id="login-password")
                    yield Button("Entrar", id="login-button", variant="primary")
                with TabPane("Cadastrar", id="tab-signup"):
                    yield Label("Nome completo")
                    yield Input(placeholder="Seu nome completo", id="signup-name")
                    yield Label("Email")
                    yield Input(placeholder="seu@email.com", id="signup-email")
                    yield Label("Senha")
                    yield Input(password=True, id="signup-password")
                    yield Button("Cadastrar", id="signup-button", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#login-email", Input).focus()

    def _value(self, widget_id: str) -> str:
        return self.query_one(f"#{widget_id}", Input).value.strip()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login-button":
            self._submit(event.button, self._do_sign_in())
        elif event.button.id == "signup-button":
            self._submit(event.button, self._do_sign_up())

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id in ("login-email", "login-password"):
            self.query_one("#login-button", Button).press()
        elif event.input.id in ("signup-name", "signup-email", "signup-password"):
            self.query_one("#signup-button", Button).press()

    def _submit(self, button: Button, job) -> None:
        button.disabled = True
        self.run_worker(self._run(button, job), exclusive=True, group="auth")

    async def _run(self, button: Button, job):
        try:
            await job
        except (AuthError, ConfigError) as exc:
            logger.warning("Authentication failed: %s", exc)
            self.notify(str(exc), title="Erro de autenticação", severity="error")
        finally:
            button.disabled = False

    async def _do_sign_in(self):
        email = self._value("login-email")
        password = self.query_one("#login-password", Input).value
        if not email or not password:
            self.notify("Informe email e senha.", severity="warning")
            return
        user = await sign_in(self.app.settings, email, password)
        self.app.start_session(user)

    async def _do_sign_up(self):
        email = self._value("signup-email")
        password = self.query_one("#signup-password", Input).value
        if not email or not password:
            self.notify("Informe email e senha.", severity="warning")
            return
        user = await sign_up(self.app.settings, email, password, self._value("signup-name"))
        if not user.access_token:
            self.notify(
                "Verifique seu email para confirmar o cadastro e depois entre.",
                title="Cadastro realizado",
            )
            self.query_one("#login-tabs", TabbedContent).active = "tab-login"
            return
        self.app.start_session(user)
