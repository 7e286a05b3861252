"""Login screen for the browser-based device-authorization flow."""

from __future__ import annotations

from flagdash.cli.models import DeviceAuthResponse
from flagdash.cli.tui.actions import Action, BrowserLoginRequested, LoginCancelled, Quit
from flagdash.cli.tui.types import KEY_ENTER_CODES, KEY_ESCAPE, LoginPhase
from flagdash.cli.tui.views.base import BaseView

SPINNER_FRAMES = "|/-\\"


class LoginView(BaseView):
    """Phases: idle -> waiting -> success, or error with retry."""

    def __init__(self) -> None:
        self.phase = LoginPhase.IDLE
        self.user_code = ""
        self.verification_url = ""
        self.error_message = ""
        self.spinner = 0

    def set_waiting(self, device_auth: DeviceAuthResponse) -> None:
        self.phase = LoginPhase.WAITING
        self.user_code = device_auth.user_code
        self.verification_url = device_auth.verification_url
        self.error_message = ""

    def set_success(self) -> None:
        self.phase = LoginPhase.SUCCESS

    def set_error(self, message: str) -> None:
        self.phase = LoginPhase.ERROR
        self.error_message = message

    def reset(self) -> None:
        self.phase = LoginPhase.IDLE
        self.user_code = ""
        self.verification_url = ""
        self.error_message = ""

    def tick(self) -> None:
        """Advance the waiting spinner."""
        self.spinner = (self.spinner + 1) % len(SPINNER_FRAMES)

    def handle_key(self, key: int) -> Action | None:
        if self.phase is LoginPhase.IDLE:
            if key in KEY_ENTER_CODES:
                return BrowserLoginRequested()
            if key == KEY_ESCAPE:
                return Quit()
        elif self.phase is LoginPhase.WAITING:
            if key == KEY_ESCAPE:
                self.reset()
                return LoginCancelled()
        elif self.phase is LoginPhase.ERROR:
            if key in KEY_ENTER_CODES:
                self.reset()
                return BrowserLoginRequested()
            if key == KEY_ESCAPE:
                self.reset()
        return None

    def get_render_lines(self, width: int, height: int) -> list[str]:
        lines = ["FlagDash", ""]
        if self.phase is LoginPhase.IDLE:
            lines += [
                "Press Enter to log in with your browser",
                "",
                "Enter to log in  Esc to quit",
            ]
        elif self.phase is LoginPhase.WAITING:
            lines += [
                "A browser window should have opened for you to log in.",
                f"If not, go to: {self.verification_url}",
                "",
                "Enter this code when prompted:",
                f"  {self.user_code}  ",
                "",
                f"{SPINNER_FRAMES[self.spinner]} Waiting for authorization...",
                "",
                "Esc to cancel",
            ]
        elif self.phase is LoginPhase.SUCCESS:
            lines.append("Logged in successfully! Loading...")
        else:
            lines += [self.error_message, "", "Enter to retry  Esc to go back"]
        return [line[:width] for line in lines]
