"""Application Host Shell.

Top-level ``CTk`` window.  Shows ``LoginView`` (or ``RegisterView``) while no
session exists and a minimal signed-in frame otherwise, switching whenever
``SessionManager`` reports a change.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import customtkinter as ctk

from envirolens import __version__ as _APP_VERSION
from envirolens.auth import SessionManager
from envirolens.logger import StructuredLogger, get_logger
from envirolens.models.auth_models import SessionUser
from envirolens.services import ServiceContainer
from envirolens.ui.login_view import LoginView
from envirolens.ui.register_view import RegisterView
from envirolens.ui.theme import (
    ACCENT_PRIMARY,
    CONTENT_BG,
    FONT_BODY,
    FONT_BRAND,
    PADDING_LG,
    TEXT_PRIMARY,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)


class AppShell(ctk.CTk):
    """Main window.  Navigation is a pure function of the session."""

    def __init__(
        self,
        session: SessionManager,
        services: ServiceContainer,
        logger: StructuredLogger,
    ) -> None:
        super().__init__()
        self._session: SessionManager = session
        self._services: ServiceContainer = services
        self._logger: StructuredLogger = logger
        self._current_frame: Optional[ctk.CTkFrame] = None

        self.title(f"EnviroLens {_APP_VERSION}")
        self.geometry(f"{WINDOW_WIDTH}x{WINDOW_HEIGHT}")
        ctk.set_appearance_mode("light")

        # Session changes arrive on worker threads; hop to the Tk loop.
        self._unsubscribe: Callable[[], None] = session.subscribe(
            lambda user: self.after(0, lambda: self._show_for(user))
        )
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self._show_for(session.current_user)

    def _show_for(self, user: Optional[SessionUser]) -> None:
        if user is None:
            self._show_login()
        else:
            self._replace_frame()
            self._logger.info("Showing signed-in view for %s.", user.email)
            self._current_frame = self._build_home(user)

    def _show_login(self) -> None:
        self._replace_frame()
        self._logger.info("Showing login view.")
        self._current_frame = LoginView(
            parent=self,
            services=self._services,
            logger=get_logger("ui.login"),
            on_create_account=self._show_register,
        )

    def _show_register(self) -> None:
        self._replace_frame()
        self._logger.info("Showing registration view.")
        self._current_frame = RegisterView(
            parent=self,
            services=self._services,
            logger=get_logger("ui.register"),
            on_back=self._show_login,
        )

    def _replace_frame(self) -> None:
        if self._current_frame is not None:
            self._current_frame.destroy()
            self._current_frame = None

    def _build_home(self, user: SessionUser) -> ctk.CTkFrame:
        frame = ctk.CTkFrame(self, fg_color=CONTENT_BG)
        frame.pack(fill="both", expand=True)
        ctk.CTkLabel(frame, text="Welcome back", font=FONT_BRAND, text_color=TEXT_PRIMARY).pack(
            pady=(PADDING_LG * 2, 4)
        )
        ctk.CTkLabel(frame, text=user.email, font=FONT_BODY, text_color=TEXT_PRIMARY).pack()
        ctk.CTkButton(
            frame,
            text="Sign Out",
            fg_color=ACCENT_PRIMARY,
            command=self._handle_sign_out,
        ).pack(pady=PADDING_LG)
        return frame

    def _handle_sign_out(self) -> None:
        authenticator = self._services["session_authenticator"]
        threading.Thread(target=authenticator.sign_out, daemon=True).start()

    def _on_close(self) -> None:
        self._unsubscribe()
        self.destroy()
