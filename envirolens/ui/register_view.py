"""Register View: create an account.

**Thin UI Rule**: the view gathers a ``RegistrationForm`` and hands it to
``RegistrationService.register()`` on a background thread; every rule and
message comes back in the ``AuthResult``.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Callable, Optional

import customtkinter as ctk

from envirolens.logger import StructuredLogger
from envirolens.models.auth_models import AuthResult
from envirolens.models.user import RegistrationForm
from envirolens.services import ServiceContainer
from envirolens.services.registration_service import RegistrationService
from envirolens.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BRAND,
    FONT_BUTTON,
    FONT_SMALL,
    INPUT_BG,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_CREATE_TEXT: str = "Create Account"
_AREA_PLACEHOLDER: str = "Select your area"
_RETURN_DELAY_MS: int = 3000


def _thread_spawn(task: Callable[[], None]) -> None:
    threading.Thread(target=task, daemon=True).start()


class RegisterView(ctk.CTkFrame):
    """Registration card.

    Parameters
    ----------
    parent:
        The root window.
    services:
        Wired service container.
    logger:
        Structured logger.
    on_back:
        Called to return to the login screen, after a successful
        registration or from the back link.
    spawn:
        Runs the registration call.  Defaults to a daemon thread.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        services: ServiceContainer,
        logger: StructuredLogger,
        on_back: Callable[[], None],
        spawn: Optional[Callable[[Callable[[], None]], None]] = None,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._service: RegistrationService = services["registration_service"]
        self._logger: StructuredLogger = logger
        self._on_back: Callable[[], None] = on_back
        self._spawn = spawn or _thread_spawn

        self._name_entry: Optional[ctk.CTkEntry] = None
        self._username_entry: Optional[ctk.CTkEntry] = None
        self._email_entry: Optional[ctk.CTkEntry] = None
        self._password_entry: Optional[ctk.CTkEntry] = None
        self._confirm_entry: Optional[ctk.CTkEntry] = None
        self._area_menu: Optional[ctk.CTkOptionMenu] = None
        self._terms_checkbox: Optional[ctk.CTkCheckBox] = None
        self._submit_button: Optional[ctk.CTkButton] = None
        self._status_label: Optional[ctk.CTkLabel] = None
        self._return_job: Optional[str] = None

        self._build_ui()

    def destroy(self) -> None:
        if self._return_job is not None:
            self.after_cancel(self._return_job)
            self._return_job = None
        super().destroy()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self.pack(fill="both", expand=True)

        card = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=16)
        card.pack(expand=True, padx=PADDING_LG, pady=PADDING_LG)

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=20)

        ctk.CTkLabel(inner, text="Join EnviroLens", font=FONT_BRAND, text_color=TEXT_PRIMARY).pack(
            pady=(0, PADDING_SM)
        )

        self._name_entry = self._entry(inner, "Full name")
        self._username_entry = self._entry(inner, "Username")
        self._email_entry = self._entry(inner, "Email address")
        self._password_entry = self._entry(inner, "Password", show="*")
        self._confirm_entry = self._entry(inner, "Confirm password", show="*")

        self._area_menu = ctk.CTkOptionMenu(
            inner,
            values=list(self._service.areas),
            font=FONT_BODY,
            fg_color=ACCENT_PRIMARY,
            button_color=ACCENT_HOVER,
            corner_radius=CORNER_RADIUS,
        )
        self._area_menu.set(_AREA_PLACEHOLDER)
        self._area_menu.pack(fill="x", pady=(PADDING_SM, 0))

        self._terms_checkbox = ctk.CTkCheckBox(
            inner,
            text="I accept the terms and conditions",
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            fg_color=ACCENT_PRIMARY,
        )
        self._terms_checkbox.pack(anchor="w", pady=(PADDING_SM, 0))

        self._submit_button = ctk.CTkButton(
            inner,
            text=_CREATE_TEXT,
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            corner_radius=CORNER_RADIUS,
            height=44,
            command=self._handle_submit,
        )
        self._submit_button.pack(fill="x", pady=(PADDING_MD, PADDING_SM))

        ctk.CTkButton(
            inner,
            text="Already have an account? Sign in",
            font=FONT_SMALL,
            fg_color="transparent",
            hover=False,
            text_color=ACCENT_PRIMARY,
            command=self._on_back,
        ).pack()

        self._status_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=320,
        )
        self._status_label.pack(fill="x", pady=(PADDING_SM, 0))

    def _entry(self, parent: ctk.CTkFrame, placeholder: str, show: str = "") -> ctk.CTkEntry:
        entry = ctk.CTkEntry(
            parent,
            placeholder_text=placeholder,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            corner_radius=CORNER_RADIUS,
            height=38,
            show=show,
        )
        entry.pack(fill="x", pady=(PADDING_SM, 0))
        return entry

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _collect_form(self) -> RegistrationForm:
        area = self._area_menu.get()
        return RegistrationForm(
            name=self._name_entry.get(),
            username=self._username_entry.get().strip(),
            email=self._email_entry.get().strip(),
            password=self._password_entry.get(),
            confirm_password=self._confirm_entry.get(),
            area="" if area == _AREA_PLACEHOLDER else area,
            accept_terms=bool(self._terms_checkbox.get()),
        )

    def _handle_submit(self) -> None:
        form = self._collect_form()
        self._status_label.configure(text="", text_color=ERROR_TEXT)
        self._set_loading(True)
        self._spawn(lambda: self._do_register(form))

    def _do_register(self, form: RegistrationForm) -> None:
        """Background thread: delegate to RegistrationService.register()."""
        result = self._service.register(form)
        try:
            self.after(0, lambda: self._show_result(result))
        except (RuntimeError, tk.TclError) as exc:
            self._logger.debug("Dropped registration result after close: %s", exc)

    def _show_result(self, result: AuthResult) -> None:
        self._set_loading(False)
        if result.success:
            self._status_label.configure(
                text="Account created! You can now sign in.", text_color=SUCCESS_TEXT,
            )
            self._return_job = self.after(_RETURN_DELAY_MS, self._return_to_login)
        else:
            self._status_label.configure(
                text=result.error_message or "Registration failed.", text_color=ERROR_TEXT,
            )

    def _return_to_login(self) -> None:
        self._return_job = None
        self._on_back()

    def _set_loading(self, loading: bool) -> None:
        if loading:
            self._submit_button.configure(text="Creating account...", state="disabled")
        else:
            self._submit_button.configure(text=_CREATE_TEXT, state="normal")
