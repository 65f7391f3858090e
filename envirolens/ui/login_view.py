"""Login View: username/password and biometric sign-in.

**Thin UI Rule**: this module gathers inputs, forwards them to
``LoginOrchestrator`` and renders whatever state it reports.  Navigation
to the signed-in screen is driven by ``SessionManager``, not by this view.
"""

from __future__ import annotations

import tkinter as tk
from typing import Callable, Optional

import customtkinter as ctk

from envirolens.logger import StructuredLogger
from envirolens.models.auth_models import LoginFormState
from envirolens.models.enums import LoginState
from envirolens.services import ServiceContainer, create_login_orchestrator
from envirolens.services.form_validator import FormValidator, INVALID_USERNAME_MESSAGE
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
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
    WARNING_TEXT,
)

_SIGN_IN_TEXT: str = "Sign In  →"


class LoginView(ctk.CTkFrame):
    """Login card.  Owns one ``LoginOrchestrator`` for its lifetime.

    Parameters
    ----------
    parent:
        The root window.
    services:
        Wired service container.
    logger:
        Structured logger.
    on_create_account:
        Opens the registration screen.  The link is hidden when omitted.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        services: ServiceContainer,
        logger: StructuredLogger,
        on_create_account: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._logger: StructuredLogger = logger
        self._on_create_account: Optional[Callable[[], None]] = on_create_account
        self._orchestrator = create_login_orchestrator(
            services,
            dispatch=self._dispatch_to_ui,
        )
        self._unsubscribe: Callable[[], None] = self._orchestrator.subscribe(self._render)

        self._username_entry: Optional[ctk.CTkEntry] = None
        self._password_entry: Optional[ctk.CTkEntry] = None
        self._login_button: Optional[ctk.CTkButton] = None
        self._biometric_button: Optional[ctk.CTkButton] = None
        self._username_hint: Optional[ctk.CTkLabel] = None
        self._error_label: Optional[ctk.CTkLabel] = None

        self._build_ui()

    def destroy(self) -> None:
        self._unsubscribe()
        self._orchestrator.teardown()
        super().destroy()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self.pack(fill="both", expand=True)

        card = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=16)
        card.pack(expand=True, padx=PADDING_LG, pady=PADDING_LG)

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=28)

        ctk.CTkLabel(inner, text="EnviroLens", font=FONT_BRAND, text_color=TEXT_PRIMARY).pack()
        ctk.CTkLabel(
            inner, text="Sort smarter. Earn credits.", font=FONT_SMALL, text_color=TEXT_SECONDARY,
        ).pack(pady=(0, PADDING_LG))

        self._username_entry = self._entry(inner, "Username")
        self._username_hint = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=ERROR_TEXT, anchor="w",
        )
        self._username_hint.pack(fill="x")

        self._password_entry = self._entry(inner, "Password", show="*")

        self._login_button = ctk.CTkButton(
            inner,
            text=_SIGN_IN_TEXT,
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            corner_radius=CORNER_RADIUS,
            height=44,
            command=self._handle_login,
        )
        self._login_button.pack(fill="x", pady=(PADDING_MD, PADDING_SM))

        self._biometric_button = ctk.CTkButton(
            inner,
            text="Sign in with Face ID",
            font=FONT_BODY,
            fg_color="transparent",
            border_width=1,
            border_color=ACCENT_PRIMARY,
            text_color=ACCENT_PRIMARY,
            corner_radius=CORNER_RADIUS,
            height=40,
            command=self._handle_biometric_login,
        )
        self._biometric_button.pack(fill="x")

        if self._on_create_account is not None:
            ctk.CTkButton(
                inner,
                text="New here? Create an account",
                font=FONT_SMALL,
                fg_color="transparent",
                hover=False,
                text_color=ACCENT_PRIMARY,
                command=self._on_create_account,
            ).pack(pady=(PADDING_SM, 0))

        self._error_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=320,
        )
        self._error_label.pack(fill="x", pady=(PADDING_SM, 0))

        self._username_entry.bind("<Return>", self._on_enter_key)
        self._password_entry.bind("<Return>", self._on_enter_key)

    def _entry(self, parent: ctk.CTkFrame, placeholder: str, show: str = "") -> ctk.CTkEntry:
        entry = ctk.CTkEntry(
            parent,
            placeholder_text=placeholder,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            corner_radius=CORNER_RADIUS,
            height=44,
            show=show,
        )
        entry.pack(fill="x", pady=(PADDING_SM, 0))
        return entry

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event[tk.Misc]) -> None:
        self._handle_login()

    def _handle_login(self) -> None:
        self._orchestrator.submit(self._username_entry.get().strip(), self._password_entry.get())

    def _handle_biometric_login(self) -> None:
        self._orchestrator.submit_biometric()

    def _dispatch_to_ui(self, task: Callable[[], None]) -> None:
        try:
            self.after(0, task)
        except (RuntimeError, tk.TclError) as exc:
            # Window already destroyed; the result has nowhere to go.
            self._logger.debug("Dropped login result after teardown: %s", exc)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, state: LoginState, form: LoginFormState) -> None:
        if self._login_button is None:
            return

        if form.loading:
            self._login_button.configure(text="Signing in...", state="disabled")
            self._biometric_button.configure(state="disabled")
        else:
            self._login_button.configure(text=_SIGN_IN_TEXT, state="normal")
            self._biometric_button.configure(state="normal")

        show_hint = form.attempted and not FormValidator.is_valid_username(form.handle)
        self._username_hint.configure(text=INVALID_USERNAME_MESSAGE if show_hint else "")

        if state == LoginState.SUCCESS and self._orchestrator.vault_warning:
            self._error_label.configure(
                text=self._orchestrator.vault_warning, text_color=WARNING_TEXT,
            )
        else:
            self._error_label.configure(text=form.error_message or "", text_color=ERROR_TEXT)
