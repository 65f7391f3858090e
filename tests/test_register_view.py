from __future__ import annotations

from unittest.mock import Mock

import pytest

ctk = pytest.importorskip("customtkinter")

import tkinter as tk  # noqa: E402

from envirolens.models.auth_models import AuthResult  # noqa: E402
from envirolens.models.enums import AuthErrorCode  # noqa: E402
from envirolens.models.user import RegistrationForm  # noqa: E402
from envirolens.services.registration_service import RegistrationService  # noqa: E402
from envirolens.ui.register_view import RegisterView  # noqa: E402


@pytest.fixture
def root():
    try:
        window = ctk.CTk()
    except tk.TclError:
        pytest.skip("no display available")
    window.withdraw()
    yield window
    window.destroy()


@pytest.fixture
def registration_service() -> Mock:
    service = Mock(spec=RegistrationService)
    service.areas = ("Colombo", "Galle")
    service.register.return_value = AuthResult(
        success=True, user_id="new-uid", email="shahein@example.com",
    )
    return service


@pytest.fixture
def view(root, registration_service, logger):
    return RegisterView(
        parent=root,
        services={"registration_service": registration_service},
        logger=logger,
        on_back=Mock(),
        spawn=lambda task: task(),
    )


def fill(view: RegisterView) -> None:
    view._name_entry.insert(0, "Shahein")
    view._username_entry.insert(0, "shahein ")
    view._email_entry.insert(0, "shahein@example.com")
    view._password_entry.insert(0, "Strong@123")
    view._confirm_entry.insert(0, "Strong@123")
    view._area_menu.set("Galle")
    view._terms_checkbox.select()


def test_submit_sends_collected_form(view, root, registration_service):
    fill(view)

    view._handle_submit()
    root.update()

    registration_service.register.assert_called_once_with(RegistrationForm(
        name="Shahein",
        username="shahein",
        email="shahein@example.com",
        password="Strong@123",
        confirm_password="Strong@123",
        area="Galle",
        accept_terms=True,
    ))
    assert view._status_label.cget("text") == "Account created! You can now sign in."
    assert view._submit_button.cget("state") == "normal"


def test_unselected_area_is_sent_empty(view, registration_service):
    assert view._collect_form().area == ""


def test_failure_message_is_shown(view, root, registration_service):
    registration_service.register.return_value = AuthResult(
        success=False,
        error_code=AuthErrorCode.USERNAME_TAKEN,
        error_message="Username already taken.",
    )
    fill(view)

    view._handle_submit()
    root.update()

    assert view._status_label.cget("text") == "Username already taken."
    view._on_back.assert_not_called()
