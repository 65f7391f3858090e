"""UI Theme Constants for EnviroLens.

Colour, font and sizing constants for the CustomTkinter interface.
This file contains **zero logic**: only ``Final`` constants.
"""

from __future__ import annotations

from typing import Final

CONTENT_BG: Final[str] = "#eef5ee"
CONTENT_CARD_BG: Final[str] = "#ffffff"

ACCENT_PRIMARY: Final[str] = "#2e7d32"
ACCENT_HOVER: Final[str] = "#1b5e20"
TEXT_PRIMARY: Final[str] = "#1b2a1b"
TEXT_SECONDARY: Final[str] = "#6c757d"
TEXT_LIGHT: Final[str] = "#ffffff"

INPUT_BG: Final[str] = "#ffffff"
INPUT_BORDER: Final[str] = "#ced4da"
ERROR_TEXT: Final[str] = "#dc3545"
WARNING_TEXT: Final[str] = "#b26a00"
SUCCESS_TEXT: Final[str] = "#2e7d32"

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 14, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)

CORNER_RADIUS: Final[int] = 8
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 16
PADDING_LG: Final[int] = 24

WINDOW_WIDTH: Final[int] = 480
WINDOW_HEIGHT: Final[int] = 600
