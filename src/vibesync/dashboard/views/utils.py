"""
Small widget helpers shared by the dashboard views.
"""

from datetime import datetime

from PyQt6.QtWidgets import QFrame, QLabel, QLayout, QVBoxLayout, QWidget


def clear_layout(layout: QLayout) -> None:
    """Remove and delete every item in a layout, recursively."""
    while layout.count():
        item = layout.takeAt(0)
        widget = item.widget()
        if widget is not None:
            widget.deleteLater()
        elif item.layout() is not None:
            clear_layout(item.layout())


def make_card(parent: QWidget | None = None) -> tuple[QFrame, QVBoxLayout]:
    """Create a rounded card frame with a vertical layout."""
    card = QFrame(parent)
    card.setObjectName("card")
    layout = QVBoxLayout(card)
    layout.setContentsMargins(24, 20, 24, 20)
    layout.setSpacing(10)
    return card, layout


def make_label(text: str, object_name: str | None = None, wrap: bool = False) -> QLabel:
    label = QLabel(text)
    if object_name:
        label.setObjectName(object_name)
    label.setWordWrap(wrap)
    return label


def format_timestamp(timestamp_ms: int) -> str:
    """Local date and time for a millisecond epoch timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%x %X")


def format_date(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%x")
