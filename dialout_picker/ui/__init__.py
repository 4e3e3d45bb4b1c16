"""User interface state and entry points for the dial-out picker."""

from .state import PickerState, PickerView, project_view, run_dial_job  # noqa: F401

__all__ = ["PickerState", "PickerView", "main", "project_view", "run_dial_job"]


def main() -> None:
    """Launch the desktop window (imports tkinter on demand)."""

    from .app import main as run_app

    run_app()
