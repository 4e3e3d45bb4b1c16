"""Tkinter based desktop window for picking and dialing call targets."""
from __future__ import annotations

import dataclasses
import logging
import queue
import tkinter as tk
from concurrent.futures import Future, ThreadPoolExecutor
from tkinter import messagebox, ttk
from typing import List, Optional

from ..catalog import TargetCatalog, load_catalog
from ..config import ConfigurationError, PickerSettings, load_settings_from_env
from ..dispatch import BatchDispatcher
from ..factory import build_dispatcher
from ..hosts import EchoDialer
from ..models import DispatchOutcome, DispatchTally, OutcomeStatus, Protocol, Role
from ..sources import build_fetcher
from .state import (
    PickerState,
    attempt_text,
    dial_single,
    format_summary,
    overrides_from_form,
    progress_text,
    project_view,
    run_dial_job,
)

LOGGER = logging.getLogger(__name__)

TOAST_MILLISECONDS = 4000
CHECKED = "☑"
UNCHECKED = "☐"


class DialOutPickerApp:
    """Main application window."""

    STATUS_COLORS = {
        OutcomeStatus.OK: "#E8F5E9",
        OutcomeStatus.FAIL: "#FCE4EC",
        OutcomeStatus.SKIP: "#FFF3E0",
    }

    def __init__(
        self,
        root: tk.Tk,
        *,
        settings: Optional[PickerSettings] = None,
        dispatcher: Optional[BatchDispatcher] = None,
    ) -> None:
        self.root = root
        self.root.title("Dial out")
        self.root.geometry("480x640")
        self.root.minsize(420, 520)

        self.settings = settings or self._load_settings()
        self.dispatcher = dispatcher or self._build_dispatcher()
        self.catalog = TargetCatalog([])
        self.state = PickerState(busy=True)
        self.event_queue: "queue.Queue[tuple]" = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=1)
        self.current_task: Optional[Future] = None
        self._toast_job: Optional[str] = None
        self._catalog_loaded = False

        self.query_var = tk.StringVar()
        self.query_var.trace_add("write", lambda *_: self._on_query_changed())
        self.join_as_var = tk.StringVar(value=Role.GUEST.value)
        self.protocol_var = tk.StringVar(value=Protocol.AUTO.value)
        self.display_name_var = tk.StringVar()
        self.count_var = tk.StringVar(value="Loading targets…")
        self.selected_var = tk.StringVar(value="0 selected")
        self.dial_label_var = tk.StringVar(value="Dial")
        self.status_var = tk.StringVar()
        self.summary_var = tk.StringVar(value="Ready.")
        self.toast_var = tk.StringVar()

        self._build_layout()
        self._controls: List[tk.Widget] = [
            self.query_entry,
            self.select_all_button,
            self.clear_button,
            self.join_as_box,
            self.protocol_box,
            self.display_name_entry,
        ]
        self.root.protocol("WM_DELETE_WINDOW", self.on_close)
        self.root.after(100, self._poll_queue)
        self._executor.submit(self._load_catalog_worker)

    # ------------------------------------------------------------------
    def _build_layout(self) -> None:
        container = ttk.Frame(self.root, padding=12)
        container.pack(fill="both", expand=True)
        container.columnconfigure(0, weight=1)
        container.rowconfigure(1, weight=1)
        container.rowconfigure(4, weight=1)

        self._build_search_section(container)
        self._build_target_list(container)
        self._build_options_section(container)
        self._build_dial_section(container)
        self._build_results_section(container)

    # ------------------------------------------------------------------
    def _build_search_section(self, parent: ttk.Frame) -> None:
        frame = ttk.Frame(parent)
        frame.grid(row=0, column=0, sticky="ew")
        frame.columnconfigure(0, weight=1)

        self.query_entry = ttk.Entry(frame, textvariable=self.query_var)
        self.query_entry.grid(row=0, column=0, sticky="ew", padx=(0, 4))
        self.select_all_button = ttk.Button(frame, text="Select all", command=self.select_all)
        self.select_all_button.grid(row=0, column=1, padx=2)
        self.clear_button = ttk.Button(frame, text="Clear", command=self.clear_selection)
        self.clear_button.grid(row=0, column=2, padx=2)
        ttk.Label(frame, textvariable=self.count_var).grid(row=1, column=0, sticky="w", pady=(4, 0))
        ttk.Label(frame, textvariable=self.selected_var).grid(row=1, column=1, columnspan=2, sticky="e", pady=(4, 0))

    # ------------------------------------------------------------------
    def _build_target_list(self, parent: ttk.Frame) -> None:
        frame = ttk.Frame(parent)
        frame.grid(row=1, column=0, sticky="nsew", pady=(8, 0))
        frame.columnconfigure(0, weight=1)
        frame.rowconfigure(0, weight=1)

        columns = ("checked", "label", "destination")
        self.target_tree = ttk.Treeview(frame, columns=columns, show="headings", selectmode="none")
        for column, heading, width in zip(columns, ["", "Target", "Destination"], [32, 160, 220]):
            self.target_tree.heading(column, text=heading)
            self.target_tree.column(column, width=width, anchor="w", stretch=column != "checked")
        self.target_tree.grid(row=0, column=0, sticky="nsew")
        self.target_tree.bind("<ButtonRelease-1>", self._on_target_click)
        self.target_tree.bind("<space>", self._on_target_click)

        scrollbar = ttk.Scrollbar(frame, orient="vertical", command=self.target_tree.yview)
        self.target_tree.configure(yscrollcommand=scrollbar.set)
        scrollbar.grid(row=0, column=1, sticky="ns")

    # ------------------------------------------------------------------
    def _build_options_section(self, parent: ttk.Frame) -> None:
        frame = ttk.LabelFrame(parent, text="Options")
        frame.grid(row=2, column=0, sticky="ew", pady=(8, 0))
        frame.columnconfigure(1, weight=1)

        ttk.Label(frame, text="Join as").grid(row=0, column=0, sticky="w", padx=4, pady=2)
        self.join_as_box = ttk.Combobox(
            frame, textvariable=self.join_as_var, state="readonly", values=[role.value for role in Role]
        )
        self.join_as_box.grid(row=0, column=1, sticky="ew", padx=4, pady=2)

        ttk.Label(frame, text="Protocol").grid(row=1, column=0, sticky="w", padx=4, pady=2)
        self.protocol_box = ttk.Combobox(
            frame, textvariable=self.protocol_var, state="readonly", values=[protocol.value for protocol in Protocol]
        )
        self.protocol_box.grid(row=1, column=1, sticky="ew", padx=4, pady=2)

        ttk.Label(frame, text="Display name").grid(row=2, column=0, sticky="w", padx=4, pady=2)
        self.display_name_entry = ttk.Entry(frame, textvariable=self.display_name_var)
        self.display_name_entry.grid(row=2, column=1, sticky="ew", padx=4, pady=2)

    # ------------------------------------------------------------------
    def _build_dial_section(self, parent: ttk.Frame) -> None:
        frame = ttk.Frame(parent)
        frame.grid(row=3, column=0, sticky="ew", pady=(8, 0))
        frame.columnconfigure(1, weight=1)

        self.dial_button = ttk.Button(frame, textvariable=self.dial_label_var, command=self.start_dial)
        self.dial_button.grid(row=0, column=0, sticky="w")
        ttk.Label(frame, textvariable=self.status_var).grid(row=0, column=1, sticky="w", padx=8)
        ttk.Label(frame, textvariable=self.toast_var, foreground="#1B5E20").grid(
            row=1, column=0, columnspan=2, sticky="w", pady=(4, 0)
        )

    # ------------------------------------------------------------------
    def _build_results_section(self, parent: ttk.Frame) -> None:
        frame = ttk.LabelFrame(parent, text="Results")
        frame.grid(row=4, column=0, sticky="nsew", pady=(8, 0))
        frame.columnconfigure(0, weight=1)
        frame.rowconfigure(0, weight=1)

        columns = ("status", "label", "message")
        self.results_tree = ttk.Treeview(frame, columns=columns, show="headings", height=6)
        for column, heading, width in zip(columns, ["", "Target", "Message"], [48, 140, 220]):
            self.results_tree.heading(column, text=heading)
            self.results_tree.column(column, width=width, anchor="w")
        for status, colour in self.STATUS_COLORS.items():
            self.results_tree.tag_configure(status.value, background=colour)
        self.results_tree.grid(row=0, column=0, sticky="nsew", padx=4, pady=4)

        scroll = ttk.Scrollbar(frame, orient="vertical", command=self.results_tree.yview)
        self.results_tree.configure(yscrollcommand=scroll.set)
        scroll.grid(row=0, column=1, sticky="ns")

        ttk.Label(frame, textvariable=self.summary_var).grid(row=1, column=0, sticky="w", padx=4, pady=(0, 4))

    # ------------------------------------------------------------------
    def refresh_view(self) -> None:
        view = project_view(self.state, self.catalog)

        self.target_tree.delete(*self.target_tree.get_children())
        for row in view.rows:
            self.target_tree.insert(
                "",
                "end",
                iid=row.target.destination,
                values=(CHECKED if row.checked else UNCHECKED, row.target.label, row.target.destination),
            )
        if not view.rows:
            self.target_tree.insert("", "end", values=("", "No matches", ""))

        if self._catalog_loaded:
            self.count_var.set(view.count_hint)
        self.selected_var.set(view.selected_hint)
        self.dial_label_var.set(view.dial_label)
        self.dial_button.state(["!disabled"] if view.dial_enabled else ["disabled"])
        for control in self._controls:
            control.state(["!disabled"] if view.controls_enabled else ["disabled"])

    # ------------------------------------------------------------------
    def _on_query_changed(self) -> None:
        self.state.query = self.query_var.get()
        self.refresh_view()

    def _on_target_click(self, event: tk.Event) -> None:
        if self.state.busy:
            return
        item = self.target_tree.identify_row(event.y) if event.y else self.target_tree.focus()
        if item and item in self.catalog:
            self.state.toggle(item)
            self.refresh_view()

    def select_all(self) -> None:
        self.state.select_all(self.catalog.search(self.state.query))
        self.refresh_view()

    def clear_selection(self) -> None:
        self.state.clear()
        self.refresh_view()

    # ------------------------------------------------------------------
    def start_dial(self) -> None:
        destinations = list(self.state.selected)
        if not destinations:
            return
        if self.dispatcher.busy or (self.current_task and not self.current_task.done()):
            messagebox.showinfo("Dialing", "A dial-out batch is already in progress.")
            return

        overrides = overrides_from_form(
            self.join_as_var.get(), self.protocol_var.get(), self.display_name_var.get()
        )
        self.results_tree.delete(*self.results_tree.get_children())
        self.status_var.set("")
        self.summary_var.set("Dialing…")

        def set_controls_enabled(enabled: bool) -> None:
            self.event_queue.put(("controls", enabled))

        def on_attempt(destination: str, label: str, index: int, total: int) -> None:
            self.event_queue.put(("attempt", label, index, total))

        def on_outcome(outcome: DispatchOutcome, tally: DispatchTally) -> None:
            self.event_queue.put(("outcome", outcome, dataclasses.replace(tally), len(destinations)))

        def notify(message: str, ok: bool) -> None:
            self.event_queue.put(("toast", message, ok))

        def worker() -> None:
            tally = DispatchTally()
            try:
                if len(destinations) == 1:
                    outcome = dial_single(
                        self.dispatcher,
                        destinations[0],
                        self.catalog,
                        overrides,
                        set_controls_enabled=set_controls_enabled,
                        notify=notify,
                    )
                    tally.record(outcome.status)
                else:
                    for outcome in run_dial_job(
                        self.dispatcher,
                        destinations,
                        self.catalog,
                        overrides,
                        set_controls_enabled=set_controls_enabled,
                        on_attempt=on_attempt,
                        on_outcome=on_outcome,
                    ):
                        tally.record(outcome.status)
            except Exception as exc:  # pragma: no cover - GUI surface
                LOGGER.exception("Dial-out batch failed")
                self.event_queue.put(("error", exc))
            self.event_queue.put(("done", tally))

        self.state.busy = True
        self.refresh_view()
        self.current_task = self._executor.submit(worker)

    # ------------------------------------------------------------------
    def _poll_queue(self) -> None:
        try:
            while True:
                event = self.event_queue.get_nowait()
                self._handle_event(event)
        except queue.Empty:
            pass
        finally:
            self.root.after(100, self._poll_queue)

    # ------------------------------------------------------------------
    def _handle_event(self, event: tuple) -> None:
        kind = event[0]
        if kind == "catalog":
            _, catalog = event
            self.catalog = catalog
            self._catalog_loaded = True
            self.state.busy = False
            self.refresh_view()
        elif kind == "controls":
            _, enabled = event
            self.state.busy = not enabled
            self.refresh_view()
        elif kind == "attempt":
            _, label, index, total = event
            self.status_var.set(attempt_text(label, index, total))
        elif kind == "outcome":
            _, outcome, tally, total = event
            self.results_tree.insert(
                "",
                "end",
                values=(outcome.status.value, outcome.label, outcome.message),
                tags=(outcome.status.value,),
            )
            self.results_tree.yview_moveto(1.0)
            self.status_var.set(progress_text(outcome, tally.total, total))
            self.summary_var.set(format_summary(tally))
        elif kind == "toast":
            _, message, ok = event
            self.show_toast(message, ok)
        elif kind == "error":
            _, exc = event
            messagebox.showerror("Dial-out failed", str(exc))
            self.status_var.set("Dial-out failed")
        elif kind == "done":
            _, tally = event
            self.status_var.set("Done.")
            self.summary_var.set(format_summary(tally, done=True))
            self.current_task = None
            self.state.busy = False
            self.refresh_view()

    # ------------------------------------------------------------------
    def show_toast(self, message: str, ok: bool) -> None:
        if self._toast_job is not None:
            self.root.after_cancel(self._toast_job)
        self.toast_var.set(message if ok else f"⚠ {message}")
        self._toast_job = self.root.after(TOAST_MILLISECONDS, self._hide_toast)

    def _hide_toast(self) -> None:
        self._toast_job = None
        self.toast_var.set("")

    # ------------------------------------------------------------------
    def _load_catalog_worker(self) -> None:
        fetcher = build_fetcher(self.settings.source, timeout=self.settings.fetch_timeout_seconds)
        catalog = load_catalog(fetcher, self.settings.source, fallback=self.settings.fallback_targets)
        self.event_queue.put(("catalog", catalog))

    # ------------------------------------------------------------------
    def on_close(self) -> None:
        if self.current_task and not self.current_task.done():
            if not messagebox.askyesno("Quit", "A dial-out batch is running. Quit anyway?"):
                return
        self._executor.shutdown(wait=False, cancel_futures=True)
        close = getattr(self.dispatcher.host, "close", None)
        if callable(close):
            try:
                close()
            except Exception:  # pragma: no cover - GUI surface
                LOGGER.exception("Failed to close dialer %s", self.dispatcher.host)
        self.root.destroy()

    # ------------------------------------------------------------------
    def _load_settings(self) -> PickerSettings:
        try:
            return load_settings_from_env()
        except ConfigurationError as exc:
            messagebox.showwarning("Configuration error", f"Failed to load configuration: {exc}")
            return PickerSettings()

    def _build_dispatcher(self) -> BatchDispatcher:
        try:
            return build_dispatcher(self.settings)
        except (ConfigurationError, ImportError) as exc:
            messagebox.showwarning("Configuration error", f"Failed to build dialer: {exc}")
            LOGGER.warning("Dialer unavailable for UI - falling back to EchoDialer")
            return build_dispatcher(self.settings, EchoDialer())


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    root = tk.Tk()
    DialOutPickerApp(root)
    root.mainloop()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
