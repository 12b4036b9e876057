"""
ComposerWindow
--------------
Tkinter message composer hosting the proofreading actions.

This file contains **only View code**: no HTTP and no orchestration. The
window implements the composer surface contract (content source/sink, alert
area, wait indicator, liveness) and renders whatever action set it is given.
"""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional, Sequence

from proofread.app.actions import Action, ActionSet
from proofread.app.views.wait_dialog import WaitDialog
from proofread.domain.ports import AlertKind, ContentCallback, ContentKind

_ALERT_COLORS = {
    AlertKind.ERROR: "#b00020",
    AlertKind.NO_RESPONSE: "#8a6d00",
}


class ComposerWindow(tk.Tk):
    """Top-level composer with an editor, an AI menu and a toolbar button."""

    OnVoid = Optional[Callable[[], None]]

    def __init__(self, *, on_close: OnVoid = None) -> None:
        super().__init__()
        self.title("Compose Message")
        self.geometry("820x560")
        self.minsize(480, 320)
        self._on_close = on_close
        self._alive = True
        self._action_set: Optional[ActionSet] = None
        self._ai_menu: Optional[tk.Menu] = None

        self.protocol("WM_DELETE_WINDOW", self._on_close_clicked)
        self._build_ui()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        self.menubar = tk.Menu(self)
        self.config(menu=self.menubar)

        self.toolbar = ttk.Frame(self, padding=(6, 4))
        self.toolbar.pack(side="top", fill="x")

        editor_frame = ttk.Frame(self)
        editor_frame.pack(side="top", fill="both", expand=True)
        self.editor = tk.Text(editor_frame, wrap="word", undo=True)
        scroll = ttk.Scrollbar(editor_frame, orient="vertical", command=self.editor.yview)
        self.editor.configure(yscrollcommand=scroll.set)
        self.editor.pack(side="left", fill="both", expand=True)
        scroll.pack(side="right", fill="y")

        self.status_message_var = tk.StringVar(value="")
        self.status_label = ttk.Label(self, textvariable=self.status_message_var, anchor="w", padding=(6, 2))
        self.status_label.pack(side="bottom", fill="x")

    def install_actions(self, action_set: ActionSet) -> None:
        """Rebuild the AI menu and toolbar from ``action_set``."""
        self._action_set = action_set
        layout = action_set.menu_layout()

        if self._ai_menu is not None:
            self.menubar.delete(0, "end")
        self._ai_menu = tk.Menu(self.menubar, tearoff=False)
        self.menubar.add_cascade(label=layout.menu.label, menu=self._ai_menu)
        for action in layout.prompt_items:
            self._ai_menu.add_command(label=action.label, command=self._activator(action))
        self._ai_menu.add_separator()
        model_menu = tk.Menu(self._ai_menu, tearoff=False)
        for action in layout.model_items:
            model_menu.add_command(label=action.label, command=self._activator(action))
        self._ai_menu.add_cascade(label=layout.model_menu_label, menu=model_menu)

        for child in list(self.toolbar.winfo_children()):
            child.destroy()
        for action in layout.toolbar:
            ttk.Button(self.toolbar, text=action.label, command=self._activator(action)).pack(side="left")

    def _activator(self, action: Action) -> Callable[[], None]:
        def _activate() -> None:
            if self._action_set is not None:
                self._action_set.activate(action, self)

        return _activate

    def popup_menu(self, actions: Sequence[Action], on_select: Callable[[Action], None]) -> None:
        menu = tk.Menu(self, tearoff=False)
        for action in actions:
            menu.add_command(label=action.label, command=lambda picked=action: on_select(picked))
        x = self.winfo_pointerx()
        y = self.winfo_pointery()
        try:
            menu.tk_popup(x, y)
        finally:
            menu.grab_release()

    # ------------------------------------------------------------------
    # Composer surface
    # ------------------------------------------------------------------
    def get_content(self, kind: ContentKind, callback: ContentCallback) -> None:
        """Deliver the selected text (or the whole body) on the next idle tick."""

        def _deliver() -> None:
            try:
                text = self._current_text()
            except tk.TclError as exc:
                callback(None, exc)
                return
            callback(text, None)

        self.after_idle(_deliver)

    def insert_content(self, text: str, kind: ContentKind) -> None:
        """Replace the selection, or the whole body when nothing is selected."""
        if self.editor.tag_ranges("sel"):
            start, end = self.editor.index("sel.first"), self.editor.index("sel.last")
        else:
            start, end = "1.0", "end-1c"
        self.editor.edit_separator()
        self.editor.delete(start, end)
        self.editor.insert(start, text)
        self.editor.edit_separator()

    def submit_alert(self, kind: AlertKind, message: str) -> None:
        """Non-blocking feedback in the status bar."""
        self.status_label.configure(foreground=_ALERT_COLORS.get(kind, ""))
        self.status_message_var.set(message)

    def open_wait_indicator(self, message: str) -> WaitDialog:
        return WaitDialog(self, message)

    def is_alive(self) -> bool:
        if not self._alive:
            return False
        try:
            return bool(self.winfo_exists())
        except tk.TclError:
            return False

    def _current_text(self) -> str:
        if self.editor.tag_ranges("sel"):
            return self.editor.get("sel.first", "sel.last")
        return self.editor.get("1.0", "end-1c")

    def _on_close_clicked(self) -> None:
        self._alive = False
        if self._on_close:
            self._on_close()
        self.destroy()


__all__ = ["ComposerWindow"]
