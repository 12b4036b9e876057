"""Modal "please wait" dialog shown while a proofreading request runs long."""

from __future__ import annotations

import tkinter as tk
from tkinter import ttk


class WaitDialog(tk.Toplevel):
    """Small modal spinner owned by one orchestrator invocation."""

    def __init__(self, parent: tk.Misc, message: str) -> None:
        super().__init__(parent)
        self.title("AI Proofreading")
        self.transient(parent)
        self.resizable(False, False)
        # The orchestrator closes the dialog; the user cannot cancel the request.
        self.protocol("WM_DELETE_WINDOW", lambda: None)

        self._spinner_frames = ("|", "/", "-", "\\")
        self._spinner_index = 0
        self._spinner_after_id: str | None = None
        self._message_var = tk.StringVar(value=message)

        self._build_ui()
        self.update_idletasks()
        self.geometry(self._center_over_parent(parent))
        try:
            self.grab_set()
        except tk.TclError:
            # Window not viewable yet; stay non-modal rather than fail.
            pass
        self.start_spinner()

    def _build_ui(self) -> None:
        box = ttk.Frame(self, padding=12)
        box.grid(row=0, column=0, sticky="nsew")
        box.columnconfigure(1, weight=1)
        self._spinner_label = ttk.Label(box, text=self._spinner_frames[0], width=2)
        self._spinner_label.grid(row=0, column=0, sticky="w", padx=(0, 12))
        ttk.Label(box, textvariable=self._message_var, wraplength=320, justify="left").grid(
            row=0, column=1, sticky="w"
        )

    def start_spinner(self) -> None:
        self.stop_spinner()
        self._tick_spinner()

    def stop_spinner(self) -> None:
        if self._spinner_after_id:
            try:
                self.after_cancel(self._spinner_after_id)
            except tk.TclError:
                pass
            self._spinner_after_id = None

    def _tick_spinner(self) -> None:
        self._spinner_label.configure(text=self._spinner_frames[self._spinner_index])
        self._spinner_index = (self._spinner_index + 1) % len(self._spinner_frames)
        self._spinner_after_id = self.after(150, self._tick_spinner)

    def close(self) -> None:
        self.stop_spinner()
        try:
            if self.winfo_exists():
                self.grab_release()
                self.destroy()
        except tk.TclError:
            pass

    @staticmethod
    def _center_over_parent(parent: tk.Misc) -> str:
        try:
            px = parent.winfo_rootx()
            py = parent.winfo_rooty()
            pw = parent.winfo_width()
            ph = parent.winfo_height()
            width = 380
            height = 90
            x = px + (pw - width) // 2
            y = py + (ph - height) // 2
            return f"{width}x{height}+{x}+{y}"
        except tk.TclError:
            return "380x90"


__all__ = ["WaitDialog"]
