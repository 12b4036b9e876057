"""Tkinter views. UI-only: no HTTP, no orchestration logic."""
