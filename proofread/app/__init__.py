"""Application composition layer for the proofreading core.

The orchestrator, action registry and extension live here together with the
Tkinter composer that hosts them. Views contain no orchestration logic.
"""
