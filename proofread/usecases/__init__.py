"""Use-case layer between the orchestration core and the provider adapter.

Each module coordinates domain objects and ports without performing transport
I/O directly.
"""
