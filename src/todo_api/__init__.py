"""
Todo backend package.

FastAPI service for creating, updating, filtering and searching todo items,
with change notifications published after every mutation. The ASGI app lives
in `todo_api.main:app`.
"""

__version__ = "1.0.0"
