"""Message channel dispatch and its HTTP server."""

from visua11y.api.channel import handle_message
from visua11y.api.server import create_app, start_server, stop_server

__all__ = ["handle_message", "create_app", "start_server", "stop_server"]
