"""
Run the API server with uvicorn
"""

import uvicorn

from app.core.config import get_settings
from app.interfaces.cli.commands.base import BaseCommand


class Command(BaseCommand):
    description = "Start the API server"

    def add_arguments(self, parser):
        settings = get_settings()
        parser.add_argument("--host", default=settings.HOST, help=f"Bind address (default: {settings.HOST})")
        parser.add_argument("--port", type=int, default=settings.PORT, help=f"Port (default: {settings.PORT})")
        parser.add_argument("--reload", action="store_true", default=settings.DEBUG, help="Reload on code changes")

    def handle(self, **kwargs):
        self.print_info(f"Starting server on {kwargs['host']}:{kwargs['port']}")
        uvicorn.run(
            "app.main:app",
            host=kwargs["host"],
            port=kwargs["port"],
            reload=kwargs["reload"],
            server_header=False,
            date_header=False,
        )
