"""
=============================================================================
HANDLERS
=============================================================================

Ready-made building blocks for route handlers.

STATIC FILES:

    from microserve.handlers import register_static_dir

    register_static_dir(server.routes, "./public")
    # GET /public/index.html → contents of ./public/index.html

TEMPLATES:

    from microserve.handlers import render_template

    @server.get("/")
    def index(request, session):
        return render_template("templates/index.html", user="alice")

=============================================================================
"""

from .static import StaticFileHandler, register_static_dir
from .template import load_template, render_template, substitute

__all__ = [
    "StaticFileHandler",
    "register_static_dir",
    "load_template",
    "render_template",
    "substitute",
]
