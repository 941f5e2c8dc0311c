"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    from minihttpd.handlers import StaticFileHandler, home, about, health

    static = StaticFileHandler("public", index_file="index.html")
    response = static.serve("/css/site.css")

=============================================================================
"""

from .static import StaticFileHandler, is_safe_path
from .pages import BUILTIN_ROUTES, home, about, health

__all__ = [
    "StaticFileHandler",
    "is_safe_path",
    "BUILTIN_ROUTES",
    "home",
    "about",
    "health",
]
