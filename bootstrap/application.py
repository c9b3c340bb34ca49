from __future__ import annotations

import os

from hybrid.Foundation.Application import Application


def create_app(base_path: str | None = None) -> Application:
    """
    Create the application instance.

    Providers and aliases come from `config/app.py`; they are registered
    when the application bootstraps.
    """
    base_path = base_path or os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    return Application.configure(base_path).create()


# Export the application factory function
__all__ = ['create_app']
