"""Cost manager package providing a REST API for users, costs and monthly reports."""

from __future__ import annotations

__all__ = [
    "__version__",
    "config",
    "crud",
    "database",
    "errors",
    "logging",
    "models",
    "reports",
    "schemas",
    "server",
    "store",
]

__version__ = "1.0.0"
