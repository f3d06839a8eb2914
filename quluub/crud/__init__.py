"""CRUD package exports with lazy module loading.

Submodules are imported on first attribute access so that importing one
query module never drags in the rest.
"""

from importlib import import_module

__all__ = ["user", "counselor", "session", "review", "wallet", "bank", "message"]


def __getattr__(name):
    if name in __all__:
        return import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
