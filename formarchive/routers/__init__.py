# Routers package for formarchive

from . import intake, submissions

__all__ = [
    "intake",
    "submissions",
]
