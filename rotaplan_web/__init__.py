"""Flask backend serving plans, rotations, directory data and preferences."""

from .app import create_app

__all__ = ["create_app"]
