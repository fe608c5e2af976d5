"""Runtime wiring."""

from .app import Application, build_application

__all__ = ["Application", "build_application"]
