"""Textual UI for tasklane."""

from tasklane.ui.app import TasklaneApp

__all__ = ["TasklaneApp"]
