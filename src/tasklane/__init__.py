"""Markdown kanban boards with drag-and-drop across documents."""
