"""Local task-assignment engine: users, tasks, submissions and conversations over a shared store."""

__version__ = "0.1.0"
