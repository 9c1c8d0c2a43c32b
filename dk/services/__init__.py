"""Application services."""

from .dispatcher import BatchReport, Dispatcher, Resolution, Target, ToolOutcome

__all__ = ["BatchReport", "Dispatcher", "Resolution", "Target", "ToolOutcome"]
