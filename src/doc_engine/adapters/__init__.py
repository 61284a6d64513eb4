"""Adapters connecting the engine to host applications."""

from .host import HostAdapter, HostHooks

__all__ = ["HostAdapter", "HostHooks"]
