"""Module contract, manager and the built-in modules."""

from __future__ import annotations

from .base import Command, Module
from .manager import ModuleManager

__all__ = ["Command", "Module", "ModuleManager"]
