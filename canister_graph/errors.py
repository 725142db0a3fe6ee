"""Exceptions raised by the analyzer and its loaders."""

from __future__ import annotations


class MalformedInputError(ValueError):
    """The unit registry is missing required fields or is inconsistent."""


class ProjectConfigError(ValueError):
    """The project manifest could not be found or parsed."""


class UnknownUnitError(KeyError):
    """A graph query named a unit that is not part of the project."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown unit: {self.name!r}"
