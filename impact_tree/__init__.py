"""impact-tree - change impact analysis over a project's import graph."""

__version__ = "0.1.0"
