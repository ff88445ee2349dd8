from .grid import GridSearch, candidates, search

__all__ = ["GridSearch", "candidates", "search"]
