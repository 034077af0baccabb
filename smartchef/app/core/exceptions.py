"""Exceptions raised by the SmartChef services."""


class SmartChefError(Exception):
    """Base exception for the SmartChef backend."""


class EmptyIngredientsError(SmartChefError):
    """Raised when a generation request names no ingredients."""


class RecipeGenerationError(SmartChefError):
    """Raised when the language model fails to produce a recipe."""


class RecipeStoreError(SmartChefError):
    """Raised when a Realtime Database read or write fails."""
