"""Application lifecycle events."""

from recipe_engagement.core.events.lifespan import lifespan


__all__ = ["lifespan"]
