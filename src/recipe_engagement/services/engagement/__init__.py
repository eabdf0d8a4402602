"""Recipe discovery and engagement.

Provides strategy-based discovery, atomic vote tallying, the recipe
lifecycle with post-commit side effects, and favorites.
"""

from recipe_engagement.services.engagement.discovery import (
    DiscoveryParams,
    DiscoveryResult,
    RecipeDiscovery,
    Strategy,
)
from recipe_engagement.services.engagement.hooks import PostCommitHooks, TaskTracker
from recipe_engagement.services.engagement.schemas import RecipeDraft
from recipe_engagement.services.engagement.service import RecipeEngagementService
from recipe_engagement.services.engagement.votes import (
    VoteCounts,
    VoteDirection,
    VoteTally,
)


__all__ = [
    "DiscoveryParams",
    "DiscoveryResult",
    "PostCommitHooks",
    "RecipeDiscovery",
    "RecipeDraft",
    "RecipeEngagementService",
    "Strategy",
    "TaskTracker",
    "VoteCounts",
    "VoteDirection",
    "VoteTally",
]
