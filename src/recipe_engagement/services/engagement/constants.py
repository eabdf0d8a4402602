"""Constants for the engagement service.

Contains:
- Discovery query parameter values
- Required recipe fields and their validation messages
"""

from __future__ import annotations

import re
from typing import Final


# =============================================================================
# Discovery
# =============================================================================

SORT_BY_UPVOTES: Final[str] = "upvotes"
ORDER_DESCENDING: Final[str] = "descending"


# =============================================================================
# Validation
# =============================================================================

WHITESPACE_RUN: Final[re.Pattern[str]] = re.compile(r"\s+")

REQUIRED_FIELD_MESSAGES: Final[dict[str, str]] = {
    "name": "Recipe name is required!",
    "ingredients": "Recipe ingredients are required!",
    "direction": "Recipe direction is required!",
}
