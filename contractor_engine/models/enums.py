"""
Enumeration definitions for the Contractor Engine backend.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in Pydantic models and API responses.
"""

from enum import Enum


class SubscriptionTier(str, Enum):
    """
    Provider subscription tier.

    The tier feeds the match score through a fixed table (see
    services/matching.py TIER_SCORES). Unknown tier strings coming from the
    catalog are scored like ESSENTIAL rather than rejected.
    """
    ESSENTIAL = "essential"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class InsightType(str, Enum):
    """
    Learning insight categories.

    - service_combination: A highly rated event that used a broad service mix
    - budget_optimization: A highly rated event that landed on budget
    - timeline_insight: Timeline adherence observations
    - vendor_performance: Per-vendor rating observations

    The learning engine currently emits only the first two. The remaining
    values are accepted so that rows written by other producers can be read
    back through the same schema.
    """
    SERVICE_COMBINATION = "service_combination"
    BUDGET_OPTIMIZATION = "budget_optimization"
    TIMELINE_INSIGHT = "timeline_insight"
    VENDOR_PERFORMANCE = "vendor_performance"


class RequirementPriority(str, Enum):
    """Optional priority hint attached to a service requirement."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
