"""
Package initialization file for contractor engine models.

Re-exports all Pydantic schemas and enumerations so other modules can import
them from contractor_engine.models directly:

    from contractor_engine.models import (
        ProviderProfile,
        ContractorMatch,
        OutcomeReport,
        ServicePattern,
        InsightType,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from contractor_engine.models.enums import (
    SubscriptionTier,
    InsightType,
    RequirementPriority,
)


# =============================================================================
# Schemas
# =============================================================================

from contractor_engine.models.schemas import (
    # Provider catalog
    ServiceOffering,
    ProviderProfile,
    # Matching
    ServiceRequirement,
    MatchingRequest,
    PriceRange,
    ContractorMatch,
    MatchingResponse,
    # Outcome reports
    SuccessMetrics,
    OutcomeReport,
    # Aggregates and insights
    ServicePattern,
    ServiceCombinationPayload,
    BudgetOptimizationPayload,
    TimelineInsightPayload,
    VendorPerformancePayload,
    InsightPayload,
    LearningInsight,
    RecordOutcomeResult,
    OutcomeAcceptedResponse,
    # Read-side summary
    BudgetVarianceStats,
    LearningSummary,
)


__all__ = [
    # Enums
    'SubscriptionTier',
    'InsightType',
    'RequirementPriority',
    # Provider catalog
    'ServiceOffering',
    'ProviderProfile',
    # Matching
    'ServiceRequirement',
    'MatchingRequest',
    'PriceRange',
    'ContractorMatch',
    'MatchingResponse',
    # Outcome reports
    'SuccessMetrics',
    'OutcomeReport',
    # Aggregates and insights
    'ServicePattern',
    'ServiceCombinationPayload',
    'BudgetOptimizationPayload',
    'TimelineInsightPayload',
    'VendorPerformancePayload',
    'InsightPayload',
    'LearningInsight',
    'RecordOutcomeResult',
    'OutcomeAcceptedResponse',
    # Read-side summary
    'BudgetVarianceStats',
    'LearningSummary',
]
