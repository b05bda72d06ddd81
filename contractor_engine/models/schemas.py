"""
Pydantic request/response models for the Contractor Engine backend.

This module provides type-safe validation and serialization for:
- Provider catalog records (ProviderProfile, ServiceOffering)
- Matching requests and ranked results (ServiceRequirement, ContractorMatch)
- Outcome reports and their success metrics
- Persisted aggregates (ServicePattern) and the insight log (LearningInsight)
- Read-side summaries

Match results use camelCase field names because they are consumed directly by
the frontend. Everything that mirrors a database row keeps the column names.

All models use Pydantic v2 syntax.
"""

import json
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from contractor_engine.models.enums import InsightType, RequirementPriority


# =============================================================================
# Provider Catalog Models (read-only collaborator data)
# =============================================================================


class ServiceOffering(BaseModel):
    """A priced service offered by a provider. Either bound may be missing."""

    service_type: str = Field(..., description="Free-text service type, e.g. 'Wedding Photography'")
    price_min: Optional[float] = Field(default=None, ge=0.0, description="Lower price bound")
    price_max: Optional[float] = Field(default=None, ge=0.0, description="Upper price bound")


class ProviderProfile(BaseModel):
    """
    Provider profile as returned by the catalog.

    The catalog already applies the eligibility predicates (published, active,
    verified contractor role, not suspended, non-empty categories). Categories
    are compared case-insensitively by the matching engine.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "6f1c2a7e-1b1d-4a55-9a51-2f0e8c1d9b10",
                "display_name": "Lens & Light Studio",
                "categories": ["Photography", "Videography"],
                "average_rating": 4.7,
                "review_count": 86,
                "is_verified": True,
                "subscription_tier": "professional",
                "offerings": [
                    {"service_type": "Wedding Photography", "price_min": 1800, "price_max": 4200}
                ],
            }
        }
    )

    id: str = Field(..., description="Provider identifier")
    display_name: str = Field(default="", description="Business or contact name")
    categories: List[str] = Field(default_factory=list, description="Declared service categories")
    average_rating: float = Field(default=0.0, ge=0.0, le=5.0, description="Average review rating")
    review_count: int = Field(default=0, ge=0, description="Number of reviews")
    is_verified: bool = Field(default=False, description="Business verification flag")
    subscription_tier: Optional[str] = Field(
        default=None,
        description="Subscription tier; unknown values are scored like 'essential'",
    )
    offerings: List[ServiceOffering] = Field(default_factory=list, description="Priced offerings")


# =============================================================================
# Matching Models
# =============================================================================


class ServiceRequirement(BaseModel):
    """A single requested service category with optional hints."""

    category: str = Field(..., description="Requested service category")
    priority: Optional[RequirementPriority] = Field(default=None, description="Priority hint")
    estimated_budget: Optional[float] = Field(default=None, ge=0.0, description="Budget hint")


class MatchingRequest(BaseModel):
    """
    Body of POST /matching/contractors.

    An empty list is accepted by the schema and rejected by the engine with
    InvalidInput so that the API reports it as a 400.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "requirements": [
                    {"category": "photography", "priority": "high"},
                    {"category": "catering", "estimated_budget": 4000},
                ]
            }
        }
    )

    requirements: List[ServiceRequirement] = Field(default_factory=list)


class PriceRange(BaseModel):
    """Estimated price range for a match."""

    min: float = Field(..., ge=0.0)
    max: float = Field(..., ge=0.0)


class ContractorMatch(BaseModel):
    """One ranked match. Not persisted."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "providerId": "6f1c2a7e-1b1d-4a55-9a51-2f0e8c1d9b10",
                "providerName": "Lens & Light Studio",
                "serviceCategory": "photography",
                "matchScore": 0.97,
                "estimatedPrice": {"min": 1800, "max": 4200},
                "availability": True,
                "rating": 4.7,
                "reviewCount": 86,
            }
        }
    )

    providerId: str
    providerName: str
    serviceCategory: str = Field(..., description="Best (first) matched category")
    matchScore: float = Field(..., ge=0.0, le=1.0)
    estimatedPrice: PriceRange
    # Availability scheduling is not modelled; every match is reported available
    availability: bool = True
    rating: float
    reviewCount: int


class MatchingResponse(BaseModel):
    """Ranked matches plus the normalized categories they were matched against."""

    matches: List[ContractorMatch]
    total: int = Field(..., ge=0, description="Scored providers before truncation")
    categories: List[str]


# =============================================================================
# Outcome Report Models
# =============================================================================


class SuccessMetrics(BaseModel):
    """Post-event success metrics."""

    overall_rating: float = Field(..., ge=1.0, le=5.0)
    budget_variance: float = Field(
        ...,
        description="Signed percentage difference between actual and planned spend",
    )
    timeline_adherence: float = Field(..., ge=0.0, le=1.0)
    attendee_satisfaction: Optional[float] = Field(default=None, ge=0.0)
    vendor_ratings: Optional[Dict[str, float]] = Field(default=None)


class OutcomeReport(BaseModel):
    """
    Post-event outcome submission.

    services_used must name at least one service; identifiers are stripped and
    blank entries are rejected.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "event_id": "evt_2f9a",
                "event_type": "wedding",
                "attendee_count": 120,
                "budget": 25000,
                "services_used": ["catering", "photography", "venue", "florist"],
                "success_metrics": {
                    "overall_rating": 4.8,
                    "budget_variance": 2.0,
                    "timeline_adherence": 0.95,
                },
                "feedback": "Everything ran on time.",
            }
        },
    )

    event_id: str = Field(..., min_length=1)
    event_type: str = Field(..., min_length=1)
    attendee_count: int = Field(default=0, ge=0)
    budget: float = Field(default=0.0, ge=0.0)
    services_used: List[str] = Field(..., min_length=1)
    success_metrics: SuccessMetrics
    feedback: Optional[str] = None

    @field_validator('services_used')
    @classmethod
    def _reject_blank_services(cls, value: List[str]) -> List[str]:
        cleaned = [service.strip() for service in value]
        if any(not service for service in cleaned):
            raise ValueError('services_used entries must be non-empty')
        return cleaned


# =============================================================================
# Service Pattern (persisted aggregate)
# =============================================================================


class ServicePattern(BaseModel):
    """
    Running aggregate for one (event_type, service_combination) key.

    confidence_level is min(1, sample_size / 10): a sample-count saturation
    heuristic, not a statistical confidence interval.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "event_type": "wedding",
                "service_combination": "catering,florist,photography,venue",
                "success_rate": 0.75,
                "average_rating": 4.3,
                "sample_size": 4,
                "confidence_level": 0.4,
                "created_at": "2026-09-01T10:00:00Z",
                "updated_at": "2026-10-01T18:30:00Z",
            }
        }
    )

    id: Optional[str] = None
    event_type: str
    service_combination: str = Field(..., description="Sorted, comma-joined service identifiers")
    success_rate: float = Field(..., ge=0.0, le=1.0)
    average_rating: float = Field(..., ge=1.0, le=5.0)
    sample_size: int = Field(..., ge=1)
    confidence_level: float = Field(..., ge=0.0, le=1.0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ServicePattern":
        return cls(
            id=str(record['id']) if record.get('id') is not None else None,
            event_type=record['event_type'],
            service_combination=record['service_combination'],
            success_rate=float(record['success_rate']),
            average_rating=float(record['average_rating']),
            sample_size=int(record['sample_size']),
            confidence_level=float(record['confidence_level']),
            created_at=record.get('created_at'),
            updated_at=record.get('updated_at'),
        )


# =============================================================================
# Learning Insights (append-only log)
# =============================================================================


class ServiceCombinationPayload(BaseModel):
    insight_type: Literal["service_combination"] = "service_combination"
    services: List[str]
    overall_rating: float
    budget_variance: float


class BudgetOptimizationPayload(BaseModel):
    insight_type: Literal["budget_optimization"] = "budget_optimization"
    budget_variance: float
    services: List[str]


class TimelineInsightPayload(BaseModel):
    insight_type: Literal["timeline_insight"] = "timeline_insight"
    timeline_adherence: float
    services: List[str] = Field(default_factory=list)


class VendorPerformancePayload(BaseModel):
    insight_type: Literal["vendor_performance"] = "vendor_performance"
    vendor_ratings: Dict[str, float] = Field(default_factory=dict)


InsightPayload = Annotated[
    Union[
        ServiceCombinationPayload,
        BudgetOptimizationPayload,
        TimelineInsightPayload,
        VendorPerformancePayload,
    ],
    Field(discriminator='insight_type'),
]


class LearningInsight(BaseModel):
    """
    Derived insight record. Never mutated after creation.

    The payload is a tagged variant; its insight_type tag must agree with the
    record's insight_type.
    """

    id: Optional[str] = None
    event_type: str
    insight_type: InsightType
    title: str
    description: str
    data: InsightPayload
    confidence: float = Field(..., ge=0.0, le=1.0)
    created_at: Optional[datetime] = None

    @model_validator(mode='after')
    def _payload_matches_type(self) -> "LearningInsight":
        if self.data.insight_type != self.insight_type.value:
            raise ValueError(
                f"payload tag {self.data.insight_type!r} does not match "
                f"insight_type {self.insight_type.value!r}"
            )
        return self

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LearningInsight":
        data = record['insight_data']
        # asyncpg returns jsonb as text unless a codec is registered
        if isinstance(data, str):
            data = json.loads(data)
        return cls(
            id=str(record['id']) if record.get('id') is not None else None,
            event_type=record['event_type'],
            insight_type=record['insight_type'],
            title=record['title'],
            description=record['description'],
            data=data,
            confidence=float(record['confidence']),
            created_at=record.get('created_at'),
        )


class RecordOutcomeResult(BaseModel):
    """What the learning engine did with one outcome report."""

    pattern_updated: bool
    insights_emitted: List[LearningInsight] = Field(default_factory=list)


class OutcomeAcceptedResponse(BaseModel):
    """Response of POST /learning/outcomes."""

    accepted: bool = True
    event_id: str
    pattern_updated: bool
    insights_emitted: List[LearningInsight] = Field(default_factory=list)


# =============================================================================
# Read-side Summary
# =============================================================================


class BudgetVarianceStats(BaseModel):
    """Budget variance reduction for one event type."""

    event_type: str
    event_count: int
    mean_budget_variance: float
    median_budget_variance: float


class LearningSummary(BaseModel):
    """
    Read-time reduction over the raw outcome reports in a trailing window,
    together with pattern confidence counts for the same window.
    """

    window_days: int
    event_type: Optional[str] = None
    event_count: int = 0
    average_rating: float = 0.0
    average_success_rate: float = 0.0
    budget_variance_by_event_type: List[BudgetVarianceStats] = Field(default_factory=list)
    total_patterns: int = 0
    high_confidence_patterns: int = 0
    pattern_confidence_rate: float = 0.0
    learning_velocity: float = Field(default=0.0, description="Outcome reports per day")
    generated_at: datetime
