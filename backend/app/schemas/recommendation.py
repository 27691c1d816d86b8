from datetime import date

from pydantic import BaseModel, Field

from app.services.recommendation.models import (
    BrandMetrics,
    CandidateDestination,
    CostEstimate,
    CreatorCommunity,
    CreatorRecord,
    DailyBreakdown,
    EngagementMetrics,
    UserPreferences,
)


class PreferencesIn(BaseModel):
    budget: float = Field(gt=0)
    currency: str = "USD"
    duration_days: int = Field(7, ge=1)
    travel_style: str | None = None
    content_focus: str | None = None
    climate: list[str] = []
    constraints: list[str] = []
    travelers: int = Field(1, ge=1)
    themes: list[str] = []

    def to_domain(self) -> UserPreferences:
        return UserPreferences(
            budget=self.budget,
            currency=self.currency,
            duration_days=self.duration_days,
            travel_style=self.travel_style,
            content_focus=self.content_focus,
            climate=tuple(self.climate),
            constraints=tuple(self.constraints),
            travelers=self.travelers,
            themes=tuple(self.themes),
        )


class EngagementIn(BaseModel):
    rate: float = 0.0
    views: float = 0.0
    reach: float = 0.0
    platform_activity: float = 0.0


class BrandIn(BaseModel):
    partner_count: float = 0.0
    alignment_score: float = 0.0
    market_size: float = 0.0
    seasonal_demand: float = 0.0


class DailyBreakdownIn(BaseModel):
    meals: float = 0.0
    transport: float = 0.0
    activities: float = 0.0
    misc: float = 0.0


class CostIn(BaseModel):
    flights: float = 0.0
    accommodation_per_night: float = 0.0
    daily_living: float = 0.0
    daily_breakdown: DailyBreakdownIn | None = None
    min_total: float | None = None
    max_total: float | None = None
    total: float | None = None
    currency: str = "USD"

    def to_domain(self) -> CostEstimate:
        breakdown = DailyBreakdown(**self.daily_breakdown.model_dump()) if self.daily_breakdown else None
        return CostEstimate(
            flights=self.flights,
            accommodation_per_night=self.accommodation_per_night,
            daily_living=self.daily_living,
            daily_breakdown=breakdown,
            min_total=self.min_total,
            max_total=self.max_total,
            total=self.total,
            currency=self.currency,
        )


class CreatorIn(BaseModel):
    name: str
    platform: str = ""
    followers: int | str = 0
    last_post_date: date | None = None
    posts_last_90_days: int | None = None
    niche: str = ""


class CreatorCommunityIn(BaseModel):
    total_reported: int = 0
    records: list[CreatorIn] = []
    data_source: str = "insufficient"
    opportunities: list[str] = []

    def to_domain(self) -> CreatorCommunity:
        return CreatorCommunity(
            total_reported=self.total_reported,
            records=tuple(CreatorRecord(**c.model_dump()) for c in self.records),
            data_source=self.data_source,
            opportunities=tuple(self.opportunities),
        )


class DestinationIn(BaseModel):
    name: str = Field(min_length=1)
    country: str = ""
    taste_affinity: float | None = None
    engagement: EngagementIn | None = None
    brand: BrandIn | None = None
    cost: CostIn | None = None
    creators: CreatorCommunityIn | None = None

    def to_domain(self) -> CandidateDestination:
        return CandidateDestination(
            name=self.name,
            country=self.country,
            taste_affinity=self.taste_affinity,
            engagement=EngagementMetrics(**self.engagement.model_dump()) if self.engagement else None,
            brand=BrandMetrics(**self.brand.model_dump()) if self.brand else None,
            cost=self.cost.to_domain() if self.cost else None,
            creators=self.creators.to_domain() if self.creators else None,
        )


class RecommendationRequest(BaseModel):
    preferences: PreferencesIn
    destinations: list[DestinationIn] = []
