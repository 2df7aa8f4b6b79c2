from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal, Union
from datetime import datetime

Number = Union[int, float]


class Positioning(BaseModel):
    target_audience: str
    primary_pain_point: str
    core_benefit: str
    market_sophistication: Literal["unaware", "problem_aware", "solution_aware", "product_aware", "most_aware"]
    messaging_angles: List[str] = []


class RevenueModel(BaseModel):
    type: str
    monetization_strategy: str
    conversion_strategy: str


class PricingStrategy(BaseModel):
    suggested_price_point: str
    reasoning: str
    psychological_hooks: List[str] = []
    price_gap_analysis: Optional[str] = None


class Upsell(BaseModel):
    offer_name: str
    price_point: str
    reasoning: str


class UpsellStructure(BaseModel):
    recommended_upsells: List[Upsell] = []


class BonusSuggestion(BaseModel):
    name: str
    value_proposition: str


class FunnelStep(BaseModel):
    name: str
    purpose: str
    key_elements: List[str] = []


class FunnelStrategy(BaseModel):
    recommended_flow: Literal["lead_magnet_sales", "direct_sales", "webinar", "application"]
    steps: List[FunnelStep] = []


class CopyAngles(BaseModel):
    headlines: List[str] = []
    hooks: List[str] = []
    email_subjects: List[str] = []


class FunnelHealthScore(BaseModel):
    clarity: Number
    monetization_depth: Number
    pricing: Number
    overall: Number


class OfferAnalysis(BaseModel):
    score: Number = Field(ge=0, le=100)
    summary: str
    positioning: Positioning
    revenue_model: RevenueModel
    pricing_strategy: PricingStrategy
    upsell_structure: UpsellStructure
    bonus_suggestions: List[BonusSuggestion] = []
    funnel_strategy: FunnelStrategy
    copy_angles: CopyAngles
    funnel_health_score: FunnelHealthScore
    recommendations: List[str] = []


class AnalysisResult(BaseModel):
    """Outcome of an analysis call; used_fallback marks the canned record."""
    analysis: OfferAnalysis
    used_fallback: bool = False
    error: Optional[str] = None


class OfferInput(BaseModel):
    type: Literal["raw_text", "url", "document"] = "raw_text"
    text: Optional[str] = None
    url: Optional[str] = None
    file_content: Optional[str] = None

    def value(self) -> str:
        return self.text or self.url or self.file_content or ""


class OfferCreate(BaseModel):
    workspace_id: str  # Foreign Key to the workspaces collection
    user_id: str
    name: str
    status: Literal["analyzed"] = "analyzed"
    input_type: Literal["raw_text", "url", "document"]
    input_value: str
    analysis: Dict[str, Any]
    analysis_source: Literal["llm", "fallback"] = "llm"
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
