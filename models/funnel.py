from pydantic import BaseModel
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime

BlockType = Literal["hero", "features", "pricing", "testimonials", "faq", "cta"]
FunnelPageType = Literal["lead", "sales", "thank_you"]

BLOCK_TYPES = ("hero", "features", "pricing", "testimonials", "faq", "cta")
FUNNEL_PAGE_TYPES = ("lead", "sales", "thank_you")


class PageBlock(BaseModel):
    id: str
    type: str
    content: Dict[str, Any] = {}
    style: Optional[Dict[str, Any]] = None


class Seo(BaseModel):
    title: str
    description: str


class FunnelCreate(BaseModel):
    workspace_id: str
    offer_id: str  # Foreign Key to the offers collection
    user_id: str
    name: str
    status: Literal["draft", "published"] = "draft"
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FunnelPageCreate(BaseModel):
    funnel_id: str  # Foreign Key to the funnels collection
    name: str
    slug: str
    type: FunnelPageType
    order_index: int
    blocks: List[Dict[str, Any]] = []
    copy_data: Dict[str, Any] = {}
    seo: Seo
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
