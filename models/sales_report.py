from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime

ReportStatus = Literal["draft", "generating", "complete", "archived"]
ExtractionStatus = Literal["pending", "processing", "complete", "failed"]


class OfferContextInput(BaseModel):
    id: Optional[str] = None  # present when updating an existing context
    workspace_id: str
    product_name: str = Field(min_length=1)
    category: str = ""
    target_audience: str = ""
    main_problem: str = ""
    key_features: Optional[List[str]] = None
    price_point: str = ""
    geographic_focus: str = ""
    usp: str = ""
    additional_context: Optional[str] = None


class OfferContext(BaseModel):
    """The attributes the report prompt is built from."""
    product_name: str
    category: str = ""
    target_audience: str = ""
    main_problem: str = ""
    key_features: List[str] = []
    price_point: str = ""
    geographic_focus: str = ""
    usp: str = ""
    additional_context: Optional[str] = None


class OfferFileCreate(BaseModel):
    workspace_id: str
    offer_id: str
    file_name: str
    file_type: str
    file_size: int
    storage_path: str
    extraction_status: ExtractionStatus = "pending"
    extracted_content: Optional[str] = None
    summary: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SalesReportCreate(BaseModel):
    workspace_id: str
    offer_id: str  # id of the offer context the report is generated from
    title: str = Field(min_length=1)
    status: ReportStatus = "draft"
    content: str = ""
    metadata: Dict[str, Any] = {"sections": {}}
    version: int = 1
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReportVersionCreate(BaseModel):
    report_id: str
    version: int
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
