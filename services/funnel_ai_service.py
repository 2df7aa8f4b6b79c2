import json
import logging
import uuid

from models.funnel import BLOCK_TYPES
from models.offer import OfferAnalysis
from services.llm_client import LLMClient
from utils.errors import LLMError
from utils.json_response import unwrap_json_response

logger = logging.getLogger(__name__)


def generate_funnel_copy(llm: LLMClient, offer: OfferAnalysis, page_type: str) -> dict:
    """Copy for one funnel page; {} when the response is not a JSON object."""
    prompt = f"""
You are an expert funnel copywriter.
Based on the following Offer Intelligence, generate high-converting copy for a "{page_type}" page.

Offer Context:
Target Audience: {offer.positioning.target_audience}
Pain Point: {offer.positioning.primary_pain_point}
Benefit: {offer.positioning.core_benefit}
Headlines: {", ".join(offer.copy_angles.headlines)}

Output structured JSON for the page content, including:
- headlines
- subheadlines
- body_copy
- bullet_points
- cta_text
- testimonial_placeholders (if applicable)

Return ONLY JSON.
""".strip()

    try:
        response_text = llm.generate(prompt, temperature=0.7, max_tokens=2000, json_mode=True)
        copy = unwrap_json_response(response_text)
    except (LLMError, ValueError):
        logger.warning(f"Funnel copy for '{page_type}' was empty or not valid JSON, using empty copy")
        return {}
    return copy if isinstance(copy, dict) else {}


def generate_page_layout(llm: LLMClient, offer: OfferAnalysis, page_type: str, copy_data: dict) -> list:
    """Map page copy onto layout blocks; [] (a blank page) when unparseable."""
    prompt = f"""
You are a conversion optimization expert and UI designer.
Map the provided copy to a high-converting page layout using the following block types:
{", ".join(f"'{block_type}'" for block_type in BLOCK_TYPES)}.

Page Type: {page_type}
Offer Summary: {offer.summary}
Copy Data: {json.dumps(copy_data)}

Return a JSON array of PageBlock objects. Each block must have:
- id: string (unique)
- type: string (one of the above)
- content: object matching the specific block schema.

Hero Schema: {{ heading, subheading, ctaText, ctaLink }}
Features Schema: {{ heading, features: [{{ title, description, icon }}] }}
Pricing Schema: {{ heading, plans: [{{ name, price, frequency, features, ctaText, ctaLink }}] }}
Testimonials Schema: {{ heading, testimonials: [{{ name, quote, role }}] }}
FAQ Schema: {{ heading, items: [{{ question, answer }}] }}
CTA Schema: {{ heading, subheading, ctaText, ctaLink }}

Return ONLY the JSON array.
""".strip()

    try:
        response_text = llm.generate(prompt, temperature=0.7, max_tokens=3000)
        data = unwrap_json_response(response_text)
    except (LLMError, ValueError):
        logger.warning(f"Layout for '{page_type}' was empty or not valid JSON, page left blank")
        return []
    return normalize_blocks(data)


def normalize_blocks(data) -> list:
    """
    Best-effort cleanup of a model-produced block list. Accepts a bare list or
    a {"blocks": [...]} wrapper, drops non-object entries and fills missing ids.
    Block content is not validated.
    """
    if isinstance(data, dict):
        data = data.get("blocks", [])
    if not isinstance(data, list):
        return []

    blocks = []
    for item in data:
        if not isinstance(item, dict):
            continue
        block = dict(item)
        if not block.get("id"):
            block["id"] = f"{block.get('type', 'block')}-{uuid.uuid4().hex[:8]}"
        if not isinstance(block.get("content"), dict):
            block["content"] = {}
        blocks.append(block)
    return blocks
