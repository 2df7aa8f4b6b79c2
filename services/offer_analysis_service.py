import logging
from typing import Optional

from pydantic import ValidationError

from models.offer import OfferAnalysis, AnalysisResult
from services.llm_client import LLMClient
from utils.json_response import unwrap_json_response

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You are the world's best direct response copywriter and offer strategist (think Alex Hormozi meets Ogilvy).
Your goal is to analyze raw offer inputs and generate a structured "Offer Intelligence Report".

You must output valid JSON matching the following schema:
{
  "score": number (0-100),
  "summary": string,
  "positioning": {
    "target_audience": string,
    "primary_pain_point": string,
    "core_benefit": string,
    "market_sophistication": string (one of: "unaware", "problem_aware", "solution_aware", "product_aware", "most_aware"),
    "messaging_angles": string[]
  },
  "revenue_model": {
    "type": string,
    "monetization_strategy": string,
    "conversion_strategy": string
  },
  "pricing_strategy": {
    "suggested_price_point": string,
    "reasoning": string,
    "psychological_hooks": string[],
    "price_gap_analysis": string
  },
  "upsell_structure": {
    "recommended_upsells": [
      { "offer_name": string, "price_point": string, "reasoning": string }
    ]
  },
  "bonus_suggestions": [
     { "name": string, "value_proposition": string }
  ],
  "funnel_strategy": {
    "recommended_flow": string (one of: "lead_magnet_sales", "direct_sales", "webinar", "application"),
    "steps": [
      { "name": string, "purpose": string, "key_elements": string[] }
    ]
  },
  "copy_angles": {
    "headlines": string[],
    "hooks": string[],
    "email_subjects": string[]
  },
  "funnel_health_score": {
    "clarity": number,
    "monetization_depth": number,
    "pricing": number,
    "overall": number
  },
  "recommendations": string[]
}

Analyze deeply. Be critical. Focus on conversion and monetization.
Return ONLY the JSON object, no markdown formatting.
""".strip()

MOCK_ANALYSIS = {
    "score": 85,
    "summary": "A strong coaching offer that needs better risk reversal.",
    "positioning": {
        "target_audience": "Mid-level corporate managers burning out",
        "primary_pain_point": "Lack of career fulfillment and exhaustion",
        "core_benefit": "Reclaim 10 hours/week and double income",
        "market_sophistication": "problem_aware",
        "messaging_angles": ["Escape the rat race", "Become your own boss"],
    },
    "revenue_model": {
        "type": "High Ticket Coaching",
        "monetization_strategy": "Upfront application fee + Backend program",
        "conversion_strategy": "Phone close",
    },
    "pricing_strategy": {
        "suggested_price_point": "$2,000 - $3,000",
        "reasoning": "High-touch coaching requires premium anchor.",
        "psychological_hooks": ["Investment in future self", "Cost of inaction"],
        "price_gap_analysis": "Competitors charge $5k+",
    },
    "upsell_structure": {
        "recommended_upsells": [
            {"offer_name": "VIP Retreat", "price_point": "$5,000", "reasoning": "In-person immersion"}
        ]
    },
    "bonus_suggestions": [
        {"name": "SOP Toolkit", "value_proposition": "Save 20 hours of setup time"}
    ],
    "funnel_strategy": {
        "recommended_flow": "application",
        "steps": [
            {
                "name": "VSL Landing Page",
                "purpose": "Pre-frame the value and filter leads",
                "key_elements": ["Headline", "Social Proof", "Application CTA"],
            },
            {
                "name": "Application Form",
                "purpose": "Qualify leads",
                "key_elements": ["Income qualify", "Commitment check"],
            },
        ],
    },
    "copy_angles": {
        "headlines": ["Stop Trading Time for Money", "The Executive Exit Strategy"],
        "hooks": ["Your boss hopes you never read this.", "Burnout is a choice."],
        "email_subjects": ["Are you tired yet?", "Invitation inside"],
    },
    "funnel_health_score": {
        "clarity": 8,
        "monetization_depth": 7,
        "pricing": 9,
        "overall": 8,
    },
    "recommendations": [
        "Add a stronger guarantee.",
        "Show more client case studies.",
    ],
}


def fallback_result(error: str) -> AnalysisResult:
    return AnalysisResult(
        analysis=OfferAnalysis.model_validate(MOCK_ANALYSIS),
        used_fallback=True,
        error=error,
    )


def analyze_offer(llm: Optional[LLMClient], content: str) -> AnalysisResult:
    """
    Turn raw offer text into an OfferAnalysis.

    Never raises: without a client, or when the model call, the JSON parse or
    the schema check fails, the canned MOCK_ANALYSIS is returned with
    used_fallback=True and the reason in `error`.
    """
    if llm is None:
        logger.warning("LLM client is not configured. Returning mock data.")
        return fallback_result("LLM client is not configured")

    try:
        logger.info("Sending offer analysis request...")
        response_text = llm.generate(
            f"Analyze this offer and return ONLY valid JSON:\n\n{content}",
            system=SYSTEM_PROMPT,
            temperature=0.7,
            max_tokens=4096,
            json_mode=True,
        )
        logger.info("Offer analysis response received")
        logger.debug(response_text)

        data = unwrap_json_response(response_text)
        analysis = OfferAnalysis.model_validate(data)
        return AnalysisResult(analysis=analysis, used_fallback=False)

    except ValidationError as e:
        logger.error(f"AI analysis did not match the schema: {e}")
        return fallback_result(f"Schema mismatch: {e.error_count()} error(s)")
    except Exception as e:
        logger.error(f"AI analysis failed: {e}", exc_info=True)
        logger.warning("Returning mock data due to error.")
        return fallback_result(str(e))
