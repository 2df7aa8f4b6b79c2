import json
import re

FENCE_PATTERN = re.compile(r"^\s*```(?:json|JSON)?[ \t]*\n?|\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    return FENCE_PATTERN.sub("", text or "").strip()


def extract_possible_json(text):
    """
    Try to extract the outermost JSON object or array using a regex
    (as a last resort fallback).
    """
    if not text:
        return None
    match = re.search(r"(\{.*\}|\[.*\])", text, re.DOTALL)
    if match:
        return match.group(1).strip()
    return None


def unwrap_json_response(text):
    """
    Parse an LLM response that is expected to be JSON.

    Handles plain JSON, JSON wrapped in markdown code fences and JSON
    surrounded by prose. Raises ValueError when nothing parses.
    """
    if text is None or not text.strip():
        raise ValueError("Empty response")

    cleaned_text = strip_code_fences(text)

    # Step 1: First attempt to parse directly
    try:
        return json.loads(cleaned_text)
    except json.JSONDecodeError:
        pass

    # Step 2: Try to extract JSON using fallback
    extracted = extract_possible_json(cleaned_text)
    if extracted:
        try:
            return json.loads(extracted)
        except json.JSONDecodeError:
            pass

    raise ValueError(f"Response is not valid JSON: {text[:200]}")
