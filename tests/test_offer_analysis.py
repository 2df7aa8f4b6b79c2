"""Tests for the offer analyzer and its explicit fallback result."""

import copy
import json

from models.offer import OfferInput
from services.offer_analysis_service import MOCK_ANALYSIS, analyze_offer
from services.offer_service import get_offer, get_workspace_offers, save_offer

from fakes.fake_clients import FakeLLM, FakeStatusError


def analysis_json(**overrides):
    data = copy.deepcopy(MOCK_ANALYSIS)
    data.update(overrides)
    return json.dumps(data)


def test_parses_fenced_response():
    llm = FakeLLM(default=f"```json\n{analysis_json(score=42, summary='Solid offer')}\n```")

    result = analyze_offer(llm, "A 6-week course for freelance designers")

    assert result.used_fallback is False
    assert result.error is None
    assert result.analysis.score == 42
    assert result.analysis.summary == "Solid offer"
    call = llm.calls[0]
    assert "A 6-week course for freelance designers" in call["prompt"]
    assert call["json_mode"] is True
    assert call["max_tokens"] == 4096


def test_missing_client_uses_fallback():
    result = analyze_offer(None, "anything")
    assert result.used_fallback is True
    assert result.analysis.score == MOCK_ANALYSIS["score"]
    assert result.error == "LLM client is not configured"


def test_non_json_uses_fallback():
    result = analyze_offer(FakeLLM(default="Sorry, I can't do that."), "offer")
    assert result.used_fallback is True
    assert "not valid JSON" in result.error


def test_schema_mismatch_uses_fallback():
    result = analyze_offer(FakeLLM(default=analysis_json(score=150)), "offer")
    assert result.used_fallback is True
    assert result.error.startswith("Schema mismatch")


def test_vendor_error_uses_fallback():
    result = analyze_offer(FakeLLM(replies=[FakeStatusError(500)]), "offer")
    assert result.used_fallback is True
    assert "500" in result.error


class TestSaveOffer:
    def test_name_from_first_headline(self, workspace, user_id):
        result = analyze_offer(FakeLLM(default=analysis_json()), "offer")
        offer_input = OfferInput(type="raw_text", text="My offer text")

        offer = save_offer(str(workspace["_id"]), user_id, offer_input, result)

        assert offer["name"] == MOCK_ANALYSIS["copy_angles"]["headlines"][0]
        assert offer["status"] == "analyzed"
        assert offer["input_value"] == "My offer text"
        assert offer["analysis_source"] == "llm"
        assert get_offer(str(offer["_id"]))["_id"] == offer["_id"]

    def test_fallback_is_recorded(self, workspace, user_id):
        data = copy.deepcopy(MOCK_ANALYSIS)
        data["copy_angles"]["headlines"] = []
        result = analyze_offer(FakeLLM(default=json.dumps(data)), "offer")
        fallback = analyze_offer(None, "offer")

        named = save_offer(str(workspace["_id"]), user_id, OfferInput(type="url", url="https://x.test"), result)
        flagged = save_offer(str(workspace["_id"]), user_id, OfferInput(text="t"), fallback)

        assert named["name"] == "New Offer"
        assert named["input_value"] == "https://x.test"
        assert flagged["analysis_source"] == "fallback"
        assert len(get_workspace_offers(str(workspace["_id"]))) == 2

    def test_unknown_offer(self):
        assert get_offer("not-an-id") is None
