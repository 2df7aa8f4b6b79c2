"""Tests for funnel page assembly."""

import pytest

from models.offer import AnalysisResult, OfferAnalysis, OfferInput
from services.funnel_ai_service import generate_funnel_copy, generate_page_layout, normalize_blocks
from services.funnel_service import create_funnel_from_offer, get_funnel
from services.offer_analysis_service import MOCK_ANALYSIS
from services.offer_service import save_offer
from utils.errors import LLMError, NotFoundError

from fakes.fake_clients import FakeLLM

LAYOUT = '```json\n[{"type": "hero", "content": {"heading": "Hi"}}, {"id": "cta-1", "type": "cta", "content": {}}]\n```'


@pytest.fixture
def analysis():
    return OfferAnalysis.model_validate(MOCK_ANALYSIS)


@pytest.fixture
def offer(workspace, user_id, analysis):
    return save_offer(
        str(workspace["_id"]),
        user_id,
        OfferInput(text="Coaching offer"),
        AnalysisResult(analysis=analysis),
    )


def empty_reply(prompt, **kwargs):
    raise LLMError("No text in response")


def funnel_llm(layout=LAYOUT):
    def reply(prompt, json_mode=False, **kwargs):
        return '{"headlines": ["Buy now"], "cta_text": "Go"}' if json_mode else layout
    return FakeLLM(handler=reply)


class TestNormalizeBlocks:
    def test_fills_missing_ids(self):
        blocks = normalize_blocks([{"type": "faq", "content": {"items": []}}])
        assert blocks[0]["id"].startswith("faq-")
        assert blocks[0]["content"] == {"items": []}

    def test_keeps_existing_ids(self):
        assert normalize_blocks([{"id": "hero-1", "type": "hero", "content": {}}])[0]["id"] == "hero-1"

    def test_unwraps_blocks_key(self):
        blocks = normalize_blocks({"blocks": [{"type": "cta", "content": {}}]})
        assert [b["type"] for b in blocks] == ["cta"]

    def test_drops_non_objects_and_bad_content(self):
        blocks = normalize_blocks(["hero", 3, {"type": "pricing", "content": "oops"}])
        assert len(blocks) == 1
        assert blocks[0]["content"] == {}

    @pytest.mark.parametrize("data", [None, "text", 42, {"other": []}])
    def test_non_list_is_blank_page(self, data):
        assert normalize_blocks(data) == []


class TestPageGeneration:
    def test_copy_requests_json(self, analysis):
        llm = FakeLLM(default='{"headlines": ["A"]}')
        assert generate_funnel_copy(llm, analysis, "sales") == {"headlines": ["A"]}
        assert llm.calls[0]["json_mode"] is True
        assert '"sales" page' in llm.calls[0]["prompt"]

    def test_unparseable_copy_is_empty(self, analysis):
        assert generate_funnel_copy(FakeLLM(default="no json"), analysis, "lead") == {}
        assert generate_funnel_copy(FakeLLM(default="[1, 2]"), analysis, "lead") == {}

    def test_unparseable_layout_is_blank(self, analysis):
        assert generate_page_layout(FakeLLM(default="```json\n[{broken"), analysis, "lead", {}) == []

    def test_empty_reply_gives_empty_copy_and_blank_layout(self, analysis):
        llm = FakeLLM(handler=empty_reply)
        assert generate_funnel_copy(llm, analysis, "lead") == {}
        assert generate_page_layout(llm, analysis, "lead", {}) == []

    def test_layout_blocks_normalized(self, analysis):
        blocks = generate_page_layout(FakeLLM(default=LAYOUT), analysis, "lead", {"headlines": ["A"]})
        assert [b["type"] for b in blocks] == ["hero", "cta"]
        assert blocks[0]["id"].startswith("hero-")


class TestCreateFunnel:
    def test_three_pages_two_calls_each(self, offer, user_id):
        llm = funnel_llm()

        result = create_funnel_from_offer(llm, str(offer["_id"]), user_id)
        funnel = get_funnel(result["funnelId"])

        assert len(llm.calls) == 6
        assert funnel["status"] == "draft"
        assert funnel["name"] == f"{offer['name']} Funnel"
        assert [p["type"] for p in funnel["pages"]] == ["lead", "sales", "thank_you"]
        assert [p["order_index"] for p in funnel["pages"]] == [0, 1, 2]
        assert [p["name"] for p in funnel["pages"]] == ["Lead Page", "Sales Page", "Thank_you Page"]
        page = funnel["pages"][0]
        assert page["copy_data"] == {"headlines": ["Buy now"], "cta_text": "Go"}
        assert [b["type"] for b in page["blocks"]] == ["hero", "cta"]
        assert page["seo"]["title"] == MOCK_ANALYSIS["copy_angles"]["headlines"][0]

    def test_malformed_layout_gives_blank_pages(self, offer, user_id):
        result = create_funnel_from_offer(funnel_llm(layout="not json at all"), str(offer["_id"]), user_id)
        funnel = get_funnel(result["funnelId"])
        assert len(funnel["pages"]) == 3
        assert all(page["blocks"] == [] for page in funnel["pages"])

    def test_empty_replies_still_build_every_page(self, offer, user_id):
        result = create_funnel_from_offer(FakeLLM(handler=empty_reply), str(offer["_id"]), user_id)
        funnel = get_funnel(result["funnelId"])
        assert len(funnel["pages"]) == 3
        assert all(page["blocks"] == [] for page in funnel["pages"])
        assert all(page["copy_data"] == {} for page in funnel["pages"])

    def test_unknown_offer(self, user_id):
        with pytest.raises(NotFoundError):
            create_funnel_from_offer(funnel_llm(), "64b7f0c2a1b2c3d4e5f60799", user_id)

    def test_unknown_funnel(self):
        assert get_funnel("64b7f0c2a1b2c3d4e5f60799") is None
