"""Tests for unwrapping JSON out of LLM responses."""

import pytest

from utils.json_response import extract_possible_json, strip_code_fences, unwrap_json_response


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n[1, 2]\n```') == "[1, 2]"

    def test_unfenced_text_untouched(self):
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_none(self):
        assert strip_code_fences(None) == ""


class TestUnwrapJsonResponse:
    def test_plain_object(self):
        assert unwrap_json_response('{"score": 90}') == {"score": 90}

    def test_fenced_object(self):
        text = '```json\n{"score": 90, "summary": "ok"}\n```'
        assert unwrap_json_response(text) == {"score": 90, "summary": "ok"}

    def test_fenced_with_surrounding_whitespace(self):
        text = '  \n```JSON\n{"a": [1, 2]}\n```\n  '
        assert unwrap_json_response(text) == {"a": [1, 2]}

    def test_fenced_array(self):
        assert unwrap_json_response('```\n[{"type": "hero"}]\n```') == [{"type": "hero"}]

    def test_json_surrounded_by_prose(self):
        text = 'Here is your analysis:\n{"score": 70}\nLet me know if you need more.'
        assert unwrap_json_response(text) == {"score": 70}

    def test_array_surrounded_by_prose(self):
        text = 'Blocks follow: [{"id": "hero-1"}] done'
        assert unwrap_json_response(text) == [{"id": "hero-1"}]

    def test_nested_braces_use_outermost_span(self):
        text = 'Result: {"a": {"b": {"c": 1}}} trailing'
        assert unwrap_json_response(text) == {"a": {"b": {"c": 1}}}

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_raises(self, text):
        with pytest.raises(ValueError):
            unwrap_json_response(text)

    def test_malformed_raises(self):
        with pytest.raises(ValueError):
            unwrap_json_response('{"score": 90,,}')

    def test_prose_without_json_raises(self):
        with pytest.raises(ValueError):
            unwrap_json_response("I cannot help with that.")

    def test_truncated_json_raises(self):
        with pytest.raises(ValueError):
            unwrap_json_response('```json\n{"score": 90, "summary": "cut off')


def test_extract_possible_json_none_when_absent():
    assert extract_possible_json("no json here") is None
    assert extract_possible_json("") is None
