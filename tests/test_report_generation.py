"""Tests for multi-section sales report generation."""

import time
from datetime import datetime

import pytest

from models.sales_report import OfferContext
from services.report_generation import (
    ReportGenerator,
    SECTION_ERROR_PLACEHOLDER,
    build_context_prompt,
    generate_report_section,
    generate_sales_report,
    refine_report_section,
    regenerate_report_section,
    replace_report_section,
)
from services.report_sections import REPORT_SECTIONS, SECTION_METADATA, section_heading

from fakes.fake_clients import FakeLLM, FakeStatusError


def section_of(prompt):
    for key in REPORT_SECTIONS:
        if SECTION_METADATA[key]["prompt"] in prompt:
            return key
    raise AssertionError("prompt names no known section")


def heading_positions(report):
    return [report.index(section_heading(key)) for key in REPORT_SECTIONS]


@pytest.fixture
def context():
    return OfferContext(
        product_name="X",
        category="Course",
        target_audience="Freelance designers",
        main_problem="Inconsistent income",
        key_features=["12 video modules", "Weekly office hours"],
        price_point="$497",
        geographic_focus="US",
        usp="Only course built around retainer pricing",
    )


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class TestBuildContextPrompt:
    def test_includes_attributes_and_features(self, context):
        prompt = build_context_prompt(context, [])
        assert "**Product Name:** X" in prompt
        assert "**Category:** Course" in prompt
        assert "**Key Features:**\n- 12 video modules\n- Weekly office hours" in prompt
        assert "Content Summaries" not in prompt
        assert "Additional Context" not in prompt

    def test_optional_blocks(self, context):
        context.key_features = []
        context.additional_context = "Launching in January"
        prompt = build_context_prompt(context, ["first summary", "second summary"])

        assert "Key Features" not in prompt
        assert "**Additional Context:** Launching in January" in prompt
        assert "## Content Summaries" in prompt
        assert "### File 1\nfirst summary" in prompt
        assert "### File 2\nsecond summary" in prompt


class TestGenerateReportSection:
    def test_uses_persona_and_section_prompt(self):
        llm = FakeLLM(default="Body")
        assert generate_report_section(llm, "pricing_strategy", "CONTEXT", sleep=SleepRecorder()) == "Body"

        call = llm.calls[0]
        assert call["prompt"].startswith("CONTEXT\n\n")
        assert SECTION_METADATA["pricing_strategy"]["prompt"] in call["prompt"]
        assert "Revenue Consultant" in call["system"]
        assert call["temperature"] == 0.7
        assert call["max_tokens"] == 1500

    def test_rate_limit_retried_three_times_then_placeholder(self):
        llm = FakeLLM(replies=[FakeStatusError(429)] * 5)
        sleep = SleepRecorder()

        result = generate_report_section(llm, "positioning", "CONTEXT", sleep=sleep)

        assert result == SECTION_ERROR_PLACEHOLDER
        assert sleep.calls == [35, 35, 35]
        assert len(llm.calls) == 4

    def test_unavailable_waits_fifteen_seconds(self):
        llm = FakeLLM(replies=[FakeStatusError(503)] * 4)
        sleep = SleepRecorder()

        result = generate_report_section(llm, "positioning", "CONTEXT", sleep=sleep)

        assert result == SECTION_ERROR_PLACEHOLDER
        assert sleep.calls == [15, 15, 15]

    def test_recovers_after_transient_error(self):
        llm = FakeLLM(replies=[FakeStatusError(429), FakeStatusError(503), "Recovered body"])
        sleep = SleepRecorder()

        assert generate_report_section(llm, "use_cases", "CONTEXT", sleep=sleep) == "Recovered body"
        assert sleep.calls == [35, 15]
        assert len(llm.calls) == 3

    def test_other_errors_not_retried(self):
        llm = FakeLLM(replies=[FakeStatusError(400)])
        sleep = SleepRecorder()

        assert generate_report_section(llm, "use_cases", "CONTEXT", sleep=sleep) == SECTION_ERROR_PLACEHOLDER
        assert sleep.calls == []
        assert len(llm.calls) == 1

    def test_error_without_status_not_retried(self):
        llm = FakeLLM(replies=[RuntimeError("connection reset")])
        sleep = SleepRecorder()

        assert generate_report_section(llm, "use_cases", "CONTEXT", sleep=sleep) == SECTION_ERROR_PLACEHOLDER
        assert sleep.calls == []


class TestReportGenerator:
    def test_serial_issues_one_call_per_section(self, context):
        llm = FakeLLM(handler=lambda prompt, **kwargs: f"Content for {section_of(prompt)}")
        sleep = SleepRecorder()

        report = ReportGenerator(llm, fanout="serial", inter_call_delay=15, sleep=sleep).generate(context, [])

        assert len(llm.calls) == len(REPORT_SECTIONS) == 14
        assert [section_of(call["prompt"]) for call in llm.calls] == REPORT_SECTIONS
        # one pause between each pair of consecutive calls
        assert sleep.calls == [15] * 13
        assert heading_positions(report) == sorted(heading_positions(report))

    def test_parallel_keeps_declared_order(self, context):
        def slow_for_early_sections(prompt, **kwargs):
            key = section_of(prompt)
            time.sleep(0.005 * (len(REPORT_SECTIONS) - REPORT_SECTIONS.index(key)))
            return f"Content for {key}"

        llm = FakeLLM(handler=slow_for_early_sections)
        report = ReportGenerator(llm, fanout="parallel", sleep=SleepRecorder()).generate(context, [])

        assert len(llm.calls) == 14
        positions = heading_positions(report)
        assert positions == sorted(positions)
        for key in REPORT_SECTIONS:
            heading_end = report.index(section_heading(key)) + len(section_heading(key))
            assert report[heading_end:].startswith(f"\n\nContent for {key}\n\n---")

    def test_failed_section_does_not_disturb_others(self, context):
        def fail_pricing(prompt, **kwargs):
            key = section_of(prompt)
            if key == "pricing_strategy":
                raise FakeStatusError(429)
            return f"Content for {key}"

        llm = FakeLLM(handler=fail_pricing)
        sleep = SleepRecorder()

        report = ReportGenerator(llm, fanout="serial", inter_call_delay=0, sleep=sleep).generate(context, [])

        pricing_heading = section_heading("pricing_strategy")
        assert f"{pricing_heading}\n\n{SECTION_ERROR_PLACEHOLDER}\n\n---" in report
        for key in REPORT_SECTIONS:
            if key != "pricing_strategy":
                assert f"Content for {key}" in report
        assert sleep.calls == [35, 35, 35]
        assert len(llm.calls) == 14 + 3

    def test_rejects_unknown_fanout(self):
        with pytest.raises(ValueError):
            ReportGenerator(FakeLLM(), fanout="burst")

    def test_from_config(self):
        config = {"REPORT_FANOUT": "parallel", "REPORT_SECTION_DELAY_SECONDS": 2.5, "REPORT_MAX_WORKERS": 4}
        generator = ReportGenerator.from_config(FakeLLM(), config)
        assert generator.fanout == "parallel"
        assert generator.inter_call_delay == 2.5
        assert generator.max_workers == 4

    def test_header_block(self, context):
        generator = ReportGenerator(FakeLLM(), inter_call_delay=0, sleep=SleepRecorder())
        report = generator.generate(context, [], generated_on=datetime(2026, 3, 7))
        assert report.startswith("# Sales Report: X\n\n*Generated on 3/7/2026*\n\n---\n\n## ")


def test_end_to_end_fourteen_headings_in_order(context):
    llm = FakeLLM(handler=lambda prompt, **kwargs: "- insight one\n- insight two")
    report = generate_sales_report(llm, context, [], inter_call_delay=0, sleep=SleepRecorder())

    headings = [line for line in report.splitlines() if line.startswith("## ")]
    assert headings == [section_heading(key) for key in REPORT_SECTIONS]
    for key in REPORT_SECTIONS:
        after = report.split(section_heading(key), 1)[1].split("\n---", 1)[0].strip()
        assert after == "- insight one\n- insight two" or after == SECTION_ERROR_PLACEHOLDER


class TestSectionEditing:
    def test_regenerate_includes_instructions(self, context):
        llm = FakeLLM(default="New body")
        result = regenerate_report_section(llm, "funnel_health", context, ["sum"], "Focus on mobile")

        assert result == "New body"
        prompt = llm.calls[0]["prompt"]
        assert SECTION_METADATA["funnel_health"]["prompt"] in prompt
        assert "Additional Instructions: Focus on mobile" in prompt
        assert "### File 1\nsum" in prompt

    def test_regenerate_unknown_section(self, context):
        with pytest.raises(ValueError):
            regenerate_report_section(FakeLLM(), "not_a_section", context, [], "")

    def test_regenerate_propagates_errors(self, context):
        llm = FakeLLM(replies=[FakeStatusError(500)])
        with pytest.raises(FakeStatusError):
            regenerate_report_section(llm, "funnel_health", context, [], "")

    def test_refine(self):
        llm = FakeLLM(default="Refined")
        assert refine_report_section(llm, "Old text", "Make it shorter") == "Refined"
        prompt = llm.calls[0]["prompt"]
        assert "Current section content:\n\nOld text" in prompt
        assert "User request: Make it shorter" in prompt
        assert "refines sales report sections" in llm.calls[0]["system"]


class TestReplaceReportSection:
    def build(self):
        generator = ReportGenerator(
            FakeLLM(handler=lambda prompt, **kwargs: f"Content for {section_of(prompt)}"),
            inter_call_delay=0,
            sleep=SleepRecorder(),
        )
        return generator.generate(OfferContext(product_name="X"), [])

    def test_replaces_only_target_section(self):
        report = self.build()
        updated = replace_report_section(report, "pricing_strategy", "Fresh pricing\n")

        assert "Content for pricing_strategy" not in updated
        assert f"{section_heading('pricing_strategy')}\n\nFresh pricing\n\n---\n\n{section_heading('upsell_downsell')}" in updated
        for key in REPORT_SECTIONS:
            if key != "pricing_strategy":
                assert f"Content for {key}" in updated
        assert heading_positions(updated) == sorted(heading_positions(updated))

    def test_replaces_last_section(self):
        report = self.build()
        updated = replace_report_section(report, "value_perception", "Final words")
        assert updated.endswith(f"{section_heading('value_perception')}\n\nFinal words\n\n---\n\n")

    def test_appends_missing_section(self):
        updated = replace_report_section("# Sales Report: X\n", "use_cases", "Cases")
        assert updated == f"# Sales Report: X\n\n{section_heading('use_cases')}\n\nCases\n\n---\n\n"
