import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Callable, List, Optional

from models.sales_report import OfferContext
from services.llm_client import LLMClient
from services.report_sections import REPORT_SECTIONS, SECTION_METADATA, section_heading

logger = logging.getLogger(__name__)

PLAIN_ENGLISH = (
    "Provide your response in clear, fluent, professional English using straightforward language "
    "that is easy to comprehend without unnecessary jargon. NEVER use any emojis in your response."
)
SYSTEM_PERSONA = (
    "You are a world-class Revenue Consultant and Marketing Strategist. You provide deep, actionable "
    "insights that transform offers into high-converting revenue engines. Be specific, strategic, and "
    f"data-informed. {PLAIN_ENGLISH}"
)
REFINE_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that refines sales report sections based on user feedback. "
    f"Maintain the markdown format and structure. {PLAIN_ENGLISH}"
)
MARKDOWN_DIRECTIVE = (
    "Provide a comprehensive analysis in markdown format. Use bullet points, subheadings, "
    "and clear structure. Be specific and actionable."
)

SECTION_ERROR_PLACEHOLDER = "Error generating this section — please retry"
SECTION_DIVIDER = "---"

# Seconds to wait before retrying, keyed by HTTP status
RETRY_WAITS = {429: 35, 503: 15}
MAX_RETRIES = 3

SECTION_TEMPERATURE = 0.7
SECTION_MAX_TOKENS = 1500

FANOUT_MODES = ("serial", "parallel")


def build_context_prompt(context: OfferContext, file_summaries: List[str]) -> str:
    lines = [
        "## Offer Context",
        "",
        f"**Product Name:** {context.product_name}",
        f"**Category:** {context.category}",
        f"**Target Audience:** {context.target_audience}",
        f"**Main Problem Solved:** {context.main_problem}",
        f"**Price Point:** {context.price_point}",
        f"**Geographic Focus:** {context.geographic_focus}",
        f"**Unique Selling Proposition:** {context.usp}",
        "",
    ]

    if context.key_features:
        lines.append("**Key Features:**")
        lines.extend(f"- {feature}" for feature in context.key_features)
        lines.append("")

    if context.additional_context:
        lines.append(f"**Additional Context:** {context.additional_context}")
        lines.append("")

    if file_summaries:
        lines.append("## Content Summaries")
        lines.append("")
        for index, summary in enumerate(file_summaries, start=1):
            lines.append(f"### File {index}")
            lines.append(summary)
            lines.append("")

    return "\n".join(lines)


def status_code_of(exc: Exception) -> Optional[int]:
    """HTTP status carried by a vendor error, if any."""
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "response", None), "status_code", None)
    return status


def generate_report_section(
    llm: LLMClient,
    section: str,
    context_prompt: str,
    sleep: Callable[[float], None] = time.sleep,
    max_retries: int = MAX_RETRIES,
) -> str:
    """
    Generate the markdown body of one section.

    Rate-limit (429) and unavailable (503) errors are retried up to
    max_retries times with a fixed wait. Anything else, or running out of
    retries, yields SECTION_ERROR_PLACEHOLDER instead of raising.
    """
    section_data = SECTION_METADATA[section]
    prompt = f"{context_prompt}\n\n{section_data['prompt']}\n\n{MARKDOWN_DIRECTIVE}"

    for attempt in range(max_retries + 1):
        try:
            return llm.generate(
                prompt,
                system=SYSTEM_PERSONA,
                temperature=SECTION_TEMPERATURE,
                max_tokens=SECTION_MAX_TOKENS,
            )
        except Exception as e:
            wait_time = RETRY_WAITS.get(status_code_of(e))
            if wait_time is None or attempt == max_retries:
                logger.error(f"Error generating section {section}: {e}")
                return SECTION_ERROR_PLACEHOLDER
            logger.warning(
                f"Section '{section}' got status {status_code_of(e)} "
                f"(attempt {attempt + 1}/{max_retries + 1}). Retrying in {wait_time}s..."
            )
            sleep(wait_time)

    return SECTION_ERROR_PLACEHOLDER


def format_generated_date(moment: datetime) -> str:
    return f"{moment.month}/{moment.day}/{moment.year}"


def assemble_report(product_name: str, contents: dict, generated_on: Optional[datetime] = None) -> str:
    """Render sections in declared order, whatever order they finished in."""
    generated_on = generated_on or datetime.now()
    parts = [
        f"# Sales Report: {product_name}\n\n",
        f"*Generated on {format_generated_date(generated_on)}*\n\n",
        f"{SECTION_DIVIDER}\n\n",
    ]
    for section in REPORT_SECTIONS:
        body = contents.get(section) or SECTION_ERROR_PLACEHOLDER
        parts.append(f"{section_heading(section)}\n\n{body}\n\n{SECTION_DIVIDER}\n\n")
    return "".join(parts)


class ReportGenerator:
    """
    Generates all report sections with one of two fan-out disciplines:

    serial    one call at a time with inter_call_delay seconds between calls,
              keeping under the vendor's requests-per-minute limit
    parallel  every section at once on a thread pool
    """

    def __init__(
        self,
        llm: LLMClient,
        fanout: str = "serial",
        inter_call_delay: float = 15.0,
        max_workers: int = len(REPORT_SECTIONS),
        sleep: Callable[[float], None] = time.sleep,
    ):
        if fanout not in FANOUT_MODES:
            raise ValueError(f"Unknown fan-out mode: {fanout}")
        self.llm = llm
        self.fanout = fanout
        self.inter_call_delay = inter_call_delay
        self.max_workers = max_workers
        self.sleep = sleep

    @classmethod
    def from_config(cls, llm: LLMClient, config, sleep: Callable[[float], None] = time.sleep) -> "ReportGenerator":
        return cls(
            llm,
            fanout=config.get("REPORT_FANOUT", "serial"),
            inter_call_delay=config.get("REPORT_SECTION_DELAY_SECONDS", 15.0),
            max_workers=config.get("REPORT_MAX_WORKERS", len(REPORT_SECTIONS)),
            sleep=sleep,
        )

    def _generate(self, section: str, context_prompt: str) -> str:
        return generate_report_section(self.llm, section, context_prompt, sleep=self.sleep)

    def generate_sections(self, context_prompt: str) -> dict:
        if self.fanout == "parallel":
            return self._generate_parallel(context_prompt)
        return self._generate_serial(context_prompt)

    def _generate_serial(self, context_prompt: str) -> dict:
        results = {}
        for index, section in enumerate(REPORT_SECTIONS):
            if index > 0 and self.inter_call_delay > 0:
                self.sleep(self.inter_call_delay)
            logger.info(f"Generating section {index + 1}/{len(REPORT_SECTIONS)}: {section}")
            results[section] = self._generate(section, context_prompt)
        return results

    def _generate_parallel(self, context_prompt: str) -> dict:
        results = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_section = {
                executor.submit(self._generate, section, context_prompt): section
                for section in REPORT_SECTIONS
            }
            for i, future in enumerate(as_completed(future_to_section)):
                section = future_to_section[future]
                try:
                    results[section] = future.result()
                    logger.info(f"Completed: {section} ({i + 1}/{len(REPORT_SECTIONS)})")
                except Exception as e:
                    logger.error(f"Error in section {section}: {e}")
                    results[section] = SECTION_ERROR_PLACEHOLDER
        return results

    def generate(self, context: OfferContext, file_summaries: List[str], generated_on: Optional[datetime] = None) -> str:
        start_time = time.time()
        logger.info(f"Generating {len(REPORT_SECTIONS)} sections ({self.fanout})")
        contents = self.generate_sections(build_context_prompt(context, file_summaries))
        logger.info(f"Report generation complete in {time.time() - start_time:.2f}s")
        return assemble_report(context.product_name, contents, generated_on)


def generate_sales_report(
    llm: LLMClient,
    context: OfferContext,
    file_summaries: List[str],
    fanout: str = "serial",
    inter_call_delay: float = 15.0,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    generator = ReportGenerator(llm, fanout=fanout, inter_call_delay=inter_call_delay, sleep=sleep)
    return generator.generate(context, file_summaries)


def regenerate_report_section(
    llm: LLMClient,
    section: str,
    context: OfferContext,
    file_summaries: List[str],
    additional_instructions: str = "",
) -> str:
    """Regenerate one section with extra user instructions. Errors propagate."""
    if section not in SECTION_METADATA:
        raise ValueError(f"Unknown report section: {section}")
    prompt = (
        f"{build_context_prompt(context, file_summaries)}\n\n"
        f"{SECTION_METADATA[section]['prompt']}\n\n"
        f"Additional Instructions: {additional_instructions}\n\n"
        "Provide a comprehensive analysis in markdown format."
    )
    return llm.generate(
        prompt,
        system=SYSTEM_PERSONA,
        temperature=SECTION_TEMPERATURE,
        max_tokens=SECTION_MAX_TOKENS,
    )


def refine_report_section(llm: LLMClient, current_content: str, user_message: str) -> str:
    prompt = (
        f"Current section content:\n\n{current_content}\n\n"
        f"User request: {user_message}\n\n"
        "Provide the refined version of this section."
    )
    return llm.generate(
        prompt,
        system=REFINE_SYSTEM_PROMPT,
        temperature=SECTION_TEMPERATURE,
        max_tokens=SECTION_MAX_TOKENS,
    )


def replace_report_section(content: str, section: str, new_body: str) -> str:
    """
    Swap the body under a section heading, up to the next known section
    heading. A section missing from the document is appended.
    """
    heading = section_heading(section)
    block = f"\n\n{new_body.strip()}\n\n{SECTION_DIVIDER}\n\n"

    start = content.find(heading)
    if start == -1:
        return f"{content.rstrip()}\n\n{heading}{block}"

    body_start = start + len(heading)
    next_headings = [
        content.find(section_heading(other), body_start)
        for other in REPORT_SECTIONS
        if other != section
    ]
    next_headings = [position for position in next_headings if position != -1]
    end = min(next_headings) if next_headings else len(content)
    return content[:body_start] + block + content[end:]
