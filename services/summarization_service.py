import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor

from langchain_core.messages import SystemMessage, HumanMessage

from utils.errors import LLMError

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "Extract key topics, main points, structure, and important details from the content. "
    "Be comprehensive but concise."
)
PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_PATTERN = re.compile(r"[^.!?]*[.!?]+|[^.!?]+$")

DEFAULT_MAX_CHARS = 30000


def split_sentences(paragraph: str) -> list:
    """Split on sentence-ending punctuation, keeping a trailing fragment."""
    return SENTENCE_PATTERN.findall(paragraph) or [paragraph]


def chunk_text(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> list:
    """
    Greedily pack blank-line separated paragraphs into chunks of at most
    max_chars. A paragraph that is too long on its own is split into
    sentences which are packed the same way; only a single sentence longer
    than max_chars can produce an oversized chunk.
    """
    stripped = (text or "").strip()
    if not stripped:
        return []
    if len(stripped) <= max_chars:
        return [stripped]

    chunks = []
    current = ""

    def flush():
        nonlocal current
        if current.strip():
            chunks.append(current.strip())
        current = ""

    for paragraph in stripped.split(PARAGRAPH_SEPARATOR):
        if not paragraph.strip():
            continue

        joined_length = len(current) + len(PARAGRAPH_SEPARATOR) + len(paragraph) if current else len(paragraph)
        if joined_length <= max_chars:
            current = f"{current}{PARAGRAPH_SEPARATOR}{paragraph}" if current else paragraph
            continue

        flush()
        if len(paragraph) <= max_chars:
            current = paragraph
            continue

        for sentence in split_sentences(paragraph):
            if len(current) + len(sentence) > max_chars:
                flush()
                current = sentence
            else:
                current += sentence

    flush()
    return chunks


def summarize_chunk(summary_model, text: str) -> str:
    """Summarize one chunk with the chat model."""
    messages = [
        SystemMessage(content=SUMMARY_SYSTEM_PROMPT),
        HumanMessage(content=text),
    ]
    response = summary_model.invoke(messages)
    content = getattr(response, "content", None)
    if not content:
        raise LLMError("No summary generated")
    return content


def generate_content_summary(summary_model, content: str, max_chars: int = DEFAULT_MAX_CHARS, max_workers: int = 8) -> str:
    """
    Chunk-and-summarize: every chunk is summarized in parallel and, when there
    was more than one chunk, the joined summaries are summarized once more.
    Empty input returns "" without calling the model.
    """
    start_time = time.time()
    chunks = chunk_text(content, max_chars)
    if not chunks:
        return ""

    logger.info(f"Summarizing {len(chunks)} chunk(s)")
    with ThreadPoolExecutor(max_workers=min(max_workers, len(chunks))) as executor:
        summaries = list(executor.map(lambda chunk: summarize_chunk(summary_model, chunk), chunks))

    if len(summaries) > 1:
        combined = PARAGRAPH_SEPARATOR.join(summaries)
        summary = summarize_chunk(summary_model, combined)
    else:
        summary = summaries[0]

    logger.info(f"Summary generated in {time.time() - start_time:.2f}s")
    return summary
