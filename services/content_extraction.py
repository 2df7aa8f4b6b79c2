import io
import logging
import math

from docx import Document
from pypdf import PdfReader

from services.llm_client import LLMClient
from utils.errors import ExtractionError

logger = logging.getLogger(__name__)

WORD_MIME_TYPES = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
)

VALID_FILE_TYPES = [
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
    "video/mp4",
    "video/quicktime",
    "video/x-msvideo",
    "audio/mpeg",
    "audio/wav",
    "audio/mp4",
    "text/plain",
]


def get_file_category(mime_type: str) -> str:
    """One of video, audio, pdf, document, text or other."""
    mime_type = (mime_type or "").lower()
    if mime_type.startswith("video/"):
        return "video"
    if mime_type.startswith("audio/"):
        return "audio"
    if mime_type == "application/pdf":
        return "pdf"
    if "word" in mime_type or "document" in mime_type or mime_type in WORD_MIME_TYPES:
        return "document"
    if mime_type.startswith("text/plain"):
        return "text"
    return "other"


def is_valid_file_type(mime_type: str) -> bool:
    mime_type = (mime_type or "").lower()
    return any(valid_type in mime_type for valid_type in VALID_FILE_TYPES)


def format_file_size(size_bytes: int) -> str:
    if size_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(units) - 1)
    # Half-up to two decimals
    value = math.floor(size_bytes / math.pow(1024, i) * 100 + 0.5) / 100
    if value == int(value):
        value = int(value)
    return f"{value} {units[i]}"


def extract_pdf_text(file_bytes: bytes):
    """Returns (text, page_count)."""
    try:
        reader = PdfReader(io.BytesIO(file_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n\n".join(page.strip() for page in pages if page.strip()), len(reader.pages)
    except Exception as e:
        logger.error(f"PDF extraction error: {e}")
        raise ExtractionError("Failed to extract PDF text") from e


def extract_word_text(file_bytes: bytes) -> str:
    try:
        document = Document(io.BytesIO(file_bytes))
        paragraphs = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
        return "\n\n".join(paragraphs)
    except Exception as e:
        logger.error(f"Word extraction error: {e}")
        raise ExtractionError("Failed to extract Word document text") from e


def extract_plain_text(file_bytes: bytes) -> str:
    return file_bytes.decode("utf-8", errors="replace")


def transcribe_audio(llm: LLMClient, file_bytes: bytes, file_name: str) -> dict:
    """Returns {"text", "segments": [{start, end, text}]}."""
    try:
        return llm.transcribe(file_bytes, file_name)
    except Exception as e:
        logger.error(f"Transcription error: {e}")
        raise ExtractionError("Failed to transcribe audio") from e


def extract_content(llm: LLMClient, category: str, file_bytes: bytes, file_name: str):
    """Dispatch to the extractor for a category. Returns (text, metadata)."""
    metadata = {}
    if category == "pdf":
        text, pages = extract_pdf_text(file_bytes)
        metadata["pages"] = pages
    elif category == "document":
        text = extract_word_text(file_bytes)
    elif category in ("video", "audio"):
        transcription = transcribe_audio(llm, file_bytes, file_name)
        text = transcription["text"] or ""
        segments = transcription.get("segments") or []
        metadata["transcriptSegments"] = segments
        if segments and segments[-1].get("end") is not None:
            metadata["duration"] = round(segments[-1]["end"])
    elif category == "text":
        text = extract_plain_text(file_bytes)
    else:
        raise ExtractionError(f"Unsupported file category: {category}")
    return text, metadata
