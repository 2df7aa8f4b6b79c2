import io
import logging
import time
from typing import Optional

from openai import AzureOpenAI
from langchain_openai import AzureChatOpenAI

from utils.errors import LLMError, LLMConfigurationError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Thin wrapper over an Azure OpenAI deployment.

    Built once per process (see services.registry) and passed into every
    generation function instead of living at module level.
    """

    def __init__(self, client: AzureOpenAI, deployment: str, transcription_deployment: Optional[str] = None):
        self.client = client
        self.deployment = deployment
        self.transcription_deployment = transcription_deployment

    @classmethod
    def from_config(cls, config) -> "LLMClient":
        api_key = config.get("AZURE_OPENAI_API_KEY")
        endpoint = config.get("AZURE_OPENAI_ENDPOINT")
        deployment = config.get("AZURE_DEPLOYMENT_NAME")
        if not all([api_key, endpoint, deployment]):
            raise LLMConfigurationError(
                "Azure OpenAI environment variables (API_KEY, ENDPOINT, DEPLOYMENT_NAME) are not set."
            )
        client = AzureOpenAI(
            api_key=api_key,
            api_version=config.get("AZURE_OPENAI_API_VERSION"),
            azure_endpoint=endpoint,
        )
        return cls(client, deployment, config.get("AZURE_TRANSCRIPTION_DEPLOYMENT"))

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        json_mode: bool = False,
    ) -> str:
        """Run one chat completion and return its text. Vendor errors propagate."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()
        response = self.client.chat.completions.create(
            model=self.deployment,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError("No text in response")

        usage = response.usage
        if usage:
            logger.info(
                f"Completion in {time.time() - start_time:.2f}s "
                f"(prompt={usage.prompt_tokens}, completion={usage.completion_tokens})"
            )
        return content.strip()

    def transcribe(self, file_bytes: bytes, file_name: str) -> dict:
        """Transcribe audio/video, returning the text and timed segments."""
        audio = io.BytesIO(file_bytes)
        audio.name = file_name
        response = self.client.audio.transcriptions.create(
            model=self.transcription_deployment,
            file=audio,
            response_format="verbose_json",
        )
        segments = getattr(response, "segments", None) or []
        return {
            "text": response.text,
            "segments": [
                {
                    "start": _field(seg, "start"),
                    "end": _field(seg, "end"),
                    "text": _field(seg, "text"),
                }
                for seg in segments
            ],
        }


def _field(segment, name):
    if isinstance(segment, dict):
        return segment.get(name)
    return getattr(segment, name, None)


def build_summary_model(config) -> AzureChatOpenAI:
    """LangChain chat model used for chunk summaries."""
    if not all([config.get("AZURE_OPENAI_API_KEY"), config.get("AZURE_OPENAI_ENDPOINT"), config.get("AZURE_DEPLOYMENT_NAME")]):
        raise LLMConfigurationError("Azure OpenAI configuration not found in the environment.")
    return AzureChatOpenAI(
        azure_endpoint=config.get("AZURE_OPENAI_ENDPOINT"),
        openai_api_version=config.get("AZURE_OPENAI_API_VERSION"),
        deployment_name=config.get("AZURE_DEPLOYMENT_NAME"),
        openai_api_key=config.get("AZURE_OPENAI_API_KEY"),
        temperature=0.3,
        max_tokens=1000,
    )
