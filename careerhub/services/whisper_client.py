"""
Whisper Transcription Client

Downloads an interview recording and transcribes it with OpenAI Whisper.
"""
import io
import logging

import httpx
from openai import OpenAI, OpenAIError

from careerhub.core.config import get_settings
from careerhub.core.exceptions import UpstreamServiceError
from careerhub.services.providers import Transcriber

logger = logging.getLogger(__name__)

settings = get_settings()


class WhisperTranscriber(Transcriber):

    def __init__(self, client: OpenAI = None, http: httpx.Client = None):
        self.client = client or OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.provider_timeout_seconds,
        )
        self.http = http or httpx.Client(timeout=settings.provider_timeout_seconds, follow_redirects=True)
        self.model = settings.whisper_model

    def _download(self, audio_url: str) -> bytes:
        try:
            response = self.http.get(audio_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Recording download failed: %s", e)
            raise UpstreamServiceError(f"Failed to download recording: {e}", provider="recording") from e
        return response.content

    def transcribe(self, audio_url: str) -> str:
        audio = io.BytesIO(self._download(audio_url))
        audio.name = "interview.mp4"

        try:
            transcription = self.client.audio.transcriptions.create(
                file=audio,
                model=self.model,
                response_format="text",
            )
        except OpenAIError as e:
            logger.error("Whisper transcription failed: %s", e)
            raise UpstreamServiceError(f"Transcription failed: {e}", provider="whisper") from e

        # response_format="text" returns a plain string
        return transcription if isinstance(transcription, str) else transcription.text


# Singleton instance
_transcriber: WhisperTranscriber = None


def get_transcriber() -> Transcriber:
    """Get or create the Whisper client (singleton pattern)"""
    global _transcriber
    if _transcriber is None:
        _transcriber = WhisperTranscriber()
    return _transcriber
