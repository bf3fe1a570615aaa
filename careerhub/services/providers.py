"""
Provider interfaces - the only way services touch external vendors.

Concrete clients:
- RoomProvider       -> daily_client.DailyRoomProvider (Daily.co)
- Transcriber        -> whisper_client.WhisperTranscriber (OpenAI Whisper)
- InterviewAnalyzer  -> llm_client.LLMInterviewAnalyzer (OpenAI-compatible chat API)
- DocumentStorage    -> storage_client.SupabaseStorage (Supabase Storage)

Implementations raise UpstreamServiceError for any vendor failure. Tests
swap in fakes through FastAPI dependency overrides.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from careerhub.models.providers import AnalysisResult, Recording, VideoRoom


class RoomProvider(ABC):
    @abstractmethod
    def create_room(self, name: str) -> VideoRoom:
        pass

    @abstractmethod
    def get_room(self, name: str) -> Optional[VideoRoom]:
        """Return the room, or None when the provider has no room by that name."""
        pass

    @abstractmethod
    def list_recordings(self, room_name: str) -> List[Recording]:
        pass

    @abstractmethod
    def get_recording_access_link(self, recording_id: str) -> str:
        pass


class Transcriber(ABC):
    @abstractmethod
    def transcribe(self, audio_url: str) -> str:
        """Download the audio at audio_url and return its transcript text."""
        pass


class InterviewAnalyzer(ABC):
    @abstractmethod
    def analyze(self, transcript: str, interviewer_name: str, candidate_name: str) -> AnalysisResult:
        pass


class DocumentStorage(ABC):
    @abstractmethod
    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store content at path (overwriting) and return its public URL."""
        pass
