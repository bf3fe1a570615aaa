from typing import Optional
from pydantic import BaseModel, Field


class VideoRoom(BaseModel):
    id: str
    name: str
    url: str


class Recording(BaseModel):
    id: str
    room_name: Optional[str] = None
    # Unix seconds; used to pick the most recent recording
    start_ts: Optional[int] = None


class ParticipantScores(BaseModel):
    clarity_score: int = Field(..., ge=1, le=10)
    pacing_score: int = Field(..., ge=1, le=10)
    engagement_score: int = Field(..., ge=1, le=10)
    suggestions: str


class AnalysisResult(BaseModel):
    interviewer: ParticipantScores
    candidate: ParticipantScores
