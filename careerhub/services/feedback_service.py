"""
AI Feedback Pipeline

Runs once per interview, on request, after the call has ended:

    recording -> access link -> transcript (saved) -> analysis -> feedback rows

1. If feedback rows already exist the run is a no-op.
2. The most recent recording of the interview's room is transcribed.
3. The transcript is saved on its own, so it survives a failed analysis.
4. The transcript and both participant names go to the analysis model.
5. One feedback row per participant is written in a single transaction.
   The employer-side row goes to the company's first employee account.
6. The raw run is archived to MongoDB. Archive failures are logged only.
"""

import logging
from typing import Optional

from pymongo.errors import PyMongoError
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from careerhub.core.exceptions import UpstreamServiceError, ValidationError
from careerhub.db.postgres import get_db_session, fetch_one
from careerhub.models.providers import AnalysisResult, ParticipantScores
from careerhub.services.archive_service import InterviewAnalysisArchive
from careerhub.services.interview_service import get_feedback_for, load_interview
from careerhub.services.providers import InterviewAnalyzer, RoomProvider, Transcriber

logger = logging.getLogger(__name__)

ALREADY_GENERATED = "Feedback already generated"
DEFAULT_INTERVIEWER_NAME = "Interviewer"


class FeedbackPipeline:

    def __init__(
        self,
        rooms: RoomProvider,
        transcriber: Transcriber,
        analyzer: InterviewAnalyzer,
        archive: Optional[InterviewAnalysisArchive] = None,
        model_name: str = "",
    ):
        self.rooms = rooms
        self.transcriber = transcriber
        self.analyzer = analyzer
        self.archive = archive
        self.model_name = model_name

    def run(self, interview_id: int, user: dict) -> dict:
        """
        Generate feedback for an interview.

        Returns:
            {"message": ..., "feedback": caller's feedback row or None}
        """
        with get_db_session() as db:
            interview = load_interview(db, interview_id, user)
            existing = fetch_one(
                db,
                "SELECT COUNT(*) AS n FROM interview_feedback WHERE interview_id = :id",
                {"id": interview_id}
            )
            if existing["n"] > 0:
                return {"message": ALREADY_GENERATED, "feedback": None}
            interviewer = fetch_one(
                db,
                """
                SELECT user_id, name FROM users
                WHERE company_id = :cid AND role = 'EMPLOYER'
                ORDER BY user_id LIMIT 1
                """,
                {"cid": interview["company_id"]}
            )

        if not interview["room_name"]:
            raise ValidationError("No video room for this interview")

        try:
            transcript = self._transcribe(interview["room_name"])

            with get_db_session() as db:
                db.execute(
                    text("""
                        UPDATE interviews SET transcription = :t, updated_at = CURRENT_TIMESTAMP
                        WHERE interview_id = :id
                    """),
                    {"t": transcript, "id": interview_id}
                )

            analysis = self.analyzer.analyze(
                transcript,
                interviewer["name"] if interviewer else DEFAULT_INTERVIEWER_NAME,
                interview["candidate_name"],
            )
        except UpstreamServiceError as e:
            logger.error("Feedback generation failed for interview %s: %s", interview_id, e.message)
            raise UpstreamServiceError(f"Analysis failed: {e.message}", provider=e.provider) from e

        try:
            with get_db_session() as db:
                self._insert_feedback(db, interview_id, interview["candidate_id"], "STUDENT", analysis.candidate)
                if interviewer:
                    self._insert_feedback(db, interview_id, interviewer["user_id"], "EMPLOYER", analysis.interviewer)
                own = get_feedback_for(db, interview_id, user["user_id"])
        except IntegrityError:
            # A concurrent run wrote its rows first
            logger.info("Feedback for interview %s already written by another run", interview_id)
            return {"message": ALREADY_GENERATED, "feedback": None}

        self._archive(interview_id, transcript, analysis)
        logger.info("Feedback generated for interview %s", interview_id)
        return {"message": "Feedback generated", "feedback": own[0] if own else None}

    def _transcribe(self, room_name: str) -> str:
        recordings = self.rooms.list_recordings(room_name)
        if not recordings:
            raise ValidationError("No recording found")
        latest = max(recordings, key=lambda r: r.start_ts or 0)
        audio_url = self.rooms.get_recording_access_link(latest.id)
        return self.transcriber.transcribe(audio_url)

    @staticmethod
    def _insert_feedback(db, interview_id: int, recipient_id: int, role: str, scores: ParticipantScores):
        db.execute(
            text("""
                INSERT INTO interview_feedback
                    (interview_id, recipient_id, recipient_role, clarity_score,
                     pacing_score, engagement_score, suggestions)
                VALUES (:iid, :rid, :role, :clarity, :pacing, :engagement, :suggestions)
            """),
            {
                "iid": interview_id, "rid": recipient_id, "role": role,
                "clarity": scores.clarity_score, "pacing": scores.pacing_score,
                "engagement": scores.engagement_score, "suggestions": scores.suggestions,
            }
        )

    def _archive(self, interview_id: int, transcript: str, analysis: AnalysisResult) -> None:
        if self.archive is None:
            return
        try:
            self.archive.save(interview_id, transcript, analysis.model_dump(), self.model_name)
        except PyMongoError as e:
            logger.warning("Could not archive analysis for interview %s: %s", interview_id, e)
