"""
Interview Routes

GET /interviews - Caller's interviews
POST /interviews - Schedule an interview with proposed slots (employer only)
GET /interviews/{id} - Interview details (participants only)
PUT /interviews/{id} - Cancel or complete (participants only)
PUT /interviews/{id}/select-slot - Pick a proposed slot (candidate only)
POST /interviews/{id}/room - Get or create the video room (participants only)
POST /interviews/{id}/analyze - Generate AI feedback (participants only)
GET /interviews/{id}/feedback - Caller's feedback and the transcript
"""

from fastapi import APIRouter, Depends
from typing import List

from careerhub.db.postgres import get_db_session
from careerhub.core.auth import get_current_user, require_employer, require_student
from careerhub.core.config import get_settings
from careerhub.schemas.schemas import (
    AnalyzeResponse, CompanySummary, FeedbackResponse, InterviewCreate, InterviewFeedbackView,
    InterviewResponse, InterviewStatusUpdate, MessageResponse, ParticipantInfo, RoomResponse,
    SlotSelection, TimeSlotResponse
)
from careerhub.services import interview_service
from careerhub.services.archive_service import InterviewAnalysisArchive, get_analysis_archive
from careerhub.services.daily_client import get_room_provider
from careerhub.services.feedback_service import FeedbackPipeline
from careerhub.services.llm_client import get_interview_analyzer
from careerhub.services.providers import InterviewAnalyzer, RoomProvider, Transcriber
from careerhub.services.whisper_client import get_transcriber
from careerhub.services.workflow import InterviewEvent, event_for_requested_status, next_interview_status

router = APIRouter(prefix="/interviews", tags=["Interviews"])


def _to_response(db, interview: dict, user: dict) -> InterviewResponse:
    return InterviewResponse(
        interview_id=interview["interview_id"],
        application_id=interview["application_id"],
        duration=interview["duration"],
        status=interview["status"],
        scheduled_at=interview["scheduled_at"],
        room_name=interview["room_name"],
        room_url=interview["room_url"],
        job_id=interview["job_id"],
        job_title=interview["job_title"],
        company=CompanySummary(
            company_id=interview["company_id"], name=interview["company_name"], logo=interview["company_logo"]
        ),
        candidate=ParticipantInfo(
            user_id=interview["candidate_id"], name=interview["candidate_name"], email=interview["candidate_email"]
        ),
        time_slots=[TimeSlotResponse(**s) for s in interview_service.get_time_slots(db, interview["interview_id"])],
        feedback=[
            FeedbackResponse(**f)
            for f in interview_service.get_feedback_for(db, interview["interview_id"], user["user_id"])
        ],
        created_at=interview["created_at"],
    )


@router.get("", response_model=List[InterviewResponse])
async def list_interviews(user: dict = Depends(get_current_user)):
    """Employers see their company's interviews, students their own. Newest first."""
    with get_db_session() as db:
        interviews = interview_service.list_interviews(db, user)
        return [_to_response(db, i, user) for i in interviews]


@router.post("", response_model=InterviewResponse, status_code=201)
async def schedule_interview(data: InterviewCreate, employer: dict = Depends(require_employer)):
    """Propose at least two time slots to an applicant."""
    with get_db_session() as db:
        interview_id = interview_service.schedule_interview(db, employer, data)
        interview = interview_service.load_interview(db, interview_id, employer)
        return _to_response(db, interview, employer)


@router.get("/{interview_id}", response_model=InterviewResponse)
async def get_interview(interview_id: int, user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        interview = interview_service.load_interview(db, interview_id, user)
        return _to_response(db, interview, user)


@router.put("/{interview_id}", response_model=MessageResponse)
async def update_interview_status(
    interview_id: int, data: InterviewStatusUpdate, user: dict = Depends(get_current_user)
):
    """Only CANCELLED and COMPLETED can be requested directly."""
    event = event_for_requested_status(data.status)
    with get_db_session() as db:
        interview = interview_service.load_interview(db, interview_id, user)
        new_status = interview_service.apply_event(db, interview, event)

    return MessageResponse(message=f"Interview {new_status}")


@router.put("/{interview_id}/select-slot", response_model=MessageResponse)
async def select_slot(interview_id: int, data: SlotSelection, student: dict = Depends(require_student)):
    """Candidate confirms one proposed slot; the interview becomes SCHEDULED."""
    with get_db_session() as db:
        interview = interview_service.load_interview(db, interview_id, student)
        interview_service.select_slot(db, interview, data.slot_id)

    return MessageResponse(message="Interview scheduled")


@router.post("/{interview_id}/room", response_model=RoomResponse)
async def join_room(
    interview_id: int,
    user: dict = Depends(get_current_user),
    rooms: RoomProvider = Depends(get_room_provider)
):
    """
    Return the interview's video room, creating it at the provider on first
    join. Joining moves a SCHEDULED interview to IN_PROGRESS.
    """
    with get_db_session() as db:
        interview = interview_service.load_interview(db, interview_id, user)
        next_interview_status(interview["status"], InterviewEvent.join)
        if interview["room_url"]:
            interview_service.apply_event(db, interview, InterviewEvent.join)
            return RoomResponse(room_url=interview["room_url"], room_name=interview["room_name"])

    room = interview_service.obtain_room(rooms, interview_id)

    with get_db_session() as db:
        interview = interview_service.load_interview(db, interview_id, user)
        interview_service.save_room(db, interview, room)
        interview_service.apply_event(db, interview, InterviewEvent.join)

    return RoomResponse(room_url=room.url, room_name=room.name)


def get_feedback_pipeline(
    rooms: RoomProvider = Depends(get_room_provider),
    transcriber: Transcriber = Depends(get_transcriber),
    analyzer: InterviewAnalyzer = Depends(get_interview_analyzer),
    archive: InterviewAnalysisArchive = Depends(get_analysis_archive),
) -> FeedbackPipeline:
    return FeedbackPipeline(
        rooms, transcriber, analyzer,
        archive=archive,
        model_name=get_settings().llm_model,
    )


@router.post("/{interview_id}/analyze", response_model=AnalyzeResponse)
async def analyze_interview(
    interview_id: int,
    user: dict = Depends(get_current_user),
    pipeline: FeedbackPipeline = Depends(get_feedback_pipeline)
):
    """Transcribe the recording and generate feedback for both participants."""
    result = pipeline.run(interview_id, user)
    feedback = result["feedback"]
    return AnalyzeResponse(
        message=result["message"],
        feedback=FeedbackResponse(**feedback) if feedback else None,
    )


@router.get("/{interview_id}/feedback", response_model=InterviewFeedbackView)
async def get_feedback(interview_id: int, user: dict = Depends(get_current_user)):
    """The caller's own feedback rows and the interview transcript."""
    with get_db_session() as db:
        interview = interview_service.load_interview(db, interview_id, user)
        feedback = interview_service.get_feedback_for(db, interview_id, user["user_id"])

    return InterviewFeedbackView(
        interview_id=interview_id,
        transcription=interview["transcription"],
        feedback=[FeedbackResponse(**f) for f in feedback],
    )
