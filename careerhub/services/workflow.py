"""
Status workflows for interviews and applications.

Each status field changes only through the functions here, which look the
move up in an explicit transition table and raise ValidationError for
anything not listed. Routes never write a status they did not get from
one of these functions.

Interview:
    PENDING_RESPONSE --select_slot--> SCHEDULED --join--> IN_PROGRESS --complete--> COMPLETED
    CANCELLED is reachable from every non-terminal state.
"""

from enum import Enum

from careerhub.core.exceptions import ValidationError
from careerhub.schemas.schemas import ApplicationStatus, InterviewStatus


class InterviewEvent(str, Enum):
    select_slot = "SELECT_SLOT"
    join = "JOIN"
    complete = "COMPLETE"
    cancel = "CANCEL"


INTERVIEW_TRANSITIONS = {
    (InterviewStatus.pending_response, InterviewEvent.select_slot): InterviewStatus.scheduled,
    (InterviewStatus.pending_response, InterviewEvent.cancel): InterviewStatus.cancelled,
    (InterviewStatus.scheduled, InterviewEvent.join): InterviewStatus.in_progress,
    (InterviewStatus.scheduled, InterviewEvent.complete): InterviewStatus.completed,
    (InterviewStatus.scheduled, InterviewEvent.cancel): InterviewStatus.cancelled,
    # Second participant joining an active call
    (InterviewStatus.in_progress, InterviewEvent.join): InterviewStatus.in_progress,
    (InterviewStatus.in_progress, InterviewEvent.complete): InterviewStatus.completed,
    (InterviewStatus.in_progress, InterviewEvent.cancel): InterviewStatus.cancelled,
    # Both participants leave the call, each reports completion
    (InterviewStatus.completed, InterviewEvent.complete): InterviewStatus.completed,
}

# Human readable rejections for the moves users actually attempt
_INTERVIEW_REJECTIONS = {
    InterviewEvent.select_slot: "Time already selected",
    InterviewEvent.join: "Interview not ready to join",
}

# Target statuses a client may request through PUT /interviews/{id}
STATUS_UPDATE_EVENTS = {
    InterviewStatus.cancelled: InterviewEvent.cancel,
    InterviewStatus.completed: InterviewEvent.complete,
}


def next_interview_status(current, event: InterviewEvent) -> InterviewStatus:
    """Return the status an interview moves to, or raise ValidationError."""
    current = InterviewStatus(current)
    target = INTERVIEW_TRANSITIONS.get((current, event))
    if target is None:
        message = _INTERVIEW_REJECTIONS.get(
            event, f"Cannot {event.value.lower().replace('_', ' ')} an interview that is {current.value}"
        )
        raise ValidationError(message)
    return target


def event_for_requested_status(requested: InterviewStatus) -> InterviewEvent:
    event = STATUS_UPDATE_EVENTS.get(requested)
    if event is None:
        raise ValidationError("Invalid update")
    return event


APPLICATION_TRANSITIONS = {
    ApplicationStatus.pending: {
        ApplicationStatus.reviewing, ApplicationStatus.interview, ApplicationStatus.offered,
        ApplicationStatus.rejected, ApplicationStatus.withdrawn,
    },
    ApplicationStatus.reviewing: {
        ApplicationStatus.interview, ApplicationStatus.offered,
        ApplicationStatus.rejected, ApplicationStatus.withdrawn,
    },
    # A follow-up interview keeps the application in INTERVIEW
    ApplicationStatus.interview: {
        ApplicationStatus.interview, ApplicationStatus.offered,
        ApplicationStatus.rejected, ApplicationStatus.withdrawn,
    },
    ApplicationStatus.offered: {ApplicationStatus.rejected, ApplicationStatus.withdrawn},
    ApplicationStatus.rejected: set(),
    ApplicationStatus.withdrawn: set(),
}


def next_application_status(current, target) -> ApplicationStatus:
    """Validate an application status change and return the new status."""
    current = ApplicationStatus(current)
    target = ApplicationStatus(target)
    if target == current:
        return target
    if target not in APPLICATION_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot move application from {current.value} to {target.value}"
        )
    return target
