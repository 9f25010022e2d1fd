from rest_framework import status
from rest_framework.response import Response


class AssessmentError(Exception):
    """Base for every typed failure the session engine reports."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'assessment_error'
    default_message = "The request could not be processed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_payload(self):
        return {"error": self.message, "code": self.code}


# --- Not found ---

class LeaveNotFound(AssessmentError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'leave_not_found'
    default_message = "Leave request not found."


class SessionNotFound(AssessmentError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'session_not_found'
    default_message = "Test session not found."


class ResultNotFound(AssessmentError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'result_not_found'
    default_message = "No result yet: the test has not been submitted."


# --- Resource ---

class InsufficientQuestions(AssessmentError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = 'insufficient_questions'
    default_message = "The question bank has no questions for this test."


# --- Lifecycle ---

class LeaveNotEligible(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    code = 'leave_not_eligible'
    default_message = "A test can no longer be provisioned for this leave request."


class AlreadyStarted(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    code = 'already_started'
    default_message = "Test already started."


class SessionNotActive(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    code = 'session_not_active'
    default_message = "Test is not in progress."


class SessionExpired(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    code = 'session_expired'
    default_message = "Time is up. The test has been submitted."


class AlreadySubmitted(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    code = 'already_submitted'
    default_message = "Test already submitted."


# --- Validation ---

class FullscreenRequired(AssessmentError):
    code = 'fullscreen_required'
    default_message = "Fullscreen is required for this test."


class UnknownQuestion(AssessmentError):
    code = 'unknown_question'
    default_message = "Question is not part of this test."


class InvalidSubmitReason(AssessmentError):
    code = 'invalid_submit_reason'
    default_message = "Unknown submit reason."


class AssessmentErrorMixin:
    """Renders engine errors the way the rest of the API reports errors."""

    def handle_exception(self, exc):
        if isinstance(exc, AssessmentError):
            return Response(exc.as_payload(), status=exc.status_code)
        return super().handle_exception(exc)
