"""
Exception hierarchy for the Dissertation Proposal Examiner
"""


class ExaminerError(Exception):
    """Base exception for all examiner errors"""
    pass


class GeminiApiError(ExaminerError):
    """Gemini API client errors, including malformed or blocked responses"""
    def __init__(self, message: str, model: str = None):
        super().__init__(message)
        self.model = model


class GeminiTimeoutError(GeminiApiError):
    """A request exceeded the configured timeout.

    The SDK call keeps running in its worker thread; ``pending`` settles once
    it returns.
    """
    def __init__(self, message: str, model: str = None, pending=None):
        super().__init__(message, model=model)
        self.pending = pending


class DocumentValidationError(ExaminerError):
    """Uploaded document rejected before any analysis starts"""
    def __init__(self, message: str, user_message: str = None, filename: str = None):
        super().__init__(message)
        self.user_message = user_message or message
        self.filename = filename


class AnalysisError(ExaminerError):
    """Base class for analysis run precondition errors"""
    pass


class DocumentRequiredError(AnalysisError):
    """An analysis run was requested without a loaded document"""
    pass


class AnalysisInProgressError(AnalysisError):
    """An analysis run was requested while agents are still running"""
    pass


class IncompleteRunError(AnalysisError):
    """Synthesis was requested before every agent reached a terminal state"""
    def __init__(self, message: str, pending_roles: list = None):
        super().__init__(message)
        self.pending_roles = pending_roles or []


class SessionError(ExaminerError):
    """Base class for dialogue session errors"""
    pass


class SessionNotOpenError(SessionError):
    """Operation on a dialogue session that was never opened"""
    pass


class SessionAlreadyOpenError(SessionError):
    """A dialogue session may only be opened once per surface"""
    pass


class SessionBusyError(SessionError):
    """A message was sent while another one is still awaiting its reply"""
    pass


class EmptyMessageError(SessionError):
    """Blank chat messages are not sent"""
    pass


class ReportNotAvailableError(ExaminerError):
    """Export or display requested before any report exists"""
    pass
