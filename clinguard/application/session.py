"""Session state for the analysis screen.

``SessionState`` is immutable. Every transition returns a new state, and
requests are identified by a ``RequestTicket`` so that results arriving
after a reset, mode switch or newer request are dropped.
"""
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from clinguard.domain.benchmarks import find_case
from clinguard.domain.models import AnalysisRequest, AppMode
from clinguard.domain.rules import format_supplemental_answers
from clinguard.application.errors import CredentialExpiredError, InferenceError
from clinguard.application.schemas import AnalysisResult
from clinguard.application.use_cases import ClinicalAnalysisUseCase


logger = logging.getLogger(__name__)


MISSING_INPUT_MESSAGE = "Please provide both a clinical note and a task."
CREDENTIAL_EXPIRED_MESSAGE = "API Key session expired. Please re-select your key."


class RequestTicket(BaseModel):
    request_id: int
    request: AnalysisRequest

    model_config = {"frozen": True}


class SessionState(BaseModel):
    mode: AppMode = AppMode.USER
    selected_case_id: str = ""
    note: str = ""
    task: str = ""
    history: List[str] = []
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    request_id: int = 0
    pending: bool = False

    model_config = {"frozen": True}


def _cleared(state: SessionState, **changes) -> SessionState:
    # Bumping request_id invalidates any in-flight ticket.
    return state.model_copy(update={
        "result": None,
        "error": None,
        "history": [],
        "pending": False,
        "request_id": state.request_id + 1,
        **changes,
    })


def reset(state: SessionState) -> SessionState:
    return _cleared(state)


def switch_mode(state: SessionState, mode: AppMode) -> SessionState:
    if mode == AppMode.USER:
        return _cleared(state, mode=mode, note="", task="", selected_case_id="")
    return _cleared(state, mode=mode)


def select_case(state: SessionState, case_id: str) -> SessionState:
    case = find_case(case_id)
    if case is None:
        logger.warning("Unknown benchmark case id: %s", case_id)
        return state
    return _cleared(state, selected_case_id=case.id, note=case.note, task=case.task)


def update_inputs(state: SessionState, note: str, task: str) -> SessionState:
    return state.model_copy(update={"note": note, "task": task})


def _issue(
    state: SessionState, history: List[str], sent_history: List[str]
) -> Tuple[SessionState, RequestTicket]:
    # history is what the session keeps; sent_history is what reaches the model.
    request_id = state.request_id + 1
    request = AnalysisRequest(note=state.note, task=state.task, history=sent_history)
    ticket = RequestTicket(request_id=request_id, request=request)
    new_state = state.model_copy(update={
        "history": history,
        "error": None,
        "pending": True,
        "request_id": request_id,
    })
    return new_state, ticket


def start_analysis(state: SessionState) -> Tuple[SessionState, Optional[RequestTicket]]:
    if not state.note.strip() or not state.task.strip():
        return state.model_copy(update={"error": MISSING_INPUT_MESSAGE}), None
    # A plain analysis sends the note alone; supplemental answers only ride on refinements.
    return _issue(state, list(state.history), [])


def submit_answers(
    state: SessionState, answers: Dict[int, str]
) -> Tuple[SessionState, Optional[RequestTicket]]:
    """Append answers to the history and issue a refinement request.

    Returns no ticket when every answer is blank.
    """
    entries = format_supplemental_answers(answers)
    if not entries:
        return state, None
    history = state.history + entries
    return _issue(state, history, history)


def is_current(state: SessionState, ticket: RequestTicket) -> bool:
    return ticket.request_id == state.request_id


def complete(state: SessionState, ticket: RequestTicket, result: AnalysisResult) -> SessionState:
    if not is_current(state, ticket):
        logger.info("Discarding stale result for request %d", ticket.request_id)
        return state
    return state.model_copy(update={"result": result, "error": None, "pending": False})


def fail(state: SessionState, ticket: RequestTicket, message: str) -> SessionState:
    if not is_current(state, ticket):
        logger.info("Discarding stale error for request %d", ticket.request_id)
        return state
    return state.model_copy(update={"error": message, "pending": False})


def release(state: SessionState, ticket: RequestTicket) -> SessionState:
    """Clear the pending flag for a ticket whose run ended without a result."""
    if not is_current(state, ticket) or not state.pending:
        return state
    return state.model_copy(update={"pending": False})


def run_ticket(use_case: ClinicalAnalysisUseCase, ticket: RequestTicket) -> AnalysisResult:
    request = ticket.request
    return use_case.evaluate(request.note, request.task, request.history)


def error_message(error: InferenceError) -> str:
    if isinstance(error, CredentialExpiredError):
        return CREDENTIAL_EXPIRED_MESSAGE
    return str(error) or "Failed to analyze."
