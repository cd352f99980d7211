import logging

import streamlit as st

from clinguard.infrastructure.config import Settings
from clinguard.infrastructure.credentials import SessionCredentialStore
from clinguard.infrastructure.llm.mistral_client import MistralLLMAdapter
from clinguard.infrastructure.llm.gemini_image_client import GeminiImageAdapter
from clinguard.application import session as workflow
from clinguard.application.errors import CredentialExpiredError, InferenceError
from clinguard.application.prompts import format_result
from clinguard.application.schemas import AnalysisResult
from clinguard.application.use_cases import ClinicalAnalysisUseCase
from clinguard.domain.benchmarks import BENCHMARK_CASES
from clinguard.domain.models import AppMode, Decision


logger = logging.getLogger(__name__)


DISCLAIMER = (
    "⚕️ **DISCLAIMER:** Research tool for evaluating clinical reasoning. "
    "Output is NOT medical advice and is not validated for clinical correctness."
)


def _init_session_state():
    if "analysis" not in st.session_state:
        st.session_state.analysis = workflow.SessionState()


def _build_use_case(settings: Settings, credentials: SessionCredentialStore) -> ClinicalAnalysisUseCase:
    llm = MistralLLMAdapter(settings=settings, api_key=credentials.api_key)
    image_generator = GeminiImageAdapter(settings=settings)
    return ClinicalAnalysisUseCase(
        llm=llm,
        image_generator=image_generator if image_generator.available else None,
        temperature=settings.temperature,
        reasoning_budget=settings.reasoning_budget,
        aspect_ratio=settings.image_aspect_ratio,
    )


def _require_credential(credentials: SessionCredentialStore) -> bool:
    if credentials.has_credential():
        return True
    st.markdown("# 🔑 API Key Required")
    st.error(
        "❌ **Mistral API Key Missing or Expired**\n\n"
        "Add `MISTRAL_API_KEY` to `.streamlit/secrets.toml` or as an environment variable, "
        "or enter a key below."
    )
    with st.form("credential_form"):
        api_key = st.text_input("Mistral API key", type="password")
        if st.form_submit_button("Use this key", use_container_width=True):
            credentials.request_credential(api_key)
            st.rerun()
    return False


def _render_sidebar(settings: Settings):
    st.sidebar.title("⚙️ Settings")

    st.sidebar.markdown("### Model")
    st.sidebar.caption(f"**Model:** {settings.mistral_model}")
    if settings.google_api_key:
        st.sidebar.success(f"✓ Image model: {settings.image_model}")
    else:
        st.sidebar.warning("⚠️ GOOGLE_API_KEY not set, no illustrations")

    st.sidebar.divider()

    state = st.session_state.analysis
    labels = {AppMode.USER: "Custom case", AppMode.BENCHMARK: "Benchmark cases"}
    mode = st.sidebar.radio(
        "Mode",
        list(labels),
        index=list(labels).index(state.mode),
        format_func=labels.get,
    )
    if mode != state.mode:
        st.session_state.analysis = workflow.switch_mode(state, mode)
        st.rerun()

    if st.sidebar.button("🔄 Reset Session", use_container_width=True):
        st.session_state.analysis = workflow.reset(state)
        st.rerun()


def _render_inputs(state: workflow.SessionState) -> workflow.SessionState:
    if state.mode == AppMode.BENCHMARK:
        titles = {case.id: case.title for case in BENCHMARK_CASES}
        options = [""] + list(titles)
        case_id = st.selectbox(
            "Benchmark case",
            options,
            index=options.index(state.selected_case_id) if state.selected_case_id in options else 0,
            format_func=lambda cid: titles.get(cid, "Select a case..."),
        )
        if case_id and case_id != state.selected_case_id:
            state = workflow.select_case(state, case_id)
            st.session_state.analysis = state
            st.rerun()

    note = st.text_area("Clinical note", value=state.note, height=180, disabled=state.pending)
    task = st.text_area("Task", value=state.task, height=80, disabled=state.pending)
    return workflow.update_inputs(state, note, task)


def _run(ticket: workflow.RequestTicket, use_case: ClinicalAnalysisUseCase, credentials: SessionCredentialStore):
    try:
        with st.spinner("🔬 Analyzing case..."):
            result = workflow.run_ticket(use_case, ticket)
        st.session_state.analysis = workflow.complete(st.session_state.analysis, ticket, result)
    except InferenceError as e:
        logger.exception("Analysis failed: %s", e)
        if isinstance(e, CredentialExpiredError):
            credentials.invalidate()
        st.session_state.analysis = workflow.fail(
            st.session_state.analysis, ticket, workflow.error_message(e)
        )
    finally:
        # Reruns and unexpected errors skip complete/fail above.
        st.session_state.analysis = workflow.release(st.session_state.analysis, ticket)


def _render_result(result: AnalysisResult, request_id: int) -> dict:
    """Render a result; returns the answers typed for its questions."""
    if result.decision == Decision.ANSWER:
        st.success("## ✅ ANSWER")
    else:
        st.warning("## ❓ ASK: more information needed")

    st.markdown(f"**Rationale:** {result.rationale}")

    answers = {}
    if result.decision == Decision.ASK and result.questions:
        st.markdown("### Clarifying Questions")
        for i, question in enumerate(result.questions):
            answers[i] = st.text_input(f"Q{i + 1}: {question}", key=f"answer_{request_id}_{i}")
    elif result.answer:
        st.markdown("### Answer")
        st.markdown(result.answer)
        if result.evidence:
            st.markdown("### Evidence")
            for item in result.evidence:
                st.markdown(f"- {item}")

    if result.image_reference:
        st.image(result.image_reference, caption="Generated illustration (not diagnostic)")

    sa = result.self_assessment
    st.markdown("### 🧭 Self-Assessment")
    cols = st.columns(4)
    cols[0].metric("Plausibility", sa.plausibility.value)
    cols[1].metric("Causal Sensitivity", sa.causal_sensitivity.value.title())
    cols[2].metric("Hallucination Check", sa.hallucination_check.value)
    cols[3].metric("Confidence", sa.confidence.value)

    with st.expander("Raw structured output"):
        st.code(format_result(result), language="text")
    return answers


def main():
    settings = Settings()
    logging.basicConfig(level=settings.log_level)

    st.set_page_config(
        page_title="Clinical Reasoning Guard",
        page_icon="⚕️",
        layout="centered",
        initial_sidebar_state="expanded",
    )

    credentials = SessionCredentialStore(st.session_state, settings)
    if not _require_credential(credentials):
        st.stop()

    _init_session_state()
    _render_sidebar(settings)

    st.markdown("# 🏥 Clinical Reasoning Guard")
    st.info(DISCLAIMER)

    state = _render_inputs(st.session_state.analysis)
    st.session_state.analysis = state

    if st.button("Analyze", type="primary", disabled=state.pending, use_container_width=True):
        state, ticket = workflow.start_analysis(state)
        st.session_state.analysis = state
        if ticket is not None:
            _run(ticket, _build_use_case(settings, credentials), credentials)
        st.rerun()

    state = st.session_state.analysis
    if state.error:
        st.error(f"❌ {state.error}")

    if state.history:
        with st.expander(f"Supplemental updates ({len(state.history)})"):
            for entry in state.history:
                st.markdown(f"- {entry}")

    if state.result is not None:
        answers = _render_result(state.result, state.request_id)
        if answers and st.button("Submit Answers & Refine", disabled=state.pending):
            state, ticket = workflow.submit_answers(state, answers)
            st.session_state.analysis = state
            if ticket is not None:
                _run(ticket, _build_use_case(settings, credentials), credentials)
            st.rerun()


if __name__ == "__main__":
    main()
