"""Streamlit Web UI for Career Comeback Coach.

Wizard: landing -> resume input -> analysis (streamed) -> roadmap ->
interview setup -> text interview -> feedback.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets -> os.environ so backend clients can read them
for key in ("ANTHROPIC_API_KEY", "TAVILY_API_KEY"):
    if key not in os.environ:
        try:
            os.environ[key] = st.secrets[key]
        except Exception:
            pass

from comeback_coach.clients.llm_client import build_llm_client
from comeback_coach.clients.search_client import build_search_client
from comeback_coach.config import load_config
from comeback_coach.export import render_pdf
from comeback_coach.logging.usage_store import UsageStore
from comeback_coach.models.interview import score_band
from comeback_coach.models.payload import to_session_string
from comeback_coach.parsers.resource_parser import parse_resource
from comeback_coach.parsers.resume_parser import load_resume_input, text_input
from comeback_coach.pipeline.feedback_reviewer import FeedbackReviewer
from comeback_coach.pipeline.interviewer import (
    VOICE_OFFLINE_MESSAGE,
    InterviewSession,
    Interviewer,
    format_duration,
)
from comeback_coach.pipeline.orchestrator import CoachOrchestrator
from comeback_coach.pipeline.streaming import InvalidInputError
from comeback_coach.session.storage import MemoryStorage
from comeback_coach.session.store import EXIT_WARNING, SessionStore
from comeback_coach.utils.rate_limiter import RateLimiter, RateLimitError

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Career Comeback Coach",
    page_icon=":rocket:",
    layout="wide",
)

config = load_config()

# ---------------------------------------------------------------------------
# Per-browser-session objects
# ---------------------------------------------------------------------------

if "session_store" not in st.session_state:
    st.session_state.session_store = SessionStore(MemoryStorage(), key=config.session.slot_key)
    st.session_state.rate_limiter = RateLimiter()
    st.session_state.llm = None if config.pipeline.demo_mode else build_llm_client(config.llm)

store: SessionStore = st.session_state.session_store
rate_limiter: RateLimiter = st.session_state.rate_limiter
llm = st.session_state.llm

_BAND_COLORS = {"success": "green", "warning": "orange", "error": "red"}

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("Career Comeback Coach")
    st.caption("Skill analysis, learning roadmap and interview practice")
    if llm is None:
        st.info("Demo mode: no API key configured, showing sample results.")
    if store.is_demo_mode():
        st.caption("Current roadmap uses sample data.")
    st.divider()
    if store.should_warn_on_exit():
        st.warning(EXIT_WARNING)
    if st.button("Start over", disabled=not store.state.has_active_session):
        store.clear_session()
        for k in ("interview", "feedback"):
            st.session_state.pop(k, None)
        st.rerun()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _save_upload_to_tmp(uploaded_file) -> Path:
    """Save a Streamlit UploadedFile to a temp file and return its Path."""
    suffix = Path(uploaded_file.name).suffix
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
    tmp.write(uploaded_file.getvalue())
    tmp.close()
    return Path(tmp.name)


def _usage_store() -> UsageStore | None:
    if not config.usage.enabled:
        return None
    try:
        return UsageStore(config.usage.resolved_db_path)
    except OSError:
        logger.debug("Usage store unavailable (read-only filesystem)")
        return None


def _interviewer() -> Interviewer:
    return Interviewer(
        llm,
        rate_limiter,
        model=config.llm.chat_model,
        max_requests=config.rate_limit.chat_max_requests,
        window_seconds=config.rate_limit.chat_window_seconds,
        demo_mode=llm is None,
        narration_delay=config.pipeline.narration_delay,
    )


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def _step_landing():
    st.header("Restart your tech career with a plan")
    st.markdown(
        "Upload your resume to get a skill analysis, a week-by-week learning "
        "roadmap and a practice interview."
    )
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Get started", type="primary"):
            store.start_session("resume-input")
            st.rerun()
    with c2:
        restored = st.file_uploader("Continue from an exported roadmap", type=None, key="restore_upload")
        if restored is not None:
            try:
                store.restore_from_roadmap_file(restored.name)
            except ValueError as e:
                st.error(str(e))
            else:
                st.rerun()


def _step_resume_input():
    st.header("Your resume")
    uploaded = st.file_uploader(
        "Upload your resume",
        type=["pdf", "docx", "doc", "txt", "md"],
        help="PDF, Word or text file (10MB max)",
    )
    pasted = st.text_area("...or paste it here", height=220)
    weeks = st.slider("Roadmap length (weeks)", 1, 12, config.pipeline.default_weeks)

    if not st.button("Analyze my skills", type="primary"):
        return
    try:
        if uploaded is not None:
            if uploaded.size > 10 * 1024 * 1024:
                st.error("The file is larger than 10MB.")
                return
            tmp_path = _save_upload_to_tmp(uploaded)
            try:
                item = load_resume_input(tmp_path, inline_files=config.pipeline.inline_files)
            finally:
                tmp_path.unlink(missing_ok=True)
        else:
            item = text_input(pasted)
    except ValueError as e:
        st.error(str(e))
        return

    store.set_resume(to_session_string(item), weeks)
    store.start_session("analyzing")
    st.rerun()


def _step_analyzing():
    st.header("Analyzing your resume")
    orchestrator = CoachOrchestrator.from_config(
        config,
        llm,
        rate_limiter,
        search=build_search_client() if llm is not None else None,
        usage_store=_usage_store(),
        demo_mode=llm is None,
    )
    status = st.status("Starting...", expanded=True)
    narration = status.empty()
    buffer: list[str] = []

    def on_phase(phase: str, detail: str):
        status.update(label=detail, state="complete" if phase == "done" else "running")

    def on_chunk(text: str):
        buffer.append(text)
        narration.markdown("".join(buffer))

    try:
        asyncio.run(orchestrator.run(store, on_phase=on_phase, on_chunk=on_chunk))
    except RateLimitError as e:
        status.update(label="Please wait", state="error")
        st.warning(str(e))
        if st.button("Try again"):
            st.rerun()
        return
    except InvalidInputError as e:
        status.update(label="Could not analyze", state="error")
        st.error(f"{e} Please check your resume and try again.")
        if st.button("Edit resume"):
            store.update_session(current_step="resume-input")
            st.rerun()
        return
    st.rerun()


def _step_roadmap():
    state = store.state
    analysis, roadmap = state.analysis_result, state.roadmap_data
    st.header("Your learning roadmap")

    if analysis is not None:
        if analysis.error:
            st.warning(f"Showing sample results: {analysis.error}")
        with st.expander("Skill analysis", expanded=False):
            cols = st.columns(3)
            groups = (
                ("Current skills", analysis.current_skills),
                ("Needs refreshing", analysis.outdated_skills),
                ("Skill gaps", analysis.skill_gaps),
                ("Suggested roles", analysis.suggested_roles),
                ("Strengths", analysis.strength_areas),
                ("To improve", analysis.improvement_areas),
            )
            for i, (label, items) in enumerate(groups):
                with cols[i % 3]:
                    st.markdown(f"**{label}**")
                    for item in items:
                        st.markdown(f"- {item}")

    if roadmap is None or not roadmap.weeks:
        st.info("No roadmap weeks to show.")
    else:
        st.markdown(f"**{roadmap.overall_goal}** | ~{roadmap.estimated_hours:g} hours")
        labels = [f"Week {w.week}: {w.title}" for w in roadmap.weeks]
        choice = st.radio("Week", labels, horizontal=True, label_visibility="collapsed")
        week = roadmap.weeks[labels.index(choice)]
        c1, c2 = st.columns(2)
        with c1:
            st.markdown("**Goals**")
            for g in week.goals:
                st.markdown(f"- {g}")
            st.markdown("**Topics**")
            for t in week.topics:
                st.markdown(f"- {t}")
        with c2:
            st.markdown("**Resources**")
            for r in week.resources:
                link = parse_resource(r)
                hint = " (search)" if link.is_search else ""
                st.markdown(f"- [{link.title}]({link.url}){hint}")
            st.markdown("**Projects**")
            for p in week.projects:
                st.markdown(f"- {p}")

        try:
            pdf_bytes = render_pdf(roadmap, config.export.theme)
        except Exception:
            logger.exception("Roadmap PDF export failed")
            pdf_bytes = None
        if pdf_bytes is not None:
            st.download_button(
                label="Download roadmap (PDF)",
                data=pdf_bytes,
                file_name="learning-roadmap.pdf",
                mime="application/pdf",
            )

    if st.button("Practice an interview", type="primary"):
        store.update_session(current_step="interview")
        st.rerun()


def _step_interview():
    if "feedback" in st.session_state:
        _show_feedback()
        return
    if "interview" not in st.session_state:
        _interview_setup()
        return

    session: InterviewSession = st.session_state.interview
    remaining = session.time_remaining()
    st.header("Mock interview")
    st.caption(f"Time remaining: {format_duration(remaining)}")

    for msg in session.messages:
        with st.chat_message(msg.role):
            st.markdown(msg.content)

    answer = st.chat_input("Your answer", disabled=session.is_expired())
    if answer:
        with st.chat_message("user"):
            st.markdown(answer)
        with st.chat_message("assistant"):
            placeholder = st.empty()

            async def _reply():
                shown = ""
                async for event in session.send_stream(answer):
                    if event.text:
                        shown += event.text
                        placeholder.markdown(shown)
                    elif event.done:
                        placeholder.markdown(event.result)

            try:
                asyncio.run(_reply())
            except RateLimitError as e:
                placeholder.warning(str(e))
        st.rerun()

    if session.is_expired():
        st.info("Time's up!")
    if st.button("End interview and get feedback", type="primary"):
        session.end(store)
        reviewer = FeedbackReviewer(llm, config.llm.chat_model, demo_mode=llm is None)
        with st.spinner("Reviewing your interview..."):
            st.session_state.feedback = asyncio.run(reviewer.review(session.messages))
        st.rerun()


def _interview_setup():
    st.header("Interview setup")
    mode = st.radio("Mode", ["Text", "Voice"], horizontal=True)
    if mode == "Voice":
        st.info(VOICE_OFFLINE_MESSAGE)
    if st.button("Start interview", type="primary"):
        store.update_session(interview_mode="text")
        st.session_state.interview = InterviewSession(
            _interviewer(),
            store.state.roadmap_data,
            duration_seconds=config.pipeline.interview_seconds,
        )
        st.rerun()


def _show_feedback():
    result = st.session_state.feedback
    st.header("Interview feedback")
    color = _BAND_COLORS[score_band(result.overall_score)]
    st.markdown(f"### Overall score: :{color}[{result.overall_score}/100]")
    for section in result.sections:
        band = _BAND_COLORS[score_band(section.score)]
        with st.container(border=True):
            st.markdown(f"**{section.title}** :{band}[{section.score}/{section.max_score}]")
            st.progress(section.score / max(section.max_score, 1))
            st.markdown(section.feedback)
            if section.highlights:
                st.markdown("Highlights: " + "; ".join(section.highlights))
            if section.improvements:
                st.markdown("To improve: " + "; ".join(section.improvements))
    if st.button("Practice again"):
        for k in ("interview", "feedback"):
            st.session_state.pop(k, None)
        st.rerun()


# ---------------------------------------------------------------------------
# Main router
# ---------------------------------------------------------------------------

_STEPS = {
    "idle": _step_landing,
    "resume-input": _step_resume_input,
    "analyzing": _step_analyzing,
    "roadmap": _step_roadmap,
    "interview": _step_interview,
}

_STEPS[store.state.current_step]()
