"""
Gym Tracker Dashboard
=====================
Streamlit frontend: log workouts by voice, review history, chart progress
and plan the weekly split.  Talks to the API only through client.py.

Run with: streamlit run dashboard.py
"""

from __future__ import annotations

import html
import os
import sys
from typing import Optional

import streamlit as st

# ── Local imports (flat modules in src/) ──────────────────────
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

import config
from client import ApiError, GymTrackerClient, SessionContext
from constants import MUSCLE_GROUPS, WEEKDAYS
from speech import SpeechCapture
from visualizations import WorkoutVisualizer
from voice_flow import FlowState, VoiceLogSession

# ── Page config ───────────────────────────────────────────────
st.set_page_config(
    page_title="Gym Tracker",
    page_icon="🏋️",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .main-header { font-size: 2.5rem; font-weight: bold; color: #3B82F6; margin-bottom: 1rem; }
    .transcript  { background-color: #f3f4f6; padding: 0.75rem; border-radius: 0.5rem; border: 1px solid #d1d5db; }
</style>
""", unsafe_allow_html=True)


# ── Helpers ───────────────────────────────────────────────────

def _secret(name: str) -> str:
    try:
        return st.secrets[name]
    except Exception:
        return ""


@st.cache_resource
def get_client() -> GymTrackerClient:
    return GymTrackerClient(base_url=_secret("GYM_TRACKER_API_URL") or config.API_URL)


@st.cache_resource
def get_visualizer() -> WorkoutVisualizer:
    return WorkoutVisualizer()


def resolve_session() -> Optional[SessionContext]:
    """Secrets → env → sidebar sign-in; no user means no session."""
    user_id = _secret("GYM_TRACKER_USER_ID") or config.DEFAULT_USER_ID
    if not user_id:
        user_id = st.sidebar.text_input("User ID", key="user_id_input").strip()
    if not user_id:
        return None
    return SessionContext(user_id=user_id, client=get_client())


def _flow() -> VoiceLogSession:
    if "voice_flow" not in st.session_state:
        st.session_state.voice_flow = VoiceLogSession()
        st.session_state.parse_seq = 0
    return st.session_state.voice_flow


# ═══════════════════════════════════════════════════════════════
#  PAGES
# ═══════════════════════════════════════════════════════════════

def main():
    st.sidebar.title("🏋️ Gym Tracker")
    st.sidebar.caption("Voice-powered workout tracking")
    st.sidebar.markdown("---")

    page = st.sidebar.selectbox(
        "Navigate",
        ["🎙️ Log Workout", "📋 History", "📈 Progress", "🗓️ Workout Split", "❓ How to Use"],
    )

    ctx = resolve_session()
    if ctx is None:
        st.info("Enter your user ID in the sidebar to start logging.")
        show_help()
        return
    st.sidebar.caption(f"Signed in as **{ctx.user_id}**")

    if page == "🎙️ Log Workout":
        show_voice_panel(ctx)
        st.markdown("---")
        show_workout_list(ctx)
    elif page == "📋 History":
        show_workout_list(ctx, limit=100)
    elif page == "📈 Progress":
        show_progress(ctx)
    elif page == "🗓️ Workout Split":
        show_split_editor(ctx)
    else:
        show_help()


# ── Voice input ───────────────────────────────────────────────

def _capture_controls(flow: VoiceLogSession, speech: SpeechCapture):
    if not speech.is_supported:
        st.warning("Speech recognition is not supported in your browser. "
                   "Use Chrome or Edge, or type the workout below.")
        typed = st.text_input("Workout", value=flow.transcript,
                              placeholder="Bench, 40kg, 8, 6, 6",
                              disabled=flow.state not in (FlowState.IDLE, FlowState.TRANSCRIPT_READY))
        if typed.strip() != flow.transcript and flow.state in (FlowState.IDLE, FlowState.TRANSCRIPT_READY):
            flow.set_transcript(typed)
        return

    listening = flow.state == FlowState.LISTENING
    label = "⏹ Done" if listening else "🎤 Record workout"
    if st.button(label, type="primary", disabled=flow.is_busy):
        if listening:
            flow.stop_listening()
        else:
            if flow.state == FlowState.SAVED:
                speech.reset()
            flow.start_listening()
        st.rerun()

    if listening:
        st.caption("Listening... record one or more phrases, then press Done.")
        speech.render()
    else:
        st.caption("Click to start recording")


def _parsed_preview(flow: VoiceLogSession, ctx: SessionContext):
    parsed = flow.parsed
    seq = st.session_state.parse_seq
    st.markdown("#### Parsed Workout")
    st.markdown(f"**Exercise:** {parsed.get('exercise')}")

    weight = st.number_input("Weight (kg)", min_value=0.0, step=2.5,
                             value=float(parsed.get("weight_kg") or 0.0),
                             key=f"weight_{seq}")
    if weight != (parsed.get("weight_kg") or 0.0):
        flow.edit_weight(weight)

    st.markdown("**Sets:**")
    for i, s in enumerate(parsed["sets"]):
        reps = st.number_input(f"Set {s.get('set_number', i + 1)} reps", min_value=0, step=1,
                               value=int(s.get("reps") or 0), key=f"reps_{seq}_{i}")
        if reps != s.get("reps"):
            flow.edit_reps(i, reps)

    st.markdown(f"**Muscle Group:** {parsed.get('muscle_group') or 'Unknown'}")

    if st.button("💾 Save Workout", type="primary"):
        with st.spinner("Saving..."):
            flow.save_with(ctx)
        st.rerun()


def show_voice_panel(ctx: SessionContext):
    st.markdown('<p class="main-header">🎙️ Voice Input</p>', unsafe_allow_html=True)

    flow = _flow()
    speech = SpeechCapture(key="voice", on_transcript=flow.set_transcript)
    _capture_controls(flow, speech)

    if flow.transcript:
        st.markdown("**Transcript:**")
        st.markdown(f'<div class="transcript">{html.escape(flow.transcript)}</div>', unsafe_allow_html=True)

    if flow.state == FlowState.TRANSCRIPT_READY:
        if st.button("🤖 Parse Workout"):
            with st.spinner("Parsing..."):
                if flow.parse_with(ctx):
                    st.session_state.parse_seq += 1
            st.rerun()

    if flow.state == FlowState.PARSED:
        _parsed_preview(flow, ctx)

    if flow.state == FlowState.SAVED:
        st.success(flow.success_message)
        if st.button("➕ Log another"):
            flow.reset()
            speech.reset()
            st.rerun()

    if flow.state == FlowState.ERROR:
        c1, c2 = st.columns([6, 1])
        with c1:
            st.error(flow.error)
        with c2:
            if st.button("✖ Dismiss"):
                flow.dismiss_error()
                st.rerun()


# ── History ───────────────────────────────────────────────────

def show_workout_list(ctx: SessionContext, limit: int = 20):
    st.markdown("### 📋 Recent Workouts")
    try:
        workouts = ctx.client.get_workouts(ctx.user_id, limit=limit).get("data") or []
    except ApiError as e:
        st.error(f"Failed to load workouts: {e.message}")
        return

    if not workouts:
        st.info("No workouts logged yet. Start by recording your first workout!")
        return
    st.dataframe(get_visualizer().workouts_table(workouts),
                 use_container_width=True, hide_index=True)


# ── Progress ──────────────────────────────────────────────────

def show_progress(ctx: SessionContext):
    st.markdown('<p class="main-header">📈 Progress</p>', unsafe_allow_html=True)
    try:
        exercises = ctx.client.get_exercises().get("data") or []
    except ApiError as e:
        st.error(f"Failed to load exercises: {e.message}")
        return
    if not exercises:
        st.info("No exercises yet.")
        return

    by_name = {ex["name"]: ex for ex in exercises}
    name = st.selectbox("Exercise", list(by_name))
    try:
        points = ctx.client.get_progress_data(by_name[name]["id"], ctx.user_id).get("data") or []
    except ApiError as e:
        st.error(f"Failed to load progress data: {e.message}")
        return

    fig = get_visualizer().create_progress_chart(points, name)
    if fig is None:
        st.info("No progress data available for this exercise yet.")
    else:
        st.plotly_chart(fig, use_container_width=True)


# ── Workout split ─────────────────────────────────────────────

def show_split_editor(ctx: SessionContext):
    st.markdown('<p class="main-header">🗓️ Workout Split</p>', unsafe_allow_html=True)
    try:
        rows = ctx.client.get_workout_split(ctx.user_id).get("data") or []
    except ApiError as e:
        st.error(f"Failed to load workout split: {e.message}")
        return

    current = {r["day_of_week"]: r.get("muscle_groups") or [] for r in rows}
    options = sorted(set(MUSCLE_GROUPS) | {g for groups in current.values() for g in groups})

    with st.form("split_form"):
        chosen = {}
        for day in WEEKDAYS:
            chosen[day] = st.multiselect(day, options, default=current.get(day, []))
        submitted = st.form_submit_button("💾 Save Split", type="primary")

    if submitted:
        splits = [{"day": day, "muscleGroups": groups} for day, groups in chosen.items() if groups]
        try:
            ctx.client.save_workout_split(ctx.user_id, splits)
            st.success("Workout split saved.")
        except ApiError as e:
            st.error(f"Failed to save workout split: {e.message}")


# ── Help ──────────────────────────────────────────────────────

def show_help():
    st.markdown("### How to Use")
    st.markdown("""
1. Click **Record workout**, then the microphone button, and say your workout
2. Press **Done** when finished
3. Click **Parse Workout** to process your input with AI
4. Review the parsed data and edit the weight or reps if needed
5. Click **Save Workout** to log it
""")
    st.markdown("#### Voice Input Examples")
    st.markdown("""
- "Bench press, 40 kilograms, first set 8 reps, second set 6 reps"
- "Bench, 40kg, 8, 6, 6" (shorthand)
- "Shoulder press, 20kg, three sets, 10 reps each"
- "Deadlift, 100kg, 5, 5, 5, 5"
""")


if __name__ == "__main__":
    main()
