import streamlit as st

from constants import DEFAULT_SESSION_NAME
from exceptions import BadmintonAppError
import session_service

st.set_page_config(layout="wide", page_title="Badminton Courts")

# --- Page Entry Logic ---
# If the session object is lost (e.g., page reload), load it from the file.
if "session" not in st.session_state or "current_session_name" not in st.session_state:
    st.session_state.session = session_service.load_or_create_session(DEFAULT_SESSION_NAME)
    st.session_state.current_session_name = DEFAULT_SESSION_NAME

session = st.session_state.session
session_name = st.session_state.current_session_name
st.title("🏸 Courts")

free_courts = [c for c in session.courts.values() if c.is_empty]

col1, col2 = st.columns([2, 1])

with col1:
    if not session.courts:
        st.info("No courts yet. Add one from the sidebar.")
    cols = st.columns(2)
    for i, court in enumerate(session.courts.values()):
        with cols[i % 2]:
            with st.container(border=True):
                if court.is_empty:
                    st.markdown(f"#### {court.name}")
                    st.caption("Free court")
                else:
                    st.markdown(f"#### {court.name} · Playing")
                    st.markdown(" · ".join(session.names_for(court.player_ids)))
                    if st.button("🏁 End game", key=f"end_{court.court_id}", use_container_width=True):
                        session_service.finish_game(session, session_name, court.court_id)
                        st.rerun()

with col2:
    st.header(f"Staging Area ({len(session.matchups)})")
    if not session.matchups:
        st.info("No staged matchups. Select players on the Players page.")
    for matchup in list(session.matchups.values()):
        with st.container(border=True):
            st.markdown(" · ".join(session.names_for(matchup.player_ids)))
            if not free_courts:
                st.caption("Waiting for a free court")
                continue
            court_id = st.selectbox(
                "Court",
                options=[c.court_id for c in free_courts],
                format_func=lambda cid: session.courts[cid].name,
                key=f"court_for_{matchup.matchup_id}",
            )
            if st.button("▶️ Assign", key=f"assign_{matchup.matchup_id}"):
                try:
                    session_service.assign_to_court(
                        session, session_name, matchup.matchup_id, court_id
                    )
                    st.rerun()
                except BadmintonAppError as e:
                    st.error(str(e))

# --- Court Management in Sidebar ---
with st.sidebar:
    st.header("Manage Courts")
    st.markdown(f"**Courts:** {len(session.courts)}")
    col_add, col_remove = st.columns(2)
    with col_add:
        if st.button("Add court", key="add_court_btn", use_container_width=True):
            session_service.update_court_count(session, session_name, 1)
            st.rerun()
    with col_remove:
        if st.button("Remove court", key="remove_court_btn", use_container_width=True):
            try:
                session_service.update_court_count(session, session_name, -1)
                st.rerun()
            except BadmintonAppError as e:
                st.error(str(e))
