import streamlit as st

from app_types import RecommenderConfig, Severity
from constants import DEFAULT_RECOMMENDER_ENABLED, DEFAULT_SESSION_NAME, PLAYERS_PER_GROUP
from exceptions import BadmintonAppError
from logger import level_from_env, setup_logging
from player_registry import create_roster_dataframe, dataframe_to_players, format_roster_text
from player_service import has_blocking_warning
import session_service

setup_logging(level_from_env())

st.set_page_config(layout="wide", page_title="Badminton Players")
st.title("🏸 Badminton Matchups")

# --- Session Loading ---
if "session" not in st.session_state:
    st.session_state.session = session_service.load_or_create_session(DEFAULT_SESSION_NAME)
    st.session_state.current_session_name = DEFAULT_SESSION_NAME

if "recommender_enabled" not in st.session_state:
    st.session_state.recommender_enabled = DEFAULT_RECOMMENDER_ENABLED

if "selected_ids" not in st.session_state:
    st.session_state.selected_ids = []

session = st.session_state.session
session_name = st.session_state.current_session_name


def player_label(player_id):
    p = session.players[player_id]
    return f"{p.name} ({p.gender.value}, L{p.level}, {p.games_played} games)"


def stage_selected():
    """Callback: stages the current selection and clears it."""
    try:
        session_service.stage_selection(session, session_name, st.session_state.selected_ids)
        st.session_state.selected_ids = []
        st.session_state.flash = "Matchup added to the staging area."
    except BadmintonAppError as e:
        st.session_state.flash_error = str(e)


def add_missing_partners():
    """Callback: adds free partners of the selected players while there is room."""
    st.session_state.selected_ids = session_service.add_missing_partners(
        session, st.session_state.selected_ids
    )


# --- Sidebar Settings ---
with st.sidebar:
    st.header("Settings")
    st.toggle(
        "Smart recommendations",
        key="recommender_enabled",
        help="Suggest the next four players by games played, level, gender, partners and history.",
    )

    st.divider()
    st.subheader("Data")
    if st.button("🔄 Reset all games played", use_container_width=True):
        session_service.reset_games(session, session_name)
        st.rerun()
    if st.button("🗑️ Clear game history", use_container_width=True):
        session_service.clear_history(session, session_name)
        st.rerun()
    st.download_button(
        "⬇️ Export roster",
        data=format_roster_text(list(session.players.values())),
        file_name="roster.txt",
        use_container_width=True,
    )

if st.session_state.get("flash"):
    st.success(st.session_state.pop("flash"))
if st.session_state.get("flash_error"):
    st.error(st.session_state.pop("flash_error"))

col1, col2 = st.columns([2, 1])

with col1:
    # --- Selection ---
    st.header("Select Players")
    available = session.available_players()
    available_ids = {p.player_id for p in available}
    # Drop selections that became unavailable since the last run
    st.session_state.selected_ids = [
        pid for pid in st.session_state.selected_ids if pid in available_ids
    ]

    st.multiselect(
        f"Pick {PLAYERS_PER_GROUP} players",
        options=[p.player_id for p in sorted(available, key=lambda p: p.games_played)],
        format_func=player_label,
        max_selections=PLAYERS_PER_GROUP,
        key="selected_ids",
    )

    warnings = session_service.check_selection(session, st.session_state.selected_ids)
    for warning in warnings:
        if warning.severity == Severity.BLOCKING:
            st.error(warning.message)
        else:
            st.warning(warning.message)

    if has_blocking_warning(warnings):
        st.button("🤝 Add missing partners", on_click=add_missing_partners)

    st.button(
        "➕ Add to staging area",
        on_click=stage_selected,
        disabled=len(st.session_state.selected_ids) != PLAYERS_PER_GROUP,
    )

    if st.session_state.recommender_enabled:
        if st.button("✨ Recommend next matchup", type="primary"):
            config = RecommenderConfig(enabled=st.session_state.recommender_enabled)
            matchup = session_service.stage_recommended_matchup(session, session_name, config)
            if matchup is None:
                st.warning(f"At least {PLAYERS_PER_GROUP} free players are needed.")
            else:
                st.session_state.flash = "Recommended: " + ", ".join(
                    session.names_for(matchup.player_ids)
                )
                st.rerun()

    # --- Roster ---
    st.header("Roster")
    edited_df = st.data_editor(
        create_roster_dataframe(list(session.players.values())),
        column_config={
            "Gender": st.column_config.SelectboxColumn(
                "Gender", options=["M", "F"], default="M", required=True
            ),
            "Level": st.column_config.NumberColumn(
                "Level", min_value=0, step=1, default=10, required=True
            ),
            "Partner": st.column_config.TextColumn(
                "Partner", help="Name of this player's fixed partner", default=""
            ),
            "player_id": None,
        },
        disabled=["#", "Games"],
        hide_index=True,
        num_rows="dynamic",
        use_container_width=True,
        key="roster_editor",
    )
    if st.button("✅ Save Roster"):
        try:
            session_service.sync_roster(session, session_name, dataframe_to_players(edited_df))
            st.session_state.flash = "Roster saved!"
            st.rerun()
        except BadmintonAppError as e:
            st.error(str(e))

    with st.expander("📋 Batch add players"):
        st.caption("One player per line: `Name Level [Partner]`. A line with `M` or `F` switches gender.")
        batch_text = st.text_area("Players", key="batch_text", height=200)
        if st.button("Add Players"):
            added = session_service.import_roster_text(session, session_name, batch_text)
            st.session_state.flash = f"Added {len(added)} player(s)."
            st.rerun()

with col2:
    # --- Staging Area ---
    st.header(f"Staging Area ({len(session.matchups)})")
    if not session.matchups:
        st.info("No staged matchups.")
    for matchup in list(session.matchups.values()):
        with st.container(border=True):
            st.markdown(" · ".join(session.names_for(matchup.player_ids)))
            if st.button("Delete", key=f"delete_matchup_{matchup.matchup_id}"):
                session_service.delete_matchup(session, session_name, matchup.matchup_id)
                st.rerun()
