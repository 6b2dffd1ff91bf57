import os
import locale
import logging

import streamlit as st
import matplotlib.pyplot as plt

from config import APP, CONFIRM, SELECTION
from session import Session
from stats import stats_frame
from storage import init_db, load_state, save_state

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

try:
    locale.setlocale(locale.LC_COLLATE, "")
except locale.Error as exc:
    logging.getLogger(__name__).warning("Using default collation for meal names: %s", exc)

st.set_page_config(page_title=APP["title"], layout="centered")

init_db()

# One Session per browser session; built from storage on first run
if "session" not in st.session_state:
    st.session_state["session"] = Session.from_storage(load_state, save_state)

session: Session = st.session_state["session"]

# -------------------------
# Header
# -------------------------
st.title(APP["title"])
st.caption(APP["tagline"])

# -------------------------
# Add meal + policy
# -------------------------
def _add_meal() -> None:
    st.session_state["new_meal"] = session.submit_meal(st.session_state.get("new_meal", ""))

with st.form("add_meal"):
    col_in, col_btn = st.columns([4, 1])
    with col_in:
        st.text_input(
            "Meal name",
            key="new_meal",
            placeholder="Add a meal (e.g. butter chicken)",
            label_visibility="collapsed",
        )
    with col_btn:
        st.form_submit_button("Add", on_click=_add_meal)

avoid_recent = st.checkbox(
    f"Avoid meals picked in the last {SELECTION['window_days']} days",
    value=session.policy.avoid_recent,
)
session.set_avoid_recent(avoid_recent)

# -------------------------
# Actions
# -------------------------
c1, c2, c3, c4 = st.columns(4)
with c1:
    if st.button("Suggest dinner", type="primary", disabled=not session.can_suggest):
        session.suggest()
with c2:
    if st.button("Clear all"):
        st.session_state["pending_confirm"] = "clear_all"
with c3:
    if st.button("Restore defaults"):
        session.restore_defaults()
with c4:
    if st.button("Reset everything"):
        st.session_state["pending_confirm"] = "reset_all"

pending = st.session_state.get("pending_confirm")
if pending:
    st.warning(CONFIRM[pending])
    yes_col, no_col = st.columns(2)
    with yes_col:
        if st.button("Yes, do it", key="confirm_yes"):
            getattr(session, pending)(lambda _msg: True)
            st.session_state.pop("pending_confirm", None)
            st.rerun()
    with no_col:
        if st.button("Cancel", key="confirm_no"):
            st.session_state.pop("pending_confirm", None)
            st.rerun()

if session.suggestion:
    with st.container(border=True):
        st.caption("Tonight is…")
        st.subheader(session.suggestion.chosen_name)
        if st.button("Clear", key="clear_suggestion"):
            session.clear_suggestion()
            st.rerun()

# -------------------------
# Meal list
# -------------------------
meals = session.meals()
count = len(meals)
st.markdown(f"### Meals  \n<small>{count} {'meal' if count == 1 else 'meals'}</small>", unsafe_allow_html=True)

if not meals:
    st.info("No meals yet.")
else:
    for m in meals:
        name_col, rm_col = st.columns([5, 1])
        with name_col:
            st.write(f"**{m.name}**")
            if m.last_picked:
                st.caption(f"Last picked: {m.last_picked.isoformat()} · picked {m.pick_count}×")
        with rm_col:
            if st.button("Remove", key=f"remove_{m.name}"):
                session.remove_meal(m.name)
                st.rerun()

# -------------------------
# Quick add
# -------------------------
st.markdown("### Quick add")
options = session.quick_add_options()
if options:
    cols = st.columns(min(len(options), 5))
    for i, name in enumerate(options):
        with cols[i % len(cols)]:
            if st.button(f"+ {name}", key=f"quick_{name}"):
                session.quick_add(name)
                st.rerun()
elif meals:
    st.caption("All suggestions added!")

# -------------------------
# Stats
# -------------------------
stats = session.stats()
if stats.has_history:
    st.markdown("### Stats")
    st.write(f"- Total picks: **{stats.total_picks}**")
    if stats.most_picked:
        st.write(f"- Most picked: **{stats.most_picked.name}** ({stats.most_picked.pick_count}×)")
    if stats.longest_avoided:
        since = stats.longest_avoided.last_picked
        st.write(
            f"- Longest avoided: **{stats.longest_avoided.name}**"
            + (f" (last picked {since.isoformat()})" if since else "")
        )

    df = stats_frame(session.registry.records)
    st.dataframe(df, width="stretch")

    picked = df[df["times_picked"] > 0]
    fig = plt.figure()
    plt.bar(picked["meal"], picked["times_picked"])
    plt.xticks(rotation=30)
    st.pyplot(fig)

st.caption(APP["version"])
