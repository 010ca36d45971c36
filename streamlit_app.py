# streamlit_app.py
"""
Expense tracker UI (Streamlit).

Presentation only: every action goes through session.Session, which owns the
state, persistence and validation. Trackers are stored with storage.FileStore
under config.DATA_DIR.
"""

from datetime import date

import plotly.express as px
import streamlit as st

import codec
import config
from errors import TrackerError
from logging_setup import configure_logging
from models import CATEGORIES, CATEGORY_COLORS
from session import Session
from storage import FileStore

configure_logging()
st.set_page_config(page_title="Expense Tracker", layout="centered")


def confirmed(message: str) -> bool:
    # destructive buttons only act once the sidebar box is ticked
    return bool(st.session_state.get("confirm_delete", False))


def get_session() -> Session:
    if "session" not in st.session_state:
        st.session_state["session"] = Session(FileStore(config.DATA_DIR), confirm=confirmed)
    return st.session_state["session"]


session = get_session()

# -----------------------
# Sidebar: tracker manager
# -----------------------
st.sidebar.title("Trackers")
with st.sidebar.form("add_project", clear_on_submit=True):
    new_name = st.text_input("Add new tracker (e.g. Trip, Event...)")
    if st.form_submit_button("Add"):
        if session.create_project(new_name):
            st.rerun()
        else:
            st.sidebar.warning("Tracker name must not be empty.")

if session.projects:
    ids = [p.id for p in session.projects]
    names = {p.id: p.name for p in session.projects}
    current = session.current_project
    chosen = st.sidebar.selectbox("Current tracker", options=ids, index=ids.index(current.id), format_func=names.get)
    if chosen != current.id:
        session.select_project(chosen)
        st.rerun()

    renamed = st.sidebar.text_input("Rename tracker", value=current.name, key=f"rename_{current.id}")
    if st.sidebar.button("Rename") and renamed.strip():
        session.rename_project(current.id, renamed.strip())
        st.rerun()

    st.sidebar.checkbox("Confirm deletions", key="confirm_delete")
    if st.sidebar.button("Delete tracker", disabled=len(session.projects) < 2):
        if session.delete_project(current.id):
            st.rerun()
        else:
            st.sidebar.info("Tick 'Confirm deletions' first.")

project = session.current_project
st.title(f"Expense Tracker: {project.name}" if project else "Expense Tracker")
if project is None:
    st.info("Add your first tracker in the sidebar!")
    st.stop()

# -----------------------
# Expense form
# -----------------------
editing = project.find_expense(session.edit_cursor) if session.edit_cursor else None
form_key = session.edit_cursor or "new"
with st.form(f"expense_{form_key}", clear_on_submit=True):
    col1, col2 = st.columns(2)
    with col1:
        amount = st.text_input("Amount", value=f"{editing.amount}" if editing else "")
    with col2:
        category = st.selectbox(
            "Category",
            options=CATEGORIES,
            index=CATEGORIES.index(editing.category) if editing and editing.category in CATEGORIES else 0,
        )
    col3, col4 = st.columns([2, 1])
    with col3:
        description = st.text_input("Description", value=editing.description if editing else "")
    with col4:
        when = st.date_input("Date", value=editing.date if editing else date.today())
    if st.form_submit_button("Update Expense" if editing else "Add Expense"):
        try:
            session.submit_expense(amount, category, description, when)
            st.rerun()
        except (TrackerError, ValueError) as e:
            st.error(str(e))
if editing and st.button("Cancel edit"):
    session.cancel_edit()
    st.rerun()

# -----------------------
# Month selector, import / export
# -----------------------
months = session.months()
if session.selected_month not in months:
    months.append(session.selected_month)
month = st.selectbox("Month", options=months, index=months.index(session.selected_month))
if month != session.selected_month:
    session.select_month(month)
    st.rerun()

col_a, col_b = st.columns(2)
with col_a:
    st.download_button("Export CSV", session.export_csv(), file_name=codec.export_filename(project.name, "csv"), mime="text/csv")
    st.download_button(
        "Export JSON", session.export_json(), file_name=codec.export_filename(project.name, "json"), mime="application/json"
    )
with col_b:
    uploaded = st.file_uploader("Import CSV or JSON", type=["csv", "json"])
    if uploaded is not None and st.button("Replace expenses with file"):
        session.begin_import()
        try:
            text = uploaded.getvalue().decode("utf-8-sig")
        except UnicodeDecodeError:
            session.cancel_import()
            st.error("File is not UTF-8 text.")
        else:
            try:
                n = session.finish_import(text, codec.detect_format(text, uploaded.name))
                st.success(f"Imported {n} expenses.")
            except TrackerError as e:
                st.error(str(e))

# -----------------------
# Summary and chart
# -----------------------
summary = session.summary()
st.subheader(f"Total: {config.CURRENCY} {summary.total:.2f}")
slices = {c: v for c, v in summary.by_category.items() if v > 0}
if slices:
    fig = px.pie(
        names=list(slices.keys()),
        values=list(slices.values()),
        color=list(slices.keys()),
        color_discrete_map=CATEGORY_COLORS,
    )
    st.plotly_chart(fig, use_container_width=True)

# -----------------------
# Expense list
# -----------------------
st.subheader("Expenses")
visible = session.visible_expenses()
if not visible:
    st.write("No expenses this month.")
for exp in visible:
    c1, c2, c3 = st.columns([6, 1, 1])
    with c1:
        st.markdown(f"**{config.CURRENCY} {exp.amount:.2f}** - {exp.category}  \n{exp.description}  _{exp.date.isoformat()}_")
    with c2:
        if st.button("Edit", key=f"edit_{exp.id}"):
            session.start_edit(exp.id)
            st.rerun()
    with c3:
        if st.button("Delete", key=f"delete_{exp.id}"):
            if session.delete_expense(exp.id):
                st.rerun()
            else:
                st.info("Tick 'Confirm deletions' first.")
