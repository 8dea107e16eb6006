import pandas as pd
import streamlit as st
from typing import List

from datagrid.data import ColumnDef, load_grid_data
from datagrid.engine import GridEngine
from datagrid.errors import InvalidConfiguration
from datagrid.pagination import ELLIPSIS
from datagrid.state import DEFAULT_WINDOW_RADIUS, PAGE_SIZE_OPTIONS


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .grid-toolbar {display: flex;gap: 20px;align-items: center;margin-bottom: 10px;color: #374151;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .page-gap {font-size: 1.4rem;letter-spacing: 3px;text-align: center;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def get_engine() -> GridEngine:
    if "grid_engine" not in st.session_state:
        st.session_state["grid_engine"] = GridEngine(load_grid_data())
    return st.session_state["grid_engine"]


def render_toolbar(engine: GridEngine):
    total_columns = len(engine.columns)
    shown = len(engine.get_visible_columns())
    st.markdown(
        f"<div class='grid-toolbar'><span class='chip'>{engine.get_total_filtered_count()} Rows</span>"
        f"<span class='chip'>{shown} of {total_columns} columns</span></div>",
        unsafe_allow_html=True,
    )


def render_column_filter(engine: GridEngine, column: ColumnDef):
    current = engine.state.filters.get(column.id)
    if column.kind == "numeric":
        bounds = engine.get_facet(column.id)
        if bounds is None or bounds[0] == bounds[1]:
            st.caption(f"{column.label}: no range to filter")
            return
        lo, hi = bounds
        value = (
            current.lo if current is not None and current.lo is not None else lo,
            current.hi if current is not None and current.hi is not None else hi,
        )
        # other filters can shrink the range under a stale selection
        value = (min(max(value[0], lo), hi), max(min(value[1], hi), lo))
        picked = st.slider(column.label, min_value=float(lo), max_value=float(hi), value=(float(value[0]), float(value[1])), key=f"range_{column.id}")
        if picked == (float(lo), float(hi)):
            if current is not None:
                engine.clear_filter(column.id)
        elif current is None or picked != (current.lo, current.hi):
            engine.set_filter(column.id, list(picked))
        return

    previous = current.query if current is not None else ""
    query = st.text_input(column.label, value=previous, key=f"text_{column.id}")
    if query.strip() != previous:
        engine.set_filter(column.id, query)
    choices = engine.get_facet(column.id)
    if query and choices:
        st.caption(f"{len(choices)} distinct values")


def render_sidebar(engine: GridEngine):
    with st.sidebar:
        st.markdown("### Search")
        query = st.text_input("Search all columns", value=engine.state.global_filter)
        if query.strip() != engine.state.global_filter:
            engine.set_global_filter(query)

        st.markdown("---")
        st.markdown("### Filters")
        for column in engine.columns:
            if column.filterable:
                render_column_filter(engine, column)

        st.markdown("---")
        st.markdown("### Sort")
        sortable = [c for c in engine.columns if c.sortable]
        current_sort = engine.state.sort[0] if engine.state.sort else None
        labels = ["(none)"] + [c.label for c in sortable]
        current_label = next((c.label for c in sortable if current_sort and c.id == current_sort.column_id), "(none)")
        picked = st.selectbox("Sort by", labels, index=labels.index(current_label))
        direction = st.radio("Direction", ["Ascending", "Descending"], index=1 if current_sort and current_sort.desc else 0, horizontal=True)
        if picked == "(none)":
            if engine.state.sort:
                engine.set_sort([])
        else:
            column = next(c for c in sortable if c.label == picked)
            desc = direction == "Descending"
            if current_sort is None or current_sort.column_id != column.id or current_sort.desc != desc:
                engine.toggle_sort(column.id, desc=desc)

        st.markdown("---")
        st.markdown("### Columns")
        for column in engine.columns:
            visible = st.checkbox(column.id, value=engine.state.column_visibility.get(column.id, column.visible), key=f"vis_{column.id}")
            engine.set_column_visibility(column.id, visible)


def render_grid(engine: GridEngine):
    rows = engine.get_page()
    columns = [c.label for c in engine.get_visible_columns()]
    df = pd.DataFrame(rows)
    if not df.empty:
        df.columns = columns
    column_config = {}
    if "Avatar" in columns:
        column_config["Avatar"] = st.column_config.ImageColumn("Avatar")
    st.dataframe(df, hide_index=True, use_container_width=True, column_config=column_config)


def render_pagination(engine: GridEngine):
    c1, c2 = st.columns([2, 8])
    with c1:
        size = st.selectbox(
            "Page size",
            PAGE_SIZE_OPTIONS,
            index=PAGE_SIZE_OPTIONS.index(engine.state.page_size) if engine.state.page_size in PAGE_SIZE_OPTIONS else 0,
            format_func=lambda n: f"Show {n} item per page",
            label_visibility="collapsed",
        )
        if size != engine.state.page_size:
            engine.set_page_size(size)
            st.rerun()
    with c2:
        window: List[int] = engine.get_page_window(DEFAULT_WINDOW_RADIUS)
        current = engine.state.page_index + 1
        slots = st.columns(len(window) + 2)
        if slots[0].button("‹", disabled=not engine.can_previous_page()):
            engine.previous_page()
            st.rerun()
        for slot, page in zip(slots[1:-1], window):
            if page == ELLIPSIS:
                slot.markdown("<div class='page-gap'>...</div>", unsafe_allow_html=True)
            elif slot.button(str(page), type="primary" if page == current else "secondary", key=f"page_{page}"):
                engine.set_page(page - 1)
                st.rerun()
        if slots[-1].button("›", disabled=not engine.can_next_page()):
            engine.next_page()
            st.rerun()


# ---------- UI setup ----------
st.set_page_config(page_title="Users Grid", layout="wide")
inject_base_styles()
st.title("Users")

engine = get_engine()
if engine.data.frame.empty:
    st.error("No records found. Place users.json in the data/ directory.")
    st.stop()

try:
    render_sidebar(engine)
    render_toolbar(engine)
    render_grid(engine)
    render_pagination(engine)
except InvalidConfiguration as exc:
    st.error(str(exc))
