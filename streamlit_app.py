# streamlit_app.py
import streamlit as st
import streamlit.components.v1 as components

from app.config import VIEWER_SOURCE
from app.controller import ViewController
from app.logging_config import setup_logging
from app.models import DATASETS, DEFAULT_DATASET
from app.renderer import dataframe_to_csv_bytes, render_table, rows_to_dataframe

st.set_page_config(page_title="Bulgarian Dictionary", layout="wide")
st.title("🇧🇬 Bulgarian Dictionary")
st.write("Browse the dictionary page by page. Search filters the entries already on this page.")


# -------------------------
# Helpers
# -------------------------
def get_controller() -> ViewController:
    if "controller" not in st.session_state:
        setup_logging()
        controller = ViewController(DEFAULT_DATASET)
        with st.spinner("Loading dictionary..."):
            controller.load()
            controller.load_stats()
        st.session_state.controller = controller
    return st.session_state.controller


# -------------------------
# Callbacks
# -------------------------
def on_dataset_change():
    st.session_state.search_query = ""
    with st.spinner("Loading dictionary..."):
        st.session_state.controller.switch_dataset(st.session_state.dataset_key)


def on_previous():
    with st.spinner("Loading dictionary..."):
        if st.session_state.controller.previous_page():
            st.session_state.search_query = ""


def on_next():
    with st.spinner("Loading dictionary..."):
        if st.session_state.controller.next_page():
            st.session_state.search_query = ""


def on_search():
    st.session_state.controller.search(st.session_state.get("search_query", ""))


# -------------------------
# UI
# -------------------------
controller = get_controller()
state = controller.state

with st.sidebar:
    st.header("Dataset")
    st.selectbox(
        "Dictionary",
        options=list(DATASETS),
        format_func=lambda key: DATASETS[key].name,
        key="dataset_key",
        on_change=on_dataset_change,
    )
    st.caption(f"Source: {VIEWER_SOURCE}")

search_col, button_col = st.columns([5, 1])
with search_col:
    st.text_input("Search", key="search_query", on_change=on_search, placeholder="Search this page...")
with button_col:
    st.button("Search", on_click=on_search, use_container_width=True)

if state.error:
    st.error(state.error)

st.caption(controller.stats_text())

prev_col, label_col, next_col = st.columns([1, 2, 1])
with prev_col:
    st.button("← Previous", on_click=on_previous, disabled=not controller.can_go_previous, use_container_width=True)
with label_col:
    st.markdown(f"<div style='text-align:center'>Page {controller.page_number}</div>", unsafe_allow_html=True)
with next_col:
    st.button("Next →", on_click=on_next, disabled=not controller.can_go_next, use_container_width=True)

# rendered in an iframe, like the styled pandas table; cells are autoescaped
components.html(render_table(controller, standalone=True), height=600, scrolling=True)

df = rows_to_dataframe(controller.descriptor, state.filtered_rows, state.offset)
st.download_button(
    "Download page as CSV",
    data=dataframe_to_csv_bytes(df),
    file_name=f"{controller.dataset_key}_page_{controller.page_number}.csv",
    mime="text/csv",
    disabled=df.empty,
)
