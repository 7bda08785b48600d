import io
from pathlib import Path
from typing import Any, Dict, List, Sequence
from urllib.parse import urlencode

import jinja2
import pandas as pd
from fastapi.templating import Jinja2Templates
from markupsafe import Markup, escape

from app.controller import PageStatus, ViewController
from app.data_client import Row
from app.models import DATASETS, DatasetDescriptor, cell_text

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

EMPTY_MESSAGE = "No entries found"
TITLE = "Bulgarian Dictionary"


def nl2br(value: Any) -> Markup:
    # escape first, then keep line breaks (multi-paragraph answers) inside the cell
    return escape(value).replace("\r\n", Markup("<br>")).replace("\n", Markup("<br>"))


env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(TEMPLATES_DIR),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
env.filters["nl2br"] = nl2br

templates = Jinja2Templates(env=env)


# ------------------------------
# View models
# ------------------------------
def table_rows(descriptor: DatasetDescriptor, rows: Sequence[Row], offset: int) -> List[Dict[str, Any]]:
    """Rows numbered from offset + 1, one text cell per configured column."""
    return [
        {
            "index": offset + position + 1,
            "cells": [{"class_name": col.class_name, "text": cell_text(row, col.key)} for col in descriptor.columns],
        }
        for position, row in enumerate(rows)
    ]


def rows_context(descriptor: DatasetDescriptor, rows: Sequence[Row], offset: int) -> Dict[str, Any]:
    return {
        "columns": descriptor.columns,
        "rows": table_rows(descriptor, rows, offset),
        "colspan": len(descriptor.columns) + 1,
        "empty_message": EMPTY_MESSAGE,
    }


def table_context(controller: ViewController) -> Dict[str, Any]:
    return rows_context(controller.descriptor, controller.state.filtered_rows, controller.state.offset)


def page_link(controller: ViewController, label: str, offset: int, enabled: bool) -> Dict[str, Any]:
    href = "/?" + urlencode({"dataset": controller.dataset_key, "offset": offset})
    return {"label": label, "href": href, "enabled": enabled}


def page_context(controller: ViewController) -> Dict[str, Any]:
    state = controller.state
    context = table_context(controller)
    context.update(
        title=TITLE,
        datasets=[
            {"key": key, "name": d.name, "selected": key == controller.dataset_key} for key, d in DATASETS.items()
        ],
        query=state.query,
        stats_text=controller.stats_text(),
        error=state.error,
        failed=state.status == PageStatus.FAILED,
        loading=state.status == PageStatus.LOADING,
        page_number=controller.page_number,
        prev_link=page_link(
            controller, "Previous", max(0, state.offset - state.page_size), controller.can_go_previous
        ),
        next_link=page_link(controller, "Next", state.offset + state.page_size, controller.can_go_next),
    )
    return context


# ------------------------------
# Rendering
# ------------------------------
def render_rows(descriptor: DatasetDescriptor, rows: Sequence[Row], offset: int) -> str:
    return env.get_template("_rows.html").render(rows_context(descriptor, rows, offset))


def render_table(controller: ViewController, standalone: bool = False) -> str:
    """The table for the current page; `standalone` adds inline styles for embedding in an iframe."""
    name = "frame.html" if standalone else "_table.html"
    return env.get_template(name).render(table_context(controller))


def render_page(controller: ViewController) -> str:
    return env.get_template("index.html").render(page_context(controller))


# ------------------------------
# DataFrame export
# ------------------------------
def rows_to_dataframe(descriptor: DatasetDescriptor, rows: Sequence[Row], offset: int) -> pd.DataFrame:
    headers = ["#"] + [col.header for col in descriptor.columns]
    records = [[row["index"]] + [cell["text"] for cell in row["cells"]] for row in table_rows(descriptor, rows, offset)]
    return pd.DataFrame(records, columns=headers)


def dataframe_to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")
