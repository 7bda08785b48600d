# app/models.py
from typing import Any, Dict, Mapping, Tuple

from pydantic import BaseModel, ConfigDict


class ColumnSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    header: str
    class_name: str


class DatasetDescriptor(BaseModel):
    """A remote table on the datasets-server plus the columns we show for it."""

    model_config = ConfigDict(frozen=True)

    name: str
    config: str = "default"
    split: str = "train"
    columns: Tuple[ColumnSpec, ...]


class UnknownDatasetError(KeyError):
    pass


DATASETS: Dict[str, DatasetDescriptor] = {
    "alpaca": DatasetDescriptor(
        name="vislupus/alpaca-bulgarian-dictionary",
        columns=(
            ColumnSpec(key="input", header="Дума (Word)", class_name="col-word"),
            ColumnSpec(key="instruction", header="Въпрос (Question)", class_name="col-definition"),
            ColumnSpec(key="output", header="Отговор (Answer)", class_name="col-extra"),
        ),
    ),
    "bogko": DatasetDescriptor(
        name="thebogko/bulgarian-dictionary-2024",
        columns=(
            ColumnSpec(key="word", header="Дума (Word)", class_name="col-word"),
            ColumnSpec(key="tag", header="Етикет (Tag)", class_name="col-definition"),
        ),
    ),
}

DEFAULT_DATASET = "alpaca"


def get_dataset(key: str) -> DatasetDescriptor:
    try:
        return DATASETS[key]
    except KeyError:
        raise UnknownDatasetError(key) from None


def unwrap_row(entry: Any) -> Mapping[str, Any]:
    """The rows API nests fields under "row"; plain mappings pass through."""
    if isinstance(entry, Mapping):
        inner = entry.get("row")
        if isinstance(inner, Mapping):
            return inner
        return entry
    return {}


def cell_text(row: Mapping[str, Any], key: str) -> str:
    # falsy values (None, "", 0) show as empty, like the original viewer
    value = row.get(key)
    return str(value) if value else ""
