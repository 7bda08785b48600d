from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Any, Union, Literal


class RowsResponse(BaseModel):
    # the remote sends features, partial flags etc. which we don't need
    model_config = ConfigDict(extra="ignore")

    rows: List[Any] = Field(default_factory=list)
    num_rows_total: Optional[int] = None


class StatsResponse(BaseModel):
    totalRows: Union[int, Literal["Unknown"]]


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class ColumnOut(BaseModel):
    key: str
    header: str
    class_name: str


class DatasetOut(BaseModel):
    key: str
    name: str
    config: str
    split: str
    columns: List[ColumnOut]
