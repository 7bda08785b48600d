# app/routes.py
import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from app.config import PROXY_DATASET
from app.data_client import DirectSource, FetchError
from app.models import DATASETS, DatasetDescriptor, UnknownDatasetError, get_dataset
from app.schemas import ColumnOut, DatasetOut, ErrorResponse, StatsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def descriptor_or_404(dataset: str) -> DatasetDescriptor:
    try:
        return get_dataset(dataset)
    except UnknownDatasetError:
        raise HTTPException(status_code=404, detail=f"Unknown dataset {dataset!r}")


# ------------------------------
# Proxy endpoints
# ------------------------------
@router.get("/dictionary")
def get_dictionary(
    offset: int = Query(0, ge=0),
    length: int = Query(100, ge=1, le=100),
    dataset: str = PROXY_DATASET,
):
    """Forward one page read to the datasets-server and return its body verbatim."""
    descriptor = descriptor_or_404(dataset)
    try:
        return DirectSource(descriptor).fetch_json(offset, length)
    except FetchError as e:
        logger.error("Error fetching from HuggingFace: %s", e.message)
        body = ErrorResponse(error="Failed to fetch dictionary data", details=e.message)
        return JSONResponse(status_code=500, content=body.model_dump())


@router.get("/stats", response_model=StatsResponse)
def get_stats(dataset: str = PROXY_DATASET):
    descriptor = descriptor_or_404(dataset)
    try:
        total = DirectSource(descriptor).total()
    except FetchError as e:
        logger.error("Error fetching stats: %s", e.message)
        body = ErrorResponse(error="Failed to fetch statistics")
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    return StatsResponse(totalRows=total)


@router.get("/datasets", response_model=List[DatasetOut])
def list_datasets():
    return [
        DatasetOut(
            key=key,
            name=d.name,
            config=d.config,
            split=d.split,
            columns=[ColumnOut(key=c.key, header=c.header, class_name=c.class_name) for c in d.columns],
        )
        for key, d in DATASETS.items()
    ]
