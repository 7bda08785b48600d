# app/main.py
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.requests import Request

from app.config import PORT
from app.controller import PAGE_SIZE, ViewController
from app.data_client import DataClient, DirectSource
from app.logging_config import setup_logging
from app.models import DEFAULT_DATASET
from app.renderer import page_context, templates
from app.routes import descriptor_or_404
from app.routes import router as api_router

STATIC_DIR = Path(__file__).resolve().parent / "static"

app = FastAPI(title="Bulgarian Dictionary Viewer")

# the API is public and read-only
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes first, static files after
app.include_router(api_router, prefix="/api")
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


def direct_client(dataset_key, descriptor):
    return DataClient(DirectSource(descriptor))


@app.get("/", response_class=HTMLResponse)
def index(request: Request, dataset: str = DEFAULT_DATASET, offset: int = Query(0), q: str = ""):
    descriptor_or_404(dataset)
    controller = ViewController(dataset, client_factory=direct_client)
    # snap to a page boundary
    controller.state.offset = max(0, offset) // PAGE_SIZE * PAGE_SIZE
    controller.load()
    controller.load_stats()
    if q:
        controller.search(q)
    return templates.TemplateResponse(request, "index.html", page_context(controller))


if __name__ == "__main__":
    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=PORT)
