# app/config.py
import os

from dotenv import load_dotenv

load_dotenv()

PORT = int(os.environ.get("PORT", "3000"))

# HuggingFace datasets-server rows endpoint
HF_ROWS_URL = os.environ.get("HF_ROWS_URL", "https://datasets-server.huggingface.co/rows")

# dataset key the proxy forwards to (see app.models.DATASETS)
PROXY_DATASET = os.environ.get("PROXY_DATASET", "alpaca")

REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "15"))

# streamlit front-end: "direct" calls HuggingFace, "proxy" goes through /api
VIEWER_SOURCE = os.environ.get("VIEWER_SOURCE", "direct")
API_BASE = os.environ.get("API_BASE", f"http://127.0.0.1:{PORT}/api")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
