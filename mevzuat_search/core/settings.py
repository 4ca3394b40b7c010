from __future__ import annotations

import os

MEVZUAT_SERVICE_URL = os.environ.get("MEVZUAT_SERVICE_URL", "http://localhost:8080")
MEVZUAT_TIMEOUT_SEC = float(os.environ.get("MEVZUAT_TIMEOUT_SEC", "10"))
MEVZUAT_RATE_PER_SEC = float(os.environ.get("MEVZUAT_RATE_PER_SEC", "5"))

COHERE_EMBED_MODEL = os.environ.get("COHERE_EMBED_MODEL", "embed-multilingual-v3.0")
LOCAL_EMBED_MODEL = os.environ.get(
    "LOCAL_EMBED_MODEL", "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"
)
EMBED_BATCH_SIZE = int(os.environ.get("EMBED_BATCH_SIZE", "3"))
EMBED_BATCH_DELAY_SEC = float(os.environ.get("EMBED_BATCH_DELAY_SEC", "0.1"))

OLLAMA_ENDPOINT = os.environ.get("OLLAMA_ENDPOINT", "http://localhost:11434/api/generate")
OLLAMA_MODEL = os.environ.get("OLLAMA_MODEL", "qwen2.5:7b-instruct")
