import os
import sys
from pathlib import Path

import pytest

# Ensure repo root on sys.path for imports from anywhere in tests tree.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time; pin them before anything imports garuda.
os.environ["APP_ENV"] = "test"
os.environ["GROQ_API_KEY"] = ""
os.environ.setdefault("LOG_FORMAT", "console")
for _name in ("OLLAMA_BASE_URL", "OLLAMA_MODEL", "API_V1_STR", "GARUDA_API_URL"):
    os.environ.pop(_name, None)


@pytest.fixture
def anyio_backend():
    return "asyncio"
