import os
import sys
from pathlib import Path


# Keep tests deterministic and local-only.
os.environ["LIGHTCHECK_SKIP_DOTENV"] = "1"
os.environ["LIGHTCHECK_QUEUE_BACKEND"] = "mock"
os.environ["LIGHTCHECK_CLASSIFIER_BACKEND"] = "mock"
os.environ["LIGHTCHECK_QUEUE_URL"] = ""
os.environ["LIGHTCHECK_ANALYSIS_WORKERS"] = "1"
os.environ["LIGHTCHECK_STATUS_TTL_SECONDS"] = "5"
os.environ["GEMINI_API_KEY"] = ""

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))
