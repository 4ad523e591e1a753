import logging
import os
from pathlib import Path

from corpus_common import PRINCIPLES_PATH

SUPABASE_URL = os.environ.get("SUPABASE_URL", "").rstrip("/")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
PRINCIPLES_FILE = Path(os.environ.get("PRINCIPLES_PATH", str(PRINCIPLES_PATH)))
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "30"))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("survival-scenarios")
