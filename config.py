import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, List
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".studyflow"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_SKIP_TITLE_PATTERNS = [
    "syllabus",
    "honor code",
    "fee",
    "supply",
    "registration",
    "course info",
    "welcome",
    "introduction",
    "orientation",
]
DEFAULT_SKIP_IN_CLASS_PATTERNS = [
    "in class",
    "in-class",
    "roll call",
    "attendance",
    "class discussion",
    "class activity",
    "classroom",
    "class work",
]


def _as_list(value: Any, default: List[str]) -> List[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value]


def load_config() -> Dict[str, Any]:
    """Load config from ~/.studyflow/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # .env may carry CANVAS_* tokens and overrides
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    canvas_cfg = config.get("canvas", {})
    config["canvas"] = {
        "base_url": os.getenv("CANVAS_BASE_URL", canvas_cfg.get("base_url", "")),
        "timeout": float(os.getenv("CANVAS_TIMEOUT", canvas_cfg.get("timeout", 20))),
        "per_page": int(canvas_cfg.get("per_page", 100)),
        "accounts": canvas_cfg.get("accounts", {}),
    }
    schedule_cfg = config.get("schedule", {})
    config["schedule"] = {
        "timezone": os.getenv("SCHOOL_TIMEZONE", schedule_cfg.get("timezone", "America/New_York")),
        "near_duplicate_min_shared_words": int(
            schedule_cfg.get("near_duplicate_min_shared_words", 2)
        ),
        "near_duplicate_min_word_length": int(
            schedule_cfg.get("near_duplicate_min_word_length", 3)
        ),
    }
    sync_cfg = config.get("sync", {})
    config["sync"] = {
        "skip_title_patterns": _as_list(
            sync_cfg.get("skip_title_patterns"), DEFAULT_SKIP_TITLE_PATTERNS
        ),
        "skip_in_class_patterns": _as_list(
            sync_cfg.get("skip_in_class_patterns"), DEFAULT_SKIP_IN_CLASS_PATTERNS
        ),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("STUDYFLOW_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config


def get_canvas_account(config: Dict[str, Any], account_key: str) -> Dict[str, str]:
    """Resolve base URL and token for a configured Canvas account.

    The token itself never lives in config.toml; the account names the
    environment variable that holds it.
    """
    canvas_cfg = config.get("canvas", {})
    account = canvas_cfg.get("accounts", {}).get(account_key, {})
    token_env = account.get("token_env") or f"CANVAS_TOKEN_{account_key.upper()}"
    return {
        "base_url": account.get("base_url") or canvas_cfg.get("base_url", ""),
        "token": os.getenv(token_env, ""),
    }
