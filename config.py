import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent

GITHUB_OWNER = os.environ.get("CEK_TAKIP_GITHUB_OWNER", "gokturk078")
GITHUB_REPO = os.environ.get("CEK_TAKIP_GITHUB_REPO", "cek-takip")
GITHUB_BRANCH = os.environ.get("CEK_TAKIP_GITHUB_BRANCH", "main")
GITHUB_FILE_PATH = os.environ.get("CEK_TAKIP_GITHUB_FILE_PATH", "data/checks.json")
GITHUB_API_URL = os.environ.get("CEK_TAKIP_GITHUB_API_URL", "https://api.github.com")
GITHUB_RAW_URL = os.environ.get("CEK_TAKIP_GITHUB_RAW_URL", "https://raw.githubusercontent.com")
GITHUB_TOKEN = os.environ.get("CEK_TAKIP_GITHUB_TOKEN", "")

REQUEST_TIMEOUT = float(os.environ.get("CEK_TAKIP_REQUEST_TIMEOUT", "15"))

LOCAL_DATA_PATH = os.environ.get("CEK_TAKIP_DATA_PATH", str(PROJECT_ROOT / "data" / "checks.json"))
SETTINGS_PATH = os.environ.get("CEK_TAKIP_SETTINGS_PATH", str(PROJECT_ROOT / "settings.json"))
SETTINGS_TOKEN_KEY = "github_token"

BASELINE_BANKS = (
    "GARANTİ BANKASI",
    "NEARESTBANK",
    "NEAR EAST BANK",
)

UPCOMING_DAYS = 7
