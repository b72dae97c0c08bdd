from __future__ import annotations

import logging

from app.check_store import CheckStore
from config import (
    BASELINE_BANKS,
    GITHUB_API_URL,
    GITHUB_BRANCH,
    GITHUB_FILE_PATH,
    GITHUB_OWNER,
    GITHUB_RAW_URL,
    GITHUB_REPO,
    GITHUB_TOKEN,
    LOCAL_DATA_PATH,
    REQUEST_TIMEOUT,
    SETTINGS_PATH,
    SETTINGS_TOKEN_KEY,
)
from infrastructure.github_store import GitHubContentsStore
from infrastructure.local_files import JsonSettingsStore, LocalSnapshotFile
from infrastructure.synchronizer import SnapshotSynchronizer

logger = logging.getLogger(__name__)


def build_settings(settings_path: str | None = None) -> JsonSettingsStore:
    return JsonSettingsStore(settings_path or SETTINGS_PATH)


def build_synchronizer(settings: JsonSettingsStore, data_path: str | None = None) -> SnapshotSynchronizer:
    def token_provider() -> str | None:
        return GITHUB_TOKEN or settings.get(SETTINGS_TOKEN_KEY)

    remote = GitHubContentsStore(
        owner=GITHUB_OWNER,
        repo=GITHUB_REPO,
        file_path=GITHUB_FILE_PATH,
        branch=GITHUB_BRANCH,
        token_provider=token_provider,
        api_url=GITHUB_API_URL,
        raw_url=GITHUB_RAW_URL,
        timeout=REQUEST_TIMEOUT,
    )
    return SnapshotSynchronizer(remote, LocalSnapshotFile(data_path or LOCAL_DATA_PATH))


def bootstrap_store(settings_path: str | None = None, data_path: str | None = None) -> CheckStore:
    """Wire the store to GitHub, the local fallback file and settings, then load."""
    settings = build_settings(settings_path)
    synchronizer = build_synchronizer(settings, data_path)
    store = CheckStore(synchronizer, baseline_banks=BASELINE_BANKS, settings=settings)
    count = store.load()
    logger.info("Store ready with %s checks (sync state: %s)", count, synchronizer.state.value)
    return store
