"""FastAPI dependency injection factories.

Every request works on the single local workspace rooted at
``Settings.STORAGE_PATH``. Tests override ``get_workspace`` with an
in-memory blob store.
"""

from fastapi import Depends

from dikelab.config.settings import Settings, get_settings
from dikelab.storage.blob_store import LocalBlobStore
from dikelab.storage.workspace import Workspace


def get_workspace(settings: Settings = Depends(get_settings)) -> Workspace:
    return Workspace(
        LocalBlobStore(settings.STORAGE_PATH),
        page_size=settings.DEFAULT_PAGE_SIZE,
        large_threshold=settings.LARGE_CHECKLIST_THRESHOLD,
    )
