"""Firebase Admin SDK initialization (singleton)."""

import logging

import firebase_admin
from firebase_admin import credentials, db

from ..core.config import get_settings
from ..core.exceptions import RecipeStoreError

log = logging.getLogger(__name__)

_app = None


def init_firebase():
    """Initialize Firebase Admin SDK if not already initialized."""
    global _app
    if _app is not None:
        return _app

    settings = get_settings()
    if not settings.firebase_database_url:
        raise RecipeStoreError("FIREBASE_DATABASE_URL is not configured")

    options = {"databaseURL": settings.firebase_database_url}
    try:
        if settings.firebase_credentials:
            cred = credentials.Certificate(settings.firebase_credentials)
            _app = firebase_admin.initialize_app(cred, options)
        else:
            # Application default credentials, GOOGLE_APPLICATION_CREDENTIALS or GCP metadata
            _app = firebase_admin.initialize_app(options=options)
        log.info("Firebase Admin SDK initialized")
    except (ValueError, OSError) as e:
        log.error(f"Firebase Admin SDK init failed: {e}")
        raise RecipeStoreError(f"Firebase init failed: {e}") from e
    return _app


def get_root_reference() -> db.Reference:
    """Return the Realtime Database root, initializing Firebase if needed."""
    return db.reference("/", app=init_firebase())
