from dotenv import load_dotenv
load_dotenv()  # It will load .env file values into os.environ

import os
import firebase_admin
from firebase_admin import credentials, initialize_app

from alcozero.config import settings
from alcozero.core.logging_config import get_logger

logger = get_logger(__name__)


def init_firebase():
    """Initialize the Admin SDK once, against the RTDB in FIREBASE_DATABASE_URL."""
    firebase_key_path = settings.FIREBASE_KEY_PATH
    logger.info(f"Firebase key path: {firebase_key_path}")
    if not os.path.exists(firebase_key_path):
        raise FileNotFoundError(f"Firebase key not found at: {firebase_key_path}")
    try:
        if not firebase_admin._apps:
            cred = credentials.Certificate(firebase_key_path)
            initialize_app(cred, {
                'databaseURL': settings.FIREBASE_DATABASE_URL
            })
    except Exception as e:
        logger.error(f"Error initializing Firebase: {str(e)}")
        raise
