# aquasense/core/firebase.py
import logging
import os

import firebase_admin
from firebase_admin import credentials


def init_firebase(config) -> None:
    """
    Initialize the Firebase Admin SDK once per process.

    `config` is a config class or Flask config mapping with
    FIREBASE_CREDENTIALS_PATH / FIREBASE_DATABASE_URL / FIREBASE_STORAGE_BUCKET.
    """
    if firebase_admin._apps:
        return

    get = config.get if hasattr(config, 'get') else lambda key: getattr(config, key, None)
    cred_path = get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")

    options = {}
    if get('FIREBASE_DATABASE_URL'):
        options['databaseURL'] = get('FIREBASE_DATABASE_URL')
    if get('FIREBASE_STORAGE_BUCKET'):
        options['storageBucket'] = get('FIREBASE_STORAGE_BUCKET')

    firebase_admin.initialize_app(credentials.Certificate(cred_path), options)
    logging.info("Firebase Admin SDK initialized")
