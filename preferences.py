from abc import ABC, abstractmethod
from datetime import datetime
import json
import logging
import os
import tempfile
import threading

logger = logging.getLogger(__name__)

BIRTHDATE_KEY = 'pet-birthdate'
CATEGORY_KEY = 'pet-weight-category'

PREFERENCES_FILE = os.getenv('PREFERENCES_FILE', 'pet_preferences.json')


class PreferenceStore(ABC):
    """Key-value storage for the user's last inputs"""

    @abstractmethod
    def get(self, key):
        """Return the stored string for key, or None"""

    @abstractmethod
    def set(self, key, value):
        """Store a string value under key"""

    def load_preferences(self):
        """Return (birth_date, category), either may be None"""
        return self.get(BIRTHDATE_KEY), self.get(CATEGORY_KEY)

    def save_preferences(self, birth_date, category):
        self.set(BIRTHDATE_KEY, birth_date)
        self.set(CATEGORY_KEY, category)


class InMemoryPreferenceStore(PreferenceStore):
    def __init__(self, initial=None):
        self.values = dict(initial or {})

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value):
        self.values[key] = value


class SessionPreferenceStore(PreferenceStore):
    """Preferences kept in the signed Flask session cookie of one browser"""

    def __init__(self, session):
        self.session = session

    def get(self, key):
        return self.session.get(key)

    def set(self, key, value):
        self.session.permanent = True
        self.session[key] = value


class JsonPreferenceStore(PreferenceStore):
    """Preferences for one user inside a JSON file shared by all users

    Writes go through a temp file and os.replace so a crash mid-write never
    leaves a truncated file. A file that is unreadable is moved aside rather
    than overwritten, so other users' data can still be recovered.
    """

    _lock = threading.Lock()

    def __init__(self, user_id, path=PREFERENCES_FILE):
        self.user_id = str(user_id)
        self.path = path

    def _quarantine(self, reason):
        backup = f"{self.path}.corrupt-{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}"
        os.replace(self.path, backup)
        logger.error(f"Preferences file {self.path} is corrupt ({reason}), moved to {backup}")

    def _load_all(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self._quarantine(e)
            return {}
        if not isinstance(data, dict):
            self._quarantine(f"expected an object, got {type(data).__name__}")
            return {}
        return data

    def _save_all(self, data):
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.pet_preferences-', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get(self, key):
        with self._lock:
            return self._load_all().get(self.user_id, {}).get(key)

    def set(self, key, value):
        with self._lock:
            data = self._load_all()
            data.setdefault(self.user_id, {})[key] = value
            self._save_all(data)
        logger.info(f"Saved preference {key} for user {self.user_id}")
