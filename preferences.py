"""Theme preference store.

Kept apart from question generation: a JSON file of user preferences with
explicit get/set, and a small Flask app exposing it to the frontend. `app.py`
mounts it under /prefs.
"""
import os
import json
import logging
import threading
from flask import Flask, request, jsonify
from flask_cors import CORS
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger("questly")

PREFS_FILE = os.getenv("QUESTLY_PREFS_FILE", "preferences.json")
THEMES = ("light", "dark")
DEFAULTS = {"theme": "light"}


class PreferenceStore:
    def __init__(self, path=PREFS_FILE):
        self.path = path
        self._lock = threading.Lock()

    def _load(self):
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r") as f:
            try:
                data = json.load(f)
            except ValueError:
                logger.warning("Ignoring unreadable preferences file %s", self.path)
                return {}
        return data if isinstance(data, dict) else {}

    def get(self, key, default=None):
        with self._lock:
            return self._load().get(key, DEFAULTS.get(key, default))

    def set(self, key, value):
        with self._lock:
            data = self._load()
            data[key] = value
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
        return value


def create_app(store=None):
    app = Flask(__name__)
    CORS(app)
    app.config["PREFERENCE_STORE"] = store or PreferenceStore()

    @app.route("/api/preferences", methods=["GET"])
    def get_preferences():
        prefs = app.config["PREFERENCE_STORE"]
        return jsonify({"theme": prefs.get("theme")})

    @app.route("/api/preferences", methods=["POST"])
    def set_preferences():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON body"}), 400
        theme = str(data.get("theme") or "").strip().lower()
        if theme not in THEMES:
            return jsonify({"error": "theme must be one of light, dark"}), 400
        prefs = app.config["PREFERENCE_STORE"]
        return jsonify({"theme": prefs.set("theme", theme)})

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 5001)), debug=True)
