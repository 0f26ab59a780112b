import os
import yaml
import keyring
from keyring.errors import PasswordDeleteError

from settings_schema import SettingsSchema, validate_settings

ENV_OVERRIDES = {
    "WORKOUT_API_URL": "api_url",
    "WORKOUT_API_TOKEN": "api_token",
    "WORKOUT_LOG_LEVEL": "log_level",
}


class YamlConfig:
    """Settings file for the workout session tools.

    With ``ENCRYPT_SETTINGS=1`` the API token lives in the system keyring and
    the YAML file only records that a token is set.
    """

    SENSITIVE_KEYS = {"api_token"}
    SERVICE = "workout-session"

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def load(self) -> dict:
        data = self._read()
        if not self.encrypt:
            return data
        for key in self.SENSITIVE_KEYS & data.keys():
            secret = keyring.get_password(self.SERVICE, key)
            if secret is None:
                del data[key]
            else:
                data[key] = secret
        return data

    def save(self, data: dict) -> SettingsSchema:
        """Validate and write ``data``; returns the validated settings."""
        settings = validate_settings(data)
        out = {k: v for k, v in data.items() if v is not None}
        if self.encrypt:
            for key in self.SENSITIVE_KEYS:
                if key in out:
                    keyring.set_password(self.SERVICE, key, str(out[key]))
                    out[key] = True
                else:
                    self._forget(key)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f, sort_keys=True)
        return settings

    def update(self, **changes) -> SettingsSchema:
        data = self.load()
        data.update(changes)
        return self.save(data)

    def _forget(self, key: str) -> None:
        try:
            keyring.delete_password(self.SERVICE, key)
        except PasswordDeleteError:
            pass


def load_settings(path: str = "settings.yaml") -> SettingsSchema:
    """Return validated settings; environment variables override the file."""
    data = YamlConfig(path).load()
    for env, key in ENV_OVERRIDES.items():
        if os.environ.get(env):
            data[key] = os.environ[env]
    return validate_settings(data)
