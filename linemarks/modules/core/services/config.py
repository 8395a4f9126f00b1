"""ConfigService — namespaced config backed by a JSON file.

Defaults come from each module's ``module.yaml``; overrides are stored in a
flat JSON object keyed by ``"<module>.<field>"``.

Access control:
  - Read own keys: always OK
  - Read other module's public keys: OK
  - Read other module's private keys: ConfigAccessError
  - Write own keys: OK
  - Write other module's keys: ConfigAccessError
"""

import json
import logging
import os

from linemarks.framework.service_base import ServiceBase

log = logging.getLogger("linemarks.config")

ENV_OVERRIDES = "LINEMARKS_SET_CONFIG"


def default_config_path():
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config")
    return os.path.join(base, "linemarks", "linemarks.json")


class ConfigAccessError(Exception):
    """Raised when a module tries to access a private config key."""


class ConfigService(ServiceBase):
    name = "config"

    def __init__(self, config_path=None):
        self._config_path = config_path or default_config_path()
        self._defaults = {}   # "module.key" -> default_value
        self._manifest = {}   # "module.key" -> field schema
        self._module_names = set()
        self._events = None   # EventBus, set after init

    def set_events(self, events):
        """Wire the event bus (called during bootstrap after events service)."""
        self._events = events

    def set_manifest(self, manifest):
        """Load config schemas from the module manifests.

        Args:
            manifest: dict of {module_name: module_dict} from module.yaml.
        """
        self._module_names = set(manifest.keys())

        for mod_name, mod_data in manifest.items():
            for field_name, schema in (mod_data.get("config") or {}).items():
                full_key = f"{mod_name}.{field_name}"
                self._defaults[full_key] = schema.get("default")
                self._manifest[full_key] = schema

        self._apply_env_overrides()

    def register_default(self, key, default):
        """Register a single default value."""
        self._defaults[key] = default

    # ── Read/Write ────────────────────────────────────────────────────

    def get(self, key, caller_module=None):
        """Get a config value from the JSON file, fallback to defaults."""
        self._check_read_access(key, caller_module)
        data = self._load()
        if key in data:
            return data[key]
        return self._defaults.get(key)

    def get_dict(self):
        """Return all config values as a flat dict (no access control)."""
        result = dict(self._defaults)
        result.update(self._load())
        return result

    def set(self, key, value, caller_module=None):
        """Persist a config value and emit config:changed."""
        self._check_write_access(key, caller_module)
        old_value = self.get(key)
        data = self._load()
        data[key] = value
        self._save(data)

        if self._events and value != old_value:
            self._events.emit(
                "config:changed", key=key, value=value, old_value=old_value
            )

    def remove(self, key, caller_module=None):
        """Reset a config key to its default."""
        self._check_write_access(key, caller_module)
        old_value = self.get(key)
        data = self._load()
        if key not in data:
            return
        del data[key]
        self._save(data)
        value = self._defaults.get(key)
        if self._events and value != old_value:
            self._events.emit(
                "config:changed", key=key, value=value, old_value=old_value
            )

    # ── Access control ────────────────────────────────────────────────

    def _check_read_access(self, key, caller_module):
        if caller_module is None:
            return
        if "." not in key:
            return
        module, _ = self._parse_key(key)
        if module == caller_module:
            return
        schema = self._manifest.get(key, {})
        if not schema.get("public", False):
            raise ConfigAccessError(
                f"Module '{caller_module}' cannot read private config '{key}'"
            )

    def _check_write_access(self, key, caller_module):
        if caller_module is None:
            return
        if "." not in key:
            return
        module, _ = self._parse_key(key)
        if module != caller_module:
            raise ConfigAccessError(
                f"Module '{caller_module}' cannot write to '{key}'"
            )

    # ── Environment overrides ────────────────────────────────────────

    def _apply_env_overrides(self):
        """Apply config overrides from the LINEMARKS_SET_CONFIG env var.

        Format: "key=value,key=value,..."
        Values are coerced to the type declared in the module schema.
        Overrides are written to the config file.
        """
        raw = os.environ.get(ENV_OVERRIDES, "").strip()
        if not raw:
            return

        data = self._load()
        count = 0
        for pair in raw.split(","):
            pair = pair.strip()
            if "=" not in pair:
                continue
            key, raw_value = pair.split("=", 1)
            key = key.strip()
            value = self._coerce_value(key, raw_value.strip())
            data[key] = value
            count += 1
            log.info("Config override: %s = %r", key, value)

        if count:
            self._save(data)
            log.info("Applied %d config override(s) from %s",
                     count, ENV_OVERRIDES)

    def _coerce_value(self, key, raw):
        """Coerce a string value to the type declared in the manifest schema."""
        schema = self._manifest.get(key, {})
        declared_type = schema.get("type", "string")

        if declared_type == "boolean":
            return raw.lower() in ("true", "1", "yes", "on")
        if declared_type == "int":
            try:
                return int(raw)
            except ValueError:
                return raw
        if declared_type == "float":
            try:
                return float(raw)
            except ValueError:
                return raw
        return raw

    # ── Key parsing ────────────────────────────────────────────────────

    def _parse_key(self, key):
        """Split a full key into (module_name, field_name).

        Longest-prefix match against known module names, so a nested module
        name containing dots still splits correctly. Falls back to a simple
        first-dot split if no module names are known.
        """
        if self._module_names:
            parts = key.split(".")
            for i in range(len(parts) - 1, 0, -1):
                candidate = ".".join(parts[:i])
                if candidate in self._module_names:
                    return candidate, ".".join(parts[i:])
        return key.split(".", 1)

    # ── File I/O ──────────────────────────────────────────────────────

    def _load(self):
        if not os.path.isfile(self._config_path):
            return {}
        try:
            with open(self._config_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            log.exception("Failed to read config file: %s", self._config_path)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring non-object config file: %s", self._config_path)
            return {}
        return data

    def _save(self, data):
        directory = os.path.dirname(self._config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        log.debug("Config saved: %s (%d keys)", self._config_path, len(data))

    # ── Module proxy factory ──────────────────────────────────────────

    def proxy_for(self, module_name):
        """Create a ModuleConfigProxy scoped to *module_name*."""
        return ModuleConfigProxy(self, module_name)


class ModuleConfigProxy:
    """Scoped config access for a single module.

    ``get("wrap_navigation")`` (no dot) is auto-prefixed with the module
    name -> ``"bookmarks.wrap_navigation"``.

    Cross-module reads require the full key: ``get("core.log_level")``.
    """

    __slots__ = ("_config", "_module")

    def __init__(self, config_service, module_name):
        self._config = config_service
        self._module = module_name

    def get(self, key, default=None):
        if "." not in key:
            key = f"{self._module}.{key}"
        val = self._config.get(key, caller_module=self._module)
        return val if val is not None else default

    def set(self, key, value):
        if "." not in key:
            key = f"{self._module}.{key}"
        self._config.set(key, value, caller_module=self._module)

    def remove(self, key):
        if "." not in key:
            key = f"{self._module}.{key}"
        self._config.remove(key, caller_module=self._module)
