import os
import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union, get_args, get_origin

from pydantic import AnyUrl, BaseModel, SecretStr
from pydantic_settings import BaseSettings


# Union alias used for configuration defaults and overrides
SettingsLike = Union[
    Dict[str, Any],
    List[Union[Dict[str, Any], BaseSettings, BaseModel]],
    BaseSettings,
    BaseModel,
    None,
]


class _AttrView:
    """
    Lightweight attribute-access wrapper around a mapping.

    Enables access like obj.SECTION.KEY for nested dictionaries.
    """

    def __init__(self, data: Dict[str, Any]):
        self._data = data

    def __getattr__(self, name: str):
        if name in self._data:
            value = self._data[name]
            if isinstance(value, dict):
                return _AttrView(value)
            return value
        raise AttributeError(f"No such attribute: {name}")

    def __getitem__(self, key: str):
        value = self._data[key]
        if isinstance(value, dict):
            return _AttrView(value)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __repr__(self) -> str:
        return f"_AttrView({self._data!r})"


class Config(dict):
    """
    Unified configuration container for FinTrack.

    Consolidates configuration from dictionaries and Pydantic models, overlays
    environment variables (``SECTION__KEY``) and masks secret fields.

    Key Features:
    -------------
    - Attr-style and dict-style access to nested keys.
    - Fields typed as `pydantic.SecretStr` are masked; use `get_secret` for the real value.
    - Environment variables override defaults, runtime overrides win over both.

    Example:
        >>> from fintrack.core.settings import FinTrackSettings
        >>> config = Config.load(defaults={"FINTRACK": FinTrackSettings()})
        >>> config.FINTRACK.MONGO_DB
        'fintrack'
        >>> config.get_secret("FINTRACK", "JWT_SECRET")
        'dev-secret-key'
    """

    MASK = "********"

    def __init__(self, extra_settings: SettingsLike = None, *, apply_env: bool = True):
        self._secret_paths: set[Tuple[str, ...]] = set()
        self._secrets: Dict[Tuple[str, ...], str] = {}
        self._section_models: Dict[Tuple[str, ...], type[BaseModel]] = {}

        merged: Dict[str, Any] = {}
        for item in self._normalize(extra_settings):
            merged = self._deep_update(merged, item)

        if apply_env:
            merged = self._apply_env_overrides(merged, typed_sections=self._section_models)
            merged = self._validate_sections(merged)

        super().__init__(self._mask_secrets(merged))

    def __getattr__(self, name: str):
        """Enable attribute-style access for top-level keys."""
        if name in self:
            value = self[name]
            if isinstance(value, dict):
                return _AttrView(value)
            return value
        raise AttributeError(f"No such attribute: {name}")

    @classmethod
    def load(
        cls,
        *,
        defaults: SettingsLike = None,
        overrides: SettingsLike = None,
    ) -> "Config":
        """Create a Config from defaults, environment variables and runtime overrides (in that precedence order)."""
        config = cls.__new__(cls)
        config._secret_paths = set()
        config._secrets = {}
        config._section_models = {}

        base: Dict[str, Any] = {}
        for item in config._normalize(defaults):
            base = cls._deep_update(base, item)
        base = cls._apply_env_overrides(base, typed_sections=config._section_models)
        for item in config._normalize(overrides):
            base = cls._deep_update(base, item)
        base = config._validate_sections(base)

        dict.__init__(config, config._mask_secrets(base))
        return config

    @classmethod
    def load_json(cls, path: str | Path, *, defaults: SettingsLike = None) -> "Config":
        """Load overrides from a JSON file on top of the given defaults."""
        with open(path, "r") as f:
            return cls.load(defaults=defaults, overrides=json.load(f))

    def get_secret(self, *path: str) -> Optional[str]:
        """Retrieve a secret by path components, e.g. get_secret("FINTRACK", "JWT_SECRET")."""
        return self._secrets.get(tuple(path))

    def secret_paths(self) -> List[str]:
        """Return dotted paths of fields considered secrets."""
        return sorted(".".join(p) for p in self._secret_paths)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize(self, settings: SettingsLike) -> List[Dict[str, Any]]:
        if settings is None:
            return []
        if not isinstance(settings, list):
            settings = [settings]
        items: List[Dict[str, Any]] = []
        for item in settings:
            if isinstance(item, (BaseSettings, BaseModel)):
                self._secret_paths.update(self._collect_secret_paths(type(item)))
                items.append(item.model_dump())
            elif isinstance(item, dict):
                self._collect_nested_secret_paths(item, ())
                items.append(self._dump_nested(item))
        return items

    def _collect_nested_secret_paths(self, data: Dict[str, Any], prefix: Tuple[str, ...]) -> None:
        for key, value in data.items():
            if isinstance(value, (BaseSettings, BaseModel)):
                self._section_models[prefix + (key,)] = type(value)
                self._secret_paths.update(self._collect_secret_paths(type(value), prefix + (key,)))
            elif isinstance(value, SecretStr):
                self._secret_paths.add(prefix + (key,))
            elif isinstance(value, dict):
                self._collect_nested_secret_paths(value, prefix + (key,))

    @staticmethod
    def _dump_nested(data: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, (BaseSettings, BaseModel)):
                result[key] = value.model_dump()
            elif isinstance(value, dict):
                result[key] = Config._dump_nested(value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _deep_update(base: dict, override: dict) -> dict:
        """Recursively update nested dictionaries."""
        for k, v in (override or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                base[k] = Config._deep_update(base.get(k, {}), v)
            else:
                base[k] = v
        return base

    @staticmethod
    def _apply_env_overrides(
        base: dict,
        delimiter: str = "__",
        typed_sections: Iterable[Tuple[str, ...]] = (),
    ) -> dict:
        """Overlay ``SECTION__KEY`` variables.

        Values under a section backed by a settings model stay strings (JSON
        lists and objects are decoded) so that ``_validate_sections`` can
        coerce them to the declared field types.
        """
        result = deepcopy(base)
        typed_sections = list(typed_sections)

        for env_key, env_value in os.environ.items():
            if delimiter not in env_key:
                continue
            parts = [p.strip().upper() for p in env_key.split(delimiter) if p.strip()]
            # Only overlay sections that are declared in the defaults
            if len(parts) < 2 or parts[0] not in result:
                continue
            node = result
            for key in parts[:-1]:
                if key not in node or not isinstance(node[key], dict):
                    node[key] = {}
                node = node[key]
            if any(tuple(parts[: len(section)]) == section for section in typed_sections):
                node[parts[-1]] = Config._decode_env_value(env_value)
            else:
                node[parts[-1]] = Config._coerce_env_value(env_value)

        return result

    @staticmethod
    def _decode_env_value(value: str) -> Any:
        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value

    @staticmethod
    def _coerce_env_value(value: str) -> Any:
        decoded = Config._decode_env_value(value)
        if decoded is not value:
            return decoded
        lower = value.lower()
        if lower in {"true", "false"}:
            return lower == "true"
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        try:
            return float(value)
        except ValueError:
            return value

    def _validate_sections(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Run every model-backed section through its model so values keep their declared types."""
        for path, model_cls in self._section_models.items():
            node: Any = data
            for key in path[:-1]:
                node = node.get(key) if isinstance(node, dict) else None
            if not isinstance(node, dict) or not isinstance(node.get(path[-1]), dict):
                continue
            section = node[path[-1]]
            section.update(model_cls.model_validate(section).model_dump())
        return data

    def _mask_secrets(self, data: Dict[str, Any]) -> Dict[str, Any]:
        def convert(v: Any, path: Tuple[str, ...]) -> Any:
            if isinstance(v, SecretStr):
                self._secrets[path] = v.get_secret_value()
                return self.MASK
            if isinstance(v, AnyUrl):
                v = str(v)
            if isinstance(v, dict):
                return {k: convert(x, path + (k,)) for k, x in v.items()}
            if path in self._secret_paths:
                self._secrets[path] = str(v)
                return self.MASK
            if isinstance(v, str) and v.startswith("~"):
                return os.path.expanduser(v)
            return v

        return convert(data, ())

    def _collect_secret_paths(
        self, model_cls: type[BaseModel], prefix: Tuple[str, ...] = ()
    ) -> set[Tuple[str, ...]]:
        paths: set[Tuple[str, ...]] = set()
        for name, field in getattr(model_cls, "__pydantic_fields__", {}).items():
            ann = getattr(field, "annotation", None)
            if self._is_secret_annotation(ann):
                paths.add(prefix + (name,))
            elif isinstance(ann, type) and issubclass(ann, BaseModel):
                paths.update(self._collect_secret_paths(ann, prefix + (name,)))
        return paths

    @staticmethod
    def _is_secret_annotation(ann: Any) -> bool:
        if ann is SecretStr:
            return True
        if get_origin(ann) is Union:
            return any(a is SecretStr for a in get_args(ann))
        return False
