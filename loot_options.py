"""
Loot Summary options
--------------------
- Fixed option schema with built-in defaults (OPTIONS_DEFAULTS).
- Values resolve in three tiers: session options → external defaults → built-ins.
- Reads of unknown keys raise InvalidOption; writes to unknown keys are ignored so
  settings saved by older or newer versions keep loading.
- Legacy keys are renamed on bind (RENAMED_OPTIONS).
- bind() can point the registry at a mapping nested inside an externally owned
  settings object (e.g. saved_vars["summaries"]["loot"]); the nested mapping is
  looked up again on every access, so replacing it on the owner side is picked up.
- Option files: YAML with the values under a `loot_summary:` key (or at the top level).
"""

from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Union

import yaml

from loot_catalog import ITEM_QUALITY_MIN, LINK_STYLE_DEFAULT
from loot_errors import InvalidOption

OPTIONS_DEFAULTS: Dict[str, Any] = {
    "enabled": True,
    "minQuality": ITEM_QUALITY_MIN,
    "showIcon": False,
    "iconSize": 90,
    "showTrait": False,
    "showNotCollected": False,
    "combineDuplicates": True,
    "hideSingularQuantities": False,
    "delimiter": " ",
    "linkStyle": LINK_STYLE_DEFAULT,
    "sorted": False,
    "sortedByQuality": False,
    "showCounter": False,
}

RENAMED_OPTIONS: Dict[str, str] = {
    "traits": "showTrait",
    "icons": "showIcon",
}

OPTIONS_FILE_SECTION = "loot_summary"

Root = Union[MutableMapping, Callable[[], MutableMapping]]


def resolve_option(
    key: str,
    options: Optional[MutableMapping],
    defaults: Optional[MutableMapping],
    builtins: Optional[Dict[str, Any]] = None,
) -> Any:
    """First non-None value among options[key], defaults[key] and builtins[key]."""
    if builtins is None:
        builtins = OPTIONS_DEFAULTS
    for layer in (options, defaults, builtins):
        if layer is None:
            continue
        value = layer.get(key)
        if value is not None:
            return value
    return None


def get_child_table(parent: Optional[MutableMapping], path: Sequence[Any], create: bool = False) -> Optional[MutableMapping]:
    child = parent
    for key in path:
        if child is None:
            return None
        nxt = child.get(key)
        if nxt is None and create:
            nxt = {}
            child[key] = nxt
        child = nxt
    return child


class NestedOptions(MutableMapping):
    """Live view of root[path[0]][path[1]]... re-resolved on every access.

    `root` may be the owning mapping or a zero-argument callable returning it.
    Missing containers read as empty and are created on write.
    """

    def __init__(self, root: Root, path: Sequence[Any] = ()) -> None:
        self._root = root
        self.path = tuple(path)

    def _resolve(self, create: bool = False) -> Optional[MutableMapping]:
        root = self._root() if callable(self._root) else self._root
        return get_child_table(root, self.path, create=create)

    def __getitem__(self, key: Any) -> Any:
        child = self._resolve()
        if child is None:
            raise KeyError(key)
        return child[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        child = self._resolve(create=True)
        if child is None:
            raise KeyError(self.path)
        child[key] = value

    def __delitem__(self, key: Any) -> None:
        child = self._resolve()
        if child is None:
            raise KeyError(key)
        del child[key]

    def __iter__(self) -> Iterator[Any]:
        child = self._resolve()
        return iter(list(child.keys()) if child is not None else [])

    def __len__(self) -> int:
        child = self._resolve()
        return len(child) if child is not None else 0

    def __repr__(self) -> str:
        return f"NestedOptions(path={self.path!r}, values={dict(self)!r})"


def migrate_renamed_options(options: MutableMapping, defaults: Optional[MutableMapping] = None) -> None:
    """Move legacy keys to their new names in place.

    Defaults: an old value always replaces the new key.
    Options: an old value only fills the new key when it is unset.
    The old key is removed from both.
    """
    for old, new in RENAMED_OPTIONS.items():
        if defaults is not None and old in defaults:
            if defaults[old] is not None:
                defaults[new] = defaults[old]
            del defaults[old]
        if old in options:
            if options[old] is not None and options.get(new) is None:
                options[new] = options[old]
            del options[old]


class OptionRegistry:
    def __init__(self, options: Optional[Dict[str, Any]] = None) -> None:
        initial: Dict[str, Any] = dict(options or {})
        migrate_renamed_options(initial)
        self.options: MutableMapping = {k: v for k, v in initial.items() if k in OPTIONS_DEFAULTS}
        self.defaults: MutableMapping = {}

    def get(self, key: str) -> Any:
        if key is None or key not in OPTIONS_DEFAULTS:
            raise InvalidOption(f"Option key {key!r} is not valid.")
        return resolve_option(key, self.options, self.defaults)

    def get_default(self, key: str) -> Any:
        if key is None or key not in OPTIONS_DEFAULTS:
            raise InvalidOption(f"Option key {key!r} is not valid.")
        return resolve_option(key, None, self.defaults)

    def set(self, key: str, value: Any) -> None:
        if key in OPTIONS_DEFAULTS:
            self.options[key] = value

    def update(self, values: Dict[str, Any]) -> None:
        values = dict(values)
        migrate_renamed_options(values)
        for key, value in values.items():
            self.set(key, value)

    def bind(self, options_root: Optional[Root], defaults_root: Optional[Root] = None, *path: Any) -> None:
        """Use settings stored at `path` inside externally owned objects.

        Constructor values fill keys the bound options lack, then every remaining
        schema key is seeded from the defaults so the owner's object is complete.
        """
        if options_root is None:
            options_root = {}
        if defaults_root is None:
            defaults_root = {}
        options: MutableMapping
        defaults: MutableMapping
        if path or callable(options_root):
            options = NestedOptions(options_root, path)
        else:
            options = options_root
        if path or callable(defaults_root):
            defaults = NestedOptions(defaults_root, path)
        else:
            defaults = defaults_root

        migrate_renamed_options(options, defaults)

        for field in OPTIONS_DEFAULTS:
            if options.get(field) is None and self.options.get(field) is not None:
                options[field] = self.options[field]
        for field in OPTIONS_DEFAULTS:
            if options.get(field) is None:
                options[field] = resolve_option(field, None, defaults)

        self.options = options
        self.defaults = defaults

    def snapshot(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in OPTIONS_DEFAULTS}


def load_options_file(path: str) -> Dict[str, Any]:
    """Read option values from YAML.

    Expected structure:
      loot_summary:
        sortedByQuality: true
        delimiter: "\\n• "
        minQuality: 2
    """
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError:
        print(f"⚠️ Failed to parse {path}; using built-in defaults.")
        return {}
    if not isinstance(data, dict):
        return {}
    section = data.get(OPTIONS_FILE_SECTION, data)
    if not isinstance(section, dict):
        return {}
    values = dict(section)
    migrate_renamed_options(values)
    return values
