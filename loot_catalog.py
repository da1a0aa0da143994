"""
Loot Catalog
------------
Item and currency metadata used to format summaries.

- Item links follow the chat link markup:  |H<style>:item:<id>:...|h<text>|h
- Icons follow the texture markup:          |t<w>:<h>:<path>|t
- ItemCatalog reads a JSON or YAML document:

    items:
      "54172": { name: "Iron Ingot^p", quality: 1, icon: "/esoui/art/icons/crafting_ore_base_iron_r3.dds" }
      "147521": { name: "Ring of the Pariah", quality: 4, icon: "...", trait: 23, trait_name: "Arcane",
                  equip_type: 12, set_collection_piece: true, collection_unlocked: false }
    currencies:
      "1": { name: "Gold", plural_name: "Gold", icon: "EsoUI/Art/currency/currency_gold.dds" }
    bags:
      "1": { "3": { item_id: 54172, stack: 20, max_stack: 200 } }

- Remote catalogs are fetched with retry + backoff and cached under cache/catalogs/.
"""

import hashlib
import json
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple

import requests
import yaml

# ---------------- Constants ----------------
ITEM_QUALITY_TRASH = 0
ITEM_QUALITY_NORMAL = 1
ITEM_QUALITY_FINE = 2
ITEM_QUALITY_SUPERIOR = 3
ITEM_QUALITY_EPIC = 4
ITEM_QUALITY_LEGENDARY = 5
ITEM_QUALITY_MIN = ITEM_QUALITY_TRASH
ITEM_QUALITY_MAX = ITEM_QUALITY_LEGENDARY

ITEM_QUALITY_NAMES = {
    ITEM_QUALITY_TRASH: "Trash",
    ITEM_QUALITY_NORMAL: "Normal",
    ITEM_QUALITY_FINE: "Fine",
    ITEM_QUALITY_SUPERIOR: "Superior",
    ITEM_QUALITY_EPIC: "Epic",
    ITEM_QUALITY_LEGENDARY: "Legendary",
}
ITEM_QUALITY_COLORS = {
    ITEM_QUALITY_TRASH: "C3C3C3",
    ITEM_QUALITY_NORMAL: "FFFFFF",
    ITEM_QUALITY_FINE: "2DC50E",
    ITEM_QUALITY_SUPERIOR: "3A92FF",
    ITEM_QUALITY_EPIC: "A02EF7",
    ITEM_QUALITY_LEGENDARY: "EECA2A",
}

LINK_STYLE_DEFAULT = 0
LINK_STYLE_BRACKETS = 1

EQUIP_TYPE_INVALID = 0

LINK_FORMAT = "|H{style}:item:{item_id}:1:1:0:0:0:0:0:0:0:0:0:0:0:0:0:0:0:0:0:0|h|h"
COLLECTION_ICON = "EsoUI/Art/treeicons/gamepad/achievement_categoryicon_collections.dds"
CURRENCY_ICON_SIZE = 16

CURT_MONEY = 1
CURT_ALLIANCE_POINTS = 2
CURT_TELVAR_STONES = 3
CURT_WRIT_VOUCHERS = 4

CURRENCY_DEFAULTS: Dict[int, Dict[str, str]] = {
    CURT_MONEY: {"name": "Gold", "plural_name": "Gold", "icon": "EsoUI/Art/currency/currency_gold.dds"},
    CURT_ALLIANCE_POINTS: {"name": "Alliance Point", "plural_name": "Alliance Points", "icon": "EsoUI/Art/currency/alliancePoints.dds"},
    CURT_TELVAR_STONES: {"name": "Tel Var Stone", "plural_name": "Tel Var Stones", "icon": "EsoUI/Art/currency/currency_telvar.dds"},
    CURT_WRIT_VOUCHERS: {"name": "Writ Voucher", "plural_name": "Writ Vouchers", "icon": "EsoUI/Art/currency/currency_writvoucher.dds"},
}

CACHE_DIR = Path("cache")
CACHE_CATALOGS_DIR = CACHE_DIR / "catalogs"

_LINK_RE = re.compile(r"\|H(\d+):item:(\d+)[^|]*\|h([^|]*)\|h")
_LINK_STYLE_RE = re.compile(r"\|H[0-1]:")
_ICON_RE = re.compile(r"\|t[^|]*\|t")
_COLOR_RE = re.compile(r"\|c[0-9A-Fa-f]{6}|\|r")
_GRAMMAR_SUFFIX_RE = re.compile(r"\^[A-Za-z,]+$")


# ---------------- Models ----------------
@dataclass
class ItemInfo:
    name: str
    quality: int = ITEM_QUALITY_NORMAL
    icon: str = ""
    trait: int = 0
    trait_name: str = ""
    equip_type: int = EQUIP_TYPE_INVALID
    set_collection_piece: bool = False
    collection_unlocked: bool = True

    @property
    def not_collected(self) -> bool:
        return self.set_collection_piece and not self.collection_unlocked


@dataclass
class CurrencyInfo:
    name: str
    plural_name: str = ""
    icon: str = ""

    def display_name(self, singular: bool) -> str:
        if singular or not self.plural_name:
            return self.name
        return self.plural_name


class ItemLookup(Protocol):
    def item_info(self, link: Any) -> ItemInfo: ...

    def currency_info(self, currency_type: Any) -> CurrencyInfo: ...

    def slot_link(self, bag_id: Any, slot_index: Any, link_style: int = LINK_STYLE_DEFAULT) -> str: ...

    def slot_stack_size(self, bag_id: Any, slot_index: Any) -> Tuple[int, int]: ...


# ---------------- Markup helpers ----------------
def make_item_link(item_id, link_style: int = LINK_STYLE_DEFAULT) -> str:
    return LINK_FORMAT.format(style=link_style, item_id=item_id)


def restyle_link(link: str, link_style: int) -> str:
    return _LINK_STYLE_RE.sub(f"|H{link_style}:", link)


def parse_item_id(link: Any) -> Optional[str]:
    m = _LINK_RE.search(str(link))
    return m.group(2) if m else None


def icon_format(path: str, width: str, height: str) -> str:
    return f"|t{width}:{height}:{path}|t"


def icon_format_inherit_color(path: str, width: str, height: str) -> str:
    return f"|t{width}:{height}:{path}:inheritcolor|t"


def colorize(text: str, hex_color: str) -> str:
    return f"|c{hex_color}{text}|r"


def format_item_name(raw_name: str) -> str:
    """Strip grammar suffixes such as '^p' or '^n,m' from a raw item name."""
    return _GRAMMAR_SUFFIX_RE.sub("", raw_name or "").strip()


def quality_name(quality: int) -> str:
    return ITEM_QUALITY_NAMES.get(quality, str(quality))


def render_plain(text: str, lookup: Optional["ItemLookup"] = None) -> str:
    """Render chat markup as plain text: links become [Name] or Name, icons and colours are dropped."""

    def _link(m: "re.Match") -> str:
        style, shown = int(m.group(1)), m.group(3)
        name = shown
        if not name and lookup is not None:
            name = format_item_name(lookup.item_info(m.group(0)).name)
        name = name or f"item:{m.group(2)}"
        return f"[{name}]" if style == LINK_STYLE_BRACKETS else name

    text = _LINK_RE.sub(_link, text)
    text = _ICON_RE.sub("", text)
    return _COLOR_RE.sub("", text)


# ---------------- Fetch helpers ----------------
def backoff_sleep(attempt: int) -> None:
    time.sleep(min(2 ** attempt, 10))


def api_get(url: str, headers: Optional[Dict[str, str]] = None) -> Optional[requests.Response]:
    for attempt in range(5):
        r = requests.get(url, headers=headers or {}, timeout=15)
        if r.status_code == 200:
            return r
        if r.status_code == 404:
            return None
        if r.status_code in (429, 500, 502, 503, 504):
            backoff_sleep(attempt)
            continue
        r.raise_for_status()
    return None


def _read_cache(path: Path) -> Optional[Dict[str, Any]]:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return None


def _write_cache(path: Path, data: Dict[str, Any]) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
    except OSError:
        print(f"⚠️ Could not write catalog cache {path}")


def _parse_document(text: str, name: str) -> Dict[str, Any]:
    if name.lower().endswith((".yaml", ".yml")):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Catalog {name} must contain a mapping at the top level")
    return data


# ---------------- Catalog ----------------
class ItemCatalog:
    """ItemLookup backed by plain dictionaries."""

    def __init__(
        self,
        items: Optional[Dict[str, ItemInfo]] = None,
        currencies: Optional[Dict[Any, CurrencyInfo]] = None,
        bags: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None,
    ) -> None:
        self.items: Dict[str, ItemInfo] = dict(items or {})
        self.currencies: Dict[Any, CurrencyInfo] = {
            k: CurrencyInfo(**v) for k, v in CURRENCY_DEFAULTS.items()
        }
        self.currencies.update(currencies or {})
        self.bags = bags or {}

    # ---- construction ----
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemCatalog":
        items: Dict[str, ItemInfo] = {}
        for key, row in (data.get("items") or {}).items():
            if not isinstance(row, dict):
                continue
            items[str(key)] = ItemInfo(
                name=str(row.get("name", key)),
                quality=int(row.get("quality", ITEM_QUALITY_NORMAL)),
                icon=str(row.get("icon", "")),
                trait=int(row.get("trait", 0) or 0),
                trait_name=str(row.get("trait_name", "")),
                equip_type=int(row.get("equip_type", EQUIP_TYPE_INVALID) or 0),
                set_collection_piece=bool(row.get("set_collection_piece", False)),
                collection_unlocked=bool(row.get("collection_unlocked", True)),
            )
        currencies: Dict[Any, CurrencyInfo] = {}
        for key, row in (data.get("currencies") or {}).items():
            if not isinstance(row, dict):
                continue
            ctype = int(key) if str(key).isdigit() else str(key)
            currencies[ctype] = CurrencyInfo(
                name=str(row.get("name", key)),
                plural_name=str(row.get("plural_name", "")),
                icon=str(row.get("icon", "")),
            )
        bags: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for bag_id, slots in (data.get("bags") or {}).items():
            if isinstance(slots, dict):
                bags[str(bag_id)] = {str(s): dict(v) for s, v in slots.items() if isinstance(v, dict)}
        return cls(items=items, currencies=currencies, bags=bags)

    @classmethod
    def from_file(cls, path: str) -> "ItemCatalog":
        p = Path(path)
        return cls.from_dict(_parse_document(p.read_text(encoding="utf-8"), p.name))

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        use_cache: bool = True,
        refresh_cache: bool = False,
    ) -> "ItemCatalog":
        cache_path = CACHE_CATALOGS_DIR / f"{hashlib.sha256(url.encode('utf-8')).hexdigest()[:16]}.json"
        if use_cache and not refresh_cache:
            cached = _read_cache(cache_path)
            if cached:
                return cls.from_dict(cached)
        resp = api_get(url)
        if resp is None:
            raise ValueError(f"Catalog not found: {url}")
        data = _parse_document(resp.text, url.split("?", 1)[0])
        if use_cache:
            _write_cache(cache_path, data)
        return cls.from_dict(data)

    # ---- ItemLookup ----
    def item_info(self, link: Any) -> ItemInfo:
        item_id = parse_item_id(link)
        key = item_id if item_id is not None else str(link)
        info = self.items.get(key)
        if info is None:
            return ItemInfo(name=key, quality=ITEM_QUALITY_MIN)
        return info

    def currency_info(self, currency_type: Any) -> CurrencyInfo:
        info = self.currencies.get(currency_type)
        if info is None:
            return CurrencyInfo(name=str(currency_type))
        return info

    def slot_link(self, bag_id: Any, slot_index: Any, link_style: int = LINK_STYLE_DEFAULT) -> str:
        slot = self.bags.get(str(bag_id), {}).get(str(slot_index))
        if not slot:
            return ""
        if slot.get("link"):
            return restyle_link(str(slot["link"]), link_style)
        return make_item_link(slot.get("item_id", 0), link_style)

    def slot_stack_size(self, bag_id: Any, slot_index: Any) -> Tuple[int, int]:
        slot = self.bags.get(str(bag_id), {}).get(str(slot_index)) or {}
        stack = int(slot.get("stack", 0) or 0)
        return stack, int(slot.get("max_stack", stack) or stack)
