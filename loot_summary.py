"""
Loot Summary
------------
Collects item and currency additions and prints them as chat-sized summary lines.

- Entries are keyed by item link / currency type and keep first-seen order.
- combineDuplicates adds repeated quantities together; otherwise each addition
  becomes its own entry in the output ("Iron Ingot x5 Iron Ingot x3").
- Output pipeline: items (sorted, quality-filtered, formatted) → currencies →
  optional counter text → greedy line packing → chat sink → reset.
- Line packing counts code points, except that icon markup is counted as
  2 characters per icon when the sink renders icons compactly.

Usage:
    summary = LootSummary({"sortedByQuality": True}, prefix="Loot: ", lookup=ItemCatalog.from_file("catalog.yaml"))
    summary.add_item_id(54172, 5)
    summary.add_currency(CURT_MONEY, 1200)
    summary.print()
"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from loot_catalog import (
    COLLECTION_ICON,
    CURRENCY_ICON_SIZE,
    EQUIP_TYPE_INVALID,
    ItemCatalog,
    ItemLookup,
    format_item_name,
    icon_format,
    icon_format_inherit_color,
    make_item_link,
    restyle_link,
)
from loot_errors import EmptySummary, InconsistentState, InvalidArgument
from loot_options import OptionRegistry
from loot_strings import format_counter, format_quantity

# Width an icon takes up in chat, whatever its markup length
ICON_CHAT_LINK_LENGTH = 2
# Chat input limit of the default chat window
DEFAULT_MAX_CHARS_PER_LINE = 350
# Used when a sink reports no capacity
FALLBACK_MAX_CHARS_PER_LINE = 1200

Token = Tuple[str, int]


def display_length(text: str) -> int:
    return len(text)


def check_quantity(quantity: Any, allow_zero: bool = False) -> None:
    ok = (
        isinstance(quantity, numbers.Real)
        and not isinstance(quantity, bool)
        and not math.isnan(quantity)
        and (quantity >= 0 if allow_zero else quantity > 0)
    )
    if not ok:
        kind = "non-negative" if allow_zero else "positive"
        raise InvalidArgument(f"quantity must be a {kind} number, got {quantity!r}")


# ---------- Entry store ----------
class EntryStore:
    """Quantities per key, in first-seen key order."""

    def __init__(self, allow_zero: bool = False) -> None:
        self.allow_zero = allow_zero
        self.entries: Dict[Any, List[float]] = {}
        self.keys: List[Any] = []

    def add(self, key: Any, quantity: float, combine: bool = True) -> None:
        if key is None:
            raise InvalidArgument("key must not be None")
        check_quantity(quantity, allow_zero=self.allow_zero)
        quantities = self.entries.get(key)
        if quantities is None:
            self.entries[key] = [quantity]
            self.keys.append(key)
        elif combine:
            quantities[0] = quantities[0] + quantity
        else:
            quantities.append(quantity)

    def quantities(self, key: Any) -> Optional[List[float]]:
        return self.entries.get(key)

    def reset(self) -> None:
        self.entries.clear()
        self.keys.clear()

    def __len__(self) -> int:
        return len(self.keys)

    def __contains__(self, key: Any) -> bool:
        return key in self.entries


# ---------- Line packing ----------
@dataclass
class LinePacker:
    max_length: int
    delimiter: str = " "
    lines: List[str] = field(default_factory=list)
    current: str = ""
    width: int = 0  # display width of `current`

    @property
    def has_output(self) -> bool:
        return bool(self.lines) or bool(self.current)

    def append(self, text: str, icon_length: int = 0) -> None:
        """Add a token, starting a new line when it would push the current one past max_length.

        A token is never split; one wider than max_length goes on a line of its own.
        A delimiter starting with a newline is written even before the first token.
        """
        text_width = display_length(text)
        if icon_length > 0:
            text_width = text_width - icon_length + ICON_CHAT_LINK_LENGTH
        projected = self.width + display_length(self.delimiter) + text_width
        if projected > self.max_length and self.current:
            self.lines.append(self.current)
            self.current, self.width = text, text_width
        elif self.current or self.delimiter.startswith("\n"):
            self.current = self.current + self.delimiter + text
            self.width = projected
        else:
            self.current, self.width = text, text_width

    def finish(self) -> List[str]:
        if self.current:
            self.lines.append(self.current)
            self.current, self.width = "", 0
        return list(self.lines)


# ---------- Sorting ----------
def sort_item_keys(
    keys: Iterable[Any],
    lookup: ItemLookup,
    by_quality: bool = False,
    by_name: bool = False,
) -> List[Any]:
    keys = list(keys)
    if not (by_quality or by_name):
        return keys
    infos = {k: lookup.item_info(k) for k in keys}
    if by_quality:
        return sorted(keys, key=lambda k: (-infos[k].quality, format_item_name(infos[k].name)))
    return sorted(keys, key=lambda k: format_item_name(infos[k].name))


def sort_currency_keys(keys: Iterable[Any], lookup: ItemLookup, by_name: bool = False) -> List[Any]:
    keys = list(keys)
    if not by_name:
        return keys
    return sorted(keys, key=lambda k: lookup.currency_info(k).name)


# ---------- Formatting ----------
def _icon_adjustment(icons: List[str], compress_icons: bool) -> int:
    # Packer adds ICON_CHAT_LINK_LENGTH once; count the other icons here
    if not compress_icons or not icons:
        return 0
    return sum(display_length(i) for i in icons) - ICON_CHAT_LINK_LENGTH * (len(icons) - 1)


def format_item(
    key: Any,
    quantities: Optional[List[float]],
    lookup: ItemLookup,
    get_option: Callable[[str], Any],
    compress_icons: bool = False,
) -> List[Token]:
    """(text, icon_length) per quantity of one item; empty when below minQuality."""
    info = lookup.item_info(key)
    if info.quality < get_option("minQuality"):
        return []
    if quantities is None:
        raise InconsistentState(f"item list missing quantities for {key}")

    icon_size = f"{get_option('iconSize')}%"
    tokens: List[Token] = []
    for quantity in quantities:
        text = str(key)
        icons: List[str] = []
        if get_option("showNotCollected") and info.not_collected:
            icon = icon_format_inherit_color(COLLECTION_ICON, icon_size, icon_size)
            icons.append(icon)
            text = text + icon
        if get_option("showTrait") and info.equip_type != EQUIP_TYPE_INVALID and info.trait and info.trait > 0:
            text = f"{text} ({info.trait_name or info.trait})"
        if not get_option("hideSingularQuantities") or quantity != 1:
            text = f"{text} {format_quantity(quantity)}"
        if get_option("showIcon") and info.icon:
            icon = icon_format(info.icon, icon_size, icon_size)
            icons.append(icon)
            text = icon + text
        tokens.append((text, _icon_adjustment(icons, compress_icons)))
    return tokens


def format_currency(
    currency_type: Any,
    quantities: Optional[List[float]],
    lookup: ItemLookup,
    get_option: Callable[[str], Any],
    compress_icons: bool = False,
) -> List[Token]:
    info = lookup.currency_info(currency_type)
    if quantities is None:
        raise InconsistentState(f"currency list missing quantities for {info.name}")

    tokens: List[Token] = []
    for quantity in quantities:
        count = format_quantity(quantity) if quantity > 0 else "0"
        text = f"{info.display_name(quantity == 1)} {count}"
        icons: List[str] = []
        if get_option("showIcon") and info.icon:
            size = str(CURRENCY_ICON_SIZE)
            icon = icon_format(info.icon, size, size)
            icons.append(icon)
            text = icon + text
        tokens.append((text, _icon_adjustment(icons, compress_icons)))
    return tokens


# ---------- Chat sinks ----------
class DefaultChat:
    """Plain console output limited to the chat input length; icons are not compacted."""

    max_chars_per_line = DEFAULT_MAX_CHARS_PER_LINE
    supports_icon_compression = False
    is_default = True

    def print(self, message: str) -> None:
        print(message)


@dataclass
class ChatBuffer:
    """Sink that keeps printed lines in memory."""

    max_chars_per_line: int = FALLBACK_MAX_CHARS_PER_LINE
    supports_icon_compression: bool = True
    lines: List[str] = field(default_factory=list)

    def print(self, message: str) -> None:
        self.lines.append(message)


def is_valid_chat(chat: Any) -> bool:
    capacity = getattr(chat, "max_chars_per_line", None)
    return (
        callable(getattr(chat, "print", None))
        and isinstance(capacity, int)
        and not isinstance(capacity, bool)
        and capacity > 0
    )


# ---------- Summary ----------
class LootSummary:
    def __init__(
        self,
        options: Optional[Dict[str, Any]] = None,
        *,
        chat: Any = None,
        prefix: str = "",
        suffix: str = "",
        counter_text: Optional[str] = None,
        lookup: Optional[ItemLookup] = None,
    ) -> None:
        self.items = EntryStore()
        self.currencies = EntryStore(allow_zero=True)
        self.counter = 0
        self.registry = OptionRegistry(options)
        self.prefix = prefix or ""
        self.suffix = suffix or ""
        self.counter_text = counter_text
        self.lookup: ItemLookup = lookup if lookup is not None else ItemCatalog()
        self.chat: Any = DefaultChat()
        self.use_chat(chat)

    # ---- options ----
    def get_option(self, key: str) -> Any:
        return self.registry.get(key)

    def set_option(self, key: str, value: Any) -> None:
        self.registry.set(key, value)

    def set_options(self, options: Any, defaults: Any = None, *path: Any) -> None:
        self.registry.bind(options, defaults, *path)

    def is_enabled(self) -> bool:
        return bool(self.get_option("enabled"))

    def set_enabled(self, enabled: bool) -> None:
        self.set_option("enabled", enabled)

    def set_combine_duplicates(self, combine_duplicates: bool) -> None:
        self.set_option("combineDuplicates", combine_duplicates)

    def set_delimiter(self, delimiter: str) -> None:
        self.set_option("delimiter", delimiter)

    def set_hide_singular_quantities(self, hide: bool) -> None:
        self.set_option("hideSingularQuantities", hide)

    def set_link_style(self, link_style: int) -> None:
        self.set_option("linkStyle", link_style)

    def set_min_quality(self, quality: int) -> None:
        self.set_option("minQuality", quality)

    def set_show_counter(self, show_counter: bool) -> None:
        self.set_option("showCounter", show_counter)

    def set_show_icon(self, show_icon: bool) -> None:
        self.set_option("showIcon", show_icon)

    def set_icon_size(self, icon_size: int) -> None:
        self.set_option("iconSize", icon_size)

    def set_show_trait(self, show_trait: bool) -> None:
        self.set_option("showTrait", show_trait)

    def set_show_not_collected(self, show_not_collected: bool) -> None:
        self.set_option("showNotCollected", show_not_collected)

    def set_sorted(self, sorted_: bool) -> None:
        self.set_option("sorted", sorted_)

    def set_sorted_by_quality(self, sorted_by_quality: bool) -> None:
        self.set_option("sortedByQuality", sorted_by_quality)

    # ---- non-option fields ----
    def set_prefix(self, prefix: str) -> None:
        self.prefix = prefix or ""

    def set_suffix(self, suffix: str) -> None:
        self.suffix = suffix or ""

    def set_counter_text(self, counter_text: Optional[str]) -> None:
        self.counter_text = counter_text

    def use_chat(self, chat: Any) -> None:
        """Print through `chat`; anything without print() and an int max_chars_per_line falls back to DefaultChat."""
        self.chat = chat if is_valid_chat(chat) else DefaultChat()

    @property
    def max_line_length(self) -> int:
        capacity = getattr(self.chat, "max_chars_per_line", None) or FALLBACK_MAX_CHARS_PER_LINE
        return capacity - display_length(self.prefix) - display_length(self.suffix)

    # ---- additions ----
    def add_currency(self, currency_type: Any, quantity: float) -> None:
        if currency_type is None:
            raise InvalidArgument("currency_type must not be None")
        check_quantity(quantity, allow_zero=True)
        if not self.is_enabled():
            return
        self.currencies.add(currency_type, quantity, self.get_option("combineDuplicates"))

    def add_item(self, bag_id: Any, slot_index: Any, quantity: Optional[float] = None) -> None:
        """Add the stack in a bag slot; without a quantity the slot's stack size is used."""
        if bag_id is None or slot_index is None:
            raise InvalidArgument("bag_id and slot_index must not be None")
        if quantity is not None:
            check_quantity(quantity)
        if not self.is_enabled():
            return
        if quantity is None:
            stack_size, max_stack_size = self.lookup.slot_stack_size(bag_id, slot_index)
            quantity = min(stack_size, max_stack_size)
            check_quantity(quantity)
        link = self.lookup.slot_link(bag_id, slot_index, self.get_option("linkStyle"))
        if not link:
            raise InvalidArgument(f"no item in bag {bag_id} slot {slot_index}")
        self.add_item_link(link, quantity, keep_style=True)

    def add_item_id(self, item_id: Any, quantity: float) -> None:
        if item_id is None:
            raise InvalidArgument("item_id must not be None")
        check_quantity(quantity)
        if not self.is_enabled():
            return
        self.add_item_link(make_item_link(item_id, self.get_option("linkStyle")), quantity, keep_style=True)

    def add_item_link(self, item_link: str, quantity: float, keep_style: bool = False) -> None:
        if item_link is None or item_link == "":
            raise InvalidArgument("item_link must not be empty")
        check_quantity(quantity)
        if not self.is_enabled():
            return
        if not keep_style:
            item_link = restyle_link(item_link, self.get_option("linkStyle"))
        self.items.add(item_link, quantity, self.get_option("combineDuplicates"))

    def increment_counter(self) -> None:
        self.counter += 1

    # ---- output ----
    def build_lines(self) -> List[str]:
        """Pack the current entries into lines without printing or resetting."""
        get = self.get_option
        compress = bool(getattr(self.chat, "supports_icon_compression", False))
        packer = LinePacker(max_length=self.max_line_length, delimiter=get("delimiter"))

        item_keys = sort_item_keys(
            self.items.keys,
            self.lookup,
            by_quality=bool(get("sortedByQuality")),
            by_name=bool(get("sorted")),
        )
        for key in item_keys:
            for text, icon_length in format_item(key, self.items.quantities(key), self.lookup, get, compress):
                packer.append(text, icon_length)

        currency_keys = sort_currency_keys(self.currencies.keys, self.lookup, by_name=bool(get("sorted")))
        for currency_type in currency_keys:
            for text, icon_length in format_currency(
                currency_type, self.currencies.quantities(currency_type), self.lookup, get, compress
            ):
                packer.append(text, icon_length)

        # Counter text only follows an existing summary
        if get("showCounter") and self.counter > 0 and self.counter_text and packer.has_output:
            packer.append(format_counter(self.counter_text, self.counter))

        return packer.finish()

    def print(self) -> None:
        """Print the summary to chat, then reset. Raises EmptySummary if nothing would be printed."""
        if not self.is_enabled():
            return
        lines = self.build_lines()
        if not lines:
            raise EmptySummary("Print called but no summary lines were generated.")
        for line in lines:
            self.chat.print(f"{self.prefix}{line}{self.suffix}")
        self.reset()

    def reset(self) -> None:
        self.items.reset()
        self.currencies.reset()
        self.counter = 0
