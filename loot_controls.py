"""
Settings controls for a loot summary.

generate_item_options() / generate_loot_options() bind the summary to the caller's
saved settings and return one control description per option, ready for a
settings panel builder:

    {"type": "checkbox", "name": ..., "tooltip": ..., "default": ...,
     "getFunc": callable, "setFunc": callable, "disabled": callable}

Dropdowns add choices / choicesValues (and sort), the icon size slider adds
min / max / step / decimals / clampInput.
"""

from typing import Any, Callable, Dict, List, Optional

from loot_catalog import (
    COLLECTION_ICON,
    ITEM_QUALITY_COLORS,
    ITEM_QUALITY_MAX,
    ITEM_QUALITY_MIN,
    LINK_STYLE_BRACKETS,
    LINK_STYLE_DEFAULT,
    colorize,
    icon_format,
    make_item_link,
    quality_name,
)
from loot_strings import get_string, pluralize_word, quote

SAMPLE_ITEM_ID = 54172

QUALITY_CHOICES_VALUES: List[int] = list(range(ITEM_QUALITY_MIN, ITEM_QUALITY_MAX + 1))
QUALITY_CHOICES: List[str] = [
    colorize(quality_name(q), ITEM_QUALITY_COLORS.get(q, "FFFFFF")) for q in QUALITY_CHOICES_VALUES
]

DELIMITER_CHOICES_VALUES: List[str] = [
    " ",
    "   ",
    ", ",
    " * ",
    "; ",
    "\n",
    "\n• ",
    "\n- ",
    "\n+ ",
    "\n* ",
    "、",
    "・",
]
DELIMITER_CHOICES: List[str] = [quote(d.replace("\n", "\\n")) for d in DELIMITER_CHOICES_VALUES]

SORT_CHOICES_VALUES = ["quality", "name", "none"]

# Per-summary string keys; ITEM for item handling summaries, LOOT for loot summaries
STRING_SETS: Dict[str, Dict[str, str]] = {
    "ITEM": {
        "SUMMARY": "ITEM_SUMMARY",
        "SUMMARY_TOOLTIP": "ITEM_SUMMARY_TOOLTIP",
        "MIN_QUALITY": "MIN_ITEM_QUALITY",
        "MIN_QUALITY_TOOLTIP": "MIN_ITEM_QUALITY_TOOLTIP",
        "SHOW_ICONS": "SHOW_ITEM_ICONS",
        "SHOW_ICONS_TOOLTIP": "SHOW_ITEM_ICONS_TOOLTIP",
        "SHOW_NOT_COLLECTED": "SHOW_ITEM_NOT_COLLECTED",
        "SHOW_NOT_COLLECTED_TOOLTIP": "SHOW_ITEM_NOT_COLLECTED_TOOLTIP",
        "SHOW_TRAITS": "SHOW_ITEM_TRAITS",
        "SHOW_TRAITS_TOOLTIP": "SHOW_ITEM_TRAITS_TOOLTIP",
        "HIDE_SINGLE_QTY": "HIDE_ITEM_SINGLE_QTY",
        "HIDE_SINGLE_QTY_TOOLTIP": "HIDE_ITEM_SINGLE_QTY_TOOLTIP",
    },
    "LOOT": {
        "SUMMARY": "LOOT_SUMMARY",
        "SUMMARY_TOOLTIP": "LOOT_SUMMARY_TOOLTIP",
        "MIN_QUALITY": "MIN_LOOT_QUALITY",
        "MIN_QUALITY_TOOLTIP": "MIN_LOOT_QUALITY_TOOLTIP",
        "SHOW_ICONS": "SHOW_LOOT_ICONS",
        "SHOW_ICONS_TOOLTIP": "SHOW_LOOT_ICONS_TOOLTIP",
        "SHOW_NOT_COLLECTED": "SHOW_LOOT_NOT_COLLECTED",
        "SHOW_NOT_COLLECTED_TOOLTIP": "SHOW_LOOT_NOT_COLLECTED_TOOLTIP",
        "SHOW_TRAITS": "SHOW_LOOT_TRAITS",
        "SHOW_TRAITS_TOOLTIP": "SHOW_LOOT_TRAITS_TOOLTIP",
        "HIDE_SINGLE_QTY": "HIDE_LOOT_SINGLE_QTY",
        "HIDE_SINGLE_QTY_TOOLTIP": "HIDE_LOOT_SINGLE_QTY_TOOLTIP",
    },
}


def _sort_getter(summary) -> Callable[[], str]:
    def get() -> str:
        if summary.get_option("sortedByQuality"):
            return "quality"
        if summary.get_option("sorted"):
            return "name"
        return "none"

    return get


def _sort_setter(summary) -> Callable[[str], None]:
    def set_(value: str) -> None:
        summary.set_sorted_by_quality(value == "quality")
        summary.set_sorted(value == "name")

    return set_


OPTION_CONTROL_DATA: List[Dict[str, Any]] = [
    {"option": "enabled", "name": "SUMMARY", "tooltip": "SUMMARY_TOOLTIP", "type": "checkbox"},
    {
        "option": "minQuality", "name": "MIN_QUALITY", "tooltip": "MIN_QUALITY_TOOLTIP", "type": "dropdown",
        "choices": QUALITY_CHOICES, "choicesValues": QUALITY_CHOICES_VALUES, "sort": "numericvalue-up",
    },
    {"option": "showIcon", "name": "SHOW_ICONS", "tooltip": "SHOW_ICONS_TOOLTIP", "type": "checkbox"},
    {"option": "showNotCollected", "name": "SHOW_NOT_COLLECTED", "tooltip": "SHOW_NOT_COLLECTED_TOOLTIP", "type": "checkbox"},
    {
        "option": "iconSize", "name": "ICON_SIZE", "tooltip": "ICON_SIZE_TOOLTIP", "type": "slider",
        "min": 50, "max": 200, "step": 10, "decimals": 0, "clampInput": True,
    },
    {"option": "showTrait", "name": "SHOW_TRAITS", "tooltip": "SHOW_TRAITS_TOOLTIP", "type": "checkbox"},
    {"option": "hideSingularQuantities", "name": "HIDE_SINGLE_QTY", "tooltip": "HIDE_SINGLE_QTY_TOOLTIP", "type": "checkbox"},
    {"option": "combineDuplicates", "name": "COMBINE_DUPLICATES", "tooltip": "COMBINE_DUPLICATES_TOOLTIP", "type": "checkbox"},
    {
        "option": "sorted", "name": "SORT_ORDER", "tooltip": "SORT_ORDER_TOOLTIP", "type": "dropdown",
        "choices": [get_string("SORT_QUALITY_NAME"), get_string("SORT_NAME"), get_string("SORT_NONE")],
        "choicesValues": SORT_CHOICES_VALUES,
        "getFunc": _sort_getter,
        "setFunc": _sort_setter,
    },
    {
        "option": "delimiter", "name": "DELIMITER", "tooltip": "DELIMITER_TOOLTIP", "type": "dropdown",
        "choices": DELIMITER_CHOICES, "choicesValues": DELIMITER_CHOICES_VALUES,
    },
    {
        "option": "linkStyle", "name": "LINK_STYLE", "tooltip": "LINK_STYLE_TOOLTIP", "type": "dropdown",
        "choices": [
            make_item_link(SAMPLE_ITEM_ID, LINK_STYLE_BRACKETS),
            make_item_link(SAMPLE_ITEM_ID, LINK_STYLE_DEFAULT),
        ],
        "choicesValues": [LINK_STYLE_BRACKETS, LINK_STYLE_DEFAULT],
    },
    {"option": "showCounter", "name": "SHOW_COUNTER", "tooltip": "SHOW_COUNTER_TOOLTIP", "type": "checkbox"},
]


def create_option_control(summary, data: Dict[str, Any], addon_name: str, strings: Dict[str, str]) -> Optional[Dict[str, Any]]:
    key = data["option"]
    name = get_string(strings.get(data["name"], data["name"]))
    tooltip = get_string(strings.get(data["tooltip"], data["tooltip"]))
    control: Dict[str, Any] = {
        "type": data["type"],
        "name": name,
        "tooltip": tooltip,
        "default": summary.registry.get_default(key),
        "disabled": lambda: not summary.is_enabled(),
        "getFunc": lambda: summary.get_option(key),
        "setFunc": lambda value: summary.set_option(key, value),
    }

    if data["type"] == "slider":
        for field in ("min", "max", "step", "decimals", "clampInput"):
            control[field] = data[field]
        control["disabled"] = lambda: not summary.is_enabled() or (
            not summary.get_option("showIcon") and not summary.get_option("showNotCollected")
        )
    elif data["type"] == "dropdown":
        control["choices"] = list(data["choices"])
        control["choicesValues"] = list(data["choicesValues"])
        if "sort" in data:
            control["sort"] = data["sort"]
        if "getFunc" in data:
            control["getFunc"] = data["getFunc"](summary)
        if "setFunc" in data:
            control["setFunc"] = data["setFunc"](summary)

    if key == "enabled":
        control["tooltip"] = tooltip.format(addon=addon_name)
        control["disabled"] = None
    elif key == "showNotCollected":
        control["name"] = name.format(icon=icon_format(COLLECTION_ICON, "120%", "120%"))
    elif key == "showCounter":
        if not summary.counter_text:
            return None
        plural = pluralize_word(summary.counter_text)
        control["name"] = name.format(noun=plural.title())
        control["tooltip"] = tooltip.format(noun=plural)

    return control


def generate_option_controls(summary, addon_name: str, options: Any, defaults: Any, option_type: str, *path: Any) -> List[Dict[str, Any]]:
    summary.set_options(options, defaults, *path)
    strings = STRING_SETS[option_type]
    controls = []
    for data in OPTION_CONTROL_DATA:
        control = create_option_control(summary, data, addon_name, strings)
        if control is not None:
            controls.append(control)
    return controls


def generate_item_options(summary, addon_name: str, options: Any, defaults: Any = None, *path: Any) -> List[Dict[str, Any]]:
    return generate_option_controls(summary, addon_name, options, defaults, "ITEM", *path)


def generate_loot_options(summary, addon_name: str, options: Any, defaults: Any = None, *path: Any) -> List[Dict[str, Any]]:
    return generate_option_controls(summary, addon_name, options, defaults, "LOOT", *path)
