"""
Loot Summary strings
--------------------
- English string table used by the summary and the settings controls.
- Count formatting: "x1,234" with thousands separators.
- Counter annotation: "(1 container)" / "(3 containers)".
- Simple English pluralization for counter nouns.
"""

from typing import Dict

# ---------------- String table ----------------
STRINGS: Dict[str, str] = {
    "COUNT": "x{count}",
    "COUNTER_FORMAT_SINGLE": "({count} {noun})",
    "COUNTER_FORMAT_PLURAL": "({count} {noun})",
    "QUOTES": "\"{text}\"",
    "ITEM_SUMMARY": "Item summary",
    "ITEM_SUMMARY_TOOLTIP": "Print a summary of items handled by {addon} to chat.",
    "LOOT_SUMMARY": "Loot summary",
    "LOOT_SUMMARY_TOOLTIP": "Print a summary of loot received by {addon} to chat.",
    "MIN_ITEM_QUALITY": "Minimum item quality",
    "MIN_ITEM_QUALITY_TOOLTIP": "Items below this quality are left out of the item summary.",
    "MIN_LOOT_QUALITY": "Minimum loot quality",
    "MIN_LOOT_QUALITY_TOOLTIP": "Items below this quality are left out of the loot summary.",
    "SHOW_ITEM_ICONS": "Show item icons",
    "SHOW_ITEM_ICONS_TOOLTIP": "Show icons next to item names in the item summary.",
    "SHOW_LOOT_ICONS": "Show loot icons",
    "SHOW_LOOT_ICONS_TOOLTIP": "Show icons next to item names in the loot summary.",
    "SHOW_ITEM_NOT_COLLECTED": "Show {icon} on uncollected set items",
    "SHOW_ITEM_NOT_COLLECTED_TOOLTIP": "Mark set items in the item summary that are missing from your set collection.",
    "SHOW_LOOT_NOT_COLLECTED": "Show {icon} on uncollected set loot",
    "SHOW_LOOT_NOT_COLLECTED_TOOLTIP": "Mark set items in the loot summary that are missing from your set collection.",
    "SHOW_ITEM_TRAITS": "Show item traits",
    "SHOW_ITEM_TRAITS_TOOLTIP": "Show the trait of equipment in the item summary.",
    "SHOW_LOOT_TRAITS": "Show loot traits",
    "SHOW_LOOT_TRAITS_TOOLTIP": "Show the trait of equipment in the loot summary.",
    "HIDE_ITEM_SINGLE_QTY": "Hide item quantity of 1",
    "HIDE_ITEM_SINGLE_QTY_TOOLTIP": "Leave out \"x1\" for single items in the item summary.",
    "HIDE_LOOT_SINGLE_QTY": "Hide loot quantity of 1",
    "HIDE_LOOT_SINGLE_QTY_TOOLTIP": "Leave out \"x1\" for single items in the loot summary.",
    "ICON_SIZE": "Icon size",
    "ICON_SIZE_TOOLTIP": "Size of icons in the summary, as a percentage of the text height.",
    "COMBINE_DUPLICATES": "Combine duplicates",
    "COMBINE_DUPLICATES_TOOLTIP": "Add up quantities of the same item instead of listing each stack separately.",
    "SORT_ORDER": "Sort order",
    "SORT_ORDER_TOOLTIP": "Order in which items are listed in the summary.",
    "SORT_QUALITY_NAME": "Quality, Name",
    "SORT_NAME": "Name",
    "SORT_NONE": "None",
    "DELIMITER": "Delimiter",
    "DELIMITER_TOOLTIP": "Text placed between entries. Delimiters starting with \\n put each entry on its own line.",
    "LINK_STYLE": "Link style",
    "LINK_STYLE_TOOLTIP": "Show item links with or without brackets.",
    "SHOW_COUNTER": "Show number of {noun}",
    "SHOW_COUNTER_TOOLTIP": "Add the number of {noun} to the end of the summary.",
}


def get_string(key: str) -> str:
    return STRINGS.get(key, key)


def comma_delimit_number(n) -> str:
    if isinstance(n, float) and n.is_integer():
        n = int(n)
    return f"{n:,}"


def format_quantity(quantity) -> str:
    """'x1,234' style count suffix (without the leading space)."""
    return get_string("COUNT").format(count=comma_delimit_number(quantity))


def pluralize_word(word: str) -> str:
    """Pluralize a single English noun (last word of a phrase)."""
    if not word:
        return word
    head, sep, last = word.rpartition(" ")
    lower = last.lower()
    irregular = {
        "knife": "knives",
        "leaf": "leaves",
        "thief": "thieves",
        "wolf": "wolves",
        "man": "men",
        "woman": "women",
        "child": "children",
        "fish": "fish",
        "sheep": "sheep",
    }
    if lower in irregular:
        plural = irregular[lower]
        if last[:1].isupper():
            plural = plural.capitalize()
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = last[:-1] + "ies"
    elif lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = last + "es"
    else:
        plural = last + "s"
    return f"{head}{sep}{plural}"


def format_counter(noun: str, count: int) -> str:
    # Singular form only for exactly one
    if count > 1:
        return get_string("COUNTER_FORMAT_PLURAL").format(count=count, noun=pluralize_word(noun))
    return get_string("COUNTER_FORMAT_SINGLE").format(count=count, noun=noun)


def quote(text: str) -> str:
    return get_string("QUOTES").format(text=text)
