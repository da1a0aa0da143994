import json

import loot_catalog as cat
import loot_controls as ctl
import loot_strings as strs
from loot_summary import ChatBuffer, LootSummary


def test_item_link_helpers():
    link = cat.make_item_link(54172, cat.LINK_STYLE_BRACKETS)
    assert link.startswith("|H1:item:54172:")
    assert cat.parse_item_id(link) == "54172"
    assert cat.restyle_link(link, cat.LINK_STYLE_DEFAULT).startswith("|H0:item:54172:")
    assert cat.parse_item_id("Iron Ingot") is None


def test_render_plain_uses_catalog_names():
    catalog = cat.ItemCatalog.from_dict({"items": {"54172": {"name": "Iron Ingot^p"}}})
    text = cat.icon_format("a.dds", "90%", "90%") + cat.make_item_link(54172, 1) + " x2 " + cat.colorize("ok", "FFFFFF")
    assert cat.render_plain(text, catalog) == "[Iron Ingot] x2 ok"
    assert cat.render_plain(cat.make_item_link(7)) == "item:7"


def test_unknown_item_is_lowest_quality_placeholder():
    info = cat.ItemCatalog().item_info(cat.make_item_link(123))
    assert info.name == "123" and info.quality == cat.ITEM_QUALITY_MIN


def test_builtin_currencies_and_plural_names():
    catalog = cat.ItemCatalog()
    info = catalog.currency_info(cat.CURT_TELVAR_STONES)
    assert info.display_name(True) == "Tel Var Stone"
    assert info.display_name(False) == "Tel Var Stones"
    assert catalog.currency_info(999).name == "999"


def test_catalog_from_yaml_file(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        "items:\n"
        "  '147521': {name: Ring of the Pariah, quality: 4, trait: 23, trait_name: Arcane,\n"
        "             equip_type: 12, set_collection_piece: true, collection_unlocked: false}\n"
        "currencies:\n"
        "  '1': {name: Coin, plural_name: Coins}\n",
        encoding="utf-8",
    )
    catalog = cat.ItemCatalog.from_file(str(path))
    info = catalog.item_info(cat.make_item_link(147521))
    assert info.quality == 4 and info.trait_name == "Arcane" and info.not_collected
    assert catalog.currency_info(cat.CURT_MONEY).display_name(False) == "Coins"


class _Resp:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        raise RuntimeError(self.status_code)


def test_catalog_from_url_retries_and_caches(tmp_path, monkeypatch):
    calls = []
    responses = [_Resp(503), _Resp(200, json.dumps({"items": {"1": {"name": "Apple", "quality": 2}}}))]

    def fake_get(url, headers=None, timeout=None):
        calls.append(url)
        return responses.pop(0)

    monkeypatch.setattr(cat.requests, "get", fake_get)
    monkeypatch.setattr(cat, "backoff_sleep", lambda attempt: None)
    monkeypatch.setattr(cat, "CACHE_CATALOGS_DIR", tmp_path)

    first = cat.ItemCatalog.from_url("https://example.invalid/catalog.json")
    second = cat.ItemCatalog.from_url("https://example.invalid/catalog.json")
    assert len(calls) == 2
    assert first.item_info("1").name == "Apple"
    assert second.item_info("1").quality == 2


def test_count_and_counter_strings():
    assert strs.format_quantity(1234567) == "x1,234,567"
    assert strs.format_quantity(3.0) == "x3"
    assert strs.format_counter("container", 1) == "(1 container)"
    assert strs.format_counter("body", 2) == "(2 bodies)"
    assert strs.format_counter("loot box", 4) == "(4 loot boxes)"
    assert strs.pluralize_word("Thief") == "Thieves"


def _controls(counter_text=None, saved=None):
    summary = LootSummary(chat=ChatBuffer(), counter_text=counter_text)
    saved = {} if saved is None else saved
    return summary, saved, ctl.generate_loot_options(summary, "My Addon", saved, None, "loot")


def test_controls_cover_every_option_and_skip_counter_without_text():
    _, _, controls = _controls()
    assert len(controls) == len(ctl.OPTION_CONTROL_DATA) - 1
    _, _, controls = _controls(counter_text="container")
    assert len(controls) == len(ctl.OPTION_CONTROL_DATA)
    assert controls[-1]["name"] == "Show number of Containers"


def test_controls_read_and_write_saved_settings():
    summary, saved, controls = _controls()
    by_name = {c["name"]: c for c in controls}
    icons = by_name["Show loot icons"]
    assert icons["getFunc"]() is False
    icons["setFunc"](True)
    assert saved["loot"]["showIcon"] is True
    assert summary.get_option("showIcon") is True


def test_sort_dropdown_maps_to_both_flags():
    summary, _, controls = _controls()
    sort = [c for c in controls if c.get("choicesValues") == ctl.SORT_CHOICES_VALUES][0]
    sort["setFunc"]("quality")
    assert summary.get_option("sortedByQuality") and not summary.get_option("sorted")
    assert sort["getFunc"]() == "quality"
    sort["setFunc"]("name")
    assert summary.get_option("sorted") and not summary.get_option("sortedByQuality")
    sort["setFunc"]("none")
    assert sort["getFunc"]() == "none"


def test_enabled_control_and_icon_size_slider():
    summary, _, controls = _controls()
    enabled = controls[0]
    assert "My Addon" in enabled["tooltip"] and enabled["disabled"] is None
    slider = [c for c in controls if c["type"] == "slider"][0]
    assert slider["min"] == 50 and slider["max"] == 200 and slider["default"] == 90
    assert slider["disabled"]() is True
    summary.set_show_not_collected(True)
    assert slider["disabled"]() is False
    summary.set_enabled(False)
    assert slider["disabled"]() is True


def test_item_controls_use_item_strings():
    summary = LootSummary(chat=ChatBuffer())
    controls = ctl.generate_item_options(summary, "My Addon", {"icons": True})
    assert controls[0]["name"] == "Item summary"
    assert summary.get_option("showIcon") is True
