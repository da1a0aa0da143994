import pytest

import loot_options as lo
from loot_errors import InvalidOption


def test_three_tier_resolution():
    assert lo.resolve_option("iconSize", {"iconSize": 120}, {"iconSize": 80}) == 120
    assert lo.resolve_option("iconSize", {"iconSize": None}, {"iconSize": 80}) == 80
    assert lo.resolve_option("iconSize", {}, {}) == 90
    assert lo.resolve_option("iconSize", None, None, {"iconSize": 70}) == 70


def test_unknown_option_read_raises_but_write_is_ignored():
    reg = lo.OptionRegistry()
    with pytest.raises(InvalidOption):
        reg.get("colour")
    with pytest.raises(InvalidOption):
        reg.get(None)
    reg.set("colour", "red")
    assert "colour" not in reg.options


def test_constructor_keeps_schema_keys_only():
    reg = lo.OptionRegistry({"sorted": True, "prefix": "x", "icons": True})
    assert reg.get("sorted") is True
    assert reg.get("showIcon") is True
    assert "prefix" not in reg.options


def test_legacy_icons_key_migrates_on_bind():
    saved = {"addon": {"loot": {"icons": True}}}
    defaults = {"addon": {"loot": {"icons": False}}}
    reg = lo.OptionRegistry()
    reg.bind(saved, defaults, "addon", "loot")
    assert reg.get("showIcon") is True
    assert "icons" not in saved["addon"]["loot"]
    assert "icons" not in defaults["addon"]["loot"]
    assert "icons" not in reg.options and "icons" not in reg.defaults


def test_legacy_key_does_not_override_new_key():
    saved = {"traits": True, "showTrait": False}
    reg = lo.OptionRegistry()
    reg.bind(saved, {})
    assert reg.get("showTrait") is False
    assert "traits" not in saved


def test_legacy_default_moves_to_new_name():
    defaults = {"traits": True}
    lo.migrate_renamed_options({}, defaults)
    assert defaults == {"showTrait": True}


def test_no_legacy_keys_no_change():
    options, defaults = {"sorted": True}, {"iconSize": 100}
    lo.migrate_renamed_options(options, defaults)
    assert options == {"sorted": True} and defaults == {"iconSize": 100}


def test_bind_seeds_every_option_into_saved_settings():
    saved = {}
    reg = lo.OptionRegistry({"sorted": True})
    reg.bind(saved, {"addon": {"iconSize": 150}}, "addon")
    stored = saved["addon"]
    assert set(lo.OPTIONS_DEFAULTS) <= set(stored)
    assert stored["sorted"] is True
    assert stored["iconSize"] == 150
    assert stored["delimiter"] == " "


def test_bound_view_follows_replaced_container():
    saved = {"addon": {"sorted": False}}
    reg = lo.OptionRegistry()
    reg.bind(saved, None, "addon")
    saved["addon"] = {"sorted": True}
    assert reg.get("sorted") is True
    reg.set("showIcon", True)
    assert saved["addon"]["showIcon"] is True


def test_bound_view_accepts_root_getter():
    state = {"root": {"cfg": {}}}
    reg = lo.OptionRegistry()
    reg.bind(lambda: state["root"], None, "cfg")
    state["root"] = {"cfg": {"minQuality": 3}}
    assert reg.get("minQuality") == 3


def test_nested_view_reads_missing_path_as_empty():
    view = lo.NestedOptions({}, ("a", "b"))
    assert len(view) == 0
    assert view.get("sorted") is None
    view["sorted"] = True
    assert dict(view) == {"sorted": True}


def test_get_default_ignores_session_value():
    reg = lo.OptionRegistry({"iconSize": 120})
    assert reg.get_default("iconSize") == 90


def test_load_options_file(tmp_path):
    path = tmp_path / "loot_summary.yaml"
    path.write_text("loot_summary:\n  sortedByQuality: true\n  traits: true\n  delimiter: ', '\n", encoding="utf-8")
    values = lo.load_options_file(str(path))
    assert values == {"sortedByQuality": True, "showTrait": True, "delimiter": ", "}
    reg = lo.OptionRegistry()
    reg.update(values)
    assert reg.get("delimiter") == ", "


def test_load_options_file_missing_returns_empty(tmp_path):
    assert lo.load_options_file(str(tmp_path / "nope.yaml")) == {}
