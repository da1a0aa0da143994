import sys
from pathlib import Path

import pytest


def _add_repo_root_to_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_add_repo_root_to_path()

from loot_catalog import ItemCatalog, ItemInfo  # noqa: E402
from loot_summary import ChatBuffer, LootSummary  # noqa: E402


@pytest.fixture
def catalog():
    # Plain names as keys keep the expected strings readable
    return ItemCatalog(
        items={
            "A": ItemInfo(name="A", quality=1, icon="icon.dds"),
            "B": ItemInfo(name="B", quality=3, icon="b.dds"),
            "C": ItemInfo(name="C", quality=3, icon="c.dds"),
            "Zinc^p": ItemInfo(name="Zinc^p", quality=5),
            "Ring": ItemInfo(
                name="Ring",
                quality=4,
                icon="ring.dds",
                trait=23,
                trait_name="Arcane",
                equip_type=12,
                set_collection_piece=True,
                collection_unlocked=False,
            ),
        }
    )


@pytest.fixture
def chat():
    return ChatBuffer()


@pytest.fixture
def summary(catalog, chat):
    return LootSummary(chat=chat, lookup=catalog)
