"""Tests for src.core.animal_types."""

import pytest

from src.core.animal_types import (
    AnimalTypeRegistry,
    UnknownAnimalTypeError,
    folder_id_key,
    sheet_id_key,
)
from src.data.models import AnimalType
from tests.fakes import CONFIG_VALUES


@pytest.fixture
def registry():
    return AnimalTypeRegistry.from_config(CONFIG_VALUES)


class TestRegistry:
    def test_every_type_registered(self, registry):
        assert len(registry.all()) == len(AnimalType)

    def test_resolve_by_key_label_and_enum(self, registry):
        assert registry.resolve("donkey").label == "חמור"
        assert registry.resolve(" חמור ").key == "donkey"
        assert registry.resolve(AnimalType.HORSE).emoji == "🐴"

    def test_unknown(self, registry):
        with pytest.raises(UnknownAnimalTypeError):
            registry.resolve("unicorn")

    def test_unknown_is_a_value_error(self, registry):
        with pytest.raises(ValueError):
            registry.resolve("")

    def test_configured_ids(self, registry):
        donkey = registry.resolve("donkey")
        assert donkey.roster_sheet_id == "donkey-roster"
        assert donkey.folder_id == "donkey-folder"
        assert registry.resolve("cat").roster_sheet_id == ""

    def test_configured_subsets(self, registry):
        assert [i.key for i in registry.with_rosters()] == ["donkey", "horse"]
        assert [i.key for i in registry.with_folders()] == ["donkey", "horse"]

    def test_label_for(self, registry):
        assert registry.label_for("chicken") == "עופות"


def test_config_keys():
    assert sheet_id_key(AnimalType.SHEEP) == "SHEEPS_SHEET_ID"
    assert folder_id_key(AnimalType.COW) == "COWS_DRIVE_FOLDER_ID"
