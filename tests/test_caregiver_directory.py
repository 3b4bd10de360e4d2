"""Tests for src.core.caregiver_directory."""

import pytest

from src.core.caregiver_directory import CaregiverDirectory
from src.core.errors import SheetLayoutError
from src.data.columns import CAREGIVER_EMAIL_HEADER, CAREGIVER_NAME_HEADER


@pytest.fixture
def caregivers(store, runtime_config):
    store.add(
        "caregivers",
        [CAREGIVER_NAME_HEADER, CAREGIVER_EMAIL_HEADER],
        [
            ["Dana", "dana@farm.org"],
            [" Yossi ", "Yossi@Farm.org "],
            ["Dana", "dana.other@farm.org"],
            ["", "nobody@farm.org"],
        ],
    )
    return CaregiverDirectory(store, runtime_config)


class TestNameForEmail:
    @pytest.mark.asyncio
    async def test_exact(self, caregivers):
        assert await caregivers.name_for_email("dana@farm.org") == "Dana"

    @pytest.mark.asyncio
    async def test_case_and_whitespace_insensitive(self, caregivers):
        assert await caregivers.name_for_email("  yossi@farm.ORG") == "Yossi"

    @pytest.mark.asyncio
    async def test_unknown_and_blank(self, caregivers):
        assert await caregivers.name_for_email("stranger@farm.org") == ""
        assert await caregivers.name_for_email("") == ""

    @pytest.mark.asyncio
    async def test_missing_email_column(self, store, runtime_config):
        store.add("caregivers", [CAREGIVER_NAME_HEADER], [["Dana"]])
        directory = CaregiverDirectory(store, runtime_config)
        assert await directory.name_for_email("dana@farm.org") == ""


class TestListCaregivers:
    @pytest.mark.asyncio
    async def test_unique_names_in_order(self, caregivers):
        assert await caregivers.list_caregivers() == ["Dana", "Yossi"]

    @pytest.mark.asyncio
    async def test_missing_name_header(self, store, runtime_config):
        store.add("caregivers", ["Name", "Email"], [["Dana", "dana@farm.org"]])
        directory = CaregiverDirectory(store, runtime_config)
        with pytest.raises(SheetLayoutError):
            await directory.list_caregivers()
