import pytest

from bank_codes import BANK_CODES, find_bank_code
from services.bank_code_service import get_bank_codes, resolve_bank_code

ONLY_ACCESS = {"Access Bank": "044"}


@pytest.mark.asyncio
async def test_known_bank_resolves_to_code():
    results = await get_bank_codes(["Access Bank"], ONLY_ACCESS)

    assert results == [{"detectedBank": "Access Bank", "status": "success", "bankCode": "044"}]


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   "])
async def test_blank_name_is_reported(name):
    results = await get_bank_codes([name], ONLY_ACCESS)

    assert results == [{"detectedBank": name, "status": "error", "error": "No bank name provided"}]


@pytest.mark.asyncio
async def test_unknown_bank_is_reported():
    results = await get_bank_codes(["Unknown Bank"], ONLY_ACCESS)

    assert results == [
        {
            "detectedBank": "Unknown Bank",
            "status": "error",
            "error": "Could not find a bank code for 'Unknown Bank'",
        }
    ]


@pytest.mark.asyncio
async def test_each_name_is_resolved_independently():
    results = await get_bank_codes(["Zenith Bank", "", "Nowhere Bank", "Guaranty Trust Bank"])

    assert [result["status"] for result in results] == ["success", "error", "error", "success"]
    assert results[0]["bankCode"] == "057"
    assert results[3]["bankCode"] == "058"


def test_lookup_ignores_case_and_extra_whitespace():
    assert find_bank_code("  access   BANK ", ONLY_ACCESS) == "044"
    assert find_bank_code("Access", ONLY_ACCESS) is None


def test_default_table_has_access_bank():
    assert BANK_CODES["Access Bank"] == "044"
    assert resolve_bank_code("Access Bank").data == "044"
