import asyncio

import pytest

from metadata_enhancer.services.search_service import SearchService


@pytest.fixture
def seeded_db(db):
    async def seed():
        await db.create_drive_file({
            "drive_id": "d1", "name": "beach.jpg", "type": "image", "parent_folder_id": "f1",
            "status": "processed",
            "ai_generated_metadata": {"description": "Sunset over a sandy beach", "keywords": ["beach", "sunset", "sea"]},
        })
        await db.create_drive_file({
            "drive_id": "d2", "name": "report.pdf", "type": "pdf", "parent_folder_id": "f1",
            "status": "processed",
            "ai_generated_metadata": {"description": "Quarterly sales report", "keywords": [], "category": ""},
        })
        await db.create_drive_file({
            "drive_id": "d3", "name": "holiday.mp4", "type": "video", "parent_folder_id": "f1",
            "custom_metadata": {"note": "beach trip"},
        })
        await db.create_drive_file({
            "drive_id": "d4", "name": "beach-house.jpg", "type": "image", "parent_folder_id": "f2",
        })
    asyncio.run(seed())
    return db


def test_search_requires_every_term(seeded_db):
    results = asyncio.run(SearchService(seeded_db).search_files("beach sunset"))
    assert [f["drive_id"] for f in results] == ["d1"]


def test_search_orders_by_occurrences_and_checks_custom_metadata(seeded_db):
    results = asyncio.run(SearchService(seeded_db).search_files("BEACH", folder_id="f1"))
    assert [f["drive_id"] for f in results] == ["d1", "d3"]


def test_search_blank_query_returns_nothing(seeded_db):
    assert asyncio.run(SearchService(seeded_db).search_files("   ")) == []


def test_folder_analytics(seeded_db):
    analytics = asyncio.run(SearchService(seeded_db).get_folder_analytics("f1"))

    assert analytics["totalFiles"] == 3
    assert analytics["filesWithAI"] == 2
    assert analytics["filesWithAIPercentage"] == 67
    # Union of keys is {description, keywords, category}, over two files
    assert analytics["totalPossibleFields"] == 6
    assert analytics["totalFilledFields"] == 3
    assert analytics["filledFieldsPercentage"] == 50
    assert analytics["statusCounts"] == {"processed": 2, "pending": 1}
    assert analytics["typeCounts"] == {"image": 1, "pdf": 1, "video": 1}


def test_analytics_for_empty_folder(db):
    analytics = asyncio.run(SearchService(db).get_folder_analytics("nothing-here"))
    assert analytics["totalFiles"] == 0
    assert analytics["filesWithAIPercentage"] == 0
    assert analytics["filledFieldsPercentage"] == 0
