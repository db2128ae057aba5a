"""
Tests for catalog lookup service functions.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from school_registry.modules.catalog.service import (
    list_municipalities,
    list_ntes,
    list_typologies,
)
from school_registry.modules.shared.errors import StoreError, ValidationError

SERVICE = "school_registry.modules.catalog.service"


def _row(row_id: int, name: str):
    row = MagicMock()
    row.id = row_id
    row.name = name
    return row


@pytest.mark.asyncio
async def test_list_ntes_stringifies_ids(mock_db):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.list_ntes = AsyncMock(return_value=[_row(1, "NTE 01"), _row(26, "NTE 26")])

        result = await list_ntes(mock_db)

    assert [item.model_dump() for item in result] == [
        {"id": "1", "name": "NTE 01"},
        {"id": "26", "name": "NTE 26"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("nte_id", [None, "", "  "])
async def test_list_municipalities_without_nte_is_empty(mock_db, nte_id):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.list_municipalities_by_nte = AsyncMock()

        result = await list_municipalities(mock_db, nte_id)

    assert result == []
    mock_repo.list_municipalities_by_nte.assert_not_called()


@pytest.mark.asyncio
async def test_list_municipalities_of_nte(mock_db):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.list_municipalities_by_nte = AsyncMock(return_value=[_row(10, "Salvador")])

        result = await list_municipalities(mock_db, "26")

    mock_repo.list_municipalities_by_nte.assert_called_once_with(mock_db, 26)
    assert result[0].id == "10"


@pytest.mark.asyncio
async def test_list_municipalities_invalid_nte(mock_db):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.list_municipalities_by_nte = AsyncMock()

        with pytest.raises(ValidationError):
            await list_municipalities(mock_db, "abc")

    mock_repo.list_municipalities_by_nte.assert_not_called()


@pytest.mark.asyncio
async def test_list_typologies_store_failure(mock_db):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.list_typologies = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("down"))
        )

        with pytest.raises(StoreError):
            await list_typologies(mock_db)
