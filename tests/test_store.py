import asyncio
from datetime import datetime, timezone

import pytest

from nainzaka import store
from nainzaka.db import async_session_maker


def test_generated_sku_is_millisecond_timestamp():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert store.generate_sku(now) == "SKU-1704067200000"
    assert store.generate_sku().startswith("SKU-")


def test_only_views_and_clicks_can_be_incremented():
    with pytest.raises(ValueError, match="Unknown counter field"):
        asyncio.run(store.increment_counter(None, "any-id", "price"))


def test_increment_unknown_product_is_reported(client):
    async def bump():
        async with async_session_maker() as session:
            return await store.increment_counter(session, "missing", "views")

    assert asyncio.run(bump()) is False
