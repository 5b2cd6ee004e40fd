"""
Unit tests for LinkManager.

Covers:
    - generate: configured defaults vs caller options, unknown entity types
    - shorten: persistence, conflicts refused by storage, storage failures
    - follow / analytics: click counting, missing slugs
    - resolve with the manager's own entity registry
    - collision cache stats and administration
    - degraded vs strict handling of a failing existence check

LLM Prompt Example:
    "Write async pytest tests for a link manager that never raises: every
    failure must come back as a result object with a typed error kind."
"""

from unittest.mock import AsyncMock

import pytest

from longlink.config import settings
from longlink.errors import ErrorKind
from longlink.manager.link_manager import LinkManager
from longlink.models import EntityConfig, EntityRecord, StorageConfig, StorageStrategy
from longlink.storage.storage import Storage

pytestmark = pytest.mark.asyncio

ENTITIES = {"product": EntityConfig(table_name="products"), "user": EntityConfig(table_name="users")}


def _manager(storage, ids=None, **kwargs):
    if ids is not None:
        kwargs["id_factory"] = ids
    return LinkManager(storage=storage, domain="yourdomain.co", **kwargs)


# -------------------------
# generate
# -------------------------

async def test_generate_uses_configured_defaults(storage, ids):
    result = await _manager(storage, ids).generate("product", "prod-1")
    assert result.success
    assert result.url == "https://yourdomain.co/ID0001"


async def test_generate_settings_defaults_and_caller_override(storage, ids, monkeypatch):
    monkeypatch.setattr(settings, "INCLUDE_ENTITY_IN_PATH", True)
    manager = _manager(storage, ids)

    with_path = await manager.generate("product", "prod-1")
    without_path = await manager.generate("product", "prod-2", {"includeEntityInPath": False})

    assert with_path.url == "https://yourdomain.co/product/ID0001"
    assert without_path.url == "https://yourdomain.co/ID0002"


async def test_generate_framework_mode_from_settings(storage, monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_SHORTENING", False)
    result = await _manager(storage).generate("product", "Laptop Dell XPS 13")
    assert result.slug == "laptop-dell-xps-13"


async def test_generate_unknown_entity_type_checks_nothing(storage, scripted):
    backing = scripted([])
    manager = _manager(storage, entities=ENTITIES, existence_check=backing)

    result = await manager.generate("widget", "w-1")

    assert result.success is False
    assert result.error_kind is ErrorKind.UNKNOWN_ENTITY_TYPE
    assert result.error == "Unknown entity type: widget"
    backing.assert_not_awaited()


async def test_generate_invalid_options(storage):
    result = await _manager(storage).generate("product", "prod-1", {"id_length": -1})
    assert result.error_kind is ErrorKind.CONFIGURATION


async def test_generate_does_not_persist(storage, ids):
    result = await _manager(storage, ids).generate("product", "prod-1")
    assert await storage.resolve(result.slug) is None


# -------------------------
# shorten
# -------------------------

async def test_shorten_persists_record(storage, ids):
    manager = _manager(storage, ids)
    result = await manager.shorten(
        "product", "42", "https://shop.example/p/42", metadata={"campaign": "summer"}
    )

    assert result.success
    assert result.url_base == "https://shop.example/p/42"
    record = await storage.resolve("ID0001")
    assert record.entity_id == "42"
    assert record.public_id == "ID0001"
    assert record.metadata == {"campaign": "summer"}


async def test_shorten_taken_public_id_is_conflict(storage):
    manager = _manager(storage)
    first = await manager.shorten("product", "42", "https://shop.example/p/42", options={"publicId": "X7gT5p"})
    second = await manager.shorten("product", "43", "https://shop.example/p/43", options={"publicId": "X7gT5p"})

    assert first.success is True
    assert second.success is False
    assert second.error_kind is ErrorKind.CONFLICT
    assert second.error == "Slug 'X7gT5p' is already taken"


async def test_shorten_framework_collision_is_conflict(storage):
    manager = _manager(storage)
    options = {"enable_shortening": False}

    assert (await manager.shorten("product", "Laptop", "https://shop.example/p/1", options=options)).success
    again = await manager.shorten("product", "Laptop", "https://shop.example/p/2", options=options)

    assert again.success is False
    assert again.error == "Slug 'laptop' conflicts with existing URL for entity type 'product'"


async def test_shorten_retries_past_taken_slugs(storage, ids):
    await storage.save(
        "ID0001",
        EntityRecord(slug="ID0001", url_base="https://shop.example/p/1", entity_type="product", entity_id="1"),
    )
    result = await _manager(storage, ids).shorten("product", "2", "https://shop.example/p/2")

    assert result.success
    assert result.slug == "ID0002"
    assert (await storage.resolve("ID0001")).entity_id == "1"


async def test_shorten_storage_error(storage, ids, monkeypatch):
    monkeypatch.setattr(storage, "save", AsyncMock(side_effect=RuntimeError("disk full")))
    result = await _manager(storage, ids).shorten("product", "42", "https://shop.example/p/42")

    assert result.success is False
    assert result.error_kind is ErrorKind.STORAGE
    assert "disk full" in result.error


async def test_shorten_propagates_generation_failure(storage, scripted, ids):
    manager = _manager(storage, ids, existence_check=scripted([True] * 4))
    result = await manager.shorten("product", "42", "https://shop.example/p/42")
    assert result.error_kind is ErrorKind.RETRY_EXHAUSTED
    assert storage.records == {}


# -------------------------
# follow / analytics
# -------------------------

async def test_follow_counts_clicks(storage, ids):
    manager = _manager(storage, ids)
    await manager.shorten("product", "42", "https://shop.example/p/42")

    first = await manager.follow("ID0001", referer="https://news.example")
    second = await manager.follow("ID0001")

    assert first.success and first.url_base == "https://shop.example/p/42"
    assert first.click_count == 1
    assert second.click_count == 2
    assert second.entity_id == "42"


async def test_follow_missing_slug(storage):
    result = await _manager(storage).follow("nope00", user_agent="curl")

    assert result.success is False
    assert result.error == "URL not found"
    assert result.error_kind is ErrorKind.NOT_FOUND
    assert storage.analytics.get_clicks("nope00")[0].valid is False


async def test_follow_storage_error(storage, monkeypatch):
    monkeypatch.setattr(storage, "resolve", AsyncMock(side_effect=ConnectionError("gone")))
    result = await _manager(storage).follow("X7gT5p")
    assert result.error_kind is ErrorKind.STORAGE


async def test_analytics(storage, ids):
    manager = _manager(storage, ids)
    await manager.shorten("product", "42", "https://shop.example/p/42")
    await manager.follow("ID0001", country="DE")

    result = await manager.analytics("ID0001")
    assert result.success
    assert result.data.total_clicks == 1
    assert result.data.click_history[0].country == "DE"


async def test_analytics_missing(storage):
    result = await _manager(storage).analytics("nope00")
    assert result.success is False
    assert result.error_kind is ErrorKind.NOT_FOUND


async def test_analytics_storage_error(storage, monkeypatch):
    monkeypatch.setattr(storage, "get_analytics", AsyncMock(side_effect=RuntimeError("boom")))
    result = await _manager(storage).analytics("X7gT5p")
    assert result.error_kind is ErrorKind.STORAGE


# -------------------------
# resolve
# -------------------------

async def test_resolve_with_registered_entities(storage, ids):
    manager = _manager(storage, ids, entities=ENTITIES)
    await manager.shorten("product", "42", "https://shop.example/p/42")
    storage.add_rows("products", [{"id": 42, "name": "Laptop"}])

    result = await manager.resolve("product", "ID0001")
    assert result.success
    assert result.entity["name"] == "Laptop"


async def test_resolve_inline_config(storage):
    storage.add_rows("users", [{"id": "u-1", "url_slug": "AbC123"}])
    manager = _manager(
        storage, entities=ENTITIES, storage_config=StorageConfig(strategy=StorageStrategy.INLINE)
    )
    result = await manager.resolve("user", "AbC123")
    assert result.entity_id == "u-1"


async def test_resolve_cache_admin(storage, ids):
    manager = _manager(storage, ids, entities=ENTITIES)
    await manager.shorten("product", "42", "https://shop.example/p/42")
    storage.add_rows("products", [{"id": 42}])
    await manager.resolve("product", "ID0001")
    assert len(manager.resolution_cache) == 1

    manager.clear_resolution_cache()
    assert len(manager.resolution_cache) == 0


# -------------------------
# Collision cache & degradation
# -------------------------

async def test_collision_cache_stats(storage, scripted, ids):
    manager = _manager(storage, ids, existence_check=scripted([True, False, False]))
    await manager.generate("product", "1")  # ID0001 taken, ID0002 free
    stats = manager.get_collision_cache_stats()
    assert (stats.hits, stats.misses) == (0, 2)

    manager.clear_collision_cache()
    assert manager.get_collision_cache_stats().total == 0


async def test_degraded_check_still_generates(storage, scripted, ids):
    manager = _manager(storage, ids, existence_check=scripted([ConnectionError("down")]))
    result = await manager.generate("product", "1")
    assert result.success and result.slug == "ID0001"


async def test_strict_check_fails_generation(storage, scripted, ids):
    manager = _manager(
        storage, ids, existence_check=scripted([ConnectionError("down")]), degrade_on_check_failure=False
    )
    result = await manager.generate("product", "1")
    assert result.success is False
    assert result.error_kind is ErrorKind.STORAGE


# -------------------------
# Misc
# -------------------------

async def test_validate_slug_static():
    assert LinkManager.validate_slug("X7gT5p") is True
    assert LinkManager.validate_slug("laptop-dell", mode="framework") is True
    assert LinkManager.validate_slug("laptop-dell") is False


async def test_lifecycle_delegates_to_storage():
    storage = AsyncMock()
    storage.health_check.return_value = True
    manager = _manager(storage)

    await manager.initialize()
    assert await manager.health_check() is True
    await manager.close()

    storage.initialize.assert_awaited_once()
    storage.close.assert_awaited_once()


async def test_default_storage_from_factory(monkeypatch):
    monkeypatch.setenv("LONGLINK_STORAGE_BACKEND", "memory")
    assert isinstance(LinkManager().storage, Storage)


# -------------------------
# Caller errors
# -------------------------

@pytest.mark.parametrize("url_base", ["", "   ", None, 42])
async def test_shorten_requires_destination(storage, scripted, url_base):
    backing = scripted([])
    manager = _manager(storage, existence_check=backing)

    result = await manager.shorten("product", "p1", url_base)

    assert result.success is False
    assert result.error_kind is ErrorKind.CONFIGURATION
    assert result.error == "url_base must be a non-empty string"
    backing.assert_not_awaited()
    assert storage.records == {}


async def test_generate_non_string_entity_id(storage):
    result = await _manager(storage).generate("product", 123)
    assert result.success is False
    assert result.error_kind is ErrorKind.CONFIGURATION


async def test_generate_non_string_entity_type(storage):
    result = await _manager(storage, entities=ENTITIES).generate(["product"], "p1")
    assert result.success is False
    assert result.error_kind is ErrorKind.CONFIGURATION
    assert result.entity_type is None


async def test_shorten_invalid_metadata(storage, ids):
    result = await _manager(storage, ids).shorten("product", "p1", "https://shop.example/p/1", metadata=["x"])
    assert result.success is False
    assert result.error_kind is ErrorKind.CONFIGURATION
    assert storage.records == {}
