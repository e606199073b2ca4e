"""
Unit tests for database operations
"""

import pytest

from database.operations import quote_to_dict, source_to_dict


@pytest.mark.unit
class TestSourceOperations:
    """Test source persistence"""

    async def test_create_and_get_source(self, db_operations):
        created = await db_operations.create_source("Marcus Aurelius")

        assert created['name'] == "Marcus Aurelius"
        assert created['created_at'] is not None

        fetched = await db_operations.get_source_by_id(created['id'])
        assert fetched['id'] == created['id']
        assert fetched['name'] == "Marcus Aurelius"

    async def test_get_missing_source(self, db_operations):
        assert await db_operations.get_source_by_id("00000000-0000-0000-0000-000000000000") is None

    async def test_sources_sorted_by_name(self, db_operations, seed_source):
        seed_source("Seneca")
        seed_source("Epictetus")
        seed_source("Marcus Aurelius")

        names = [source['name'] for source in await db_operations.get_all_sources()]
        assert names == ["Epictetus", "Marcus Aurelius", "Seneca"]

    async def test_update_source(self, db_operations, seed_source):
        source_id = seed_source("Senca")

        updated = await db_operations.update_source(source_id, "Seneca")

        assert updated['name'] == "Seneca"
        assert updated['updated_at'] >= updated['created_at']
        assert await db_operations.update_source("missing", "x") is None

    async def test_delete_source_detaches_quotes(self, db_operations, seed):
        ids = seed(["Waste no more time arguing"], source_name="Marcus Aurelius")
        quote = await db_operations.get_quote_by_id(ids["Waste no more time arguing"])

        assert await db_operations.delete_source(quote['source_id']) is True

        remaining = await db_operations.get_quote_by_id(quote['id'])
        assert remaining is not None
        assert remaining['source_id'] is None
        assert remaining['source'] is None
        assert await db_operations.count_sources() == 0

    async def test_delete_missing_source(self, db_operations):
        assert await db_operations.delete_source("missing") is False


@pytest.mark.unit
class TestQuoteOperations:
    """Test quote persistence"""

    async def test_create_quote_without_source(self, db_operations):
        quote = await db_operations.create_quote("Know thyself")

        assert quote['text'] == "Know thyself"
        assert quote['source_id'] is None
        assert quote['source'] is None

    async def test_create_quote_with_source(self, db_operations, seed_source):
        source_id = seed_source("Seneca")

        quote = await db_operations.create_quote("Luck is what happens when preparation meets opportunity", source_id)

        assert quote['source_id'] == source_id
        assert quote['source']['name'] == "Seneca"

    async def test_quotes_sorted_by_text(self, db_operations, seed):
        seed(["Charlie", "alpha", "Bravo"])

        texts = [quote['text'] for quote in await db_operations.get_all_quotes()]
        # 二进制排序：大写字母在小写字母之前
        assert texts == ["Bravo", "Charlie", "alpha"]

    async def test_search_is_case_sensitive(self, db_operations, seed):
        seed(["The Way", "the way", "Highway to nowhere"])

        texts = [quote['text'] for quote in await db_operations.search_quotes("way")]
        assert texts == ["Highway to nowhere", "the way"]

    async def test_search_treats_wildcards_literally(self, db_operations, seed):
        seed(["100% sure", "1000 times", "snake_case", "snakecase"])

        assert [q['text'] for q in await db_operations.search_quotes("0% ")] == ["100% sure"]
        assert [q['text'] for q in await db_operations.search_quotes("e_c")] == ["snake_case"]

    async def test_search_without_match(self, db_operations, seed):
        seed(["Know thyself"])
        assert await db_operations.search_quotes("nothing") == []

    async def test_count_quotes(self, db_operations, seed):
        seed(["one", "two"])
        seed(["three"], source_name="Someone")

        assert await db_operations.count_quotes() == 3
        assert await db_operations.count_quotes(unattributed_only=True) == 2

    async def test_quote_at_offset(self, db_operations, seed):
        seed(["E", "C", "A", "D", "B"])

        assert (await db_operations.get_quote_at_offset(0))['text'] == "A"
        assert (await db_operations.get_quote_at_offset(2))['text'] == "C"
        assert (await db_operations.get_quote_at_offset(4))['text'] == "E"
        assert await db_operations.get_quote_at_offset(5) is None

    async def test_random_quote(self, db_operations, seed):
        assert await db_operations.get_random_quote() is None

        ids = seed(["one", "two", "three"])
        quote = await db_operations.get_random_quote()
        assert quote['id'] in ids.values()

    async def test_quotes_by_source(self, db_operations, seed):
        seed(["unrelated"])
        ids = seed(["b quote", "a quote"], source_name="Author")
        source_id = (await db_operations.get_quote_by_id(ids["a quote"]))['source_id']

        texts = [q['text'] for q in await db_operations.get_quotes_by_source(source_id)]
        assert texts == ["a quote", "b quote"]

    async def test_update_quote(self, db_operations, seed, seed_source):
        ids = seed(["old text"])
        source_id = seed_source("Author")

        updated = await db_operations.update_quote(ids["old text"], {'text': "new text", 'source_id': source_id})

        assert updated['text'] == "new text"
        assert updated['source']['id'] == source_id

        cleared = await db_operations.update_quote(ids["old text"], {'source_id': None})
        assert cleared['text'] == "new text"
        assert cleared['source'] is None

    async def test_update_missing_quote(self, db_operations):
        assert await db_operations.update_quote("missing", {'text': "x"}) is None

    async def test_delete_quote(self, db_operations, seed):
        ids = seed(["doomed"])

        assert await db_operations.delete_quote(ids["doomed"]) is True
        assert await db_operations.get_quote_by_id(ids["doomed"]) is None
        assert await db_operations.delete_quote(ids["doomed"]) is False


@pytest.mark.unit
class TestConversions:
    """Test ORM to dict conversions"""

    def test_none_passes_through(self):
        assert quote_to_dict(None) is None
        assert source_to_dict(None) is None
