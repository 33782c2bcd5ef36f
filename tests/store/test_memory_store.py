"""
In-memory document store behaviour
"""

import pytest
import pytest_asyncio

from blog_api.database.base import StoreError
from blog_api.database.memory import MemoryDatabase


@pytest_asyncio.fixture
async def memory_db():
    db = MemoryDatabase()
    await db.connect()
    yield db
    await db.close()


@pytest.fixture
def posts(memory_db):
    return memory_db.collection("posts")


def _post(title, first="Jane", last="Doe"):
    return {"title": title, "content": f"{title} body", "author": {"firstName": first, "lastName": last}}


class TestInsert:

    async def test_assigns_id_and_created(self, posts):
        stored = await posts.insert_one(_post("a"))

        assert stored["id"]
        assert stored["created"].tzinfo is not None
        assert stored["title"] == "a"

    async def test_ids_are_unique(self, posts):
        stored = await posts.insert_many([_post(str(i)) for i in range(50)])

        assert len({doc["id"] for doc in stored}) == 50

    async def test_insert_many_keeps_input_order(self, posts):
        stored = await posts.insert_many([_post("first"), _post("second"), _post("third")])

        assert [doc["title"] for doc in stored] == ["first", "second", "third"]
        assert [doc["title"] for doc in await posts.find()] == ["first", "second", "third"]

    async def test_caller_cannot_choose_id_or_created(self, posts):
        stored = await posts.insert_one({**_post("a"), "id": "mine", "created": "yesterday"})

        assert stored["id"] != "mine"
        assert stored["created"] != "yesterday"
        assert await posts.find_by_id("mine") is None


class TestQueries:

    async def test_find_by_id(self, posts):
        stored = await posts.insert_one(_post("a"))

        assert await posts.find_by_id(stored["id"]) == stored
        assert await posts.find_by_id("unknown") is None

    async def test_find_one_with_dotted_path(self, posts):
        await posts.insert_many([_post("a", last="Smith"), _post("b", last="Jones"), _post("c", last="Jones")])

        found = await posts.find_one({"author.lastName": "Jones"})

        assert found["title"] == "b"
        assert await posts.find_one({"author.lastName": "Nobody"}) is None

    async def test_find_and_count_with_filters(self, posts):
        await posts.insert_many([_post("a", first="Ann"), _post("b", first="Bob"), _post("c", first="Ann")])

        assert [doc["title"] for doc in await posts.find({"author.firstName": "Ann"})] == ["a", "c"]
        assert await posts.count() == 3
        assert await posts.count({"author.firstName": "Ann"}) == 2
        assert await posts.count({"title": "zzz"}) == 0

    async def test_returned_documents_are_copies(self, posts):
        stored = await posts.insert_one(_post("a"))
        stored["title"] = "changed"
        stored["author"]["lastName"] = "changed"

        fetched = await posts.find_by_id(stored["id"])
        fetched["title"] = "changed again"

        again = await posts.find_by_id(stored["id"])
        assert again["title"] == "a"
        assert again["author"]["lastName"] == "Doe"


class TestUpdateAndDelete:

    async def test_update_sets_only_given_fields(self, posts):
        stored = await posts.insert_one(_post("a", first="Jane", last="Doe"))

        updated = await posts.update_by_id(stored["id"], {"title": "b", "author.lastName": "Roe"})

        assert updated["title"] == "b"
        assert updated["content"] == "a body"
        assert updated["author"] == {"firstName": "Jane", "lastName": "Roe"}
        assert updated["created"] == stored["created"]
        assert await posts.find_by_id(stored["id"]) == updated

    async def test_update_never_rewrites_id_or_created(self, posts):
        stored = await posts.insert_one(_post("a"))

        updated = await posts.update_by_id(stored["id"], {"id": "other", "created": "now", "title": "b"})

        assert updated["id"] == stored["id"]
        assert updated["created"] == stored["created"]

    async def test_update_unknown_id(self, posts):
        assert await posts.update_by_id("unknown", {"title": "b"}) is None

    async def test_delete(self, posts):
        stored = await posts.insert_one(_post("a"))

        assert await posts.delete_by_id(stored["id"]) is True
        assert await posts.find_by_id(stored["id"]) is None
        assert await posts.delete_by_id(stored["id"]) is False


class TestDatabase:

    async def test_collections_are_separate(self, memory_db):
        await memory_db.collection("posts").insert_one(_post("a"))

        assert await memory_db.collection("drafts").count() == 0
        assert memory_db.collection("posts") is memory_db.collection("posts")

    async def test_drop_database_empties_every_collection(self, memory_db, posts):
        await posts.insert_many([_post("a"), _post("b")])
        await memory_db.collection("drafts").insert_one(_post("c"))

        await memory_db.drop_database()

        assert await posts.count() == 0
        assert await memory_db.collection("drafts").count() == 0

    async def test_closed_database_raises_store_error(self, memory_db, posts):
        await memory_db.close()

        with pytest.raises(StoreError):
            await posts.find()
        with pytest.raises(StoreError):
            await memory_db.ping()
