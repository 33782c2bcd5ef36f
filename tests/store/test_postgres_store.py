"""
PostgreSQL document store

Query building is checked without a server. The round-trip tests need
TEST_DATABASE_URL=postgresql://... and are skipped otherwise.
"""

import json

import pytest
import pytest_asyncio

from blog_api.config.settings import TEST_DATABASE_URL
from blog_api.database.postgres import PostgresCollection, PostgresDatabase, _build_where

requires_postgres = pytest.mark.skipif(
    not TEST_DATABASE_URL.startswith(("postgres://", "postgresql://")),
    reason="TEST_DATABASE_URL does not point at PostgreSQL"
)


class TestBuildWhere:

    def test_no_filters(self):
        assert _build_where(None) == ("", [])
        assert _build_where({}) == ("", [])

    def test_id_uses_the_column(self):
        assert _build_where({"id": "abc"}) == (" WHERE id = $1", ["abc"])

    def test_dotted_paths_become_containment(self):
        where, params = _build_where({"author.lastName": "Doe", "title": "t"})

        assert where == " WHERE doc @> $1::jsonb"
        assert json.loads(params[0]) == {"author": {"lastName": "Doe"}, "title": "t"}

    def test_column_and_document_filters_combine(self):
        where, params = _build_where({"title": "t", "id": "abc"}, first_param=3)

        assert where == " WHERE id = $3 AND doc @> $4::jsonb"
        assert params[0] == "abc"
        assert json.loads(params[1]) == {"title": "t"}


class TestIdentifiers:

    @pytest.mark.parametrize("name", ["Posts", "posts; DROP TABLE x", "1posts", ""])
    def test_rejects_unsafe_collection_names(self, name):
        database = PostgresDatabase("postgresql://localhost/unused")

        with pytest.raises(ValueError):
            PostgresCollection(name, database)

    def test_rejects_unsafe_schema(self):
        with pytest.raises(ValueError):
            PostgresDatabase("postgresql://localhost/unused", schema='x"; --')


@pytest_asyncio.fixture
async def pg_db():
    db = PostgresDatabase(TEST_DATABASE_URL, schema="documents_test", min_size=1, max_size=2)
    await db.connect()
    await db.drop_database()
    yield db
    await db.drop_database()
    await db.close()


def _post(title, last="Doe"):
    return {"title": title, "content": f"{title} body", "author": {"firstName": "Jane", "lastName": last}}


@pytest.mark.postgres
@requires_postgres
class TestPostgresRoundTrip:

    async def test_insert_and_find(self, pg_db):
        posts = pg_db.collection("posts")
        stored = await posts.insert_many([_post("a"), _post("b", last="Roe")])

        assert [doc["title"] for doc in await posts.find()] == ["a", "b"]
        assert await posts.find_by_id(stored[1]["id"]) == stored[1]
        assert (await posts.find_one({"author.lastName": "Roe"}))["title"] == "b"
        assert await posts.count() == 2

    async def test_update_is_partial_and_keeps_created(self, pg_db):
        posts = pg_db.collection("posts")
        stored = await posts.insert_one(_post("a"))

        updated = await posts.update_by_id(stored["id"], {"title": "b", "author.lastName": "Roe", "created": "x"})

        assert updated["title"] == "b"
        assert updated["author"] == {"firstName": "Jane", "lastName": "Roe"}
        assert updated["created"] == stored["created"]
        assert await posts.update_by_id("unknown", {"title": "c"}) is None

    async def test_delete_and_drop(self, pg_db):
        posts = pg_db.collection("posts")
        stored = await posts.insert_many([_post("a"), _post("b")])

        assert await posts.delete_by_id(stored[0]["id"]) is True
        assert await posts.delete_by_id(stored[0]["id"]) is False

        await pg_db.drop_database()
        assert await posts.count() == 0

    async def test_ping(self, pg_db):
        await pg_db.ping()
