from db.init_db import create_collections


class TestCreateCollections:

    def test_creates_collections_and_indexes(self, database):
        create_collections(database)
        assert {"location", "student", "simpleStudent"} <= set(database.list_collection_names())
        indexed = {
            key
            for info in database["student"].index_information().values()
            for key, _ in info["key"]
        }
        assert {"name", "hobbies.name", "location"} <= indexed

    def test_is_idempotent(self, database):
        create_collections(database)
        create_collections(database)
        assert set(database.list_collection_names()) >= {"location", "student", "simpleStudent"}
