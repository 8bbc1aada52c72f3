import unittest
from unittest.mock import patch

from bson import ObjectId
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from files_manager.db import DuplicateUserError, InMemoryDocumentStore, MongoDocumentStore
from files_manager.records import (
    FileRecord,
    is_root_parent,
    parent_to_wire,
    parse_object_id,
)


class InMemoryDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDocumentStore()

    def test_user_roundtrip_and_uniqueness(self):
        user = self.db.create_user("a@b.com", "hash")
        self.assertEqual(self.db.get_user(user.id), user)
        self.assertEqual(self.db.find_user_by_email("a@b.com"), user)
        self.assertIsNone(self.db.find_user_by_email("x@y.com"))
        with self.assertRaises(DuplicateUserError):
            self.db.create_user("a@b.com", "other")
        self.assertEqual(self.db.count_users(), 1)

    def test_children_are_scoped_by_user_and_parent(self):
        owner, stranger = ObjectId(), ObjectId()
        folder = self.db.create_file(
            user_id=owner, name="d", type="folder", is_public=False, parent_id=None
        )
        self.db.create_file(
            user_id=owner, name="f", type="file", is_public=False, parent_id=folder.id,
            local_path="/tmp/f",
        )
        self.db.create_file(
            user_id=stranger, name="s", type="folder", is_public=False, parent_id=None
        )
        self.assertEqual(self.db.count_children(owner, None), 1)
        self.assertEqual(self.db.count_children(owner, folder.id), 1)
        self.assertEqual(self.db.count_children(stranger, folder.id), 0)
        self.assertEqual(self.db.count_files(), 3)
        self.assertIsNone(self.db.get_file(folder.id, stranger))
        self.assertEqual(self.db.get_file(folder.id, owner), folder)


class MongoDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("files_manager.db.MongoClient")
        self.mongo_client = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = self.mongo_client.return_value
        self.collection = self.client.__getitem__.return_value.__getitem__.return_value

    def test_connect_pings_and_creates_indexes(self):
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager", timeout_ms=100)
        self.mongo_client.assert_called_once_with(
            "mongodb://localhost:27017", serverSelectionTimeoutMS=100
        )
        self.client.__getitem__.assert_called_with("files_manager")
        self.client.admin.command.assert_called_once_with("ping")
        self.assertTrue(store.is_alive())
        self.collection.create_index.assert_any_call([("email", 1)], unique=True)

    def test_unreachable_server_is_not_alive(self):
        self.client.admin.command.side_effect = ConnectionFailure("down")
        store = MongoDocumentStore("mongodb://nowhere:1", "files_manager")
        self.assertFalse(store.is_alive())
        self.collection.create_index.assert_not_called()

    def test_failed_call_updates_cached_state(self):
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        self.collection.count_documents.side_effect = ServerSelectionTimeoutError("gone")
        with self.assertRaises(ConnectionFailure):
            store.count_files()
        self.assertFalse(store.is_alive())

        self.collection.count_documents.side_effect = None
        self.collection.count_documents.return_value = 4
        self.assertEqual(store.count_files(), 4)
        self.assertTrue(store.is_alive())

    def test_list_children_uses_skip_and_limit(self):
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        user_id, file_id = ObjectId(), ObjectId()
        cursor = self.collection.find.return_value.skip.return_value.limit
        cursor.return_value = iter(
            [{"_id": file_id, "userId": user_id, "name": "d", "type": "folder",
              "isPublic": False, "parentId": None}]
        )

        records = store.list_children(user_id, None, skip=20, limit=20)

        self.collection.find.assert_called_once_with({"userId": user_id, "parentId": None})
        self.collection.find.return_value.skip.assert_called_once_with(20)
        cursor.assert_called_once_with(20)
        self.assertEqual(
            records,
            [FileRecord(id=file_id, user_id=user_id, name="d", type="folder")],
        )

    def test_get_file_scopes_to_owner(self):
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        self.collection.find_one.return_value = None
        file_id, user_id = ObjectId(), ObjectId()
        self.assertIsNone(store.get_file(file_id, user_id))
        self.collection.find_one.assert_called_once_with({"_id": file_id, "userId": user_id})

    def test_indexes_created_once_server_comes_back(self):
        self.client.admin.command.side_effect = ConnectionFailure("down")
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        self.assertFalse(store.is_alive())
        self.collection.create_index.assert_not_called()

        self.collection.count_documents.return_value = 0
        self.assertEqual(store.count_users(), 0)
        self.assertTrue(store.is_alive())
        self.collection.create_index.assert_any_call([("email", 1)], unique=True)
        self.assertEqual(self.collection.create_index.call_count, 2)

        store.count_files()
        self.assertEqual(self.collection.create_index.call_count, 2)

    def test_index_failure_does_not_break_startup(self):
        self.collection.create_index.side_effect = OperationFailure("duplicate emails")
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        self.assertTrue(store.is_alive())
        self.collection.count_documents.return_value = 2
        self.assertEqual(store.count_users(), 2)
        self.assertEqual(self.collection.create_index.call_count, 1)

    def test_create_file_inserts_record_document(self):
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        user_id = ObjectId()
        record = store.create_file(
            user_id=user_id, name="a", type="file", is_public=True, parent_id=None,
            local_path="/tmp/files_manager/x",
        )
        document = self.collection.insert_one.call_args.args[0]
        self.assertEqual(document, record.to_document())
        self.assertEqual(document["_id"], record.id)
        self.assertEqual(document["localPath"], "/tmp/files_manager/x")
        self.assertIsNone(document["parentId"])
        self.assertEqual(FileRecord.from_document(document), record)

    def test_create_user_stores_password_hash(self):
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        record = store.create_user("a@b.com", "hash")
        document = self.collection.insert_one.call_args.args[0]
        self.assertEqual(
            document, {"_id": record.id, "email": "a@b.com", "passwordHash": "hash"}
        )

    def test_duplicate_email_raises(self):
        store = MongoDocumentStore("mongodb://localhost:27017", "files_manager")
        self.collection.insert_one.side_effect = DuplicateKeyError("dup")
        with self.assertRaises(DuplicateUserError):
            store.create_user("a@b.com", "hash")


class IdentifierTests(unittest.TestCase):
    def test_parse_object_id(self):
        oid = ObjectId()
        self.assertEqual(parse_object_id(str(oid)), oid)
        self.assertEqual(parse_object_id(oid), oid)
        for bad in (None, 0, "0", "xyz", "a" * 12):
            with self.subTest(value=bad):
                self.assertIsNone(parse_object_id(bad))

    def test_root_parent_aliases(self):
        for value in (None, 0, "0", "", False):
            with self.subTest(value=value):
                self.assertTrue(is_root_parent(value))
        for value in ("1", 5, True, str(ObjectId())):
            with self.subTest(value=value):
                self.assertFalse(is_root_parent(value))

    def test_parent_to_wire(self):
        oid = ObjectId()
        self.assertEqual(parent_to_wire(None), 0)
        self.assertEqual(parent_to_wire(oid), str(oid))


if __name__ == "__main__":
    unittest.main()
