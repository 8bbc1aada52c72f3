import unittest
from unittest.mock import patch

from redis import exceptions as redis_exceptions

from files_manager.sessions import InMemorySessionStore, RedisSessionStore


class InMemorySessionStoreTests(unittest.TestCase):
    @patch("files_manager.sessions.time.time")
    def test_entries_expire(self, mock_time):
        store = InMemorySessionStore()
        mock_time.return_value = 1000.0
        store.set("auth_abc", "user-1", 60)
        self.assertEqual(store.get("auth_abc"), "user-1")

        mock_time.return_value = 1059.0
        self.assertEqual(store.get("auth_abc"), "user-1")

        mock_time.return_value = 1060.0
        self.assertIsNone(store.get("auth_abc"))
        self.assertNotIn("auth_abc", store.items)

    def test_delete(self):
        store = InMemorySessionStore()
        store.set("auth_abc", "user-1", 60)
        store.delete("auth_abc")
        store.delete("auth_missing")
        self.assertIsNone(store.get("auth_abc"))


class RedisSessionStoreTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("files_manager.sessions.redis.Redis.from_url")
        self.from_url = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = self.from_url.return_value

    def test_connect_and_set_with_expiry(self):
        store = RedisSessionStore("redis://localhost:6379/0", timeout_seconds=2)
        self.from_url.assert_called_once_with(
            "redis://localhost:6379/0",
            socket_timeout=2,
            socket_connect_timeout=2,
            decode_responses=True,
        )
        self.assertTrue(store.is_alive())

        store.set("auth_abc", "user-1", 86400)
        self.client.set.assert_called_once_with("auth_abc", "user-1", ex=86400)

        self.client.get.return_value = "user-1"
        self.assertEqual(store.get("auth_abc"), "user-1")

    def test_unreachable_server_is_not_alive(self):
        self.client.ping.side_effect = redis_exceptions.ConnectionError("refused")
        store = RedisSessionStore("redis://nowhere:6379/0")
        self.assertFalse(store.is_alive())

    def test_connection_loss_and_recovery(self):
        store = RedisSessionStore("redis://localhost:6379/0")
        self.client.get.side_effect = redis_exceptions.TimeoutError("slow")
        with self.assertRaises(redis_exceptions.TimeoutError):
            store.get("auth_abc")
        self.assertFalse(store.is_alive())

        self.client.get.side_effect = None
        self.client.get.return_value = None
        self.assertIsNone(store.get("auth_abc"))
        self.assertTrue(store.is_alive())

    def test_close(self):
        store = RedisSessionStore("redis://localhost:6379/0")
        store.close()
        self.client.close.assert_called_once_with()
        self.assertFalse(store.is_alive())


if __name__ == "__main__":
    unittest.main()
