import os
import threading
import time
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from fastapi.testclient import TestClient

from venuecharge import dependencies
from venuecharge.app import create_app
from venuecharge.config import Settings
from venuecharge.db import InMemoryStorageClient, PostgresStorageClient


class StorageSelectionTests(unittest.TestCase):
    def setUp(self):
        dependencies._storage_client = None

    def tearDown(self):
        dependencies._storage_client = None

    @patch("venuecharge.dependencies.get_settings")
    def test_no_database_url_selects_in_memory(self, mock_settings):
        mock_settings.return_value = Settings(database_url=None)
        self.assertIsInstance(dependencies.get_storage_client(), InMemoryStorageClient)

    @patch("venuecharge.dependencies.get_settings")
    def test_database_url_selects_database_backend(self, mock_settings):
        mock_settings.return_value = Settings(
            database_url="sqlite+pysqlite:///:memory:"
        )
        storage = dependencies.get_storage_client()
        self.assertIsInstance(storage, PostgresStorageClient)
        self.assertTrue(storage.connected)

    @patch("venuecharge.dependencies.get_settings")
    def test_in_memory_toggle_wins(self, mock_settings):
        mock_settings.return_value = Settings(
            database_url="sqlite+pysqlite:///:memory:", use_in_memory_backends=True
        )
        self.assertIsInstance(dependencies.get_storage_client(), InMemoryStorageClient)

    @patch("venuecharge.dependencies.get_settings")
    def test_selection_is_made_once(self, mock_settings):
        mock_settings.return_value = Settings(database_url=None)
        first = dependencies.get_storage_client()
        mock_settings.return_value = Settings(
            database_url="sqlite+pysqlite:///:memory:"
        )
        self.assertIs(dependencies.get_storage_client(), first)
        mock_settings.assert_called_once()

    @patch("venuecharge.dependencies.get_settings")
    def test_concurrent_first_calls_share_one_backend(self, mock_settings):
        mock_settings.return_value = Settings(database_url=None)
        built = []

        class SlowInMemoryStorageClient(InMemoryStorageClient):
            def __init__(self):
                time.sleep(0.2)
                super().__init__()
                built.append(self)

        barrier = threading.Barrier(4)

        def first_call():
            barrier.wait()
            return dependencies.get_storage_client()

        with patch(
            "venuecharge.dependencies.InMemoryStorageClient", SlowInMemoryStorageClient
        ):
            with ThreadPoolExecutor(max_workers=4) as pool:
                clients = list(pool.map(lambda _: first_call(), range(4)))

        self.assertEqual(len(built), 1)
        self.assertTrue(all(client is built[0] for client in clients))

    @patch("venuecharge.dependencies.get_settings")
    def test_concurrent_first_requests_keep_every_record(self, mock_settings):
        mock_settings.return_value = Settings(database_url=None)

        class SlowInMemoryStorageClient(InMemoryStorageClient):
            def __init__(self):
                time.sleep(0.2)
                super().__init__()

        client = TestClient(create_app())
        venue = {"name": "Dock Bar", "contactName": "Lee", "email": "lee@dock.com"}
        with patch(
            "venuecharge.dependencies.InMemoryStorageClient", SlowInMemoryStorageClient
        ):
            with ThreadPoolExecutor(max_workers=4) as pool:
                responses = list(
                    pool.map(
                        lambda _: client.post("/api/venues", json=venue), range(4)
                    )
                )

        self.assertEqual([r.status_code for r in responses], [201] * 4)
        listed = client.get("/api/venues").json()
        self.assertEqual(len(listed), 4)
        self.assertEqual(sorted(v["id"] for v in listed), [1, 2, 3, 4])


class SettingsTests(unittest.TestCase):
    def test_reads_environment(self):
        env = {
            "DATABASE_URL": "postgresql://u:p@localhost/site",
            "API_PREFIX": "/v1",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.database_url, "postgresql://u:p@localhost/site")
        self.assertEqual(settings.api_prefix, "/v1")
        self.assertEqual(settings.log_level, "debug")
        self.assertFalse(settings.use_in_memory_backends)


if __name__ == "__main__":
    unittest.main()
