#!/usr/bin/env python3
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
"""
Integration tests: full authorization and add flow over a mocked HTTP
session and a settings file on disk.
"""
import json
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock

import requests

from api_client import PocketAPIClient
from errors import RemoteAPIError
from pocket_client import PocketClient
from storage import JSONSettingsStore

REDIRECT_URI = "http://localhost:7070/pocket/callback"


def make_response(body=None, status_code=200, headers=None):
    response = requests.models.Response()
    response.status_code = status_code
    response.headers.update(headers or {})
    response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return response


class TestAuthorizeAndAdd(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.test_dir, "settings.json")
        JSONSettingsStore(self.path).update({"consumer_key": "test-consumer-key"})
        self.mock_session = MagicMock()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def new_client(self):
        return PocketClient(
            JSONSettingsStore(self.path), PocketAPIClient(session=self.mock_session)
        )

    def test_authorization_in_one_session_add_in_another(self):
        adder = self.new_client()
        authorizer = self.new_client()
        self.mock_session.post.side_effect = [
            make_response({"code": "abc123"}),
            make_response({"access_token": "tok1", "username": "alice"}),
            make_response({"item": {"item_id": "999", "status": "0"}, "status": 1}),
        ]

        authorizer.obtain_request_token(REDIRECT_URI)
        self.assertIn("abc123", authorizer.build_authorization_url(REDIRECT_URI))
        result = authorizer.complete_authorization()
        item = adder.add("http://example.com")

        self.assertEqual(result.username, "alice")
        self.assertEqual(item.item_id, "999")
        with open(self.path, "r", encoding="utf-8") as f:
            self.assertEqual(json.load(f)["access_token"], "tok1")

        urls = [c[0][0] for c in self.mock_session.post.call_args_list]
        self.assertEqual(
            urls,
            [
                "https://getpocket.com/v3/oauth/request",
                "https://getpocket.com/v3/oauth/authorize",
                "https://getpocket.com/v3/add",
            ],
        )
        add_body = json.loads(self.mock_session.post.call_args[1]["data"])
        self.assertEqual(
            add_body,
            {
                "url": "http://example.com",
                "access_token": "tok1",
                "consumer_key": "test-consumer-key",
            },
        )

    def test_rate_limited_on_every_endpoint(self):
        client = self.new_client()
        JSONSettingsStore(self.path).update({"access_token": "tok1"})
        self.mock_session.post.return_value = make_response(
            status_code=403, headers={"X-Error": "rate limited"}
        )

        with self.assertRaises(RemoteAPIError) as ctx:
            client.obtain_request_token(REDIRECT_URI)
        self.assertIn("rate limited", str(ctx.exception))

        with self.assertRaises(RemoteAPIError) as ctx:
            client.add("http://example.com")
        self.assertIn("rate limited", str(ctx.exception))

        client.credentials.request_token = "abc123"
        with self.assertRaises(RemoteAPIError) as ctx:
            client.complete_authorization()
        self.assertIn("rate limited", str(ctx.exception))
        self.assertEqual(self.mock_session.post.call_count, 3)


if __name__ == "__main__":
    unittest.main()
