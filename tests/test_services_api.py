#!/usr/bin/env python3
"""
Tests for services_models.py and services_api.py.

Run with:
    python -m pytest tests/test_services_api.py
"""
import os
import sys
import threading
import unittest
from unittest.mock import MagicMock, patch

import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services_api import ApiCall, ApiResponse, ServicesApiClient, SERVICES_PATH
from services_models import Err, Ok, ServiceRecord


BASE_URL = "https://api.example.com/v1/"


def _make_response(status_code=200, payload=None, content=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    if content is None:
        content = b'{"message": "x"}' if payload is not None else b""
    resp.content = content
    resp.text = text
    resp.json.return_value = payload
    return resp


# ===========================================================================
# ServiceRecord / results
# ===========================================================================

class TestServiceRecord(unittest.TestCase):

    def test_from_dict(self):
        self.assertEqual(ServiceRecord.from_dict({"message": "ok"}).message, "ok")

    def test_extra_keys_ignored(self):
        record = ServiceRecord.from_dict({"message": "hi", "version": 3})
        self.assertEqual(record, ServiceRecord("hi"))

    def test_missing_message_raises(self):
        with self.assertRaises(ValueError):
            ServiceRecord.from_dict({"msg": "hi"})

    def test_non_string_message_raises(self):
        with self.assertRaises(ValueError):
            ServiceRecord.from_dict({"message": 42})

    def test_non_object_raises(self):
        with self.assertRaises(ValueError):
            ServiceRecord.from_dict(["message"])

    def test_to_dict(self):
        self.assertEqual(ServiceRecord("a").to_dict(), {"message": "a"})


class TestResults(unittest.TestCase):

    def test_ok_message_is_record_message(self):
        result = Ok(ServiceRecord("ok"))
        self.assertTrue(result.ok)
        self.assertEqual(result.message, "ok")

    def test_err_message_is_prefixed(self):
        result = Err(RuntimeError("boom"))
        self.assertFalse(result.ok)
        self.assertEqual(result.detail, "boom")
        self.assertEqual(result.message, "Error fetching services: boom")


# ===========================================================================
# ServicesApiClient
# ===========================================================================

class TestServicesApiClientInit(unittest.TestCase):

    def test_requires_base_url(self):
        with self.assertRaises(ValueError):
            ServicesApiClient("")

    def test_rejects_blank_base_url(self):
        with self.assertRaises(ValueError):
            ServicesApiClient("   ")

    def test_adds_trailing_slash(self):
        c = ServicesApiClient("https://api.example.com/v1")
        self.assertEqual(c.base_url, "https://api.example.com/v1/")

    def test_services_url_is_relative_to_base(self):
        call = ServicesApiClient("https://api.example.com/v1").get_services()
        self.assertEqual(call.url, "https://api.example.com/v1/" + SERVICES_PATH)

    def test_each_call_is_new(self):
        c = ServicesApiClient(BASE_URL)
        self.assertIsNot(c.get_services(), c.get_services())


class TestApiCallExecute(unittest.TestCase):

    @patch("services_api.requests.get")
    def test_success_parses_body(self, mock_get):
        mock_get.return_value = _make_response(200, {"message": "ok"})
        response = ServicesApiClient(BASE_URL).get_services().execute()
        self.assertTrue(response.is_successful)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.body, ServiceRecord("ok"))

    @patch("services_api.requests.get")
    def test_plain_get_without_params_or_auth(self, mock_get):
        mock_get.return_value = _make_response(200, {"message": "ok"})
        ServicesApiClient(BASE_URL).get_services().execute()
        mock_get.assert_called_once_with(BASE_URL + "services", timeout=None)

    @patch("services_api.requests.get")
    def test_timeout_passed_through(self, mock_get):
        mock_get.return_value = _make_response(200, {"message": "ok"})
        ServicesApiClient(BASE_URL, timeout=5).get_services().execute()
        self.assertEqual(mock_get.call_args.kwargs["timeout"], 5)

    @patch("services_api.requests.get")
    def test_error_status_not_parsed(self, mock_get):
        resp = _make_response(500, text="internal error")
        mock_get.return_value = resp
        response = ServicesApiClient(BASE_URL).get_services().execute()
        self.assertFalse(response.is_successful)
        self.assertEqual(response.status_code, 500)
        self.assertIsNone(response.body)
        self.assertEqual(response.error_body, "internal error")
        resp.json.assert_not_called()

    @patch("services_api.requests.get")
    def test_empty_success_body_is_none(self, mock_get):
        mock_get.return_value = _make_response(204)
        response = ServicesApiClient(BASE_URL).get_services().execute()
        self.assertTrue(response.is_successful)
        self.assertIsNone(response.body)

    @patch("services_api.requests.get")
    def test_json_null_body_is_none(self, mock_get):
        mock_get.return_value = _make_response(200, None, content=b"null")
        response = ServicesApiClient(BASE_URL).get_services().execute()
        self.assertIsNone(response.body)

    @patch("services_api.requests.get")
    def test_malformed_body_raises_value_error(self, mock_get):
        mock_get.return_value = _make_response(200, {"unexpected": True})
        with self.assertRaises(ValueError):
            ServicesApiClient(BASE_URL).get_services().execute()

    @patch("services_api.requests.get")
    def test_network_error_propagates(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("network down")
        with self.assertRaises(requests.RequestException):
            ServicesApiClient(BASE_URL).get_services().execute()


class TestApiResponse(unittest.TestCase):

    def test_success_range(self):
        self.assertTrue(ApiResponse(200).is_successful)
        self.assertTrue(ApiResponse(299).is_successful)
        self.assertFalse(ApiResponse(199).is_successful)
        self.assertFalse(ApiResponse(300).is_successful)
        self.assertFalse(ApiResponse(404).is_successful)


class TestApiCallEnqueue(unittest.TestCase):

    @patch("services_api.requests.get")
    def test_response_delivered_on_worker_thread(self, mock_get):
        mock_get.return_value = _make_response(200, {"message": "ok"})
        seen = {}

        def on_response(response):
            seen["response"] = response
            seen["thread"] = threading.current_thread()

        on_failure = MagicMock()
        worker = ServicesApiClient(BASE_URL).get_services().enqueue(on_response, on_failure)
        worker.join(timeout=5)

        self.assertFalse(worker.is_alive())
        self.assertTrue(worker.daemon)
        self.assertEqual(seen["response"].body, ServiceRecord("ok"))
        self.assertIsNot(seen["thread"], threading.current_thread())
        on_failure.assert_not_called()

    @patch("services_api.requests.get")
    def test_network_error_goes_to_on_failure(self, mock_get):
        exc = requests.ConnectionError("network down")
        mock_get.side_effect = exc
        on_response = MagicMock()
        on_failure = MagicMock()
        worker = ApiCall(BASE_URL + "services", ServiceRecord.from_dict).enqueue(on_response, on_failure)
        worker.join(timeout=5)
        on_failure.assert_called_once_with(exc)
        on_response.assert_not_called()

    @patch("services_api.requests.get")
    def test_parse_error_goes_to_on_failure(self, mock_get):
        mock_get.return_value = _make_response(200, {"nope": 1})
        on_response = MagicMock()
        on_failure = MagicMock()
        worker = ServicesApiClient(BASE_URL).get_services().enqueue(on_response, on_failure)
        worker.join(timeout=5)
        on_failure.assert_called_once()
        self.assertIsInstance(on_failure.call_args.args[0], ValueError)
        on_response.assert_not_called()

    @patch("services_api.requests.get")
    def test_non_value_error_from_parse_goes_to_on_failure(self, mock_get):
        mock_get.return_value = _make_response(200, {"message": "ok"})

        def parse(_data):
            raise TypeError("unexpected shape")

        on_response = MagicMock()
        on_failure = MagicMock()
        worker = ApiCall(BASE_URL + "services", parse).enqueue(on_response, on_failure)
        worker.join(timeout=5)
        on_failure.assert_called_once()
        self.assertIsInstance(on_failure.call_args.args[0], TypeError)
        on_response.assert_not_called()

    @patch("services_api.requests.get")
    def test_deeply_nested_body_goes_to_on_failure(self, mock_get):
        resp = _make_response(200, {"message": "ok"})
        resp.json.side_effect = RecursionError("maximum recursion depth exceeded")
        mock_get.return_value = resp
        on_response = MagicMock()
        on_failure = MagicMock()
        worker = ServicesApiClient(BASE_URL).get_services().enqueue(on_response, on_failure)
        worker.join(timeout=5)
        on_failure.assert_called_once()
        self.assertIsInstance(on_failure.call_args.args[0], RecursionError)
        on_response.assert_not_called()

    @patch("services_api.requests.get")
    def test_error_status_goes_to_on_response(self, mock_get):
        mock_get.return_value = _make_response(503)
        on_response = MagicMock()
        on_failure = MagicMock()
        worker = ServicesApiClient(BASE_URL).get_services().enqueue(on_response, on_failure)
        worker.join(timeout=5)
        on_response.assert_called_once()
        self.assertEqual(on_response.call_args.args[0].status_code, 503)
        on_failure.assert_not_called()


if __name__ == '__main__':
    unittest.main()
