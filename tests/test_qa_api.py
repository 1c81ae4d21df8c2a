import unittest
from unittest.mock import MagicMock, patch

import requests

from config.settings import DEFAULT_QA_USER_AGENT
from ingestion.qa_api import (
    QAApiService,
    detect_access_restricted,
    extract_title,
    get_qa_api_service,
    reset_qa_api_service,
)


def _response(status=200, json_data=None, text="", headers=None):
    response = MagicMock()
    response.status_code = status
    response.text = text
    response.headers = headers or {}
    response.url = "https://nonprd-delta.stopandshop.com/"
    if json_data is None:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = json_data
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error", response=response)
    return response


class TestQAApiService(unittest.TestCase):
    def setUp(self):
        self.session = requests.Session()
        self.service = QAApiService(
            base_url="https://nonprd-delta.stopandshop.com/",
            session=self.session,
            retry_delay=0.01,
        )

    def test_session_headers(self):
        self.assertEqual(self.session.headers["User-Agent"], DEFAULT_QA_USER_AGENT)
        self.assertIn("gzip", self.session.headers["Accept-Encoding"])
        self.assertIn(QAApiService._log_response, self.session.hooks["response"])

    def test_url_building(self):
        self.assertEqual(self.service.base_url, "https://nonprd-delta.stopandshop.com")
        self.assertEqual(self.service._url("/cart"), "https://nonprd-delta.stopandshop.com/cart")
        self.assertEqual(self.service._url("cart"), "https://nonprd-delta.stopandshop.com/cart")
        self.assertEqual(self.service._url("https://example.com/x"), "https://example.com/x")

    def test_timeout_converted_to_seconds(self):
        with patch.object(self.session, "request", return_value=_response(json_data={})) as mock_request:
            self.service.test_endpoint("/cart")
        _, kwargs = mock_request.call_args
        self.assertEqual(kwargs["timeout"], 30.0)

    def test_endpoint_success(self):
        with patch.object(self.session, "request", return_value=_response(json_data={"items": []})):
            result = self.service.test_endpoint("/cart")
        self.assertTrue(result.success)
        self.assertEqual(result.status, 200)
        self.assertEqual(result.data, {"items": []})
        self.assertIsNone(result.error)

    def test_endpoint_text_body(self):
        with patch.object(self.session, "request", return_value=_response(text="<html></html>")):
            result = self.service.test_endpoint("/")
        self.assertEqual(result.data, "<html></html>")

    def test_endpoint_http_error(self):
        with patch.object(self.session, "request", return_value=_response(status=403)):
            result = self.service.test_endpoint("/cart")
        self.assertFalse(result.success)
        self.assertEqual(result.status, 403)
        self.assertIn("403", result.error)

    def test_endpoint_connection_error(self):
        with patch.object(self.session, "request", side_effect=requests.ConnectionError("refused")):
            result = self.service.test_endpoint("/cart")
        self.assertFalse(result.success)
        self.assertEqual(result.status, 0)
        self.assertEqual(result.error, "refused")

    def test_product_search_counts_results(self):
        with patch.object(self.session, "request", return_value=_response(json_data=[{"id": 1}, {"id": 2}])) as mock_request:
            result = self.service.test_product_search("milk")
        self.assertTrue(result.success)
        self.assertEqual(result.products_found, 2)
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("GET", "https://nonprd-delta.stopandshop.com/api/products/search"))
        self.assertEqual(kwargs["params"], {"q": "milk"})

    def test_product_search_non_list_body(self):
        with patch.object(self.session, "request", return_value=_response(json_data={"results": [1, 2]})):
            result = self.service.test_product_search("milk")
        self.assertTrue(result.success)
        self.assertEqual(result.products_found, 0)

    def test_product_search_failure(self):
        with patch.object(self.session, "request", return_value=_response(status=500)):
            result = self.service.test_product_search("milk")
        self.assertFalse(result.success)
        self.assertEqual(result.products_found, 0)

    def test_page_load(self):
        html = "<html><head><title> Stop &amp; Shop </title></head><body>ok</body></html>"
        response = _response(text=html, headers={"content-length": "1234"})
        with patch.object(self.session, "request", return_value=response):
            result = self.service.test_page_load("/")
        self.assertTrue(result.success)
        self.assertEqual(result.content_length, 1234)
        self.assertEqual(result.title, "Stop & Shop")
        self.assertFalse(result.access_restricted)

    def test_page_load_bad_content_length(self):
        response = _response(text="<html></html>", headers={"content-length": "abc"})
        with patch.object(self.session, "request", return_value=response):
            result = self.service.test_page_load("/")
        self.assertEqual(result.content_length, 0)

    def test_page_load_block_page(self):
        response = _response(text="<html><title>Blocked</title>Access is temporarily restricted</html>")
        with patch.object(self.session, "request", return_value=response):
            result = self.service.test_page_load("/")
        self.assertTrue(result.success)
        self.assertTrue(result.access_restricted)


class TestRequestWithRetry(unittest.TestCase):
    def setUp(self):
        self.session = requests.Session()
        self.service = QAApiService(
            base_url="https://nonprd-delta.stopandshop.com",
            session=self.session,
            retry_attempts=3,
            retry_delay=1.0,
        )

    @patch("ingestion.qa_api.time.sleep")
    def test_succeeds_after_failures(self, mock_sleep):
        ok = _response(json_data={})
        side_effect = [requests.ConnectionError("down"), requests.ConnectionError("down"), ok]
        with patch.object(self.session, "request", side_effect=side_effect) as mock_request:
            response = self.service.request_with_retry("GET", "/cart")
        self.assertIs(response, ok)
        self.assertEqual(mock_request.call_count, 3)
        self.assertEqual(mock_sleep.call_count, 2)
        mock_sleep.assert_called_with(1.0)

    @patch("ingestion.qa_api.time.sleep")
    def test_raises_after_retries_exhausted(self, mock_sleep):
        with patch.object(self.session, "request", side_effect=requests.ConnectionError("down")) as mock_request:
            with self.assertRaises(requests.ConnectionError):
                self.service.request_with_retry("GET", "/cart")
        self.assertEqual(mock_request.call_count, 4)
        self.assertEqual(mock_sleep.call_count, 3)

    @patch("ingestion.qa_api.time.sleep")
    def test_zero_retries_means_single_attempt(self, mock_sleep):
        with patch.object(self.session, "request", return_value=_response(status=503)) as mock_request:
            with self.assertRaises(requests.HTTPError):
                self.service.request_with_retry("GET", "/cart", retries=0)
        self.assertEqual(mock_request.call_count, 1)
        mock_sleep.assert_not_called()


def test_extract_title():
    assert extract_title("<html><head><title>Giant Food</title></head></html>") == "Giant Food"
    assert extract_title("<html><body>no title</body></html>") is None
    assert extract_title("") is None


def test_detect_access_restricted():
    assert detect_access_restricted("<h1>Access Denied</h1>")
    assert not detect_access_restricted("<h1>Welcome</h1>")
    assert not detect_access_restricted("x" * 6000 + "access denied")


def test_shared_service_is_reused():
    reset_qa_api_service()
    try:
        assert get_qa_api_service() is get_qa_api_service()
    finally:
        reset_qa_api_service()
