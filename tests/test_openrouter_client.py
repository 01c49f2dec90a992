import json
import unittest

import httpx

from openrouter_search.clients.openrouter_client import OpenRouterClient
from openrouter_search.utils.errors import UpstreamError


def _client(handler) -> OpenRouterClient:
    return OpenRouterClient(
        api_key="sk-test",
        base_url="https://openrouter.test/api/v1",
        referer="https://example.test",
        title="Test Suite",
        transport=httpx.MockTransport(handler),
    )


class TestOpenRouterClient(unittest.IsolatedAsyncioTestCase):
    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["referer"] = request.headers.get("HTTP-Referer")
            seen["title"] = request.headers.get("X-Title")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

        await _client(handler).complete("openai/gpt-4o:online", "who won?")

        self.assertEqual(seen["url"], "https://openrouter.test/api/v1/chat/completions")
        self.assertEqual(seen["auth"], "Bearer sk-test")
        self.assertEqual(seen["referer"], "https://example.test")
        self.assertEqual(seen["title"], "Test Suite")
        self.assertEqual(
            seen["body"],
            {"model": "openai/gpt-4o:online", "messages": [{"role": "user", "content": "who won?"}]},
        )

    async def test_first_choice_content_is_returned_unaltered(self):
        text = "  Result with [link](https://example.com)\n"
        client = _client(lambda r: httpx.Response(200, json={"choices": [{"message": {"content": text}}, {"message": {"content": "second"}}]}))
        self.assertEqual(await client.complete("m", "q"), text)

    async def test_missing_content_yields_empty_string(self):
        bodies = [
            {"choices": []},
            {},
            {"choices": [{}]},
            {"choices": [{"message": {}}]},
            {"choices": [{"message": {"content": None}}]},
        ]
        for body in bodies:
            with self.subTest(body=body):
                client = _client(lambda r, body=body: httpx.Response(200, json=body))
                self.assertEqual(await client.complete("m", "q"), "")

    async def test_upstream_error_message_is_surfaced(self):
        client = _client(lambda r: httpx.Response(401, json={"error": {"message": "bad key", "code": 401}}))
        with self.assertRaises(UpstreamError) as ctx:
            await client.complete("m", "q")
        self.assertEqual(ctx.exception.message, "bad key")
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIn("bad key", str(ctx.exception))

    async def test_status_error_without_body_uses_transport_message(self):
        client = _client(lambda r: httpx.Response(502, text="Bad Gateway"))
        with self.assertRaises(UpstreamError) as ctx:
            await client.complete("m", "q")
        self.assertIn("502", ctx.exception.message)

    async def test_error_inside_success_body(self):
        client = _client(lambda r: httpx.Response(200, json={"error": {"message": "model not found"}}))
        with self.assertRaises(UpstreamError) as ctx:
            await client.complete("nope", "q")
        self.assertIn("model not found", str(ctx.exception))

    async def test_non_json_body_is_an_upstream_error(self):
        client = _client(lambda r: httpx.Response(200, text="<html>oops</html>"))
        with self.assertRaises(UpstreamError):
            await client.complete("m", "q")

    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(UpstreamError) as ctx:
            await _client(handler).complete("m", "q")
        self.assertIn("connection refused", str(ctx.exception))
        self.assertIsNone(ctx.exception.status_code)


if __name__ == "__main__":
    unittest.main()
