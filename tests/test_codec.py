import json
import unittest

from gemini_chat import Conversation, Role, Turn
from gemini_chat.core import codec
from gemini_chat.core.errors import EmptyCandidatesError, MalformedResponseError


class TestEncode(unittest.TestCase):
    def setUp(self):
        self.conversation = Conversation()
        self.conversation.add_user("Hello")
        self.conversation.add_assistant("Hi there")
        self.conversation.add_user("How are you?")

    def test_request_shape(self):
        payload = json.loads(codec.encode(self.conversation.snapshot()))
        self.assertEqual(
            payload,
            {
                "contents": [
                    {"role": "user", "parts": [{"text": "Hello"}]},
                    {"role": "model", "parts": [{"text": "Hi there"}]},
                    {"role": "user", "parts": [{"text": "How are you?"}]},
                ]
            },
        )

    def test_encode_is_deterministic(self):
        snapshot = self.conversation.snapshot()
        self.assertEqual(codec.encode(snapshot), codec.encode(snapshot))
        self.assertEqual(codec.encode(snapshot), codec.encode(list(snapshot)))

    def test_system_instruction(self):
        payload = json.loads(codec.encode(self.conversation.snapshot(), "Be brief."))
        self.assertEqual(payload["systemInstruction"], {"parts": [{"text": "Be brief."}]})

    def test_non_ascii_is_utf8(self):
        body = codec.encode([Turn(Role.USER, "héllo ✓")])
        self.assertIn("héllo ✓".encode("utf-8"), body)

    def test_input_not_mutated(self):
        turns = [Turn(Role.USER, "a")]
        codec.encode(turns, "sys")
        self.assertEqual(turns, [Turn(Role.USER, "a")])


class TestDecode(unittest.TestCase):
    def test_extracts_first_candidate_text(self):
        raw = json.dumps({
            "candidates": [
                {"content": {"parts": [{"text": "first"}, {"text": "second"}]}},
                {"content": {"parts": [{"text": "other"}]}},
            ]
        }).encode()
        self.assertEqual(codec.decode(raw), "first")

    def test_missing_candidates_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            codec.decode(b'{"usageMetadata": {"totalTokenCount": 3}}')

    def test_empty_candidates(self):
        with self.assertRaises(EmptyCandidatesError):
            codec.decode(b'{"candidates": []}')

    def test_not_json_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            codec.decode(b"<html>Bad Gateway</html>")

    def test_invalid_utf8_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            codec.decode(b"\xff\xfe\xfa")

    def test_broken_access_paths_are_malformed(self):
        bodies = [
            [],
            {"candidates": {}},
            {"candidates": ["text"]},
            {"candidates": [{}]},
            {"candidates": [{"finishReason": "SAFETY"}]},
            {"candidates": [{"content": []}]},
            {"candidates": [{"content": {}}]},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{}]}}]},
            {"candidates": [{"content": {"parts": [{"text": None}]}}]},
            {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
        ]
        for body in bodies:
            with self.subTest(body=body):
                with self.assertRaises(MalformedResponseError):
                    codec.decode(json.dumps(body).encode())


class TestExtractErrorMessage(unittest.TestCase):
    def test_provider_error(self):
        raw = b'{"error": {"code": 403, "message": "Permission denied", "status": "PERMISSION_DENIED"}}'
        self.assertEqual(codec.extract_error_message(raw), "PERMISSION_DENIED: Permission denied")

    def test_message_only(self):
        self.assertEqual(codec.extract_error_message(b'{"error": {"message": "nope"}}'), "nope")

    def test_no_error_payload(self):
        self.assertIsNone(codec.extract_error_message(b"Service Unavailable"))
        self.assertIsNone(codec.extract_error_message(b'{"error": "flat"}'))
