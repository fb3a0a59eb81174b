import json
from pathlib import Path
from unittest.mock import patch

from gemini_chat import Credential, GeminiClient
from .test_base import BaseChatCLITest


class TestCommands(BaseChatCLITest):
    def setUp(self):
        super().setUp()
        # Commands operate on a started session
        self.chat_cli.client = GeminiClient(self.mock_transport, Credential("test-key"))

    def test_model_switching(self):
        """Test that model switching works correctly"""
        # Test switching to a supported model
        self.chat_cli.handle_command("/model gemini-2.5-pro")
        self.assertEqual(self.chat_cli.client.model, "gemini-2.5-pro")

        # Test switching to an unsupported model
        self.chat_cli.handle_command("/model invalid-model")
        self.assertEqual(self.chat_cli.client.model, "gemini-2.5-pro")  # Should not change
        self.assertIn("[model switched to gemini-2.5-pro]", self.output_text())

    @patch("gemini_chat.cli.questionary.select")
    def test_model_interactive(self, mock_select):
        """Interactive model selection uses questionary"""
        mock_select.return_value.ask.return_value = "gemini-1.5-pro"

        self.chat_cli.handle_command("/model")

        mock_select.assert_called_once()
        self.assertEqual(self.chat_cli.client.model, "gemini-1.5-pro")

    @patch("gemini_chat.cli.questionary.select")
    def test_model_interactive_cancelled(self, mock_select):
        mock_select.return_value.ask.return_value = None

        self.chat_cli.handle_command("/model")

        self.assertEqual(self.chat_cli.client.model, "gemini-2.0-flash")

    def test_switched_model_is_used_for_requests(self):
        self.chat_cli.handle_command("/model gemini-2.5-flash")
        self.chat_cli.exchange("Hello")

        url = self.mock_transport.send.call_args[0][0]
        self.assertIn("/gemini-2.5-flash:generateContent", url)

    def test_models_lists_current(self):
        self.chat_cli.handle_command("/models")
        self.assertIn("gemini-2.0-flash <- current", self.output_text())

    def test_history_prints_turns(self):
        self.chat_cli.handle_command("/history")
        self.assertIn("(conversation is empty)", self.output_text())

        self.chat_cli.exchange("Hello")
        self.chat_cli.handle_command("/history")

        output = self.output_text()
        self.assertIn("You: Hello", output)
        self.assertIn("AI: Hi there!", output)

    def test_save_writes_transcript(self):
        self.chat_cli.exchange("Hello")
        target = Path(self.tmp_dir.name) / "transcript.json"

        self.chat_cli.handle_command(f"/save {target}")

        data = json.loads(target.read_text(encoding="utf-8"))
        self.assertEqual(
            data["turns"],
            [
                {"role": "user", "text": "Hello"},
                {"role": "assistant", "text": "Hi there!"},
            ],
        )
        self.assertIn("[transcript saved to", self.output_text())

    def test_save_failure_is_reported(self):
        target = Path(self.tmp_dir.name) / "missing-dir" / "transcript.json"

        self.assertTrue(self.chat_cli.handle_command(f"/save {target}"))
        self.assertIn("Failed to save transcript", self.output_text())

    def test_save_usage(self):
        self.chat_cli.handle_command("/save")
        self.assertIn("Usage: /save <path>", self.output_text())

    def test_exit_command_stops_loop(self):
        self.assertFalse(self.chat_cli.handle_command("/exit"))

    def test_unknown_command(self):
        self.assertTrue(self.chat_cli.handle_command("/frobnicate"))
        self.assertIn("Unknown command: /frobnicate", self.output_text())

    def test_unknown_command_with_markup_is_printed_literally(self):
        """Brackets in a command name must not be parsed as rich markup"""
        for line in ["/[/]", "/[bold]x", "/[red]oops[/red]"]:
            with self.subTest(line=line):
                self.assertTrue(self.chat_cli.handle_command(line))
                self.assertIn(f"Unknown command: {line} (see /help)", self.output_text())

    @patch('builtins.input')
    def test_loop_survives_markup_command(self, mock_input):
        mock_input.side_effect = ["/[/]", "Hello", "exit"]
        self.store.save(Credential("stored-key"))

        self.assertEqual(self.chat_cli.run(), 0)
        self.assertEqual(len(self.chat_cli.conversation), 2)

    def test_help_shows_commands(self):
        self.chat_cli.handle_command("/help")
        self.assertIn("/history", self.output_text())
