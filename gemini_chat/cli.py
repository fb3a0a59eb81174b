"""Terminal chat loop for Gemini models.

Startup resolves the API key (environment, config file, or an interactive
prompt that saves it), then every line the user types is sent along with
the conversation so far and the reply is printed.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
import readline  # noqa: F401 – side-effect: history & line editing
from enum import Enum
from typing import List, Optional

import questionary
from rich.markup import escape
from rich.panel import Panel

from .core import ConfigStore, Conversation, Credential, Role, Settings, SUPPORTED_MODELS
from .core.client import GeminiClient
from .core.codec import extract_error_message
from .core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_HISTORY_CHARS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
    SYSTEM_PROMPT,
)
from .core.errors import ChatError, ConfigIOError, ConfigNotFoundError, HTTPStatusError
from .core.transport import TransportClient
from .utils import (
    Ansi,
    ASSISTANT_LABEL,
    USER_LABEL,
    Spinner,
    configure_logging,
    console,
    error_line,
    notice,
    speaker_line,
)

logger = logging.getLogger(__name__)

EXIT_KEYWORD = "exit"
_AUTH_STATUSES = {400, 401, 403}


class SessionState(Enum):
    AWAITING_CREDENTIAL = "awaiting_credential"
    READY = "ready"
    READING_INPUT = "reading_input"
    EXCHANGING = "exchanging"
    EXITED = "exited"


# ---------------------------------------------------------------------------
# Helper classes
# ---------------------------------------------------------------------------


class ChatCLI:
    """High-level orchestration class for the interactive REPL."""

    def __init__(
        self,
        settings: Settings,
        store: ConfigStore,
        transport: TransportClient,
        conversation: Optional[Conversation] = None,
    ):
        self.settings = settings
        self.store = store
        self.transport = transport
        self.conversation = conversation if conversation is not None else Conversation()
        self.client: Optional[GeminiClient] = None
        self.state = SessionState.AWAITING_CREDENTIAL

    # ---------------- Credential ----------------

    def _prompt_for_key(self) -> Optional[str]:
        console.print(
            Ansi.style(
                f"No API key found. It will be saved to {self.store.path}.",
                Ansi.FG_YELLOW,
            )
        )
        while True:
            try:
                answer = questionary.password("Gemini API key:").ask()
            except (KeyboardInterrupt, EOFError):
                return None
            if answer is None:
                return None
            answer = answer.strip()
            if answer:
                return answer
            console.print(Ansi.style("The API key cannot be empty.", Ansi.FG_RED))

    def acquire_credential(self) -> Credential:
        """Return the API key for this run, prompting and saving it if needed.

        Raises :class:`ConfigIOError` when a freshly entered key cannot be
        saved and :class:`ConfigNotFoundError` when the prompt is cancelled.
        """
        if self.settings.api_key:
            logger.debug("Using API key from the environment")
            return Credential(self.settings.api_key)

        try:
            return self.store.load()
        except ConfigNotFoundError:
            logger.debug("No stored API key at %s", self.store.path)
        except ConfigIOError as exc:
            logger.warning("Ignoring unreadable config file: %s", exc)

        key = self._prompt_for_key()
        if key is None:
            raise ConfigNotFoundError("no API key was entered")
        try:
            credential = Credential(key)
        except ValueError as exc:
            raise ConfigNotFoundError(str(exc)) from exc
        self.store.save(credential)
        console.print(notice(f"API key saved to {self.store.path}"))
        return credential

    # ---------------- Exchange ----------------

    def describe_error(self, exc: ChatError) -> str:
        """One-line, user-facing description of a failed exchange."""
        if isinstance(exc, HTTPStatusError):
            detail = extract_error_message(exc.body) or str(exc)
            text = f"{exc.kind} {exc.status}: {detail}"
            if exc.status in _AUTH_STATUSES:
                text += f" (check the API key in {self.store.path})"
            return text
        return f"{exc.kind}: {exc}"

    def exchange(self, text: str) -> bool:
        """Send *text* with the history so far. Return True on success."""
        self.state = SessionState.EXCHANGING
        self.conversation.add_user(text)
        try:
            with Spinner(prefix=f"{ASSISTANT_LABEL}: "):
                reply = self.client.generate(self.conversation.snapshot())
        except ChatError as exc:
            logger.info("Exchange failed: %s", exc)
            console.print(error_line(self.describe_error(exc)))
            return False
        finally:
            self.state = SessionState.READING_INPUT

        self.conversation.add_assistant(reply)
        console.print(speaker_line(ASSISTANT_LABEL, reply))
        return True

    # -------------- Interactive pickers ---------------

    @staticmethod
    def _interactive_picker(
        title: str, options: List[str], current: Optional[str] = None
    ) -> Optional[str]:
        """Present *options* to the user and return the selected value."""
        if not options:
            console.print("(no items available)")
            return None
        try:
            return questionary.select(title, choices=options, default=current).ask()
        except (KeyboardInterrupt, EOFError):
            console.print()
            return None

    # ---------------- Command handling ---------------

    def handle_command(self, line: str) -> bool:
        """Handle slash commands. Return False to exit REPL."""

        parts = line.strip().split()
        if not parts:
            return True

        cmd = parts[0].lower()

        if cmd == "/help":
            from . import __doc__ as _doc  # lazy import to avoid circularity

            console.print(escape(_doc or "(no help available)"))

        elif cmd == "/exit":
            return False

        elif cmd == "/model":
            if len(parts) == 1:
                selection = self._interactive_picker(
                    "Select a model:", SUPPORTED_MODELS, current=self.client.model
                )
                if selection and selection in SUPPORTED_MODELS:
                    self.client.model = selection
                    console.print(notice(f"model switched to {self.client.model}"))
                return True

            if len(parts) != 2:
                console.print("Usage: /model <model_name>")
            else:
                model_name = parts[1]
                if model_name not in SUPPORTED_MODELS:
                    console.print("Unsupported model. Use /models to see the list of supported models.")
                else:
                    self.client.model = model_name
                    console.print(notice(f"model switched to {self.client.model}"))

        elif cmd == "/models":
            console.print("Supported models:")
            for m in SUPPORTED_MODELS:
                marker = " <- current" if m == self.client.model else ""
                console.print(f"  {m}{marker}")

        elif cmd == "/history":
            if not len(self.conversation):
                console.print("(conversation is empty)")
            for turn in self.conversation:
                label = USER_LABEL if turn.role is Role.USER else ASSISTANT_LABEL
                console.print(speaker_line(label, turn.text))

        elif cmd == "/save":
            if len(parts) != 2:
                console.print("Usage: /save <path>")
                return True
            try:
                path = self.conversation.save(parts[1])
            except OSError as exc:
                console.print(Ansi.style(f"Failed to save transcript: {exc}", Ansi.FG_RED))
            else:
                console.print(notice(f"transcript saved to {path}"))

        else:
            console.print(Ansi.style(f"Unknown command: {cmd} (see /help)", Ansi.FG_RED))

        return True

    # ---------------- Interaction loop ---------------

    def _exit(self, code: int, message: Optional[str] = None) -> int:
        if message:
            console.print(message)
        self.state = SessionState.EXITED
        return code

    def run(self) -> int:
        """Run the chat loop and return the process exit code."""
        self.state = SessionState.AWAITING_CREDENTIAL
        try:
            credential = self.acquire_credential()
        except ChatError as exc:
            logger.error("Cannot start without an API key: %s", exc)
            return self._exit(1, error_line(f"{exc.kind}: {exc}"))

        self.client = GeminiClient(
            self.transport,
            credential,
            model=self.settings.model,
            base_url=self.settings.base_url,
            system_prompt=self.settings.system_prompt,
            max_history_chars=self.settings.max_history_chars,
        )
        self.state = SessionState.READY

        console.print(Panel.fit("Gemini Chat CLI", style="bold magenta"))
        console.print(
            Ansi.style(f"Type your message and press Enter. Type '{EXIT_KEYWORD}' to quit.", Ansi.FG_YELLOW),
            Ansi.style(f"Current model: {self.client.model}.", Ansi.FG_YELLOW),
            Ansi.style("Commands start with '/'; type /help for help.", Ansi.FG_YELLOW),
            sep="\n",
        )

        while True:
            self.state = SessionState.READING_INPUT
            try:
                line = console.input(f"{USER_LABEL}: ").strip()
            except (EOFError, KeyboardInterrupt):
                return self._exit(0, "\n" + notice("signal caught – exiting") + " Goodbye!")

            if line == EXIT_KEYWORD:
                return self._exit(0, "Goodbye!")

            if not line:
                continue

            if line.startswith("/"):
                if not self.handle_command(line):
                    return self._exit(0, "Goodbye!")
                continue

            self.exchange(line)


# ---------------------------------------------------------------------------
# Entrypoint helpers (keeping it separate simplifies __main__ handling)
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive terminal chat with Google Gemini models."
    )
    parser.add_argument("--model", "-m", help=f"Model name (default: {DEFAULT_MODEL})")
    parser.add_argument("--config", "-c", help="Path of the API key file")
    parser.add_argument("--timeout", type=float, help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})")
    parser.add_argument(
        "--max-history-chars",
        type=int,
        help="Drop the oldest turns from requests beyond this many characters (0 disables)",
    )
    parser.add_argument("--system-prompt", help="Override the built-in system instruction ('' disables it)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    return parser


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Combine command-line flags, environment variables and defaults.

    Raises :class:`ValueError` for a timeout or history budget that cannot
    be used.
    """
    model = args.model or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
    if model not in SUPPORTED_MODELS:
        console.print(
            f"Warning: model '{escape(model)}' is not in the supported list. "
            f"Falling back to default '{DEFAULT_MODEL}'."
        )
        model = DEFAULT_MODEL

    timeout = args.timeout
    if timeout is None:
        raw_timeout = os.getenv("GEMINI_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"GEMINI_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from None
    if not timeout > 0:
        raise ValueError(f"timeout must be positive, got {timeout:g}")

    max_history_chars = args.max_history_chars
    if max_history_chars is None:
        max_history_chars = DEFAULT_MAX_HISTORY_CHARS
    if max_history_chars < 0:
        raise ValueError(f"--max-history-chars must be 0 or more, got {max_history_chars}")

    system_prompt = args.system_prompt if args.system_prompt is not None else SYSTEM_PROMPT

    return Settings(
        model=model,
        base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
        timeout=timeout,
        max_history_chars=max_history_chars or None,
        system_prompt=system_prompt or None,
        api_key=os.getenv("GEMINI_API_KEY") or None,
    )


def run_cli(argv: Optional[List[str]] = None) -> None:  # pragma: no cover
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    try:
        settings = build_settings(args)
    except ValueError as exc:
        parser.error(str(exc))
    store = ConfigStore(args.config or os.getenv("GEMINI_CHAT_CONFIG") or None)

    with TransportClient(timeout=settings.timeout) as transport:
        code = ChatCLI(settings, store, transport).run()
    sys.exit(code)


if __name__ == "__main__":  # pragma: no cover
    run_cli()
