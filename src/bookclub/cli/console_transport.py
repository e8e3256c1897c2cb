# ABOUTME: Terminal stand-ins for the chat service and the AI engines used by the review command.
# ABOUTME: Renders messages and keyboards with rich; message ids are assigned sequentially.

import itertools

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from bookclub.confirmation.collaborators import Button, Keyboard, Sentiment
from bookclub.metadata.types import Confidence, ExtractedBookInfo


def action_buttons(keyboard: Keyboard) -> list[Button]:
    """Flatten a keyboard into the buttons that trigger a dialogue action."""
    return [button for row in keyboard for button in row if button.action]


class ConsoleTransport:
    """ChatTransport that prints to a rich Console.

    Keeps the last keyboard of every message so the command loop can offer
    its buttons as numbered choices.
    """

    def __init__(self, console: Console | None = None, first_message_id: int = 1000) -> None:
        self._console = console or Console()
        self._ids = itertools.count(first_message_id)
        self._keyboards: dict[int, Keyboard] = {}

    def new_message_id(self) -> int:
        """Allocate an id for a message the user typed."""
        return next(self._ids)

    def keyboard_for(self, message_id: int) -> Keyboard:
        return self._keyboards.get(message_id, [])

    def send_message(
        self,
        chat_id: int | None,
        text: str,
        keyboard: Keyboard | None = None,
        reply_to: int | None = None,
    ) -> int:
        message_id = self.new_message_id()
        self._render(message_id, text, keyboard or [])
        return message_id

    def edit_message(
        self, chat_id: int | None, message_id: int, text: str, keyboard: Keyboard | None = None
    ) -> None:
        self._render(message_id, text, keyboard or [])

    def delete_message(self, chat_id: int | None, message_id: int) -> None:
        self._keyboards.pop(message_id, None)

    def answer_callback(self, callback_id: str, text: str | None = None) -> None:
        if text:
            self._console.print(Text(f"» {text}", style="bold cyan"))

    def _render(self, message_id: int, text: str, keyboard: Keyboard) -> None:
        self._keyboards[message_id] = keyboard
        body = Text(text)
        choices = action_buttons(keyboard)
        if choices:
            body.append("\n")
        for number, button in enumerate(choices, start=1):
            body.append(f"\n  [{number}] ", style="bold")
            body.append(button.label)
        for row in keyboard:
            for button in row:
                if button.url:
                    body.append(f"\n  🔗 {button.label}: {button.url}", style="dim")
        self._console.print(Panel(body, title=f"#{message_id}", title_align="left"))


class StaticExtractor:
    """BookExtractor that returns the title and author given on the command line."""

    def __init__(self, title: str | None, author: str | None = None) -> None:
        self._title = title
        self._author = author

    def extract_book_info(self, text: str, hints: str | None = None) -> ExtractedBookInfo | None:
        if not self._title:
            return None
        return ExtractedBookInfo(
            title=self._title, author=self._author, confidence=Confidence.HIGH
        )


class FixedSentiment:
    """SentimentAnalyzer that reports the sentiment given on the command line."""

    def __init__(self, sentiment: Sentiment | None = None) -> None:
        self._sentiment = sentiment

    def analyze(self, text: str) -> Sentiment | None:
        return self._sentiment
