# ABOUTME: Renders the dialogue's prompt texts and inline keyboards.
# ABOUTME: Pure functions of session data; the flow decides which one to show.

from dataclasses import dataclass, field
from urllib.parse import quote

from bookclub.confirmation.collaborators import Button, Keyboard
from bookclub.confirmation.state import ConfirmationSession
from bookclub.metadata.types import ResultSource

ACTION_SELECT_PREFIX = "confirm_book:"
ACTION_ACCEPT = "confirm_accept"
ACTION_ISBN = "confirm_isbn"
ACTION_MANUAL = "confirm_manual"
ACTION_CANCEL = "confirm_cancel"

ISBN_EXAMPLE = "978-0-7475-3269-9"

SESSION_EXPIRED = "❌ Сессия истекла. Пожалуйста, отправьте рецензию заново."
BOOK_NOT_FOUND = "❌ Книга не найдена"
CANCELLED_TOAST = "❌ Отменено"
DUPLICATE_REVIEW = "Эта рецензия уже сохранена!"
EXTRACTING = "📖 Извлекаю информацию о книге..."
PENDING_REVIEW = (
    "⚠️ У вас уже есть незавершённая рецензия. "
    "Пожалуйста, завершите её сначала или отмените."
)
PROCESSING_FAILED = "❌ Произошла ошибка при обработке рецензии. Пожалуйста, попробуйте ещё раз."
EXTRACTION_RATE_LIMITED = (
    "Кажется, у нас закончились лимиты в Google Books API – попробуем импортнуть все завтра! 📚💤"
)

_SOURCE_LABELS = {
    ResultSource.LOCAL: "локальной БД",
    ResultSource.EXTERNAL: "Google Books",
}


@dataclass(frozen=True)
class Prompt:
    """Text plus inline keyboard for the session's prompt message."""

    text: str
    keyboard: Keyboard = field(default_factory=list)


def _cancel_row() -> list[Button]:
    return [Button("❌ Отмена", action=ACTION_CANCEL)]


def _entry_rows() -> Keyboard:
    return [
        [Button("🔢 Введу ISBN", action=ACTION_ISBN)],
        [Button("✏️ Введу название и автора", action=ACTION_MANUAL)],
        _cancel_row(),
    ]


def _with_author(title: str, author: str | None) -> str:
    return f"«{title}» — {author}" if author else f"«{title}»"


def options_prompt(session: ConfirmationSession) -> Prompt:
    """Candidate list with pick buttons, or manual-entry choices if none matched."""
    result = session.enrichment_result
    if result is not None and result.has_matches:
        label = _SOURCE_LABELS.get(result.source, "каталоге")
        lines = [f"📚 Найдены книги в {label}:", "", "Выберите нужную книгу:", ""]
        keyboard: Keyboard = []
        for index, book in enumerate(result.matches):
            percent = round(book.similarity.average * 100)
            lines.append(
                f"{index + 1}. {_with_author(book.title, book.author)} (совпадение: {percent}%)"
            )
            keyboard.append(
                [
                    Button(
                        f"📖 {index + 1}. {book.display_name}",
                        action=f"{ACTION_SELECT_PREFIX}{index}",
                    )
                ]
            )
        lines += ["", "Или выберите другой вариант:"]
        return Prompt("\n".join(lines), keyboard + _entry_rows())

    lines = ["❌ Книга не найдена автоматически.", ""]
    keyboard = []
    extracted = session.extracted_info
    if extracted is not None:
        lines += [f"Искали: {_with_author(extracted.title, extracted.author)}", ""]
        keyboard.append([Button("✅ Использовать как есть", action=ACTION_ACCEPT)])
    lines.append("Выберите способ ввода:")
    return Prompt("\n".join(lines), keyboard + _entry_rows())


def isbn_prompt() -> Prompt:
    return Prompt(
        "📖 Пожалуйста, введите ISBN книги (ISBN-10 или ISBN-13).\n\n"
        f"Пример: {ISBN_EXAMPLE}",
        [_cancel_row()],
    )


def invalid_isbn_prompt() -> Prompt:
    return Prompt(
        "❌ Неверный формат ISBN. Пожалуйста, попробуйте ещё раз.\n\n"
        f"Пример: {ISBN_EXAMPLE}",
        [_cancel_row()],
    )


def isbn_not_found_prompt() -> Prompt:
    return Prompt(
        "❌ Книга с этим ISBN не найдена в Google Books.\n\n"
        "Попробуйте ввести другой ISBN или используйте ручной ввод.",
        [
            [Button("🔢 Ввести другой ISBN", action=ACTION_ISBN)],
            [Button("✏️ Ввести название и автора", action=ACTION_MANUAL)],
            _cancel_row(),
        ],
    )


def isbn_lookup_failed_prompt() -> Prompt:
    return Prompt(
        "❌ Ошибка при поиске книги. Пожалуйста, попробуйте ещё раз.",
        [
            [Button("🔢 Ввести другой ISBN", action=ACTION_ISBN)],
            _cancel_row(),
        ],
    )


def title_prompt() -> Prompt:
    return Prompt("📖 Введите название книги:", [_cancel_row()])


def author_prompt(title: str) -> Prompt:
    return Prompt(f"📖 Книга: «{title}»\n\n✍️ Введите имя автора:", [_cancel_row()])


def cancelled_prompt() -> Prompt:
    return Prompt("❌ Создание рецензии отменено.")


def error_prompt() -> Prompt:
    return Prompt("❌ Произошла ошибка при создании рецензии. Пожалуйста, попробуйте ещё раз.")


def saved_prompt(title: str, author: str | None) -> Prompt:
    return Prompt(f"✅ Рецензия сохранена: {_with_author(title, author)}")


def first_review_toast(title: str) -> str:
    return f"🎉 Поздравляю с первой рецензией на «{title}»!"


def russian_plural_review(count: int) -> str:
    """Pick the Russian word form for 'review' that agrees with count."""
    last_two = count % 100
    last = count % 10
    if 11 <= last_two <= 14:
        return "рецензий"
    if last == 1:
        return "рецензия"
    if 2 <= last <= 4:
        return "рецензии"
    return "рецензий"


def format_sentiment_breakdown(breakdown: dict[str, int]) -> str:
    """Render counts like '👍 3 / 😐 1', omitting sentiments with no reviews."""
    parts = []
    for key, emoji in (("positive", "👍"), ("neutral", "😐"), ("negative", "👎")):
        if breakdown.get(key):
            parts.append(f"{emoji} {breakdown[key]}")
    return " / ".join(parts)


def book_deep_link(bot_username: str, book_id: int) -> str:
    """Telegram deep link that opens the mini app on a book page."""
    return f"https://t.me/{quote(bot_username)}?startapp=book_{book_id}"


def review_tally_message(
    title: str,
    review_count: int,
    breakdown: dict[str, int],
    deep_link: str,
) -> Prompt:
    """Chat acknowledgement for a book that already had reviews."""
    tally = format_sentiment_breakdown(breakdown)
    summary = f"всего {review_count} {russian_plural_review(review_count)}"
    lines = [
        f"🎉 Поздравляю с рецензией #{review_count} на «{title}»!",
        "",
        f"{tally} — {summary}" if tally else summary,
    ]
    return Prompt(
        "\n".join(lines),
        [[Button("📱 Открыть в Mini App", url=deep_link)]],
    )
