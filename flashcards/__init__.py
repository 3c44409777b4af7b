"""Plain-text spaced-repetition flashcard reviewer."""

from .card_file import (
    CardFile,
    import_spreadsheet,
    load_card_file,
    parse_card_text,
    save_card_file,
    serialize_card_file,
)
from .card_state import Flashcard
from .deck import CardDeck
from .errors import DataFileError, EmptyStoreError, FlashcardError, MalformedRecordError
from .review_service import ReviewSession, install_shutdown_handler
from .scheduler import LONG_TERM_STREAK, update_on_answer

__all__ = [
    "CardDeck",
    "CardFile",
    "DataFileError",
    "EmptyStoreError",
    "Flashcard",
    "FlashcardError",
    "LONG_TERM_STREAK",
    "MalformedRecordError",
    "ReviewSession",
    "import_spreadsheet",
    "install_shutdown_handler",
    "load_card_file",
    "parse_card_text",
    "save_card_file",
    "serialize_card_file",
    "update_on_answer",
]
