"""Input validation and sanitizing for content records."""

import re

from mneme.core.errors import ValidationFailed
from mneme.core.models import CreateLanguageRequest, CreateVocabularyRequest

_LANGUAGE_CODE = re.compile(r"^[A-Za-z-]+$")

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5


def validate_not_empty(value: str, field: str) -> None:
    if not value.strip():
        raise ValidationFailed(f"{field} cannot be empty")


def validate_length(value: str, field: str, min_len: int, max_len: int) -> None:
    length = len(value.strip())
    if length < min_len:
        raise ValidationFailed(f"{field} must be at least {min_len} characters")
    if length > max_len:
        raise ValidationFailed(f"{field} must be at most {max_len} characters")


def validate_language_code(code: str) -> None:
    validate_not_empty(code, "Language code")
    code = code.strip()
    if not 2 <= len(code) <= 5:
        raise ValidationFailed("Language code must be between 2 and 5 characters")
    if not _LANGUAGE_CODE.match(code):
        raise ValidationFailed("Language code must contain only letters and hyphens")


def validate_difficulty(level: int) -> None:
    if not MIN_DIFFICULTY <= level <= MAX_DIFFICULTY:
        raise ValidationFailed(
            f"Difficulty level must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
        )


def sanitize_optional(value: str | None) -> str | None:
    """Trim an optional string, mapping blank values to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def clean_language(req: CreateLanguageRequest) -> CreateLanguageRequest:
    """Validate a language request and return a trimmed copy."""
    validate_not_empty(req.name, "Language name")
    validate_length(req.name, "Language name", 1, 50)
    validate_language_code(req.code)
    validate_not_empty(req.flag_emoji, "Flag emoji")
    return CreateLanguageRequest(
        name=req.name.strip(),
        code=req.code.strip(),
        flag_emoji=req.flag_emoji.strip(),
    )


def clean_vocabulary(req: CreateVocabularyRequest) -> CreateVocabularyRequest:
    """Validate a vocabulary request and return a trimmed copy."""
    validate_not_empty(req.word, "Word")
    validate_length(req.word, "Word", 1, 200)
    validate_not_empty(req.translation, "Translation")
    validate_length(req.translation, "Translation", 1, 500)
    validate_difficulty(req.difficulty_level)
    return req.model_copy(
        update={
            "word": req.word.strip(),
            "translation": req.translation.strip(),
            "pronunciation": sanitize_optional(req.pronunciation),
            "example_sentence": sanitize_optional(req.example_sentence),
        }
    )
