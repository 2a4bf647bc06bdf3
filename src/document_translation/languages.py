"""
Supported Languages
===================

ISO 639-1 codes accepted as translation targets, with the English name
used in prompts and the writing direction.
"""

from dataclasses import dataclass
from enum import Enum

from document_translation.errors import DocumentValidationError


class WritingDirection(Enum):
    LTR = "ltr"
    RTL = "rtl"


@dataclass(frozen=True)
class Language:
    code: str  # ISO 639-1
    name: str
    native_name: str
    direction: WritingDirection = WritingDirection.LTR


LANGUAGES: dict[str, Language] = {
    lang.code: lang
    for lang in [
        Language("en", "English", "English"),
        Language("de", "German", "Deutsch"),
        Language("fr", "French", "Français"),
        Language("es", "Spanish", "Español"),
        Language("it", "Italian", "Italiano"),
        Language("pt", "Portuguese", "Português"),
        Language("nl", "Dutch", "Nederlands"),
        Language("pl", "Polish", "Polski"),
        Language("cs", "Czech", "Čeština"),
        Language("sv", "Swedish", "Svenska"),
        Language("da", "Danish", "Dansk"),
        Language("fi", "Finnish", "Suomi"),
        Language("no", "Norwegian", "Norsk"),
        Language("el", "Greek", "Ελληνικά"),
        Language("tr", "Turkish", "Türkçe"),
        Language("ru", "Russian", "Русский"),
        Language("uk", "Ukrainian", "Українська"),
        Language("ar", "Arabic", "العربية", WritingDirection.RTL),
        Language("he", "Hebrew", "עברית", WritingDirection.RTL),
        Language("fa", "Persian", "فارسی", WritingDirection.RTL),
        Language("hi", "Hindi", "हिन्दी"),
        Language("zh", "Chinese", "中文"),
        Language("ja", "Japanese", "日本語"),
        Language("ko", "Korean", "한국어"),
        Language("vi", "Vietnamese", "Tiếng Việt"),
        Language("th", "Thai", "ไทย"),
        Language("id", "Indonesian", "Bahasa Indonesia"),
    ]
}


def normalize_language_code(code: str) -> str:
    """Reduce tags like ``en-US`` or ``pt_BR`` to their ISO 639-1 part."""
    return code.strip().replace("_", "-").split("-")[0].lower()


def get_language(code: str) -> Language:
    """
    Look up a supported language.

    Raises:
        DocumentValidationError: If the code is not supported
    """
    normalized = normalize_language_code(code)
    try:
        return LANGUAGES[normalized]
    except KeyError:
        raise DocumentValidationError(f"Unsupported language: {code}") from None


def language_name(code: str | None) -> str:
    """English name for a code, or the raw code when it is not in the table."""
    if not code:
        return "unknown"
    lang = LANGUAGES.get(normalize_language_code(code))
    return lang.name if lang else code
