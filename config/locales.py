"""
config/locales.py
─────────────────
Supported locales, display names and plural suffixes.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class LocaleInfo:
    code: str
    name: str
    native_name: str
    rtl: bool = False


LOCALES: dict[str, LocaleInfo] = {
    "en": LocaleInfo("en", "English", "English"),
    "es": LocaleInfo("es", "Spanish", "Español"),
    "zh-Hans": LocaleInfo("zh-Hans", "Chinese (Simplified)", "简体中文"),
    "zh-Hant": LocaleInfo("zh-Hant", "Chinese (Traditional)", "繁體中文"),
    "vi": LocaleInfo("vi", "Vietnamese", "Tiếng Việt"),
    "fil": LocaleInfo("fil", "Filipino", "Filipino"),
    "ko": LocaleInfo("ko", "Korean", "한국어"),
    "ru": LocaleInfo("ru", "Russian", "Русский"),
    "fr": LocaleInfo("fr", "French", "Français"),
    "ar": LocaleInfo("ar", "Arabic", "العربية", rtl=True),
}

# Rendered in place of {s} when count != 1. Languages without plural
# inflection get an empty suffix.
PLURAL_SUFFIXES: dict[str, str] = {
    "en": "s",
    "es": "s",
    "fr": "s",
    "zh": "",
    "vi": "",
    "ko": "",
    "fil": "",
    "ru": "",
    "ar": "",
}
DEFAULT_PLURAL_SUFFIX = "s"


def plural_suffix(locale: str) -> str:
    """Suffix for the most specific known prefix of ``locale``."""
    parts = locale.split("-")
    while parts:
        suffix = PLURAL_SUFFIXES.get("-".join(parts))
        if suffix is not None:
            return suffix
        parts.pop()
    return DEFAULT_PLURAL_SUFFIX
