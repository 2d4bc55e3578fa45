"""
Language codes offered for recognition.

Codes follow Tesseract traineddata names. BCP-47 equivalents are used as
hints for engines that expect them.
"""

from typing import Dict, Optional

SUPPORTED_LANGUAGES: Dict[str, str] = {
    "eng": "English",
    "spa": "Spanish",
    "fra": "French",
    "deu": "German",
    "ita": "Italian",
    "por": "Portuguese",
    "rus": "Russian",
    "chi_sim": "Chinese (Simplified)",
    "chi_tra": "Chinese (Traditional)",
    "jpn": "Japanese",
    "kor": "Korean",
    "ara": "Arabic",
    "hin": "Hindi",
    "ben": "Bengali",
    "tha": "Thai",
    "vie": "Vietnamese",
    "nld": "Dutch",
    "pol": "Polish",
    "tur": "Turkish",
    "swe": "Swedish",
}

_BCP47 = {
    "eng": "en",
    "spa": "es",
    "fra": "fr",
    "deu": "de",
    "ita": "it",
    "por": "pt",
    "rus": "ru",
    "chi_sim": "zh",
    "chi_tra": "zh-Hant",
    "jpn": "ja",
    "kor": "ko",
    "ara": "ar",
    "hin": "hi",
    "ben": "bn",
    "tha": "th",
    "vie": "vi",
    "nld": "nl",
    "pol": "pl",
    "tur": "tr",
    "swe": "sv",
}


def to_bcp47(language: str) -> Optional[str]:
    """Map a Tesseract code (or "eng+fra" combination) to its first BCP-47 hint."""
    primary = language.split("+", 1)[0].strip()
    return _BCP47.get(primary)
