import unicodedata


def clean_text(text: str) -> str:
    return "".join(ch for ch in text if unicodedata.category(ch)[0] != "C" or ch in "\n\r\t")


def normalize_for_matching(text: str) -> str:
    return " ".join(clean_text(text).lower().split())
