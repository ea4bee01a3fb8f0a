import unicodedata


def normalize_text(value: str) -> str:
    """Lower-case and strip diacritics so "Pérez" matches "perez"."""
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return stripped.strip().lower()


def full_name(nombre: str, apellido: str) -> str:
    return f"{nombre or ''} {apellido or ''}".strip()
