import hashlib


def fingerprint(raw_value: str) -> str:
    """Stable one-way key for a card or bank account number.

    Used only as an equality oracle for uniqueness lookups.
    """
    return hashlib.sha256(raw_value.encode("utf-8")).hexdigest()
