"""Province detection from a free-text Pakistani address."""

# Order matters: the first key found in the address wins.
_PROVINCE_KEYS = (
    ("punjab", "Punjab"),
    ("islamabad", "Islamabad"),
    ("ict", "Islamabad"),
    ("khyber", "Khyber Pakhtunkhwa"),
    ("kpk", "Khyber Pakhtunkhwa"),
    ("kp", "Khyber Pakhtunkhwa"),
    ("sindh", "Sindh"),
    ("balochistan", "Balochistan"),
    ("gb", "Gilgit-Baltistan"),
    ("gilgit", "Gilgit-Baltistan"),
    ("ajk", "Azad Kashmir"),
    ("kashmir", "Azad Kashmir"),
)


def detect_province(address: str | None) -> str | None:
    """Return the province named in ``address`` by substring match, or None."""
    text = (address or "").lower()
    if not text:
        return None
    for key, province in _PROVINCE_KEYS:
        if key in text:
            return province
    return None


def compose_address(*parts: str | None) -> str:
    """Join the non-empty address parts with ", "."""
    return ", ".join(p.strip() for p in parts if p and p.strip())
