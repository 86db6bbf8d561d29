import re

MAX_EMAIL_LENGTH = 255

# local@domain.tld: no whitespace or '@' in either part, at least one dot after '@'
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(raw: str) -> str:
    """Canonicalize an email address for comparison and storage.

    Args:
        raw: Email as submitted by the client.

    Returns:
        str: The address with surrounding whitespace removed, lowercased.
    """
    return raw.strip().lower()


def email_length(email: str) -> int:
    """Length in UTF-16 code units, the way JavaScript's ``String.length`` counts.

    Characters outside the Basic Multilingual Plane (emoji, for example)
    count as two units where ``len()`` counts one.
    """
    return len(email.encode("utf-16-le")) // 2


def validate_email(email: str) -> bool:
    """Check an (already normalized) email against format and length rules.

    Args:
        email: Normalized email address.

    Returns:
        bool: True if the address looks like ``local@domain.tld`` and is at
            most 255 UTF-16 code units long.
    """
    return email_length(email) <= MAX_EMAIL_LENGTH and EMAIL_PATTERN.fullmatch(email) is not None
