"""
Credential Validator.

Pure, side-effect-free checks used by ``AuthService`` and directly by
the UI layer:

- e-mail format,
- the password policy (itemised per rule so every violation can be
  shown at once) and a deterministic 0-100 strength score,
- Dutch business identifiers: KvK (Chamber of Commerce), postcode,
  WPBR certificate, beveiligingspas and SVPB diploma numbers.

All user-facing text is Dutch.
"""

from __future__ import annotations

import re

from securyflex.models.auth_models import PasswordValidationResult, ValidationResult
from securyflex.models.enums import UserType


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

PASSWORD_MIN_LENGTH: int = 12
PASSWORD_MAX_LENGTH: int = 128

_UPPER_RE: re.Pattern[str] = re.compile(r"[A-Z]")
_LOWER_RE: re.Pattern[str] = re.compile(r"[a-z]")
_DIGIT_RE: re.Pattern[str] = re.compile(r"[0-9]")
_SPECIAL_RE: re.Pattern[str] = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

_COMMON_PASSWORDS: frozenset[str] = frozenset({
    # Dutch
    "wachtwoord", "wachtwoord123", "password", "password123",
    "welkom", "welkom123", "amsterdam", "nederland",
    # International
    "123456789012", "qwertyuiopas", "asdfghjklzxc",
    "admin123456", "user12345678", "temp12345678",
    "letmein12345", "monkey123456", "dragon123456",
    "football1234", "baseball1234", "master123456",
    "shadow123456", "jordan123456", "superman1234",
    "michael12345", "jennifer1234", "welcome12345",
    "sunshine1234", "princess1234", "freedom12345",
    # Sequential patterns
    "123456789abc", "abcdefghijkl", "987654321098",
    "098765432109", "zyxwvutsrqpo",
})

_COMMON_SUBSTRINGS: tuple[str, ...] = ("123456", "password", "qwerty")

_SEQUENCES: tuple[str, ...] = (
    "123", "234", "345", "456", "567", "678", "789",
    "abc", "bcd", "cde", "def", "efg", "fgh", "ghi",
    "qwe", "wer", "ert", "rty", "tyu", "yui", "uio",
)

_NON_DIGIT_RE: re.Pattern[str] = re.compile(r"\D")
_KVK_RE: re.Pattern[str] = re.compile(r"^\d{8}$")
_POSTAL_CODE_RE: re.Pattern[str] = re.compile(r"^\d{4}[A-Z]{2}$")
_WPBR_PREFIX: str = "WPBR-"
_WPBR_RE: re.Pattern[str] = re.compile(r"^WPBR-\d{6}$")
_PAS_RE: re.Pattern[str] = re.compile(r"^\d{7}$")
_SVPB_RE: re.Pattern[str] = re.compile(r"^SVPB-\d{6}$")


# ---------------------------------------------------------------------------
# E-mail
# ---------------------------------------------------------------------------

def is_valid_email(email: str) -> bool:
    """Permissive address check: allows ``+`` aliases and dotted local
    parts, rejects consecutive dots anywhere."""
    return bool(_EMAIL_RE.match(email)) and ".." not in email


def validate_email(email: str) -> ValidationResult:
    """Detailed e-mail check with Dutch messages."""
    if not email or not email.strip():
        return ValidationResult.fail(["E-mailadres is verplicht"])
    if not is_valid_email(email.strip()):
        return ValidationResult.fail(["Ongeldig e-mailadres format"])
    return ValidationResult.ok("E-mailadres is geldig", formatted=email.strip())


# ---------------------------------------------------------------------------
# Password policy
# ---------------------------------------------------------------------------

def has_uppercase(password: str) -> bool:
    return bool(_UPPER_RE.search(password))


def has_lowercase(password: str) -> bool:
    return bool(_LOWER_RE.search(password))


def has_digit(password: str) -> bool:
    return bool(_DIGIT_RE.search(password))


def has_special_char(password: str) -> bool:
    return bool(_SPECIAL_RE.search(password))


def is_common_password(password: str) -> bool:
    """Deny-list match or one of the well-known substrings."""
    lowered = password.lower()
    if lowered in _COMMON_PASSWORDS:
        return True
    return any(fragment in lowered for fragment in _COMMON_SUBSTRINGS)


def has_sequential_chars(password: str) -> bool:
    lowered = password.lower()
    return any(seq in lowered for seq in _SEQUENCES)


def has_repeated_chars(password: str) -> bool:
    """Three or more identical characters in a row."""
    return any(
        password[i] == password[i + 1] == password[i + 2]
        for i in range(len(password) - 2)
    )


def is_valid_password(password: str) -> bool:
    """Fast policy check; see ``validate_password_detailed`` for reasons."""
    return (
        len(password) >= PASSWORD_MIN_LENGTH
        and has_uppercase(password)
        and has_lowercase(password)
        and has_digit(password)
        and has_special_char(password)
        and not is_common_password(password)
    )


def validate_password_detailed(password: str) -> PasswordValidationResult:
    """Check every password rule and report all violations.

    Rules are evaluated in a fixed order (length, maximum length, upper,
    lower, digit, special, common) and never short-circuit.
    """
    errors: list[str] = []

    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Wachtwoord moet minimaal {PASSWORD_MIN_LENGTH} tekens bevatten")
    if len(password) > PASSWORD_MAX_LENGTH:
        errors.append(f"Wachtwoord mag maximaal {PASSWORD_MAX_LENGTH} tekens bevatten")
    if not has_uppercase(password):
        errors.append("Wachtwoord moet minimaal één hoofdletter bevatten")
    if not has_lowercase(password):
        errors.append("Wachtwoord moet minimaal één kleine letter bevatten")
    if not has_digit(password):
        errors.append("Wachtwoord moet minimaal één cijfer bevatten")
    if not has_special_char(password):
        errors.append("Wachtwoord moet minimaal één speciaal teken bevatten (!@#$%^&*)")
    if is_common_password(password):
        errors.append("Dit wachtwoord is te algemeen. Kies een unieker wachtwoord.")

    return PasswordValidationResult(
        is_valid=not errors,
        errors=errors,
        strength=calculate_password_strength(password),
    )


def calculate_password_strength(password: str) -> int:
    """Deterministic additive strength score clamped to ``[0, 100]``.

    Length milestones (8/12/16/20), one bonus per character class plus
    five points per class present, then a 70% reduction for common
    passwords and flat penalties for sequential runs (-15) and triple
    repeats (-10).
    """
    length = len(password)
    strength = 0

    if length >= 8:
        strength += 10
    if length >= 12:
        strength += 20
    if length >= 16:
        strength += 15
    if length >= 20:
        strength += 10

    classes = (
        (has_uppercase(password), 10),
        (has_lowercase(password), 10),
        (has_digit(password), 10),
        (has_special_char(password), 15),
    )
    present = 0
    for found, points in classes:
        if found:
            strength += points
            present += 1
    strength += present * 5

    if is_common_password(password):
        # 30% of the score, rounded half-up.
        strength = (strength * 3 + 5) // 10

    if has_sequential_chars(password):
        strength -= 15
    if has_repeated_chars(password):
        strength -= 10

    return max(0, min(100, strength))


# ---------------------------------------------------------------------------
# KvK (Kamer van Koophandel) number
# ---------------------------------------------------------------------------

def parse_kvk_number(kvk_number: str) -> str:
    """Reduce *kvk_number* to its digits (``12.34.56.78`` → ``12345678``)."""
    return _NON_DIGIT_RE.sub("", kvk_number)


def is_valid_kvk(kvk_number: str) -> bool:
    if not kvk_number:
        return False
    return bool(_KVK_RE.match(parse_kvk_number(kvk_number)))


def format_kvk_number(kvk_number: str) -> str:
    """Display form ``12.34.56.78``; invalid input is returned unchanged."""
    if not kvk_number:
        return ""
    cleaned = parse_kvk_number(kvk_number)
    if not _KVK_RE.match(cleaned):
        return kvk_number
    return f"{cleaned[0:2]}.{cleaned[2:4]}.{cleaned[4:6]}.{cleaned[6:8]}"


def validate_kvk_detailed(kvk_number: str) -> ValidationResult:
    if not kvk_number or not kvk_number.strip():
        return ValidationResult.fail(["KvK nummer is verplicht"])

    cleaned = parse_kvk_number(kvk_number)
    errors: list[str] = []
    if not cleaned:
        errors.append("KvK nummer mag alleen cijfers bevatten")
    if len(cleaned) < 8:
        errors.append("KvK nummer moet uit 8 cijfers bestaan")
    elif len(cleaned) > 8:
        errors.append("KvK nummer mag niet meer dan 8 cijfers bevatten")

    if errors:
        return ValidationResult.fail(errors)
    return ValidationResult.ok("KvK nummer is geldig", formatted=format_kvk_number(cleaned))


# ---------------------------------------------------------------------------
# Dutch postcode
# ---------------------------------------------------------------------------

def parse_dutch_postal_code(postal_code: str) -> str:
    """Canonical storage form: spaces removed, uppercased (``1234AB``)."""
    return postal_code.replace(" ", "").upper()


def is_valid_dutch_postal_code(postal_code: str) -> bool:
    if not postal_code:
        return False
    return bool(_POSTAL_CODE_RE.match(parse_dutch_postal_code(postal_code)))


def format_dutch_postal_code(postal_code: str) -> str:
    """Display form ``1234 AB``; invalid input is returned unchanged."""
    if not postal_code:
        return ""
    cleaned = parse_dutch_postal_code(postal_code)
    if not _POSTAL_CODE_RE.match(cleaned):
        return postal_code
    return f"{cleaned[:4]} {cleaned[4:]}"


def validate_dutch_postal_code_detailed(postal_code: str) -> ValidationResult:
    if not postal_code or not postal_code.strip():
        return ValidationResult.fail(["Postcode is verplicht"])

    cleaned = parse_dutch_postal_code(postal_code)
    if len(cleaned) < 6:
        return ValidationResult.fail(["Postcode is te kort (formaat: 1234AB)"])
    if len(cleaned) > 6:
        return ValidationResult.fail(["Postcode is te lang (formaat: 1234AB)"])

    errors: list[str] = []
    if not cleaned[:4].isdigit() or not cleaned[:4].isascii():
        errors.append("De eerste vier tekens van de postcode moeten cijfers zijn")
    if not re.match(r"^[A-Z]{2}$", cleaned[4:]):
        errors.append("De laatste twee tekens van de postcode moeten letters zijn")
    if errors:
        errors.append("Ongeldig postcode formaat. Gebruik: 1234AB")
        return ValidationResult.fail(errors)

    return ValidationResult.ok("Postcode is geldig", formatted=format_dutch_postal_code(cleaned))


# ---------------------------------------------------------------------------
# Security-sector numbers
# ---------------------------------------------------------------------------

def is_valid_wpbr_number(wpbr_number: str) -> bool:
    if not wpbr_number:
        return False
    return bool(_WPBR_RE.match(wpbr_number.strip().upper()))


def validate_wpbr_detailed(wpbr_number: str) -> ValidationResult:
    if not wpbr_number or not wpbr_number.strip():
        return ValidationResult.fail(["WPBR certificaatnummer is verplicht"])

    cleaned = wpbr_number.strip().upper()
    errors: list[str] = []
    if not cleaned.startswith(_WPBR_PREFIX):
        errors.append('WPBR nummer moet beginnen met "WPBR-"')
    if not _WPBR_RE.match(cleaned):
        errors.append("Ongeldig WPBR formaat. Gebruik: WPBR-123456")

    if errors:
        return ValidationResult.fail(errors)
    return ValidationResult.ok("WPBR certificaatnummer is geldig", formatted=cleaned)


def is_valid_beveiligingspas_number(pas_number: str) -> bool:
    if not pas_number:
        return False
    return bool(_PAS_RE.match(_NON_DIGIT_RE.sub("", pas_number)))


def validate_beveiligingspas_detailed(pas_number: str) -> ValidationResult:
    if not pas_number or not pas_number.strip():
        return ValidationResult.fail(["Beveiligingspas nummer is verplicht"])

    cleaned = _NON_DIGIT_RE.sub("", pas_number)
    if not _PAS_RE.match(cleaned):
        return ValidationResult.fail([
            "Beveiligingspas moet 7 cijfers bevatten",
            "Ongeldig beveiligingspas formaat. Gebruik: 1234567",
        ])
    return ValidationResult.ok("Beveiligingspas nummer is geldig", formatted=cleaned)


def validate_svpb_diploma_detailed(diploma_number: str) -> ValidationResult:
    if not diploma_number or not diploma_number.strip():
        return ValidationResult.fail(["SVPB diploma nummer is verplicht"])

    cleaned = diploma_number.strip().upper()
    if not _SVPB_RE.match(cleaned):
        return ValidationResult.fail(["Ongeldig SVPB diploma formaat. Gebruik: SVPB-123456"])
    return ValidationResult.ok("SVPB diploma nummer is geldig", formatted=cleaned)


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

_ROLE_DISPLAY_NAMES: dict[str, str] = {
    UserType.GUARD.value: "Beveiliger",
    UserType.COMPANY.value: "Bedrijf",
    UserType.ADMIN.value: "Beheerder",
}


def user_role_display_name(user_type: str) -> str:
    """Dutch display name for a role, case-insensitive."""
    return _ROLE_DISPLAY_NAMES.get(user_type.lower(), "Gebruiker")
