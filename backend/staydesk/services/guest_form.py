"""Guest details — validation before submission and prefill from the signed-in user."""

import re

from staydesk.schemas.booking import GuestDetails

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_COUNTRY = "EG"
DEFAULT_PHONE_CODE = "+20"

NATIONALITY_TO_COUNTRY: dict[str, str] = {
    "egypt": "EG", "egyptian": "EG",
    "united states": "US", "american": "US", "usa": "US",
    "united kingdom": "GB", "british": "GB", "uk": "GB",
    "saudi arabia": "SA", "saudi": "SA",
    "united arab emirates": "AE", "emirati": "AE", "uae": "AE",
    "germany": "DE", "german": "DE",
    "france": "FR", "french": "FR",
    "italy": "IT", "italian": "IT",
    "spain": "ES", "spanish": "ES",
}

# First matching prefix wins
PHONE_CODES = ("+966", "+971", "+20", "+1", "+44", "+49", "+33", "+39", "+34")


class GuestValidationError(ValueError):
    def __init__(self, errors: dict[str, str]):
        super().__init__("Guest details are incomplete")
        self.errors = errors


def validate_guest_details(guest: GuestDetails) -> dict[str, str]:
    """Per-field error messages; empty when the guest details can be submitted."""
    errors: dict[str, str] = {}
    if not guest.first_name.strip():
        errors["first_name"] = "First name is required"
    if not guest.last_name.strip():
        errors["last_name"] = "Last name is required"

    email = guest.email.strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(email):
        errors["email"] = "Please enter a valid email"
    return errors


def split_phone(phone: str | None) -> tuple[str, str]:
    phone = (phone or "").strip()
    for code in PHONE_CODES:
        if phone.startswith(code):
            return code, phone[len(code):]
    return DEFAULT_PHONE_CODE, phone


def prefill_from_user(
    name: str | None,
    email: str | None = None,
    nationality: str | None = None,
    phone: str | None = None,
) -> GuestDetails:
    """Guest details pre-populated from a user profile."""
    parts = (name or "").strip().split()
    country = DEFAULT_COUNTRY
    if nationality:
        country = NATIONALITY_TO_COUNTRY.get(nationality.strip().lower(), DEFAULT_COUNTRY)
    phone_code, number = split_phone(phone)

    return GuestDetails(
        first_name=parts[0] if parts else "",
        last_name=" ".join(parts[1:]),
        email=email or "",
        country=country,
        phone_code=phone_code,
        phone=number,
    )
