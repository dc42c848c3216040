from staydesk.schemas.booking import GuestDetails
from staydesk.services.guest_form import prefill_from_user, split_phone, validate_guest_details


def test_complete_guest_has_no_errors():
    guest = GuestDetails(first_name="Omar", last_name="Haddad", email="omar@example.com")
    assert validate_guest_details(guest) == {}


def test_missing_fields_are_reported_per_field():
    errors = validate_guest_details(GuestDetails(first_name="  ", email=""))
    assert set(errors) == {"first_name", "last_name", "email"}
    assert errors["email"] == "Email is required"


def test_invalid_email():
    guest = GuestDetails(first_name="A", last_name="B", email="not an@email")
    assert validate_guest_details(guest) == {"email": "Please enter a valid email"}


def test_prefill_splits_name_and_phone():
    guest = prefill_from_user("Layla Abdel Rahman", "layla@example.com", "Saudi", "+966501234567")
    assert guest.first_name == "Layla"
    assert guest.last_name == "Abdel Rahman"
    assert guest.country == "SA"
    assert guest.phone_code == "+966"
    assert guest.phone == "501234567"


def test_prefill_defaults():
    guest = prefill_from_user(None, nationality="Martian", phone="0123")
    assert guest.first_name == ""
    assert guest.country == "EG"
    assert guest.phone_code == "+20"
    assert guest.phone == "0123"


def test_split_phone_without_known_prefix():
    assert split_phone("+81312345678") == ("+20", "+81312345678")
