from datetime import datetime, timezone

import pytest

from validation import check_donor, is_facebook_profile_url, is_gmail_address, is_phone_number, parse_donation_date

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def valid_candidate(**overrides):
    candidate = {
        "name": "Karim",
        "location": "Chattogram",
        "email": "karim@gmail.com",
        "bloodGroup": "A+",
        "phoneNumber": "01812345678",
    }
    candidate.update(overrides)
    return candidate


def test_valid_candidate_has_no_errors():
    record, errors = check_donor(valid_candidate(), now=NOW)

    assert errors == []
    assert record["bloodGroup"] == "A+"
    assert "facebookProfileUrl" not in record


@pytest.mark.parametrize("field,message", [
    ("name", "Name is required"),
    ("location", "Location is required"),
    ("email", "Email is required"),
    ("bloodGroup", "Blood group is required"),
])
def test_missing_required_field(field, message):
    candidate = valid_candidate()
    del candidate[field]

    _, errors = check_donor(candidate, now=NOW)

    assert errors == [message]


def test_blank_strings_count_as_missing():
    _, errors = check_donor(valid_candidate(name="   ", location=""), now=NOW)

    assert errors == ["Name is required", "Location is required"]


def test_strings_are_trimmed_and_email_lowercased():
    record, errors = check_donor(valid_candidate(name="  Karim  ", email=" Karim@Gmail.com "), now=NOW)

    assert errors == []
    assert record["name"] == "Karim"
    assert record["email"] == "karim@gmail.com"


def test_email_must_be_gmail():
    assert is_gmail_address("a@gmail.com")
    assert not is_gmail_address("a@yahoo.com")
    assert not is_gmail_address("@gmail.com")
    assert not is_gmail_address("a b@gmail.com")

    _, errors = check_donor(valid_candidate(email="a@yahoo.com"), now=NOW)
    assert errors == ["Please enter a valid Gmail address"]


def test_unknown_blood_group():
    _, errors = check_donor(valid_candidate(bloodGroup="C+"), now=NOW)

    assert errors == ["C+ is not a valid blood group"]


def test_phone_number_must_be_eleven_digits():
    assert is_phone_number("01712345678")
    assert not is_phone_number("123")
    assert not is_phone_number("017123456789")
    assert not is_phone_number("0171234567a")

    _, errors = check_donor(valid_candidate(phoneNumber="123"), now=NOW)
    assert errors == ["123 is not a valid phone number! Must be exactly 11 digits."]


@pytest.mark.parametrize("url", [
    "https://www.facebook.com/john.doe",
    "http://facebook.com/john_doe",
    "https://fb.com/john-doe",
])
def test_facebook_profile_url_accepted(url):
    assert is_facebook_profile_url(url)


@pytest.mark.parametrize("url", [
    "not-a-url",
    "https://www.facebook.com/",
    "https://www.facebook.com/john/",
    "https://twitter.com/john",
    "ftp://facebook.com/john",
    "https://facebook.com/jöhn٣",
])
def test_facebook_profile_url_rejected(url):
    assert not is_facebook_profile_url(url)


def test_facebook_url_alone_satisfies_contact_rule():
    candidate = valid_candidate(facebookProfileUrl="https://www.facebook.com/karim.bd")
    del candidate["phoneNumber"]

    record, errors = check_donor(candidate, now=NOW)

    assert errors == []
    assert record["facebookProfileUrl"] == "https://www.facebook.com/karim.bd"


def test_contact_required_when_both_absent():
    candidate = valid_candidate(phoneNumber="", facebookProfileUrl=None)

    _, errors = check_donor(candidate, now=NOW)

    assert errors == ["Either Phone Number or Facebook Profile URL is required"]


def test_all_violations_are_reported_together():
    _, errors = check_donor({"email": "x@yahoo.com", "lastDonatedDate": "2030-01-01"}, now=NOW)

    assert errors == [
        "Name is required",
        "Location is required",
        "Please enter a valid Gmail address",
        "Blood group is required",
        "Last donated date cannot be in the future",
        "Either Phone Number or Facebook Profile URL is required",
    ]


def test_snake_case_keys_are_accepted():
    record, errors = check_donor({
        "name": "Karim",
        "location": "Sylhet",
        "email": "karim@gmail.com",
        "blood_group": "B-",
        "facebook_profile_url": "https://fb.com/karim",
    }, now=NOW)

    assert errors == []
    assert record["bloodGroup"] == "B-"


def test_last_donated_date_parsing():
    assert parse_donation_date("2025-12-24") == datetime(2025, 12, 24, tzinfo=timezone.utc)
    assert parse_donation_date("2025-12-24T10:30:00Z") == datetime(2025, 12, 24, 10, 30, tzinfo=timezone.utc)
    assert parse_donation_date("yesterday") is None

    _, errors = check_donor(valid_candidate(lastDonatedDate="yesterday"), now=NOW)
    assert errors == ["Last donated date must be a valid date"]


def test_last_donated_date_in_past_is_stored():
    record, errors = check_donor(valid_candidate(lastDonatedDate="2026-01-15"), now=NOW)

    assert errors == []
    assert record["lastDonatedDate"] == datetime(2026, 1, 15, tzinfo=timezone.utc)


def test_last_donated_date_in_future_rejected():
    _, errors = check_donor(valid_candidate(lastDonatedDate="2026-03-02"), now=NOW)

    assert errors == ["Last donated date cannot be in the future"]


@pytest.mark.parametrize("value", ["5", "1700000000", "-3", "12.5"])
def test_bare_numbers_are_not_dates(value):
    assert parse_donation_date(value) is None

    _, errors = check_donor(valid_candidate(lastDonatedDate=value), now=NOW)
    assert errors == ["Last donated date must be a valid date"]
