import pytest

from schema.enums import Zone
from modules.zone.zone_service import PincodeDetails, normalize_pincode
from utils.exceptions import UnknownPincode, ValidationError


@pytest.mark.parametrize(
    "pickup, delivery, expected",
    [
        ("110001", "110002", Zone.WITHIN_CITY),
        ("400001", "411001", Zone.WITHIN_STATE),
        ("110001", "560001", Zone.METRO_TO_METRO),
        ("110001", "781001", Zone.SPECIAL_ZONE),
        ("110001", "302001", Zone.REST_OF_INDIA),
    ],
)
def test_resolve_zone(services, pickup, delivery, expected):
    assert services.zone_resolver.resolve(pickup, delivery) == expected


def test_same_city_wins_over_metro(services):
    # both ends are metros, but the same city rule comes first
    assert services.zone_resolver.resolve("110001", "110002") == Zone.WITHIN_CITY


def test_same_state_wins_over_metro(services):
    # mumbai and pune are both metros in the same state
    assert services.zone_resolver.resolve("400001", "411001") == Zone.WITHIN_STATE


def test_metro_wins_over_special_destination(services):
    resolver = services.zone_resolver
    origin = PincodeDetails(pincode="110001", city="new delhi", state="delhi")
    destination = PincodeDetails(
        pincode="400001", city="mumbai", state="maharashtra", region="north east"
    )

    assert resolver.classify(origin, destination) == Zone.METRO_TO_METRO


def test_special_zone_by_state(services):
    origin = PincodeDetails(pincode="302001", city="jaipur", state="rajasthan")
    destination = PincodeDetails(pincode="190001", city="srinagar", state="jammu and kashmir")

    assert services.zone_resolver.classify(origin, destination) == Zone.SPECIAL_ZONE


def test_classification_is_case_insensitive(services):
    # seeded rows are mixed case, lookups normalise them
    details = services.pincode_lookup.lookup("110001")

    assert details.city == "new delhi"
    assert details.state == "delhi"


def test_unknown_pincode_is_an_error(services):
    with pytest.raises(UnknownPincode) as exc:
        services.zone_resolver.resolve("110001", "999999")

    assert exc.value.pincode == "999999"


@pytest.mark.parametrize("pincode", ["12345", "012345", "11000A", "", None, "1100011"])
def test_malformed_pincode_is_rejected(pincode):
    with pytest.raises(ValidationError):
        normalize_pincode(pincode)


def test_pincode_is_normalised():
    assert normalize_pincode(" 110001 ") == "110001"
    assert normalize_pincode(110001) == "110001"


def test_zone_mapping_reports_unknown_pincodes(services):
    mapping = services.zone_resolver.zone_mapping("110001", ["110002", "302001", "999999"])

    assert mapping.pickup_pincode == "110001"
    assert mapping.zones["110002"] == Zone.WITHIN_CITY
    assert mapping.zones["302001"] == Zone.REST_OF_INDIA
    assert mapping.zones["999999"] is None
    assert mapping.unknown_pincodes == ["999999"]


def test_lookup_is_cached(services, session_factory):
    from database import session_scope
    from models import Pincode_Mapping

    services.pincode_lookup.lookup("302001")

    with session_scope(session_factory) as db:
        db.query(Pincode_Mapping).filter(Pincode_Mapping.pincode == "302001").delete()

    assert services.pincode_lookup.lookup("302001").city == "jaipur"

    services.pincode_lookup.clear_cache()
    with pytest.raises(UnknownPincode):
        services.pincode_lookup.lookup("302001")
