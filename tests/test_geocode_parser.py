import pytest

from tasador.geocoding import GeocodeField, parse_geocode_field, parse_geocode_fields


def test_parses_address_components(toronto_payload):
    assert parse_geocode_field(toronto_payload, GeocodeField.STREET_NUMBER) == "123"
    assert parse_geocode_field(toronto_payload, GeocodeField.ROUTE) == "Main Street"
    assert parse_geocode_field(toronto_payload, GeocodeField.LOCALITY) == "Toronto"
    assert parse_geocode_field(toronto_payload, GeocodeField.SUBLOCALITY) == "Old Toronto"
    assert parse_geocode_field(toronto_payload, GeocodeField.POSTAL_CODE) == "M4E 2V8"
    assert (
        parse_geocode_field(toronto_payload, "formatted_address")
        == "123 Main St, Toronto, ON M4E 2V8, Canada"
    )


def test_latitude_and_longitude_are_not_swapped(toronto_payload):
    assert parse_geocode_field(toronto_payload, GeocodeField.LATITUDE) == pytest.approx(43.6832)
    assert parse_geocode_field(toronto_payload, GeocodeField.LONGITUDE) == pytest.approx(-79.2995)


def test_coordinates_average_over_ambiguous_results(geocode_payload):
    payload = geocode_payload(
        {"formatted_address": "A, Canada", "lat": 43.0, "lng": -79.0},
        {"formatted_address": "B, Canada", "lat": 44.0, "lng": -80.0},
    )
    assert parse_geocode_field(payload, GeocodeField.LATITUDE) == pytest.approx(43.5)
    assert parse_geocode_field(payload, GeocodeField.LONGITUDE) == pytest.approx(-79.5)
    # Campos de texto salen del primer resultado
    assert parse_geocode_field(payload, GeocodeField.FORMATTED_ADDRESS) == "A, Canada"


def test_sublocality_does_not_match_locality(geocode_payload):
    payload = geocode_payload(
        {
            "components": [
                ("Scarborough", ["political", "sublocality", "sublocality_level_1"]),
                ("Ontario", ["administrative_area_level_1", "political"]),
            ],
            "formatted_address": "Scarborough, ON, Canada",
        }
    )
    assert parse_geocode_field(payload, GeocodeField.LOCALITY) is None
    assert parse_geocode_field(payload, GeocodeField.SUBLOCALITY) == "Scarborough"


def test_postal_code_prefix_type_is_not_a_postal_code(geocode_payload):
    payload = geocode_payload({"components": [("M5V", ["postal_code_prefix", "postal_code"])]})
    assert parse_geocode_field(payload, GeocodeField.POSTAL_CODE) == "M5V"

    payload = geocode_payload({"components": [("M5V", ["postal_code_prefix"])]})
    assert parse_geocode_field(payload, GeocodeField.POSTAL_CODE) is None


@pytest.mark.parametrize("field", list(GeocodeField))
def test_no_results_yields_missing_for_every_field(geocode_payload, field):
    payload = geocode_payload(status="ZERO_RESULTS")
    assert parse_geocode_field(payload, field) is None


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"results": None},
        {"results": "oops"},
        {"results": [None, 3]},
        {"results": [{"address_components": "bad", "geometry": []}]},
        {"results": [{"address_components": [{"types": "locality"}, {"long_name": "X"}]}]},
        {"results": [{"geometry": {"location": {"lat": "43.1", "lng": None}}}]},
    ],
)
def test_malformed_payloads_never_raise(payload):
    parsed = parse_geocode_fields(payload, list(GeocodeField))
    assert set(parsed) == {field.value for field in GeocodeField}
    assert all(value is None for value in parsed.values())


def test_missing_field_does_not_affect_other_fields(geocode_payload):
    payload = geocode_payload(
        {
            "components": [("Toronto", ["locality", "political"])],
            "formatted_address": "Toronto, ON, Canada",
        }
    )
    parsed = parse_geocode_fields(
        payload,
        [GeocodeField.STREET_NUMBER, GeocodeField.LOCALITY, GeocodeField.LATITUDE],
    )
    assert parsed == {"street_number": None, "locality": "Toronto", "latitude": None}


def test_unknown_field_name_is_rejected():
    with pytest.raises(ValueError):
        parse_geocode_field({"results": []}, "country")
