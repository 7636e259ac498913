import pytest

from tasador.models import ListingType, RawListing
from tasador.processing import normalize_listing, normalize_listings, parse_price, parse_room_count


@pytest.mark.parametrize(
    "text, expected",
    [
        ("3+1", 3),
        ("2", 2),
        (" 4 beds ", 4),
        ("1+den", 1),
        ("", None),
        ("+", None),
        ("beds", None),
        ("--", None),
        (None, None),
    ],
)
def test_parse_room_count(text, expected):
    assert parse_room_count(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("$650,000", 650000),
        ("$1,299,900", 1299900),
        ("650000", 650000),
        ("$", None),
        ("", None),
        ("Price on request", None),
        ("$0", None),
        (None, None),
    ],
)
def test_parse_price(text, expected):
    assert parse_price(text) == expected


def test_noise_only_fields_normalize_to_missing_not_zero():
    raw = RawListing(
        address="1 Noise Ave",
        n_beds_text=" - ",
        n_baths_text="n/a",
        price_text="$,",
        listing_type=ListingType.CONDO,
    )

    listing = normalize_listing(raw)

    assert listing.n_beds is None
    assert listing.n_baths is None
    assert listing.price is None


def test_normalize_listing_example():
    raw = RawListing(
        address="123 Main St",
        n_beds_text="3+1",
        n_baths_text="2",
        price_text="$650,000",
        listing_type=ListingType.DETACHED,
    )

    listing = normalize_listing(raw)

    assert listing.address == "123 Main St"
    assert listing.listing_type is ListingType.DETACHED
    assert listing.n_beds == 3
    assert listing.n_baths == 2
    assert listing.price == 650000


def test_normalize_listings_keeps_every_row():
    raws = [
        RawListing(address=f"{i} King St", price_text="$1", listing_type=ListingType.TOWNHOME)
        for i in range(5)
    ]
    assert len(normalize_listings(raws)) == 5
