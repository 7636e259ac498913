import pytest

from tasador.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        google_maps_api_key="test-key",
        listing_base_url="https://listings.example.com",
        geocode_url="https://geocode.example.com/json",
        geocode_min_interval_seconds=0.0,
        geocode_max_attempts=3,
        retry_backoff_seconds=0.0,
        scrape_delay_min=0.0,
        scrape_delay_max=0.0,
        scrape_concurrency=2,
        data_dir=tmp_path / "data",
        artifacts_dir=tmp_path / "artifacts",
    )


def _card(address, beds="", baths="", price=""):
    return (
        '<div class="listing-card">'
        f'<span class="listing-card__address">{address}</span>'
        f'<span class="listing-card__beds">{beds}</span>'
        f'<span class="listing-card__baths">{baths}</span>'
        f'<span class="listing-card__price">{price}</span>'
        "</div>"
    )


@pytest.fixture
def make_page():
    """make_page(("123 Main St", "3+1", "2", "$650,000"), ...) -> HTML"""

    def _make(*cards):
        body = "".join(_card(*card) for card in cards)
        return f"<html><body><div class='results'>{body}</div></body></html>"

    return _make


@pytest.fixture
def geocode_payload():
    """Arma una respuesta de Google Geocoding con un resultado por dict."""

    def _make(*results, status="OK"):
        built = []
        for result in results:
            components = [
                {"long_name": name, "short_name": name, "types": types}
                for name, types in result.get("components", [])
            ]
            entry = {"address_components": components}
            if "formatted_address" in result:
                entry["formatted_address"] = result["formatted_address"]
            if "lat" in result or "lng" in result:
                entry["geometry"] = {
                    "location": {"lat": result.get("lat"), "lng": result.get("lng")}
                }
            built.append(entry)
        return {"status": status, "results": built}

    return _make


@pytest.fixture
def toronto_payload(geocode_payload):
    return geocode_payload(
        {
            "components": [
                ("123", ["street_number"]),
                ("Main Street", ["route"]),
                ("Old Toronto", ["political", "sublocality", "sublocality_level_1"]),
                ("Toronto", ["locality", "political"]),
                ("Ontario", ["administrative_area_level_1", "political"]),
                ("Canada", ["country", "political"]),
                ("M4E 2V8", ["postal_code"]),
            ],
            "formatted_address": "123 Main St, Toronto, ON M4E 2V8, Canada",
            "lat": 43.6832,
            "lng": -79.2995,
        }
    )
