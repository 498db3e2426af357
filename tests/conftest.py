"""Pytest configuration for shift-market search tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from shift_market.core.config import SearchConfig, set_config


def make_row(product_id, name, price, category="Electronics", location="Kampala",
             description="", ads=None, shops=None):
    """Raw products row shaped like the PostgREST embed response."""
    return {
        "product_id": product_id,
        "name": name,
        "description": description,
        "price": price,
        "price_currency": "UGX",
        "rating": 4.0,
        "shop_id": f"shop-{location.lower()}",
        "other": {"images": [f"https://cdn.example.com/{product_id}.jpg"], "category": category},
        "ads": ads if ads is not None else [{"advert_id": f"ad-{product_id}", "ispromoted": False, "views": 3}],
        "shops": shops if shops is not None else [{"name": f"{location} Traders", "other": {"location": location}}],
    }


@pytest.fixture
def config():
    """Small debounce window so timing tests stay fast."""
    cfg = SearchConfig(debounce_ms=20, data_source="memory")
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def catalog_rows():
    return [
        make_row(1, "Running Shoe", 150_000, category="Fashion", location="Kampala",
                 description="Lightweight trainers"),
        make_row(2, "Leather Boots", 420_000, category="Fashion", location="Entebbe"),
        make_row(3, "Phone Charger", 35_000, category="Electronics", location="Kampala",
                 description="Fast charging, fits any shoe rack outlet"),
        make_row(4, "Smart TV", 2_500_000, category="Electronics", location="Jinja"),
        make_row(5, "Garden Hose", 60_000, category="Home & Garden", location="Kampala",
                 ads=[], shops=None),
    ]
