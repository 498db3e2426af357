"""
Tests for normalize(): join-shape flattening and defaulting.
"""

import json

import pytest

from shift_market.search.normalizer import AdSummary, SellerSummary, normalize, normalize_row

from conftest import make_row


class TestJoinShapes:
    def test_array_embeds_take_first_element(self):
        row = make_row(1, "Shoe", 1000, ads=[
            {"advert_id": "a1", "ispromoted": True, "views": 9},
            {"advert_id": "a2", "ispromoted": False, "views": 1},
        ])
        item = normalize_row(row)
        assert item.ads == AdSummary(id="a1", is_promoted=True, views=9)
        assert item.shop == SellerSummary(name="Kampala Traders", location="Kampala")

    def test_object_embeds_pass_through(self):
        row = make_row(2, "Boot", 2000)
        row["ads"] = {"advert_id": "a9", "isPromoted": True, "views": 4}
        row["shops"] = {"name": "Gulu Shoes", "other": {"location": "Gulu"}}
        item = normalize_row(row)
        assert item.ads == AdSummary(id="a9", is_promoted=True, views=4)
        assert item.shop == SellerSummary(name="Gulu Shoes", location="Gulu")

    def test_flattened_location_projection(self):
        row = make_row(3, "Hat", 500)
        row["shops"] = [{"name": "Hats", "location": "Mbale"}]
        assert normalize_row(row).shop.location == "Mbale"

    @pytest.mark.parametrize("missing", ["absent", "empty", "none"])
    def test_missing_sub_records_get_defaults(self, missing):
        row = make_row(4, "Lamp", 700)
        if missing == "absent":
            del row["ads"]
            del row["shops"]
        elif missing == "empty":
            row["ads"] = []
            row["shops"] = []
        else:
            row["ads"] = None
            row["shops"] = None
        item = normalize_row(row)
        assert item.ads == AdSummary(id="", is_promoted=False, views=0)
        assert item.shop == SellerSummary(name="", location="")


class TestScalars:
    def test_scalar_fields(self):
        item = normalize_row(make_row(7, "Radio", 45_000, category="Electronics", description="FM"))
        assert item.id == "7"
        assert item.name == "Radio"
        assert item.description == "FM"
        assert item.price == 45_000.0
        assert item.price_currency == "UGX"
        assert item.rating == 4.0
        assert item.images == ["https://cdn.example.com/7.jpg"]
        assert item.category == "Electronics"

    def test_bare_row_never_throws(self):
        item = normalize_row({})
        assert item.id == ""
        assert item.price == 0.0
        assert item.images == []
        assert item.ads == AdSummary()
        assert item.shop == SellerSummary()

    def test_garbage_nested_values(self):
        item = normalize_row({
            "product_id": "x",
            "price": "not a number",
            "rating": None,
            "other": "oops",
            "ads": ["not a dict"],
            "shops": [{"name": None, "other": None}],
        })
        assert item.price == 0.0
        assert item.rating == 0.0
        assert item.images == []
        assert item.ads == AdSummary()
        assert item.shop == SellerSummary(name="", location="")

    def test_normalize_skips_non_objects(self):
        items = normalize([make_row(1, "A", 1), None, "row", make_row(2, "B", 2)])
        assert [i.id for i in items] == ["1", "2"]

    def test_normalize_none(self):
        assert normalize(None) == []

    def test_to_dict_is_plain(self):
        data = normalize_row(make_row(1, "A", 1)).to_dict()
        assert data["ads"]["id"] == "ad-1"
        assert data["shop"]["location"] == "Kampala"

    def test_non_finite_numbers_from_json(self):
        rows = json.loads(
            '[{"product_id": 1, "price": Infinity, "rating": NaN,'
            ' "ads": [{"advert_id": "a", "views": Infinity}]},'
            ' {"product_id": 2, "price": 10, "ads": [{"views": -Infinity}]}]'
        )
        items = normalize(rows)
        assert [(i.price, i.rating, i.ads.views) for i in items] == [(0.0, 0.0, 0), (10.0, 0.0, 0)]

    def test_oversized_integer_views(self):
        item = normalize_row({"product_id": 1, "ads": [{"views": 10 ** 400}]})
        assert item.ads.views == 0
