"""Unit tests for catalog_service module."""

import pytest

from planner.domain.objective import Product
from planner.services import catalog_service


@pytest.mark.unit
class TestProducts:
    """Tests for product operations."""

    async def test_create_and_list_by_name(self, patched_db):
        await catalog_service.create_product(name="Zephyr")
        await catalog_service.create_product(name="  Atlas ")

        products = await catalog_service.get_products()

        assert [product.name for product in products] == ["Atlas", "Zephyr"]

    async def test_existing_name_returns_existing_product(self, patched_db):
        first = await catalog_service.create_product(name="Atlas")
        second = await catalog_service.create_product(name="Atlas")

        assert second.id == first.id
        assert len(patched_db.all("products")) == 1

    async def test_blank_name_rejected(self, patched_db):
        with pytest.raises(ValueError, match="must not be empty"):
            await catalog_service.create_product(name="   ")

    async def test_list_reads_every_page(self, patched_db):
        for index in range(501):
            patched_db.seed("products", f"p{index:03d}", {"name": f"Product {index:03d}"})

        products = await catalog_service.get_products()

        assert len(products) == 501
        assert products[-1].name == "Product 500"


PRODUCTS = [
    Product(id="p1", name="Atlas Mobile"),
    Product(id="p2", name="Billing / Invoices"),
    Product(id="p3", name="Zephyr"),
]


@pytest.mark.unit
class TestMatchProduct:
    """Tests for match_product."""

    @pytest.mark.parametrize(
        ("search", "expected"),
        [
            ("ATLAS MOBILE", "p1"),
            ("billing invoices", "p2"),
            ("zeph", "p3"),
            ("mobile app", "p1"),
            ("p2", "p2"),
        ],
    )
    def test_strategies(self, search, expected):
        assert catalog_service.match_product(PRODUCTS, search).id == expected

    def test_exact_name_wins_over_looser_matches(self):
        products = [Product(id="a", name="Atlas Mobile"), Product(id="b", name="Atlas")]

        assert catalog_service.match_product(products, "atlas").id == "b"

    @pytest.mark.parametrize("search", ["", "   ", "unknown"])
    def test_no_match(self, search):
        assert catalog_service.match_product(PRODUCTS, search) is None

    async def test_find_product_reads_store(self, patched_db):
        patched_db.seed("products", "p9", {"name": "Atlas Mobile"})

        product = await catalog_service.find_product("atlas-mobile")

        assert product.id == "p9"


@pytest.mark.unit
class TestMembers:
    """Tests for member operations."""

    async def test_initials_derived_from_name(self, patched_db):
        member = await catalog_service.create_member(name="ada lovelace", role="Engineer")

        assert member.initials == "AL"
        assert member.role == "Engineer"

    async def test_single_name_initial(self, patched_db):
        member = await catalog_service.create_member(name="Grace")

        assert member.initials == "G"

    async def test_list_members(self, patched_db):
        await catalog_service.create_member(name="Bob")
        await catalog_service.create_member(name="Alice")

        assert [member.name for member in await catalog_service.get_members()] == ["Alice", "Bob"]
