"""Application tests for store, product, variant and category commands."""

import pytest
from marketplace.catalogue.browse import browse_products
from marketplace.catalogue.categories import CreateDistrictCategory, CreateProductCategory, DeleteProductCategory
from marketplace.catalogue.category import ProductCategory
from marketplace.catalogue.listing import DelistProduct, ToggleProductActive, UpdateProduct
from marketplace.catalogue.product import Product
from marketplace.catalogue.variants import AddVariant, AdjustStock, RemoveVariant
from marketplace.projections.product_card import ProductCard
from marketplace.projections.sku_index import SkuIndex
from marketplace.store.management import SetStoreCod, UpdateStore
from marketplace.store.store import Store
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


class TestStoreCommands:
    def test_open_and_approve(self, make_store):
        store_id = make_store()
        store = current_domain.repository_for(Store).get(store_id)
        assert store.status == "approved"
        assert store.is_cod_ready

    def test_update_and_toggle_cod(self, make_store):
        store_id = make_store()
        current_domain.process(UpdateStore(store_id=store_id, description="Kashi tiles"), asynchronous=False)
        current_domain.process(SetStoreCod(store_id=store_id, enabled=False), asynchronous=False)
        store = current_domain.repository_for(Store).get(store_id)
        assert store.description == "Kashi tiles"
        assert store.cod_enabled is False


class TestListProduct:
    def test_product_card_created(self, make_store, make_product):
        product_id = make_product(make_store(), status="pending")
        card = current_domain.repository_for(ProductCard).get(product_id)
        assert card.status == "pending"
        assert card.price == 1000.0
        assert card.stock == 10

    def test_unknown_store(self, make_product):
        with pytest.raises(ObjectNotFoundError):
            make_product("no-such-store")

    def test_variant_stock_sums_into_product_stock(self, make_store, make_product):
        product_id = make_product(
            make_store(),
            stock=0,
            variants=[
                {"sku": "CHAPPAL-42", "attributes": {"size": "42"}, "stock": 6},
                {"sku": "CHAPPAL-44", "attributes": {"size": "44"}, "price": 4800.0, "stock": 4},
            ],
        )
        product = current_domain.repository_for(Product).get(product_id)
        assert product.stock == 10
        assert product.base_price("CHAPPAL-44") == 4800.0
        assert current_domain.repository_for(SkuIndex).get("CHAPPAL-42").product_id == product_id

    def test_sku_is_unique_across_catalogue(self, make_store, make_product):
        store_id = make_store()
        make_product(store_id, variants=[{"sku": "VASE-BLUE"}])
        other = make_product(store_id, title="Another vase")
        with pytest.raises(ValidationError):
            current_domain.process(AddVariant(product_id=other, sku="VASE-BLUE"), asynchronous=False)

    def test_removed_sku_can_be_reused(self, make_store, make_product):
        store_id = make_store()
        first = make_product(store_id, variants=[{"sku": "VASE-GREEN"}])
        current_domain.process(RemoveVariant(product_id=first, sku="VASE-GREEN"), asynchronous=False)
        second = make_product(store_id, title="Green vase")
        current_domain.process(AddVariant(product_id=second, sku="VASE-GREEN", stock=2), asynchronous=False)
        assert current_domain.repository_for(SkuIndex).get("VASE-GREEN").product_id == second


class TestProductMaintenance:
    def test_update_flows_to_card(self, make_store, make_product):
        product_id = make_product(make_store())
        command = UpdateProduct(product_id=product_id, title="Large vase", price=1500.0)
        current_domain.process(command, asynchronous=False)
        card = current_domain.repository_for(ProductCard).get(product_id)
        assert card.title == "Large vase"
        assert card.price == 1500.0

    def test_adjust_stock(self, make_store, make_product):
        product_id = make_product(make_store())
        current_domain.process(AdjustStock(product_id=product_id, quantity=42), asynchronous=False)
        assert current_domain.repository_for(ProductCard).get(product_id).stock == 42

    def test_toggle_returns_new_state(self, make_store, make_product):
        product_id = make_product(make_store())
        result = current_domain.process(ToggleProductActive(product_id=product_id), asynchronous=False)
        assert result is False
        assert current_domain.repository_for(ProductCard).get(product_id).is_active is False

    def test_delist(self, make_store, make_product):
        product_id = make_product(make_store())
        current_domain.process(DelistProduct(product_id=product_id), asynchronous=False)
        assert current_domain.repository_for(Product).get(product_id).is_orderable is False


class TestBrowse:
    def test_shoppers_see_approved_active_products(self, make_store, make_product):
        store_id = make_store()
        visible = make_product(store_id, title="Visible vase")
        make_product(store_id, title="Pending vase", status="pending")
        hidden = make_product(store_id, title="Hidden vase")
        current_domain.process(ToggleProductActive(product_id=hidden), asynchronous=False)

        page = browse_products(store_id=store_id)
        assert [c.product_id for c in page.cards] == [visible]
        assert page.total == 1

    def test_admin_can_see_everything(self, make_store, make_product):
        store_id = make_store()
        make_product(store_id, title="One")
        make_product(store_id, title="Two", status="pending")
        page = browse_products(store_id=store_id, status="all", include_inactive=True)
        assert page.total == 2

    def test_filters_and_search(self, make_store, make_product):
        store_id = make_store()
        make_product(store_id, title="Ajrak Shawl", price=2800.0, district="Hala", gi_brand="Sindhi Ajrak")
        make_product(store_id, title="Blue Vase", price=3200.0)
        assert browse_products(store_id=store_id, district="Hala").total == 1
        assert browse_products(store_id=store_id, min_price=3000).total == 1
        assert browse_products(store_id=store_id, max_price=3000).total == 1
        assert browse_products(store_id=store_id, search="ajrak").cards[0].title == "Ajrak Shawl"

    def test_paging(self, make_store, make_product):
        store_id = make_store()
        for n in range(5):
            make_product(store_id, title=f"Vase {n}")
        page = browse_products(store_id=store_id, page=2, page_size=2)
        assert len(page.cards) == 2
        assert page.total == 5
        assert page.page == 2


class TestCategories:
    def test_slug_generated_from_name(self):
        category_id = current_domain.process(CreateProductCategory(name="Blue Pottery & Tiles"), asynchronous=False)
        assert current_domain.repository_for(ProductCategory).get(category_id).slug == "blue-pottery-tiles"

    def test_duplicate_slug(self):
        current_domain.process(CreateProductCategory(name="Textiles"), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(CreateProductCategory(name="TEXTILES"), asynchronous=False)

    def test_delete(self):
        category_id = current_domain.process(CreateProductCategory(name="Footwear"), asynchronous=False)
        current_domain.process(DeleteProductCategory(category_id=category_id), asynchronous=False)
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(ProductCategory).get(category_id)

    def test_one_category_per_district(self):
        current_domain.process(
            CreateDistrictCategory(district="Hala", gi_brand="Sindhi Ajrak", crafts=["Ajrak"]), asynchronous=False
        )
        with pytest.raises(ValidationError):
            current_domain.process(CreateDistrictCategory(district="Hala", gi_brand="Hala Pottery"), asynchronous=False)
