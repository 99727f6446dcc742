from eco_cart.catalog import (
    available_categories,
    build_catalog_view,
    clamp_page,
    paginate,
    query_catalog,
    sort_products,
    total_pages,
)
from eco_cart.models import CatalogQuery, Product


def _product(id, name="Item", price=100, category="home", description=None):
    return Product(id=id, name=name, fiat_price=price, token_price=10, category=category, description=description)


def _catalog():
    return [
        _product("1", "Bamboo Wall Clock", 300, "home", "Hand-made wall clock"),
        _product("2", "Jute Tote Bag", 150, "bags"),
        _product("3", "Recycled Notebook", 80, "stationery", "Made from BAMBOO pulp"),
        _product("4", "Coir Doormat", 150, "home"),
        _product("5", "Seed Pencils", 40, "stationery"),
    ]


def test_category_filter_only_returns_that_category():
    page = query_catalog(_catalog(), CatalogQuery(category="home"))
    assert [p.id for p in page.page_items] == ["1", "4"]
    assert all(p.category == "home" for p in page.page_items)
    assert page.total_matching == 2


def test_all_category_passes_through():
    page = query_catalog(_catalog(), CatalogQuery())
    assert page.total_matching == 5
    assert [p.id for p in page.page_items] == ["1", "2", "3", "4", "5"]


def test_search_is_case_insensitive_on_name_and_description():
    page = query_catalog(_catalog(), CatalogQuery(search_term="bamboo"))
    assert [p.id for p in page.page_items] == ["1", "3"]

    page = query_catalog(_catalog(), CatalogQuery(search_term="BAMBOO WALL"))
    assert [p.name for p in page.page_items] == ["Bamboo Wall Clock"]


def test_category_then_search():
    page = query_catalog(_catalog(), CatalogQuery(category="stationery", search_term="bamboo"))
    assert [p.id for p in page.page_items] == ["3"]
    assert page.total_matching == 1


def test_sort_price_low_is_stable():
    ordered = sort_products(_catalog(), "price_low")
    assert [p.id for p in ordered] == ["5", "3", "2", "4", "1"]


def test_sort_price_high_is_stable():
    ordered = sort_products(_catalog(), "price_high")
    # "2" and "4" tie at 150 and keep their input order
    assert [p.id for p in ordered] == ["1", "2", "4", "3", "5"]


def test_popular_and_unknown_sort_keep_order():
    cat = _catalog()
    assert sort_products(cat, "popular") == cat
    assert sort_products(cat, "rating") == cat


def test_sort_does_not_mutate_input():
    cat = _catalog()
    before = list(cat)
    sort_products(cat, "price_high")
    assert cat == before


def test_pagination_slices_after_sort():
    page = query_catalog(_catalog(), CatalogQuery(sort_by="price_low", page=2, page_size=2))
    assert [p.id for p in page.page_items] == ["2", "4"]
    assert page.total_matching == 5


def test_page_never_exceeds_page_size():
    for page_no in range(1, 5):
        page = query_catalog(_catalog(), CatalogQuery(page=page_no, page_size=2))
        assert len(page.page_items) <= 2


def test_page_past_the_end_is_empty():
    page = query_catalog(_catalog(), CatalogQuery(page=9, page_size=2))
    assert page.page_items == []
    assert page.total_matching == 5


def test_paginate_non_positive_page_is_empty():
    assert paginate(_catalog(), 0, 2) == []
    assert paginate(_catalog(), -1, 2) == []


def test_categories_all_first_then_first_seen():
    assert available_categories(_catalog()) == ["all", "home", "bags", "stationery"]
    assert available_categories([]) == ["all"]


def test_total_pages_and_clamp():
    assert total_pages(0, 12) == 1
    assert total_pages(12, 12) == 1
    assert total_pages(13, 12) == 2
    assert clamp_page(0, 13, 12) == 1
    assert clamp_page(5, 13, 12) == 2
    assert clamp_page(2, 13, 12) == 2


def test_catalog_view():
    view = build_catalog_view(_catalog(), CatalogQuery(category="stationery", page_size=1))
    assert view.total_matching == 2
    assert [p.id for p in view.page_items] == ["3"]
    assert view.total_pages == 2
    # categories come from the whole snapshot, not the filtered page
    assert view.available_categories == ["all", "home", "bags", "stationery"]
