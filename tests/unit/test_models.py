import pytest
from pydantic import ValidationError

from jsonapi_resolver.models.base import Document, Links, Resource, ResourceIdentifier
from jsonapi_resolver.models.errors import ErrorDocument
from jsonapi_resolver.models.payloads import build_payload


@pytest.mark.unit
def test_document_validates_single_and_collection(order_document):
    single = Document.model_validate(order_document)
    collection = Document.model_validate({"data": [order_document["data"]], "included": []})

    assert isinstance(single.data, Resource)
    assert single.data.relationships["supplier"].data == ResourceIdentifier(type="contacts", id="9")
    assert [item.id for item in single.data.relationships["items"].data] == ["11", "12"]
    assert len(single.included) == 4
    assert isinstance(collection.data, list)


@pytest.mark.unit
def test_numeric_ids_are_coerced_to_strings():
    resource = Resource.model_validate({"id": 42, "type": "products", "attributes": {"sku": "X"}})

    assert resource.id == "42"
    assert ResourceIdentifier.model_validate({"type": "products", "id": 7}).id == "7"


@pytest.mark.unit
def test_resource_requires_type_and_id():
    with pytest.raises(ValidationError):
        Resource.model_validate({"attributes": {}})


@pytest.mark.unit
@pytest.mark.parametrize(
    "links",
    [
        {"next": "http://test.local/api/v1/stocks?page[number]=2"},
        {"next": {"href": "http://test.local/api/v1/stocks?page[number]=2", "meta": {"count": 10}}},
    ],
)
def test_next_page_url_accepts_both_link_forms(links):
    document = Document.model_validate({"data": [], "links": links})

    assert document.next_page_url() == "http://test.local/api/v1/stocks?page[number]=2"


@pytest.mark.unit
def test_links_extra_members():
    links = Links.model_validate({"self": "/a", "describedby": {"href": "/schema"}})

    assert links.href("self") == "/a"
    assert links.href("describedby") == "/schema"
    assert links.href("next") is None
    assert Document.model_validate({"data": None}).next_page_url() is None


@pytest.mark.unit
def test_error_document_accepts_numeric_status():
    document = ErrorDocument.model_validate(
        {"errors": [{"status": 422, "detail": "bad", "source": {"pointer": "/data/attributes/code"}}]}
    )

    assert document.errors[0].status == "422"
    assert document.errors[0].source.pointer == "/data/attributes/code"


@pytest.mark.unit
def test_build_payload_for_create_and_update():
    assert build_payload("warehouses", {"name": "North", "email": None}) == {
        "data": {"type": "warehouses", "attributes": {"name": "North"}}
    }
    assert build_payload(
        "purchase-orders",
        {"status": "approved"},
        "3",
        {
            "supplier": {"type": "contacts", "id": "9"},
            "items": [{"type": "purchase-order-items", "id": "11"}],
            "warehouse": None,
        },
    ) == {
        "data": {
            "type": "purchase-orders",
            "id": "3",
            "attributes": {"status": "approved"},
            "relationships": {
                "supplier": {"data": {"type": "contacts", "id": "9"}},
                "items": {"data": [{"type": "purchase-order-items", "id": "11"}]},
                "warehouse": {"data": None},
            },
        }
    }
