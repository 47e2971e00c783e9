import pytest


@pytest.mark.parametrize(
    "word, expected",
    [
        ("comment", "comments"),
        ("blog_category", "blog_categories"),
        ("address", "addresses"),
        ("box", "boxes"),
        ("status", "statuses"),
        ("person", "people"),
        ("series", "series"),
        ("writer", "writers"),
        ("tags", "tags"),
    ],
)
def test_pluralize(word, expected):
    from ..utils import pluralize

    assert pluralize(word) == expected


@pytest.mark.parametrize(
    "word, expected",
    [
        ("comments", "comment"),
        ("blog_categories", "blog_category"),
        ("addresses", "address"),
        ("boxes", "box"),
        ("people", "person"),
        ("news", "news"),
        ("analyses", "analysis"),
        ("houses", "house"),
    ],
)
def test_singularize(word, expected):
    from ..utils import singularize

    assert singularize(word) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("PostSerializer", "post_serializer"),
        ("BlogPost", "blog_post"),
        ("HTMLPage", "html_page"),
        ("Version2Post", "version2_post"),
    ],
)
def test_underscore(name, expected):
    from ..utils import underscore

    assert underscore(name) == expected


def test_demodulize():
    from ..utils import demodulize

    assert demodulize("Api.Sales.InvoiceSerializer") == "InvoiceSerializer"
    assert demodulize("InvoiceSerializer") == "InvoiceSerializer"


def test_is_collection():
    from ..utils import is_collection

    assert is_collection([])
    assert is_collection(())
    assert is_collection(frozenset())
    assert not is_collection("abc")
    assert not is_collection(b"abc")
    assert not is_collection({})
    assert not is_collection(None)
    assert not is_collection(iter([]))


def test_read_attribute_for_serialization():
    from ..utils import read_attribute_for_serialization
    from .testing import Author, Record

    assert read_attribute_for_serialization(Author(id=1, name="Bo"), "name") == "Bo"
    assert read_attribute_for_serialization({"name": "Bo"}, "name") == "Bo"
    assert read_attribute_for_serialization({}, "name") is None
    assert read_attribute_for_serialization(Record(name="Bo"), "name") == "Bo"
    with pytest.raises(AttributeError):
        read_attribute_for_serialization(Author(id=1, name="Bo"), "missing")
