import pytest

from .testing import Author, Post, new_base_serializer


@pytest.fixture
def base():
    return new_base_serializer()


@pytest.fixture
def target_class():
    from ..collection import CollectionSerializer

    return CollectionSerializer


def test_elements_are_rendered_with_their_serializers(base, target_class):
    class PostSerializer(base):
        class Meta:
            attributes = ("title",)

    class AuthorSerializer(base):
        class Meta:
            attributes = ("name",)

    target = target_class(
        [Post(id=1, title="A"), Author(id=3, name="Bo"), {"x": 1}],
        registry=base.registry,
    )
    assert target.serializable_object() == [{"title": "A"}, {"name": "Bo"}, {"x": 1}]
    assert target.serializable_array() == target.serializable_object()


def test_each_serializer(base, target_class):
    class TitleSerializer(base):
        class Meta:
            attributes = ("title",)

    target = target_class(
        [Post(id=1, title="A"), Post(id=2, title="B")],
        each_serializer=TitleSerializer,
        registry=base.registry,
    )
    assert target.serializable_object() == [{"title": "A"}, {"title": "B"}]


def test_scope_is_propagated(base, target_class):
    class PostSerializer(base):
        class Meta:
            attributes = ("title",)

        def title(self):
            return f"{self.object.title}/{self.scope}"

    target = target_class([Post(id=1, title="A")], scope="me", registry=base.registry)
    assert target.serializable_object() == [{"title": "A/me"}]


def test_nested_collections(base, target_class):
    class PostSerializer(base):
        class Meta:
            attributes = ("id",)

    target = target_class(
        [[Post(id=1, title="A")], [Post(id=2, title="B"), Post(id=3, title="C")]],
        registry=base.registry,
    )
    assert target.serializable_object() == [[{"id": 1}], [{"id": 2}, {"id": 3}]]


def test_absent_and_empty(target_class):
    assert target_class(None).serializable_object() == []
    assert target_class([]).serializable_object() == []
    assert target_class([]).embedded_in_root_associations() == {}


class TestJsonKey:
    def test_resource_name(self, target_class):
        assert target_class([]).json_key() is None
        assert target_class([], resource_name="posts").json_key() == "posts"
        assert target_class([], root="articles", resource_name="posts").json_key() == "articles"
        assert target_class([], root=False, resource_name="posts").json_key() is None

    def test_default_root(self, target_class):
        class PostsSerializer(target_class):
            default_root = "posts"

        assert PostsSerializer([]).json_key() == "posts"

    def test_as_json(self, base, target_class):
        class PostSerializer(base):
            class Meta:
                attributes = ("title",)

        target = target_class(
            [Post(id=1, title="A")],
            resource_name="posts",
            meta={"page": 1},
            registry=base.registry,
        )
        assert target.as_json() == {"posts": [{"title": "A"}], "meta": {"page": 1}}
        assert target.as_json(root=False) == [{"title": "A"}]


def test_explicit_collection_serializer_for_has_many(base, target_class):
    class PostsSerializer(target_class):
        def serializable_object(self):
            return [post.id for post in self.objects]

    class AuthorSerializer(base):
        class Meta:
            has_many = [("posts", {"serializer": PostsSerializer})]

    author = Author(id=3, name="Bo")
    author.posts = [Post(id=1, title="A"), Post(id=2, title="B")]
    assert AuthorSerializer(author).associations() == {"posts": [1, 2]}
