import dataclasses

import pytest

from ..config import EmbeddingPolicy, EmbedMode
from ..exceptions import InvalidDeclarationError, UnknownOptionError
from .testing import Post, new_base_serializer


@pytest.fixture
def base():
    return new_base_serializer()


class TestBuilder:
    def test_build(self):
        from ..associations import HasMany, HasOne
        from ..declarative import SerializerConfigBuilder

        config = (
            SerializerConfigBuilder(policy=EmbeddingPolicy())
            .attributes("id", "title")
            .has_one("author", "person")
            .has_many("comments", embed="ids")
            .root("article")
            .build()
        )
        assert config.attributes == ("id", "title")
        assert config.root == "article"
        assert list(config.associations) == ["author", "person", "comments"]

        author = config.associations["author"]
        assert isinstance(author, HasOne)
        assert author.key == "author_id"
        assert author.embedded_key == "author"
        assert author.root_key == "authors"
        assert author.embed_key == "id"
        assert author.embed is EmbedMode.OBJECTS
        assert config.associations["person"].root_key == "people"

        comments = config.associations["comments"]
        assert isinstance(comments, HasMany)
        assert comments.key == "comment_ids"
        assert comments.root_key == "comments"
        assert comments.embed_ids and not comments.embed_objects

    def test_redeclared_attribute_is_kept_once(self):
        from ..declarative import SerializerConfigBuilder

        config = SerializerConfigBuilder().attributes("a", "b").attributes("b", "a", "c").build()
        assert config.attributes == ("a", "b", "c")

    def test_attribute_and_association_conflict(self):
        from ..declarative import SerializerConfigBuilder

        with pytest.raises(InvalidDeclarationError):
            SerializerConfigBuilder().attributes("author").has_one("author")
        with pytest.raises(InvalidDeclarationError):
            SerializerConfigBuilder().has_many("comments").attributes("comments")

    def test_association_declared_twice(self):
        from ..declarative import SerializerConfigBuilder

        with pytest.raises(InvalidDeclarationError):
            SerializerConfigBuilder().has_one("author").has_many("author")
        with pytest.raises(InvalidDeclarationError):
            SerializerConfigBuilder().has_many("comments", "comments")

    def test_config_is_immutable(self):
        from ..declarative import SerializerConfigBuilder

        config = SerializerConfigBuilder().has_one("author").build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.attributes = ("x",)  # type: ignore
        with pytest.raises(TypeError):
            config.associations["x"] = config.associations["author"]  # type: ignore
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.associations["author"].key = "x"  # type: ignore


class TestAssociationOptions:
    def test_unknown_option(self):
        from ..associations import HasOne

        with pytest.raises(UnknownOptionError) as excinfo:
            HasOne.declare("author", embeds="ids", keys="x")
        assert excinfo.value.message == "unknown options for association (author): embeds, and keys"

    def test_invalid_embed_mode(self):
        from ..associations import HasOne

        with pytest.raises(InvalidDeclarationError):
            HasOne.declare("author", embed="everything")

    def test_include_is_deprecated(self):
        from ..associations import HasMany

        with pytest.warns(DeprecationWarning):
            association = HasMany.declare("comments", policy=EmbeddingPolicy(), include=True)
        assert association.embed_in_root

    def test_contradicting_include(self):
        from ..associations import HasMany

        with pytest.warns(DeprecationWarning):
            with pytest.raises(InvalidDeclarationError):
                HasMany.declare("comments", include=True, embed_in_root=False)

    def test_policy_defaults(self):
        from ..associations import HasMany

        policy = EmbeddingPolicy(embed=EmbedMode.IDS, embed_in_root=True)
        association = HasMany.declare("comments", policy=policy)
        assert association.embed is EmbedMode.IDS
        assert association.embed_in_root

        association = HasMany.declare("comments", policy=policy, embed="objects", embed_in_root=False)
        assert association.embed is EmbedMode.OBJECTS
        assert not association.embed_in_root


class TestInheritance:
    def test_specialization_does_not_alter_parent(self, base):
        class PostSerializer(base):
            class Meta:
                attributes = ("id", "title")
                has_one = ["author"]

        class DetailedPostSerializer(PostSerializer):
            class Meta:
                attributes = ("body",)
                has_many = ["comments"]

        assert PostSerializer.declared_attributes() == ("id", "title")
        assert list(PostSerializer.declared_associations()) == ["author"]
        assert DetailedPostSerializer.declared_attributes() == ("id", "title", "body")
        assert list(DetailedPostSerializer.declared_associations()) == ["author", "comments"]

        post = Post(id=1, title="A", body="B")
        assert PostSerializer(post, except_=["author"]).serializable_object() == {
            "id": 1,
            "title": "A",
        }
        assert DetailedPostSerializer(post, only=["title", "body"]).serializable_object() == {
            "title": "A",
            "body": "B",
        }

    def test_specialization_without_meta(self, base):
        class PostSerializer(base):
            class Meta:
                attributes = ("id", "title")
                root = "article"

        class OtherPostSerializer(PostSerializer):
            pass

        assert OtherPostSerializer.declared_attributes() == ("id", "title")
        assert OtherPostSerializer(None).json_key() == "article"

    def test_model_is_not_inherited(self, base):
        class PostSerializer(base):
            class Meta:
                model = Post

        class OtherPostSerializer(PostSerializer):
            pass

        assert base.serializer_for(Post(id=1, title="A")) is PostSerializer

    def test_overrides_are_inherited(self, base):
        class PostSerializer(base):
            class Meta:
                attributes = ("title",)

            def title(self):
                return "overridden"

        class OtherPostSerializer(PostSerializer):
            class Meta:
                attributes = ("id",)

        assert OtherPostSerializer(Post(id=1, title="A")).serializable_object() == {
            "title": "overridden",
            "id": 1,
        }


class TestMeta:
    def test_unknown_meta_attribute(self, base):
        with pytest.raises(InvalidDeclarationError):

            class PostSerializer(base):
                class Meta:
                    atributes = ("title",)

    def test_single_attribute_string(self, base):
        class PostSerializer(base):
            class Meta:
                attributes = "title"

        assert PostSerializer.declared_attributes() == ("title",)

    def test_invalid_association_declarations(self, base):
        with pytest.raises(InvalidDeclarationError):

            class PostSerializer(base):
                class Meta:
                    has_one = "author"

    def test_conflicting_association_declarations(self, base):
        with pytest.raises(InvalidDeclarationError):

            class PostSerializer(base):
                class Meta:
                    has_one = ["author"]
                    has_many = ["author"]

    def test_inherited_association_can_be_redeclared(self, base):
        class PostSerializer(base):
            class Meta:
                has_one = ["author"]

        class PostIdsSerializer(PostSerializer):
            class Meta:
                has_one = [("author", {"embed": "ids"})]

        assert PostSerializer.declared_associations()["author"].embed is EmbedMode.OBJECTS
        assert PostIdsSerializer.declared_associations()["author"].embed is EmbedMode.IDS

    def test_policy_is_read_at_declaration(self):
        from ..config import Config

        config = Config()
        base = new_base_serializer(config)

        class PostSerializer(base):
            class Meta:
                has_many = ["comments"]

        config.setup(lambda policy: setattr(policy, "embed", EmbedMode.IDS))

        class LaterPostSerializer(base):
            class Meta:
                has_many = ["comments"]

        assert PostSerializer.declared_associations()["comments"].embed is EmbedMode.OBJECTS
        assert LaterPostSerializer.declared_associations()["comments"].embed is EmbedMode.IDS
