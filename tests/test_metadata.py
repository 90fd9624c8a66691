"""
Tests for annotation registration, validation and the read-only store.
"""

from unittest import TestCase

from drizzle_auto_generator.declarations import ModelDecl, PropertyDecl, TypeRef
from drizzle_auto_generator.metadata import ManyToManyOptions, MetadataBuilder, MetadataStore
from drizzle_auto_generator.validators import AnnotationValidator, validate_identifier


def make_model(name="User", namespace=""):
    model = ModelDecl(name=name, namespace=namespace)
    model.add_property(PropertyDecl("id", TypeRef.scalar("string")))
    model.add_property(PropertyDecl("email", TypeRef.scalar("string")))
    return model


class TestMetadataStore(TestCase):
    """Test cases for MetadataStore accessors"""

    def test_unset_metadata_is_absent(self):
        """Accessors return None/False instead of raising"""
        model = make_model()
        prop = model.properties["email"]
        store = MetadataStore()

        assert store.is_table(model) is False
        assert store.get_table_options(model) is None
        assert store.get_table_name(model) == "user"
        assert store.get_column_name(prop) == "email"
        assert store.is_primary_key(prop) is False
        assert store.get_composite_id(model) is None
        assert store.get_uuid_options(prop) is None
        assert store.get_default_value(prop) is None
        assert store.get_relation_options(prop) is None
        assert store.get_configuration("Blog") is None
        assert store.get_configuration(None) is None

    def test_identity_keyed(self):
        """Two declarations with equal names do not share annotations"""
        first, second = make_model(), make_model()
        builder = MetadataBuilder()
        builder.table(first)
        store = builder.build()

        assert store.is_table(first)
        assert not store.is_table(second)

    def test_store_is_a_snapshot(self):
        model = make_model()
        builder = MetadataBuilder()
        store = builder.build()
        builder.table(model)

        assert not store.is_table(model)
        assert builder.build().is_table(model)

    def test_column_name_precedence(self):
        model = make_model()
        prop = model.properties["email"]
        builder = MetadataBuilder()
        builder.column(prop, name="email_address")
        assert builder.build().get_column_name(prop) == "email_address"

        builder.map(prop, "mail")
        assert builder.build().get_column_name(prop) == "mail"

    def test_configuration_walks_up_namespaces(self):
        builder = MetadataBuilder()
        builder.config("Blog", schema="blog")
        builder.config("Blog.Admin.Audit", schema="audit")
        store = builder.build()

        assert store.get_configuration("Blog.Admin").schema == "blog"
        assert store.get_configuration("Blog.Admin.Audit").schema == "audit"
        assert store.get_configuration("Shop") is None

    def test_table_options(self):
        model = make_model()
        builder = MetadataBuilder()
        assert builder.table(model, name="users", schema="auth")
        store = builder.build()

        assert store.get_table_name(model) == "users"
        assert store.get_table_options(model).schema == "auth"

    def test_junction_implies_table(self):
        model = make_model("UserRole")
        builder = MetadataBuilder()
        builder.junction(model)
        store = builder.build()

        assert store.is_junction(model)
        assert store.is_table(model)


class TestMetadataDiagnostics(TestCase):
    """Invalid annotations are reported and not registered"""

    def test_invalid_table_name(self):
        model = make_model()
        builder = MetadataBuilder()

        assert builder.table(model, name="user-table") is False
        assert not builder.build().is_table(model)
        assert [d.code for d in builder.diagnostics] == ["invalid-table-name"]
        assert builder.diagnostics[0].target == "User"

    def test_invalid_schema_name(self):
        builder = MetadataBuilder()
        assert builder.table(make_model(), schema="1auth") is False
        assert builder.config("Blog", schema="") is False
        assert [d.code for d in builder.diagnostics] == ["invalid-schema-name", "invalid-schema-name"]

    def test_invalid_column_name(self):
        prop = make_model().properties["email"]
        builder = MetadataBuilder()

        assert builder.column(prop, name="e mail") is False
        assert builder.map(prop, "") is False
        assert builder.build().get_column_name(prop) == "email"
        assert len(builder.diagnostics) == 2

    def test_null_default_and_empty_sql(self):
        prop = make_model().properties["email"]
        builder = MetadataBuilder()

        assert builder.default_value(prop, None) is False
        assert builder.sql(prop, "   ") is False
        assert [d.code for d in builder.diagnostics] == ["invalid-default-value", "invalid-sql-expression"]

    def test_many_to_many_requires_through(self):
        prop = PropertyDecl("tags", TypeRef.array(TypeRef.model("Tag")))
        builder = MetadataBuilder()

        assert builder.many_to_many(prop) is False
        assert builder.many_to_many(prop, ManyToManyOptions()) is False
        assert not builder.build().is_many_to_many(prop)
        assert builder.many_to_many(prop, ManyToManyOptions(through="PostTag"))
        assert builder.build().get_relation_options(prop).through == "PostTag"

    def test_unknown_foreign_key_action(self):
        prop = PropertyDecl("author", TypeRef.model("User"))
        builder = MetadataBuilder()
        options = MetadataBuilder.relation_options(fields="authorId", on_delete="explode")

        assert builder.many_to_one(prop, options) is False
        assert builder.diagnostics[0].code == "invalid-relation-config"
        assert "explode" in builder.diagnostics[0].message

    def test_composite_id_needs_fields(self):
        model = make_model()
        builder = MetadataBuilder()

        assert builder.id(model) is False
        assert builder.id(model, name="pk_user", fields=["id", "email"])
        assert builder.build().get_composite_id(model).fields == ("id", "email")

    def test_relation_options_normalises_field_lists(self):
        options = MetadataBuilder.relation_options(fields="authorId", references=["id"])
        assert options.fields == ("authorId",)
        assert options.first_reference == "id"
        assert MetadataBuilder.relation_options().first_field is None


class TestValidators(TestCase):

    def test_validate_identifier(self):
        assert validate_identifier("user_roles").is_valid
        assert not validate_identifier("").is_valid
        assert not validate_identifier("user roles").is_valid
        long_name = validate_identifier("a" * 64)
        assert long_name.is_valid
        assert long_name.warnings

    def test_default_value_types(self):
        assert AnnotationValidator.validate_default_value(0).is_valid
        assert AnnotationValidator.validate_default_value(False).is_valid
        assert AnnotationValidator.validate_default_value("now()").is_valid
        assert not AnnotationValidator.validate_default_value(["a"]).is_valid

    def test_foreign_key_actions(self):
        assert AnnotationValidator.validate_foreign_key_actions("cascade", "set null").is_valid
        assert AnnotationValidator.validate_foreign_key_actions(None, None).is_valid
        assert not AnnotationValidator.validate_foreign_key_actions("CASCADE", None).is_valid
