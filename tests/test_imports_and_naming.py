"""
Tests for import tracking and naming helpers.
"""

from unittest import TestCase

from drizzle_auto_generator.codegen.imports import ImportTracker
from drizzle_auto_generator.domain.naming import (
    default_foreign_key,
    enum_variable_name,
    lower_first,
    pluralize,
    relations_variable_name,
    strip_foreign_key_suffix,
    table_variable_name,
)


class TestImportTracker(TestCase):
    """Test cases for ImportTracker"""

    def test_render_sorts_and_deduplicates(self):
        imports = ImportTracker()
        imports.require("text").require("pgTable").require("text").require("integer")
        imports.needs_relations().needs_sql().needs_sql()

        assert imports.render() == (
            "import { integer, pgTable, text } from 'drizzle-orm/pg-core';\n"
            "import { relations, sql } from 'drizzle-orm';"
        )

    def test_empty_namespaces_are_omitted(self):
        imports = ImportTracker()
        assert imports.render() == ""

        imports.require("pgTable")
        assert imports.render() == "import { pgTable } from 'drizzle-orm/pg-core';"

    def test_core_only(self):
        imports = ImportTracker().require_core("relations")
        assert imports.render() == "import { relations } from 'drizzle-orm';"
        assert imports.pg_core_symbols == []


class TestNaming(TestCase):
    """Test cases for generated identifiers"""

    def test_variable_names(self):
        assert table_variable_name("UserRole") == "userroleTable"
        assert relations_variable_name("UserRole") == "userroleRelations"
        assert enum_variable_name("OrderStatus") == "orderStatusEnum"
        assert lower_first("Post") == "post"
        assert lower_first("") == ""

    def test_pluralize(self):
        assert pluralize("post") == "posts"
        assert pluralize("category") == "categories"
        assert pluralize("") == ""

    def test_default_foreign_key(self):
        assert default_foreign_key("User") == "userId"
        assert default_foreign_key("BlogPost") == "blogpostId"

    def test_strip_foreign_key_suffix(self):
        assert strip_foreign_key_suffix("reviewerId") == "reviewer"
        assert strip_foreign_key_suffix("reviewer_id") == "reviewer"
        assert strip_foreign_key_suffix("id_reviewer") == "reviewer"
        assert strip_foreign_key_suffix("id") == "id"
        assert strip_foreign_key_suffix("name") == "name"
