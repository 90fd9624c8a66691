"""
Tests for table and enum rendering

This module checks the column builder chains, table callbacks and enum
declarations of the generated schema.
"""

from unittest import TestCase

from drizzle_auto_generator.codegen.enums import EnumRenderer
from drizzle_auto_generator.codegen.imports import ImportTracker
from drizzle_auto_generator.codegen.tables import TableRenderer

from factories import build, enum, model, prop, user


def render_tables(*models, enums=()):
    imports = ImportTracker()
    schema = build({"models": list(models), "enums": list(enums)})
    return TableRenderer(imports).render_blocks(schema), imports


def column_lines(block):
    return [line.strip() for line in block.splitlines() if line.startswith("  ")]


class TestTableDeclaration(TestCase):
    """Test cases for the pgTable block"""

    def test_basic_table(self):
        blocks, imports = render_tables(user())

        assert blocks == [
            "export const userTable = pgTable('user', {\n"
            "  id: text('id').primaryKey(),\n"
            "  name: text('name').notNull(),\n"
            "});\n"
            "\n"
            "export type User = typeof userTable.$inferSelect;\n"
            "export type NewUser = typeof userTable.$inferInsert;"
        ]
        assert imports.pg_core_symbols == ["pgTable", "text"]

    def test_table_name_and_schema(self):
        blocks, _ = render_tables(model("User", prop("id", id=True), table={"name": "users", "schema": "auth"}))
        assert blocks[0].startswith("export const userTable = pgTable('auth.users', {")

    def test_namespace_schema(self):
        schema = build({
            "namespace": "Billing.Invoices",
            "config": {"schema": "billing"},
            "models": [model("Invoice", prop("id", id=True))],
        })
        blocks = TableRenderer(ImportTracker()).render_blocks(schema)
        assert "pgTable('billing.invoice', {" in blocks[0]

    def test_relation_properties_are_not_columns(self):
        blocks, _ = render_tables(
            user(prop("posts", "Post[]")),
            model("Post", prop("id", id=True), prop("owner", "User"), prop("address", "Address")),
        )

        assert column_lines(blocks[0]) == ["id: text('id').primaryKey(),", "name: text('name').notNull(),"]
        # Address is not a collected model, so it stays a column
        assert column_lines(blocks[1]) == ["id: text('id').primaryKey(),", "address: text('address').notNull(),"]


class TestColumnChain(TestCase):
    """Test cases for individual column builder chains"""

    def render_column(self, *properties):
        blocks, imports = render_tables(model("Item", *properties))
        return column_lines(blocks[0]), imports

    def test_auto_increment_primary_key(self):
        lines, imports = self.render_column(prop("id", "int32", id=True, autoIncrement=True))
        assert lines == ["id: integer('id').primaryKey().generatedAlwaysAsIdentity(),"]
        assert "integer" in imports.pg_core_symbols

    def test_uuid_columns(self):
        lines, imports = self.render_column(
            prop("id", id=True, uuid={"defaultRandom": True}),
            prop("ref", uuid={"defaultRandom": True}),
            prop("plain", uuid=True, optional=True),
        )
        assert lines == [
            "id: uuid('id').primaryKey().defaultRandom(),",
            "ref: uuid('ref').notNull().defaultRandom(),",
            "plain: uuid('plain'),",
        ]
        assert imports.pg_core_symbols == ["pgTable", "uuid"]

    def test_optional_column_is_nullable(self):
        lines, _ = self.render_column(prop("nickname", optional=True))
        assert lines == ["nickname: text('nickname'),"]

    def test_column_name_overrides(self):
        lines, _ = self.render_column(
            prop("email", column={"name": "email_address"}),
            prop("userName", map="user_name"),
        )
        assert lines == [
            "email: text('email_address').notNull(),",
            "userName: text('user_name').notNull(),",
        ]

    def test_default_values(self):
        lines, imports = self.render_column(
            prop("active", "boolean", default=True),
            prop("score", "float64", default=0),
            prop("ratio", "float32", default=0.5),
            prop("status", default="'draft'"),
            prop("createdAt", "utcDateTime", default="now()"),
            prop("updatedAt", "utcDateTime", default="CURRENT_TIMESTAMP"),
            prop("level", "int32", default="3"),
            prop("archived", "boolean", default="false"),
            prop("token", default="gen_random_uuid()"),
        )
        assert lines == [
            "active: boolean('active').notNull().default(true),",
            "score: doublePrecision('score').notNull().default(0),",
            "ratio: real('ratio').notNull().default(0.5),",
            "status: text('status').notNull().default('draft'),",
            "createdAt: timestamp('createdAt').notNull().defaultNow(),",
            "updatedAt: timestamp('updatedAt').notNull().defaultNow(),",
            "level: integer('level').notNull().default(3),",
            "archived: boolean('archived').notNull().default(false),",
            "token: text('token').notNull().default(sql`gen_random_uuid()`),",
        ]
        assert imports.core_symbols == ["sql"]

    def test_sql_expression_default(self):
        lines, imports = self.render_column(prop("slug", sql="lower(name)"))
        assert lines == ["slug: text('slug').notNull().default(sql`lower(name)`),"]
        assert imports.core_symbols == ["sql"]

    def test_plain_defaults_do_not_import_sql(self):
        _, imports = self.render_column(prop("active", "boolean", default=False))
        assert imports.core_symbols == []

    def test_unique_columns(self):
        lines, _ = self.render_column(
            prop("email", unique=True),
            prop("handle", unique={"name": "uq_handle"}),
        )
        assert lines == [
            "email: text('email').notNull().unique(),",
            "handle: text('handle').notNull().unique('uq_handle'),",
        ]

    def test_array_and_enum_columns(self):
        blocks, imports = render_tables(
            model("Item", prop("tags", "string[]"), prop("status", "Status"), prop("history", "Status[]")),
            enums=[enum("Status", ["active", "archived"])],
        )
        assert column_lines(blocks[0]) == [
            "tags: text('tags').array().notNull(),",
            "status: statusEnum('status').notNull(),",
            "history: statusEnum('history').array().notNull(),",
        ]
        assert "statusEnum" not in imports.pg_core_symbols

    def test_reference_clause_with_actions(self):
        blocks, _ = render_tables(
            user(),
            model(
                "Post",
                prop("id", id=True),
                prop("authorId"),
                prop("author", "User", manyToOne={
                    "fields": "authorId",
                    "references": "id",
                    "onDelete": "cascade",
                    "onUpdate": "no action",
                }),
            ),
        )
        assert column_lines(blocks[1])[1] == (
            "authorId: text('authorId').references(() => userTable.id, "
            "{ onDelete: 'cascade', onUpdate: 'no action' }).notNull(),"
        )

    def test_reference_clause_needs_real_columns(self):
        """A relation naming a missing local field renders no reference"""
        blocks, _ = render_tables(
            user(),
            model("Post", prop("id", id=True), prop("author", "User", manyToOne={"fields": "writerId"})),
        )
        assert "references" not in blocks[1]


class TestTableCallback(TestCase):
    """Test cases for composite keys, unique constraints and indexes"""

    def test_callback_entries(self):
        blocks, imports = render_tables(model(
            "Membership",
            prop("userId"),
            prop("teamId"),
            prop("email", index=True),
            prop("slug", index={"name": "membership_slug", "expression": "lower(slug)"}),
            id={"name": "pk_membership", "fields": ["userId", "teamId"]},
            unique={"name": "uq_membership_email", "columns": ["teamId", "email"]},
        ))

        assert blocks[0].split("\n\n")[0] == (
            "export const membershipTable = pgTable('membership', {\n"
            "  userId: text('userId').notNull(),\n"
            "  teamId: text('teamId').notNull(),\n"
            "  email: text('email').notNull(),\n"
            "  slug: text('slug').notNull(),\n"
            "}, (table) => ({\n"
            "  pk: primaryKey({ columns: [table.userId, table.teamId], name: 'pk_membership' }),\n"
            "  teamIdEmailUnique: unique('uq_membership_email').on(table.teamId, table.email),\n"
            "  emailIdx: index('membership_email_idx').on(table.email),\n"
            "  slugIdx: index('membership_slug').on(sql`lower(slug)`),\n"
            "}));"
        )
        assert imports.pg_core_symbols == ["index", "pgTable", "primaryKey", "text", "unique"]
        assert imports.core_symbols == ["sql"]

    def test_unnamed_composite_key(self):
        blocks, _ = render_tables(model("Pair", prop("a"), prop("b"), id={"fields": ["a", "b"]}))
        assert "  pk: primaryKey({ columns: [table.a, table.b] }),\n" in blocks[0]

    def test_index_name_uses_table_name(self):
        blocks, _ = render_tables(model("User", prop("email", index=True), table={"name": "users"}))
        assert "emailIdx: index('users_email_idx').on(table.email)" in blocks[0]


class TestEnumRenderer(TestCase):

    def test_enum_declaration(self):
        imports = ImportTracker()
        schema = build({"enums": [enum("OrderStatus", {"Pending": "pending", "Shipped": "shipped"})]})

        assert EnumRenderer(imports).render_blocks(schema) == [
            "export const orderStatusEnum = pgEnum('orderstatus', ['pending', 'shipped']);"
        ]
        assert imports.pg_core_symbols == ["pgEnum"]

    def test_declared_values_replace_member_names(self):
        """Members with a value render the value; the rest fall back to their name"""
        schema = build({"enums": [enum("Role", {"Admin": "administrator", "Guest": None})]})
        blocks = EnumRenderer(ImportTracker()).render_blocks(schema)

        assert blocks == ["export const roleEnum = pgEnum('role', ['administrator', 'Guest']);"]
        assert "'Admin'" not in blocks[0]

    def test_enum_members_are_quoted(self):
        schema = build({"enums": [enum("Mood", ["it's fine", "ok"])]})
        blocks = EnumRenderer(ImportTracker()).render_blocks(schema)
        assert blocks == ["export const moodEnum = pgEnum('mood', ['it\\'s fine', 'ok']);"]
