"""
Tests for relation block rendering
"""

from unittest import TestCase

from drizzle_auto_generator.codegen.imports import ImportTracker
from drizzle_auto_generator.codegen.relations import RelationEntry, RelationsRenderer

from factories import build, model, prop, role, user


def render_relations(*models):
    imports = ImportTracker()
    schema = build({"models": list(models)})
    blocks = RelationsRenderer(imports).render_blocks(schema)
    return {block.split(" = ")[0].replace("export const ", ""): block for block in blocks}, imports


class TestRelationsRenderer(TestCase):
    """Test cases for RelationsRenderer"""

    def test_inferred_one_to_many(self):
        blocks, imports = render_relations(
            user(),
            model("Post", prop("id", id=True), prop("title"), prop("userId")),
        )

        assert blocks["userRelations"] == (
            "export const userRelations = relations(userTable, ({ many }) => ({\n"
            "  posts: many(postTable),\n"
            "}));"
        )
        assert blocks["postRelations"] == (
            "export const postRelations = relations(postTable, ({ one }) => ({\n"
            "  user: one(userTable, {\n"
            "    fields: [postTable.userId],\n"
            "    references: [userTable.id],\n"
            "  }),\n"
            "}));"
        )
        assert imports.core_symbols == ["relations"]

    def test_models_without_relations_have_no_block(self):
        blocks, imports = render_relations(user(), role())
        assert blocks == {}
        assert imports.core_symbols == []

    def test_explicit_many_to_one_uses_relation_name(self):
        blocks, _ = render_relations(
            user(),
            model("Post", prop("id", id=True), prop("authorId"),
                  prop("author", "User", manyToOne={"fields": "authorId"})),
        )

        assert "  author: one(userTable, {\n    fields: [postTable.authorId],\n" in blocks["postRelations"]
        assert "  posts: many(postTable),\n" in blocks["userRelations"]

    def test_explicit_one_to_many_uses_relation_name(self):
        blocks, _ = render_relations(
            user(prop("articles", "Post[]", oneToMany={"fields": "id", "references": "writerId"})),
            model("Post", prop("id", id=True), prop("writerId")),
        )

        assert "  articles: many(postTable),\n" in blocks["userRelations"]
        assert (
            "  user: one(userTable, {\n"
            "    fields: [postTable.writerId],\n"
            "    references: [userTable.id],\n"
            "  }),\n"
        ) in blocks["postRelations"]

    def test_explicit_one_to_one(self):
        blocks, _ = render_relations(
            user(prop("profileId"), prop("profile", "Profile", oneToOne={"fields": "profileId"})),
            model("Profile", prop("id", id=True), prop("bio")),
        )

        assert blocks["userRelations"] == (
            "export const userRelations = relations(userTable, ({ one }) => ({\n"
            "  profile: one(profileTable, {\n"
            "    fields: [userTable.profileId],\n"
            "    references: [profileTable.id],\n"
            "  }),\n"
            "}));"
        )
        assert "  user: one(userTable),\n" in blocks["profileRelations"]

    def test_one_to_one_without_key_column(self):
        blocks, _ = render_relations(
            model("Post", prop("id", id=True), prop("cover", "Image", relation=True)),
            model("Image", prop("id", id=True)),
        )

        assert "  cover: one(imageTable),\n" in blocks["postRelations"]
        assert "  post: one(postTable),\n" in blocks["imageRelations"]

    def test_many_to_many_points_at_junction(self):
        blocks, _ = render_relations(
            model("Post", prop("id", id=True), prop("tags", "Tag[]", manyToMany={"through": "PostTag"})),
            model("Tag", prop("id", id=True)),
            model("PostTag", prop("postId"), prop("tagId"), junction=True),
        )

        assert "  tags: many(posttagTable),\n" in blocks["postRelations"]
        assert "  posts: many(posttagTable),\n" in blocks["tagRelations"]
        assert blocks["posttagRelations"] == (
            "export const posttagRelations = relations(posttagTable, ({ one }) => ({\n"
            "  post: one(postTable, {\n"
            "    fields: [posttagTable.postId],\n"
            "    references: [postTable.id],\n"
            "  }),\n"
            "  tag: one(tagTable, {\n"
            "    fields: [posttagTable.tagId],\n"
            "    references: [tagTable.id],\n"
            "  }),\n"
            "}));"
        )

    def test_marked_junction_with_one_key_falls_back(self):
        """A junction-marked model without two keys renders like any other model"""
        blocks, _ = render_relations(
            user(),
            model("Audit", prop("id", id=True), prop("userId"),
                  prop("owner", "User", manyToOne={"fields": "userId"}), junction=True),
        )
        assert "  owner: one(userTable, {\n    fields: [auditTable.userId],\n" in blocks["auditRelations"]
        assert "  audits: many(auditTable),\n" in blocks["userRelations"]

    def test_junction_keys_do_not_infer_one_to_many(self):
        blocks, _ = render_relations(
            user(),
            model("Audit", prop("id", id=True), prop("userId"), junction=True),
        )
        assert blocks == {}

    def test_relation_names_for_repeated_pairs(self):
        blocks, _ = render_relations(
            user(),
            model(
                "Post",
                prop("id", id=True),
                prop("authorId"),
                prop("editorId"),
                prop("author", "User", manyToOne={"fields": "authorId"}),
                prop("editor", "User", manyToOne={"fields": "editorId"}),
            ),
        )

        assert blocks["postRelations"] == (
            "export const postRelations = relations(postTable, ({ one }) => ({\n"
            "  author: one(userTable, {\n"
            "    fields: [postTable.authorId],\n"
            "    references: [userTable.id],\n"
            "    relationName: 'author',\n"
            "  }),\n"
            "  editor: one(userTable, {\n"
            "    fields: [postTable.editorId],\n"
            "    references: [userTable.id],\n"
            "    relationName: 'editor',\n"
            "  }),\n"
            "}));"
        )
        assert blocks["userRelations"] == (
            "export const userRelations = relations(userTable, ({ many }) => ({\n"
            "  posts: many(postTable, { relationName: 'author' }),\n"
            "  editorPosts: many(postTable, { relationName: 'editor' }),\n"
            "}));"
        )

    def test_self_reference(self):
        blocks, _ = render_relations(
            model(
                "Employee",
                prop("id", id=True),
                prop("managerId", optional=True),
                prop("manager", "Employee", manyToOne={"fields": "managerId"}),
            ),
        )

        assert blocks["employeeRelations"] == (
            "export const employeeRelations = relations(employeeTable, ({ one, many }) => ({\n"
            "  manager: one(employeeTable, {\n"
            "    fields: [employeeTable.managerId],\n"
            "    references: [employeeTable.id],\n"
            "    relationName: 'manager',\n"
            "  }),\n"
            "  employees: many(employeeTable, { relationName: 'manager' }),\n"
            "}));"
        )


class TestEntryNames(TestCase):
    """Test cases for entry name conflict resolution"""

    def test_alternative_then_counter(self):
        entries = [
            RelationEntry(name="user", alternative=None, call="one", target_var="userTable"),
            RelationEntry(name="user", alternative="author", call="one", target_var="userTable"),
            RelationEntry(name="user", alternative="author", call="one", target_var="userTable"),
            RelationEntry(name="user", alternative=None, call="one", target_var="userTable"),
        ]
        assert RelationsRenderer._resolve_names(entries) == ["user", "author", "user_1", "user_2"]

    def test_entry_render_forms(self):
        bare = RelationEntry(name="x", alternative=None, call="many", target_var="postTable")
        labelled = RelationEntry(name="x", alternative=None, call="many", target_var="postTable",
                                 relation_name="author")

        assert bare.render("posts") == "  posts: many(postTable),"
        assert labelled.render("posts") == "  posts: many(postTable, { relationName: 'author' }),"
