# File: tests/factories.py
# Small builders for declaration documents used across the test modules.

from typing import Any, Dict

from drizzle_auto_generator.codegen import SchemaRenderer
from drizzle_auto_generator.domain.models import SchemaModel
from drizzle_auto_generator.loader import DeclarationLoader, LoadResult
from drizzle_auto_generator.mapper import build_schema_model


def prop(name: str, type: str = "string", **options: Any) -> Dict[str, Any]:
    """A property entry; options use the document's camelCase keys."""
    return {"name": name, "type": type, **options}


def model(name: str, *properties: Dict[str, Any], table: Any = True, **options: Any) -> Dict[str, Any]:
    """A model entry, marked as a table unless told otherwise."""
    return {"name": name, "table": table, "properties": list(properties), **options}


def enum(name: str, members: Any) -> Dict[str, Any]:
    return {"name": name, "members": members}


def document(*models: Dict[str, Any], enums=(), namespace: str = "", config=None) -> Dict[str, Any]:
    doc = {"namespace": namespace, "models": list(models), "enums": list(enums)}
    if config is not None:
        doc["config"] = config
    return doc


def load(*documents: Dict[str, Any]) -> LoadResult:
    return DeclarationLoader().load_documents(
        [(f"document-{index}", doc) for index, doc in enumerate(documents)]
    )


def build(*documents: Dict[str, Any]) -> SchemaModel:
    loaded = load(*documents)
    return build_schema_model(loaded.program, loaded.metadata)


def render(*documents: Dict[str, Any]) -> str:
    return SchemaRenderer().render(build(*documents))


# --- Reusable declarations ---
def user(*extra: Dict[str, Any]) -> Dict[str, Any]:
    return model("User", prop("id", id=True), prop("name"), *extra)


def role() -> Dict[str, Any]:
    return model("Role", prop("id", id=True), prop("name"))
