"""
Declaration graph consumed by the schema engine.

A ``Program`` is the ordered list of model and enum declarations produced by a
loader. Declarations compare and hash by identity, which is what lets the
metadata store key annotations on them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union


class TypeKind(Enum):
    """Kinds of property types."""

    SCALAR = "scalar"
    ENUM = "enum"
    MODEL = "model"
    ARRAY = "array"


@dataclass(frozen=True)
class TypeRef:
    """
    Reference to the type of a property.

    ``name`` is the scalar, enum or model name; ``element`` is only set for
    arrays and holds the item type.
    """

    kind: TypeKind
    name: str
    element: Optional["TypeRef"] = None

    @classmethod
    def scalar(cls, name: str) -> "TypeRef":
        return cls(TypeKind.SCALAR, name)

    @classmethod
    def enum(cls, name: str) -> "TypeRef":
        return cls(TypeKind.ENUM, name)

    @classmethod
    def model(cls, name: str) -> "TypeRef":
        return cls(TypeKind.MODEL, name)

    @classmethod
    def array(cls, element: "TypeRef") -> "TypeRef":
        return cls(TypeKind.ARRAY, "Array", element)

    @property
    def is_scalar(self) -> bool:
        return self.kind is TypeKind.SCALAR

    @property
    def is_enum(self) -> bool:
        return self.kind is TypeKind.ENUM

    @property
    def is_model(self) -> bool:
        return self.kind is TypeKind.MODEL

    @property
    def is_array(self) -> bool:
        return self.kind is TypeKind.ARRAY

    def __str__(self) -> str:
        if self.is_array and self.element is not None:
            return f"{self.element}[]"
        return self.name


@dataclass(eq=False)
class PropertyDecl:
    """A declared property of a model."""

    name: str
    type: TypeRef
    optional: bool = False

    def __repr__(self) -> str:
        return f"PropertyDecl({self.name}: {self.type}{'?' if self.optional else ''})"


@dataclass(eq=False)
class ModelDecl:
    """A declared model with its properties in declaration order."""

    name: str
    namespace: str = ""
    properties: Dict[str, PropertyDecl] = field(default_factory=dict)
    # Namespace of the template a model was instantiated from, if any
    source_namespace: Optional[str] = None

    def add_property(self, prop: PropertyDecl) -> PropertyDecl:
        self.properties[prop.name] = prop
        return prop

    def __repr__(self) -> str:
        return f"ModelDecl({self.qualified_name})"

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


@dataclass(eq=False)
class EnumDecl:
    """A declared enum; member values are ``None`` when only a name was given."""

    name: str
    namespace: str = ""
    members: Dict[str, Optional[Union[str, int, float]]] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"EnumDecl({self.qualified_name})"

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


Declaration = Union[ModelDecl, EnumDecl]


@dataclass
class Program:
    """Ordered collection of declarations handed to the engine."""

    declarations: List[Declaration] = field(default_factory=list)

    def add(self, declaration: Declaration) -> Declaration:
        self.declarations.append(declaration)
        return declaration

    def models(self) -> Iterator[ModelDecl]:
        return (d for d in self.declarations if isinstance(d, ModelDecl))

    def find_model(self, name: str) -> Optional[ModelDecl]:
        return next((m for m in self.models() if m.name == name), None)
