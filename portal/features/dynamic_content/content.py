"""
In-memory content tree.

A ContentItem owns a root ContentPart; a part maps field names to Fields in
definition order; a reference field's value is the nested ContentPart it owns.
The tree is built from a ContentType and serialized to plain JSON-compatible
dictionaries for storage.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from .exceptions import ContentDefinitionError


class DataTypeKind(str, Enum):
    """Data types that get dedicated form handling, keyed by data type name."""

    RICH_TEXT = "Rich Text"
    MARKDOWN = "Markdown"
    STANDARD = "Standard"

    @classmethod
    def from_name(cls, name: str) -> "DataTypeKind":
        if name == cls.RICH_TEXT.value:
            return cls.RICH_TEXT
        if name == cls.MARKDOWN.value:
            return cls.MARKDOWN
        return cls.STANDARD


class UnderlyingDataType(str, Enum):
    """Storage type of a scalar data type."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    DATE_TIME = "datetime"
    GUID = "guid"
    URI = "uri"


class FieldKind(str, Enum):
    """Tag of a field's value: decides both the Python type and the form coercion."""

    BOOLEAN = "boolean"      # bool
    INTEGER = "integer"      # int
    FLOAT = "float"          # float
    TEXT = "text"            # str
    RICH_TEXT = "rich_text"  # str, HTML-escaped
    MARKDOWN = "markdown"    # str, verbatim
    PART = "part"            # ContentPart or None


SCALAR_DEFAULTS: Dict[FieldKind, Any] = {
    FieldKind.BOOLEAN: False,
    FieldKind.INTEGER: 0,
    FieldKind.FLOAT: 0.0,
    FieldKind.TEXT: "",
    FieldKind.RICH_TEXT: "",
    FieldKind.MARKDOWN: "",
}

_UNDERLYING_KINDS = {
    UnderlyingDataType.BOOLEAN: FieldKind.BOOLEAN,
    UnderlyingDataType.INTEGER: FieldKind.INTEGER,
    UnderlyingDataType.FLOAT: FieldKind.FLOAT,
}

FieldValue = Union[bool, int, float, str, "ContentPart", None]


@dataclass(frozen=True)
class DataType:
    name: str
    underlying_data_type: UnderlyingDataType = UnderlyingDataType.STRING
    id: Optional[str] = None

    @property
    def kind(self) -> DataTypeKind:
        return DataTypeKind.from_name(self.name)


@dataclass(frozen=True)
class ContentType:
    name: str
    field_definitions: Tuple["FieldDefinition", ...] = ()
    id: Optional[str] = None

    def get_field_definition(self, name: str) -> Optional["FieldDefinition"]:
        for definition in self.field_definitions:
            if definition.name == name:
                return definition
        return None


@dataclass(frozen=True)
class FieldDefinition:
    """
    Immutable description of one field.

    Exactly one of data_type (scalar field) or content_type (reference field,
    whose value is a nested part of that type) is set.
    """

    name: str
    data_type: Optional[DataType] = None
    content_type: Optional[ContentType] = None
    label: str = ""
    id: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ContentDefinitionError("Field definitions need a name")
        if "/" in self.name:
            raise ContentDefinitionError(f"Field name '{self.name}' may not contain '/'")
        if (self.data_type is None) == (self.content_type is None):
            raise ContentDefinitionError(
                f"Field '{self.name}' must have either a data type or a referenced content type"
            )

    @property
    def is_reference_type(self) -> bool:
        return self.content_type is not None

    @property
    def kind(self) -> FieldKind:
        if self.is_reference_type:
            return FieldKind.PART

        data_kind = self.data_type.kind
        if data_kind is DataTypeKind.RICH_TEXT:
            return FieldKind.RICH_TEXT
        if data_kind is DataTypeKind.MARKDOWN:
            return FieldKind.MARKDOWN
        return _UNDERLYING_KINDS.get(self.data_type.underlying_data_type, FieldKind.TEXT)

    @property
    def display_label(self) -> str:
        return self.label or self.name

    def default_value(self) -> FieldValue:
        if self.is_reference_type:
            return ContentPart.from_content_type(self.content_type)
        return SCALAR_DEFAULTS[self.kind]


@dataclass
class Field:
    definition: FieldDefinition
    value: FieldValue = None

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass
class ContentPart:
    content_type: Optional[ContentType] = None
    fields: Dict[str, Field] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_content_type(cls, content_type: Optional[ContentType]) -> "ContentPart":
        """Build a part with default values, allocating nested parts for reference fields."""
        if content_type is None:
            return cls()
        fields = {
            definition.name: Field(definition, definition.default_value())
            for definition in content_type.field_definitions
        }
        return cls(content_type=content_type, fields=fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields.values())

    def __getitem__(self, name: str) -> Field:
        return self.fields[name]

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for field in self:
            if isinstance(field.value, ContentPart):
                data[field.name] = field.value.to_dict()
            else:
                data[field.name] = field.value
        return data

    def load(self, data: Optional[Dict[str, Any]]) -> "ContentPart":
        """
        Copy stored values onto this part's fields.

        Keys without a matching field are ignored; fields without a stored key
        keep their current value. A stored null for a reference field leaves
        the nested part absent.
        """
        for name, stored in (data or {}).items():
            field = self.fields.get(name)
            if field is None:
                continue

            if not field.definition.is_reference_type:
                field.value = stored
                continue

            if stored is None:
                field.value = None
            elif isinstance(stored, dict):
                if not isinstance(field.value, ContentPart):
                    field.value = ContentPart.from_content_type(field.definition.content_type)
                field.value.load(stored)
        return self


@dataclass
class ContentItem:
    content: ContentPart
    module_id: Optional[str] = None
    portal_id: Optional[int] = None
    content_type_id: Optional[str] = None
    id: Optional[str] = None

    @property
    def content_type(self) -> Optional[ContentType]:
        return self.content.content_type

    @property
    def is_new(self) -> bool:
        return self.id is None
