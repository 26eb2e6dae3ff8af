import typing
from dataclasses import dataclass, field


def _format_path(path: typing.Tuple[str, ...]) -> str:
    return " -> ".join(path)


@dataclass
class SchemaException(Exception):
    """
    SchemaException is the common base of every error raised by sw_schema. Each subclass carries a machine-readable
    kind tag so callers can map errors without matching on class names.
    """
    kind: typing.ClassVar[str] = "schema"


@dataclass
class BadArgumentException(SchemaException):
    """
    BadArgumentException indicates that an invalid configuration was passed to a rule or schema component.
    """
    kind: typing.ClassVar[str] = "bad_argument"
    msg: str = ""

    def __str__(self):
        return self.msg


@dataclass
class InvalidFieldError(SchemaException):
    """
    InvalidFieldError indicates that a schema type was constructed with a field specification that is neither a name
    nor a single-key mapping from a name to a nested type (or a one-element list holding a nested type).
    """
    kind: typing.ClassVar[str] = "invalid_field"
    schema_name: str = ""
    spec: typing.Any = None
    msg: str = ""

    def __str__(self):
        message = "Invalid field specification {!r} on '{}'".format(self.spec, self.schema_name)
        if self.msg != "":
            message += ": {}".format(self.msg)
        return message


@dataclass
class NoDeclaredFieldsError(SchemaException):
    """
    NoDeclaredFieldsError indicates that a schema type declared no fields at all.
    """
    kind: typing.ClassVar[str] = "no_declared_fields"
    schema_name: str = ""

    def __str__(self):
        return "The schema '{}' declares no fields, please pass at least one field to Schema.__init__".format(
            self.schema_name
        )


@dataclass
class FromSchemaMissingError(SchemaException):
    """
    FromSchemaMissingError indicates that a nested field was declared with a type that does not implement populate(),
    i.e. it does not extend Schema.
    """
    kind: typing.ClassVar[str] = "from_schema_missing"
    path: typing.Tuple[str, ...] = tuple([])
    type_name: str = ""

    def __str__(self):
        return "Cannot populate '{}': the declared type '{}' does not implement populate(), " \
               "nested types must extend Schema".format(_format_path(self.path), self.type_name)


@dataclass
class ToSchemaMissingError(SchemaException):
    """
    ToSchemaMissingError indicates that the runtime value of a nested field does not implement to_schema().
    """
    kind: typing.ClassVar[str] = "to_schema_missing"
    path: typing.Tuple[str, ...] = tuple([])
    type_name: str = ""

    def __str__(self):
        return "Cannot serialize '{}': a value of type '{}' does not implement to_schema()".format(
            _format_path(self.path),
            self.type_name,
        )


@dataclass
class InvalidSchemaError(SchemaException):
    """
    InvalidSchemaError indicates that the populated instance failed validation. The full failure tree is available in
    validation_errors.
    """
    kind: typing.ClassVar[str] = "invalid_schema"
    schema_name: str = ""
    validation_errors: typing.List[typing.Any] = field(default_factory=list)

    def __str__(self):
        return "Validation failed for '{}':\n{}".format(
            self.schema_name,
            "".join(e.__str__() for e in self.validation_errors),
        )


@dataclass
class LoadFromFileException(SchemaException):
    """
    LoadFromFileException indicates that a payload file could not be read or decoded.
    """
    kind: typing.ClassVar[str] = "load_from_file"
    msg: str = ""

    def __str__(self):
        return self.msg
