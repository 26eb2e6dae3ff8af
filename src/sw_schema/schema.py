import enum
import logging
import threading
import types
import typing
import weakref
from dataclasses import dataclass, field

from sw_schema.exceptions import (
    FromSchemaMissingError,
    InvalidFieldError,
    InvalidSchemaError,
    NoDeclaredFieldsError,
    ToSchemaMissingError,
)
from sw_schema.sanitization import sanitize
from sw_schema.validation import RawView, ValidatorOptions, conditions_met, validate

_log = logging.getLogger(__name__)

# region Options


class NonListPolicy(enum.Enum):
    """
    NonListPolicy decides what happens when an array field that is subject to validation receives a value that is not
    a list.
    """
    WRAP_NONE = "wrap_none"
    """Replace the value with [None], so one nested instance is still built and validated."""
    VERBATIM = "verbatim"
    """Assign the value unchanged and let ValidateNested report it."""


@dataclass
class SchemaOptions:
    """
    Options for a from_schema() call.
    """
    validator: ValidatorOptions = field(default_factory=ValidatorOptions)
    non_list_policy: NonListPolicy = NonListPolicy.WRAP_NONE


# endregion

# region Field declarations


class FieldKind(enum.Enum):
    PLAIN = "plain"
    NESTED = "nested"
    ARRAY = "array"


@dataclass(frozen=True)
class FieldDeclaration:
    """
    FieldDeclaration describes one declared field. type_ref holds the nested type, or a zero-argument callable that
    returns it, which lets a schema nest itself.
    """
    name: str
    kind: FieldKind = FieldKind.PLAIN
    type_ref: typing.Any = None

    def resolve(self) -> typing.Any:
        if self.type_ref is None or isinstance(self.type_ref, type):
            return self.type_ref
        return self.type_ref()

    def declared_kind(self) -> typing.Any:
        nested_type = self.resolve()
        if self.kind is FieldKind.ARRAY:
            return [nested_type]
        return nested_type


def _parse_field_spec(schema_name: str, spec: typing.Any) -> FieldDeclaration:
    if isinstance(spec, str):
        return _checked(schema_name, spec, FieldDeclaration(spec))
    if isinstance(spec, dict) and len(spec) == 1:
        name, type_ref = next(iter(spec.items()))
        if not isinstance(name, str):
            raise InvalidFieldError(schema_name, spec, "field names must be strings")
        if isinstance(type_ref, list):
            if len(type_ref) != 1 or not callable(type_ref[0]):
                raise InvalidFieldError(schema_name, spec, "array fields take a list holding exactly one type")
            return _checked(schema_name, spec, FieldDeclaration(name, FieldKind.ARRAY, type_ref[0]))
        if callable(type_ref):
            return _checked(schema_name, spec, FieldDeclaration(name, FieldKind.NESTED, type_ref))
    raise InvalidFieldError(
        schema_name,
        spec,
        "expected a field name, {name: Type} or {name: [Type]}",
    )


_RESERVED_NAMES = frozenset(["unregistered_fields"])


def _checked(schema_name: str, spec: typing.Any, declaration: FieldDeclaration) -> FieldDeclaration:
    name = declaration.name
    if name == "" or name.startswith("_") or name in _RESERVED_NAMES or hasattr(Schema, name):
        raise InvalidFieldError(
            schema_name,
            spec,
            "'{}' is not a usable field name".format(name),
        )
    return declaration


# One registry per class, shared by its instances while the class passes the same specs.
_declarations = weakref.WeakKeyDictionary()
_declarations_lock = threading.Lock()


def _declare(cls: type, specs: typing.Tuple) -> typing.Mapping[str, FieldDeclaration]:
    parsed = tuple(_parse_field_spec(cls.__name__, spec) for spec in specs)
    if len(parsed) == 0:
        raise NoDeclaredFieldsError(cls.__name__)
    with _declarations_lock:
        cached = _declarations.get(cls)
        if cached is not None and cached[0] == parsed:
            return cached[1]
        result = types.MappingProxyType({d.name: d for d in parsed})
        _declarations[cls] = (parsed, result)
    return result


# endregion

# region Schema

SchemaT = typing.TypeVar("SchemaT", bound="Schema")


class Schema:
    """
    Schema is the base of every schema type. A schema type declares its fields by passing them to Schema.__init__,
    and its rules in typing.Annotated metadata on the class annotations::

        @Strict(True)
        class Post(Schema):
            user: typing.Annotated[User, IsDefined(), ValidateNested()]
            title: typing.Annotated[str, Length(5, 20)]
            users: typing.Annotated[typing.List[User], ValidateIf(lambda o: o.users is not None), ValidateNested()]

            def __init__(self):
                super().__init__({"user": User}, "title", {"users": [User]})

    A field spec is a name (plain value), {name: Type} (nested schema) or {name: [Type]} (list of nested schemas).
    Type may also be a zero-argument callable returning the type, for schemas that nest themselves.

    Unset fields read as None but are left out of to_schema(). Fields explicitly set to None are kept.
    """

    def __init__(self, *fields: typing.Any):
        self.__dict__["_declared"] = _declare(type(self), fields)
        self.__dict__["unregistered_fields"] = []

    def __getattr__(self, name: str) -> typing.Any:
        declared = self.__dict__.get("_declared")
        if declared is not None and name in declared:
            return None
        raise AttributeError("'{}' object has no attribute '{}'".format(type(self).__name__, name))

    @property
    def declared_fields(self) -> typing.Mapping[str, typing.Any]:
        """
        The declared fields in declaration order, mapped to None (plain), the nested type, or [nested type].
        """
        return types.MappingProxyType({n: d.declared_kind() for n, d in self._declared.items()})

    @property
    def field_declarations(self) -> typing.Tuple[FieldDeclaration, ...]:
        return tuple(self._declared.values())

    @classmethod
    def from_schema(
            cls: typing.Type[SchemaT],
            raw: typing.Any,
            is_validating: bool = True,
            is_sanitizing: bool = True,
            options: typing.Optional[SchemaOptions] = None,
    ) -> SchemaT:
        """
        This function builds a new instance from raw data (e.g. a decoded JSON body), then validates and sanitizes it.
        :param raw: the raw data, normally a dict.
        :param is_validating: run the validation pass.
        :param is_sanitizing: run the sanitization pass.
        :param options: population and validation options.
        :return: the populated instance.
        :raise InvalidSchemaError: if validation is enabled and fails.
        """
        if options is None:
            options = SchemaOptions()
        instance = cls()
        instance.populate(raw, options)
        if is_validating:
            errors = validate(instance, options.validator)
            if len(errors) > 0:
                raise InvalidSchemaError(cls.__name__, errors)
        if is_sanitizing:
            sanitize(instance)
        return instance

    def populate(
            self: SchemaT,
            raw: typing.Any,
            options: typing.Optional[SchemaOptions] = None,
            path: typing.Optional[typing.Tuple[str, ...]] = None,
    ) -> SchemaT:
        """
        This function copies the declared fields of raw onto the instance, building nested instances as declared.
        Keys that are not declared are recorded in unregistered_fields. Non-dict input populates nothing.
        :param raw: the raw data.
        :param options: population options.
        :param path: the structural elements that lead to this point, for error messages.
        :return: the instance itself.
        :raise FromSchemaMissingError: if a nested type does not extend Schema.
        """
        if options is None:
            options = SchemaOptions()
        if path is None:
            path = tuple([type(self).__name__])
        if not isinstance(raw, dict):
            return self
        view = RawView(raw)
        for key, value in raw.items():
            declaration = self._declared.get(key)
            if declaration is None:
                self.unregistered_fields.append(key)
                continue
            new_path = path + (key,)
            if declaration.kind is FieldKind.PLAIN:
                result = value
            elif declaration.kind is FieldKind.ARRAY:
                result = self._populate_array(declaration, value, view, options, new_path)
            else:
                result = _nested_instance(declaration, new_path).populate(value, options, new_path)
            setattr(self, key, result)
        if len(self.unregistered_fields) > 0:
            _log.debug("%s: unregistered fields %s", " -> ".join(path), self.unregistered_fields)
        return self

    def _populate_array(
            self,
            declaration: FieldDeclaration,
            value: typing.Any,
            view: RawView,
            options: SchemaOptions,
            path: typing.Tuple[str, ...],
    ) -> typing.Any:
        if not conditions_met(type(self), declaration.name, view):
            _log.debug("%s: not subject to validation, assigned verbatim", " -> ".join(path))
            return value
        if not isinstance(value, (list, tuple)):
            if options.non_list_policy is NonListPolicy.VERBATIM:
                return value
            value = [None]
        result = []
        for i, item in enumerate(value):
            item_path = path + (str(i),)
            result.append(_nested_instance(declaration, item_path).populate(item, options, item_path))
        return result

    def to_schema(self) -> typing.Dict[str, typing.Any]:
        """
        This function serializes the declared fields into a new dict, recursing into nested schemas. Unset fields
        are omitted.
        :raise ToSchemaMissingError: if a nested value does not implement to_schema().
        """
        return self._to_schema(tuple([type(self).__name__]))

    def _to_schema(self, path: typing.Tuple[str, ...]) -> typing.Dict[str, typing.Any]:
        result = {}
        for name, declaration in self._declared.items():
            if name not in self.__dict__:
                continue
            value = self.__dict__[name]
            new_path = path + (name,)
            if declaration.kind is FieldKind.PLAIN or value is None:
                result[name] = value
            elif declaration.kind is FieldKind.NESTED:
                result[name] = _serialize_nested(value, new_path)
            elif isinstance(value, (list, tuple)):
                result[name] = [_serialize_nested(item, new_path + (str(i),)) for i, item in enumerate(value)]
            else:
                result[name] = value
        return result

    def to_json(self) -> typing.Dict[str, typing.Any]:
        return self.to_schema()

    def __eq__(self, other: typing.Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values() == other._values()

    def __repr__(self):
        return "{}({})".format(
            type(self).__name__,
            ", ".join("{}={!r}".format(name, value) for name, value in self._values().items()),
        )

    def _values(self) -> typing.Dict[str, typing.Any]:
        return {name: self.__dict__[name] for name in self._declared if name in self.__dict__}


def _nested_instance(declaration: FieldDeclaration, path: typing.Tuple[str, ...]) -> Schema:
    nested_type = declaration.resolve()
    if not isinstance(nested_type, type) or not callable(getattr(nested_type, "populate", None)):
        raise FromSchemaMissingError(path, getattr(nested_type, "__name__", type(nested_type).__name__))
    return nested_type()


def _serialize_nested(value: typing.Any, path: typing.Tuple[str, ...]) -> typing.Any:
    if value is None:
        return None
    if isinstance(value, Schema):
        return value._to_schema(path)
    to_schema = getattr(value, "to_schema", None)
    if not callable(to_schema):
        raise ToSchemaMissingError(path, type(value).__name__)
    return to_schema()


# endregion
