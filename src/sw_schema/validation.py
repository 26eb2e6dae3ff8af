"""
This module holds the constraint rules and the engine that checks an instance against them. Constraints are placed in
typing.Annotated metadata::

    class User(Schema):
        age: typing.Annotated[int, Min(12), Max(12)]
        name: typing.Annotated[str, Contains("patrick")]

        def __init__(self):
            super().__init__("age", "name")

validate() returns a list of ValidationError trees, one per failing property, in declaration order.
"""
import datetime
import ipaddress
import json
import logging
import re
import typing
import urllib.parse
import uuid
from dataclasses import dataclass, field

import email_validator
import idna

from sw_schema.exceptions import BadArgumentException
from sw_schema.metadata import WHOLE_OBJECT, Rule, RuleMetadata, get_metadata_storage

_log = logging.getLogger(__name__)

# region Results


@dataclass
class ValidatorOptions:
    """
    Options for a validate() call.
    """
    skip_missing_properties: bool = False
    """Skip every constraint except IsDefined when the value is None or unset."""
    validation_error_target: bool = False
    """Attach the validated object to each ValidationError."""
    validation_error_value: bool = True
    """Attach the offending value to each ValidationError."""
    stop_at_first_error: bool = False
    """Stop checking a property after its first failing constraint."""


@dataclass
class ValidationError:
    """
    ValidationError describes the failures of one property. Failures of nested objects are reported in children.
    """
    property: str
    value: typing.Any = None
    constraints: typing.Dict[str, str] = field(default_factory=dict)
    children: typing.List["ValidationError"] = field(default_factory=list)
    target: typing.Any = None

    def __str__(self):
        return self._format("")

    def _format(self, parent_path: str) -> str:
        path = self.property
        if parent_path != "":
            path = "{}.{}".format(parent_path, self.property)
        result = ""
        if len(self.constraints) > 0:
            result += "  - property {} has failed the following constraints: {}\n".format(
                path,
                ", ".join(self.constraints.keys())
            )
        for child in self.children:
            result += child._format(path)
        return result


@dataclass
class ValidationArguments:
    """
    ValidationArguments is passed to constraint checks and message callables.
    """
    value: typing.Any
    constraints: typing.List[typing.Any]
    target_name: str
    object: typing.Any
    property: str


class RawView:
    """
    RawView gives attribute access to a raw input dict so conditions written against instances (``o.users``,
    ``o.meta.enabled``) also work during population. Missing keys read as None. Nested dicts, also inside lists, are
    returned as RawView.
    """

    def __init__(self, raw: typing.Dict[str, typing.Any]):
        self._raw = raw

    def __getattr__(self, name: str) -> typing.Any:
        if name.startswith("__"):
            raise AttributeError(name)
        return _wrap_raw(self._raw.get(name))

    def __getitem__(self, key: typing.Any) -> typing.Any:
        return _wrap_raw(self._raw[key])

    def __contains__(self, key: typing.Any) -> bool:
        return key in self._raw

    def get(self, key: typing.Any, default: typing.Any = None) -> typing.Any:
        return _wrap_raw(self._raw.get(key, default))


def _wrap_raw(value: typing.Any) -> typing.Any:
    if isinstance(value, dict):
        return RawView(value)
    if isinstance(value, list):
        return [_wrap_raw(item) for item in value]
    return value


# endregion

# region Rule types

MessageT = typing.Union[str, typing.Callable[[ValidationArguments], str], None]


def _render(template: str, args: ValidationArguments) -> str:
    result = template.replace("$property", args.property).replace("$target", args.target_name)
    # Highest index first so $constraint1 does not eat into $constraint10.
    for i in range(len(args.constraints), 0, -1):
        result = result.replace("$constraint{}".format(i), str(args.constraints[i - 1]))
    return result.replace("$value", str(args.value))


class Constraint(Rule):
    """
    Constraint is the base class for validation rules. Subclasses set name and template and implement check().

    :param constraints: the rule parameters, available to messages as $constraint1, $constraint2, ...
    :param each: apply the check to every element when the value is a list, tuple or set.
    :param message: a message template or a callable receiving ValidationArguments.
    """
    name: str = "customValidation"
    template: str = "$property is invalid"

    def __init__(self, *constraints: typing.Any, each: bool = False, message: MessageT = None):
        self.constraints = list(constraints)
        self.each = each
        self.message = message

    def check(self, value: typing.Any, args: ValidationArguments) -> bool:
        raise NotImplementedError()

    def default_message(self, args: ValidationArguments) -> str:
        return self.template

    def validate_value(self, value: typing.Any, args: ValidationArguments) -> bool:
        if self.each and isinstance(value, (list, tuple, set, frozenset)):
            return all(self.check(item, args) for item in value)
        return self.check(value, args)

    def render_message(self, args: ValidationArguments) -> str:
        if callable(self.message):
            return self.message(args)
        template = self.message
        if template is None:
            template = self.default_message(args)
            if self.each:
                template = "each value in " + template
        return _render(template, args)

    def __repr__(self):
        return "{}({})".format(type(self).__name__, ", ".join(repr(c) for c in self.constraints))


class _Marker(Constraint):
    """
    Markers steer the engine instead of checking the value themselves.
    """

    def check(self, value: typing.Any, args: ValidationArguments) -> bool:
        return True


class IsDefined(Constraint):
    """
    Fails on None and unset values. It is evaluated even when missing properties are skipped.
    """
    name = "isDefined"
    template = "$property should not be null or undefined"

    def check(self, value, args):
        return value is not None


class IsOptional(_Marker):
    """
    Skips the remaining constraints of the property when its value is None or unset.
    """
    name = "isOptional"


class ValidateIf(_Marker):
    """
    Validates the property only when the condition returns a truthy value for the enclosing object. The condition
    receives the instance during validation and a RawView of the input during population, so write it with attribute
    access: ``ValidateIf(lambda o: o.email is not None)``.
    """
    name = "conditionalValidation"

    def __init__(self, condition: typing.Callable[[typing.Any], typing.Any]):
        if not callable(condition):
            raise BadArgumentException("ValidateIf expects a callable, {} given".format(type(condition).__name__))
        super().__init__()
        self.condition = condition


class ValidateNested(_Marker):
    """
    Validates nested objects and lists of objects and reports their failures as children.
    """
    name = "nestedValidation"
    template = "nested property $property must be either object or array"


# endregion

# region Shared predicate


def conditions_met(target: type, property_name: str, obj: typing.Any) -> bool:
    """
    This function decides whether a property is subject to validation, given the conditional rules registered for it.
    Population and validation both call it, so a field skipped by one is skipped by the other.
    :param target: the class declaring the property.
    :param property_name: the property to check.
    :param obj: the enclosing object, an instance or a RawView.
    :return: True if no ValidateIf rule exists, or if every condition holds.
    """
    for metadata in get_metadata_storage().get_conditional_rules(target, property_name):
        if not metadata.rule.condition(obj):
            return False
    return True


# endregion

# region Engine


def validate(instance: typing.Any, options: typing.Optional[ValidatorOptions] = None) -> typing.List[ValidationError]:
    """
    This function checks an instance against the constraints registered for its class.
    :param instance: the object to validate.
    :param options: validator options, defaults apply when omitted.
    :return: the list of failures, empty when the instance is valid.
    """
    if options is None:
        options = ValidatorOptions()
    errors = _Executor(options).execute(instance)
    _log.debug("validated %s: %d failing properties", type(instance).__name__, len(errors))
    return errors


def _is_primitive(value: typing.Any) -> bool:
    return value is None or isinstance(value, (str, bytes, int, float, bool, datetime.date))


class _Executor:
    def __init__(self, options: ValidatorOptions):
        self.options = options

    def execute(self, obj: typing.Any) -> typing.List[ValidationError]:
        target = type(obj)
        grouped: typing.Dict[str, typing.List[RuleMetadata[Constraint]]] = {}
        for metadata in get_metadata_storage().get_target_rules(target, Constraint):
            grouped.setdefault(metadata.property_name, []).append(metadata)
        errors = []
        for property_name, group in grouped.items():
            if property_name == WHOLE_OBJECT:
                value = obj
            else:
                value = getattr(obj, property_name, None)
            error = self._validate_property(obj, target, property_name, value, [m.rule for m in group])
            if error is not None:
                errors.append(error)
        return errors

    def _validate_property(
            self,
            obj: typing.Any,
            target: type,
            property_name: str,
            value: typing.Any,
            rules: typing.List[Constraint],
    ) -> typing.Optional[ValidationError]:
        if not conditions_met(target, property_name, obj):
            return None
        error = self._new_error(obj, property_name, value)
        defined = [r for r in rules if isinstance(r, IsDefined)]
        self._run_checks(obj, target, property_name, value, defined, error)
        if value is None and (self.options.skip_missing_properties or any(isinstance(r, IsOptional) for r in rules)):
            return self._result(error)
        checks = [r for r in rules if not isinstance(r, (_Marker, IsDefined))]
        if not (self.options.stop_at_first_error and len(error.constraints) > 0):
            self._run_checks(obj, target, property_name, value, checks, error)
        for rule in rules:
            if isinstance(rule, ValidateNested):
                self._validate_nested(obj, target, property_name, value, rule, error)
        return self._result(error)

    def _run_checks(self, obj, target, property_name, value, rules, error: ValidationError):
        for rule in rules:
            args = ValidationArguments(value, rule.constraints, target.__name__, obj, property_name)
            if not rule.validate_value(value, args):
                error.constraints[rule.name] = rule.render_message(args)
                if self.options.stop_at_first_error:
                    return

    def _validate_nested(self, obj, target, property_name, value, rule: ValidateNested, error: ValidationError):
        if isinstance(value, (list, tuple, set, frozenset)):
            for index, item in enumerate(value):
                child = self._validate_nested_item(obj, target, str(index), item, rule)
                if child is not None:
                    error.children.append(child)
        elif not _is_primitive(value):
            error.children.extend(self.execute(value))
        else:
            args = ValidationArguments(value, rule.constraints, target.__name__, obj, property_name)
            error.constraints[rule.name] = rule.render_message(args)

    def _validate_nested_item(self, obj, target, index: str, item, rule: ValidateNested):
        error = self._new_error(obj, index, item)
        if _is_primitive(item):
            args = ValidationArguments(item, rule.constraints, target.__name__, obj, index)
            error.constraints[rule.name] = rule.render_message(args)
        else:
            error.children.extend(self.execute(item))
        return self._result(error)

    def _new_error(self, obj, property_name: str, value) -> ValidationError:
        error = ValidationError(property_name)
        if self.options.validation_error_value:
            error.value = value
        if self.options.validation_error_target:
            error.target = obj
        return error

    @staticmethod
    def _result(error: ValidationError) -> typing.Optional[ValidationError]:
        if len(error.constraints) == 0 and len(error.children) == 0:
            return None
        return error


# endregion

# region Common constraints


class Equals(Constraint):
    name = "equals"
    template = "$property must be equal to $constraint1"

    def __init__(self, comparison: typing.Any, **kwargs):
        super().__init__(comparison, **kwargs)

    def check(self, value, args):
        return value == self.constraints[0]


class NotEquals(Constraint):
    name = "notEquals"
    template = "$property should not be equal to $constraint1"

    def __init__(self, comparison: typing.Any, **kwargs):
        super().__init__(comparison, **kwargs)

    def check(self, value, args):
        return value != self.constraints[0]


class IsEmpty(Constraint):
    name = "isEmpty"
    template = "$property must be empty"

    def check(self, value, args):
        return value is None or value == ""


class IsNotEmpty(Constraint):
    name = "isNotEmpty"
    template = "$property should not be empty"

    def check(self, value, args):
        return value is not None and value != ""


class IsIn(Constraint):
    name = "isIn"
    template = "$property must be one of the following values: $constraint1"

    def __init__(self, values: typing.Iterable[typing.Any], **kwargs):
        super().__init__(list(values), **kwargs)

    def check(self, value, args):
        return value in self.constraints[0]

    def default_message(self, args):
        return "$property must be one of the following values: " + ", ".join(str(v) for v in self.constraints[0])


class IsNotIn(IsIn):
    name = "isNotIn"

    def check(self, value, args):
        return value not in self.constraints[0]

    def default_message(self, args):
        return "$property should not be one of the following values: " + ", ".join(
            str(v) for v in self.constraints[0]
        )


# endregion

# region Type constraints


class IsBoolean(Constraint):
    name = "isBoolean"
    template = "$property must be a boolean value"

    def check(self, value, args):
        return isinstance(value, bool)


class IsDate(Constraint):
    name = "isDate"
    template = "$property must be a Date instance"

    def check(self, value, args):
        return isinstance(value, datetime.date)


_DATABLE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}(Z|[+-][0-9]{2}:[0-9]{2})")


class IsDatable(Constraint):
    """
    Accepts date values and ISO 8601 strings with milliseconds and a timezone, e.g. ``2015-05-05T14:56:43.854Z``.
    Pair it with the ToDate sanitizer to store the parsed value.
    """
    name = "isDatable"
    template = "$property must be a Date instance or an ISO 8601 string (YYYY-MM-DDTHH:MM:SS.sssZ)"

    def check(self, value, args):
        if isinstance(value, datetime.date):
            return True
        if not isinstance(value, str) or _DATABLE_PATTERN.fullmatch(value) is None:
            return False
        # The pattern admits out-of-range fields such as hour 44.
        try:
            datetime.datetime.fromisoformat(value[:-1] + "+00:00" if value.endswith("Z") else value)
        except ValueError:
            return False
        return True


class IsString(Constraint):
    name = "isString"
    template = "$property must be a string"

    def check(self, value, args):
        return isinstance(value, str)


def _is_number(value: typing.Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class IsNumber(Constraint):
    name = "isNumber"
    template = "$property must be a number"

    def check(self, value, args):
        return _is_number(value)


class IsInt(Constraint):
    name = "isInt"
    template = "$property must be an integer number"

    def check(self, value, args):
        return isinstance(value, int) and not isinstance(value, bool)


class IsArray(Constraint):
    name = "isArray"
    template = "$property must be an array"

    def check(self, value, args):
        return isinstance(value, (list, tuple))


# endregion

# region Number constraints


class IsDivisibleBy(Constraint):
    name = "isDivisibleBy"
    template = "$property must be divisible by $constraint1"

    def __init__(self, num: typing.Union[int, float], **kwargs):
        if not _is_number(num) or num == 0:
            raise BadArgumentException("IsDivisibleBy expects a non-zero number, {!r} given".format(num))
        super().__init__(num, **kwargs)

    def check(self, value, args):
        return _is_number(value) and value % self.constraints[0] == 0


class IsPositive(Constraint):
    name = "isPositive"
    template = "$property must be a positive number"

    def check(self, value, args):
        return _is_number(value) and value > 0


class IsNegative(Constraint):
    name = "isNegative"
    template = "$property must be a negative number"

    def check(self, value, args):
        return _is_number(value) and value < 0


class Min(Constraint):
    name = "min"
    template = "$property must not be less than $constraint1"

    def __init__(self, min_value: typing.Union[int, float], **kwargs):
        if not _is_number(min_value):
            raise BadArgumentException("Min expects a number, {!r} given".format(min_value))
        super().__init__(min_value, **kwargs)

    def check(self, value, args):
        return _is_number(value) and value >= self.constraints[0]


class Max(Constraint):
    name = "max"
    template = "$property must not be greater than $constraint1"

    def __init__(self, max_value: typing.Union[int, float], **kwargs):
        if not _is_number(max_value):
            raise BadArgumentException("Max expects a number, {!r} given".format(max_value))
        super().__init__(max_value, **kwargs)

    def check(self, value, args):
        return _is_number(value) and value <= self.constraints[0]


# endregion

# region Date constraints


class MinDate(Constraint):
    name = "minDate"
    template = "minimal allowed date for $property is $constraint1"

    def __init__(self, date: datetime.date, **kwargs):
        if not isinstance(date, datetime.date):
            raise BadArgumentException("MinDate expects a date, {!r} given".format(date))
        super().__init__(date, **kwargs)

    def check(self, value, args):
        value = _comparable_date(value, self.constraints[0])
        return value is not None and value >= self.constraints[0]


class MaxDate(MinDate):
    name = "maxDate"
    template = "maximal allowed date for $property is $constraint1"

    def check(self, value, args):
        value = _comparable_date(value, self.constraints[0])
        return value is not None and value <= self.constraints[0]


def _comparable_date(value: typing.Any, bound: datetime.date) -> typing.Optional[datetime.date]:
    # datetime and date instances do not compare with each other.
    if isinstance(bound, datetime.datetime):
        if isinstance(value, datetime.datetime) and (value.tzinfo is None) == (bound.tzinfo is None):
            return value
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return None


# endregion

# region String constraints


class Contains(Constraint):
    name = "contains"
    template = "$property must contain a $constraint1 string"

    def __init__(self, seed: str, **kwargs):
        super().__init__(seed, **kwargs)

    def check(self, value, args):
        return isinstance(value, str) and self.constraints[0] in value


class NotContains(Contains):
    name = "notContains"
    template = "$property should not contain a $constraint1 string"

    def check(self, value, args):
        return isinstance(value, str) and self.constraints[0] not in value


class IsAlpha(Constraint):
    name = "isAlpha"
    template = "$property must contain only letters (a-zA-Z)"

    def check(self, value, args):
        return isinstance(value, str) and re.fullmatch(r"[a-zA-Z]+", value) is not None


class IsAlphanumeric(Constraint):
    name = "isAlphanumeric"
    template = "$property must contain only letters and numbers"

    def check(self, value, args):
        return isinstance(value, str) and re.fullmatch(r"[a-zA-Z0-9]+", value) is not None


class IsAscii(Constraint):
    name = "isAscii"
    template = "$property must contain only ASCII characters"

    def check(self, value, args):
        return isinstance(value, str) and value.isascii()


class IsLowercase(Constraint):
    name = "isLowercase"
    template = "$property must be a lowercase string"

    def check(self, value, args):
        return isinstance(value, str) and value == value.lower()


class IsUppercase(Constraint):
    name = "isUppercase"
    template = "$property must be uppercase"

    def check(self, value, args):
        return isinstance(value, str) and value == value.upper()


class IsEmail(Constraint):
    """
    Checks the address syntax with email-validator. Deliverability is not checked, no DNS lookups are made.
    """
    name = "isEmail"
    template = "$property must be an email"

    def __init__(self, each: bool = False, message: MessageT = None, **kwargs):
        super().__init__(each=each, message=message)
        self.kw = kwargs
        self.kw.setdefault("check_deliverability", False)

    def check(self, value, args):
        if not isinstance(value, str):
            return False
        try:
            email_validator.validate_email(value, **self.kw)
        except email_validator.EmailNotValidError:
            return False
        return True


_FQDN_LABEL = re.compile(r"^[a-z\u00a1-\uffff0-9-]+$", re.IGNORECASE)
_FQDN_TLD = re.compile(r"^([a-z\u00a1-\uffff]{2,}|xn[a-z0-9-]{2,})$", re.IGNORECASE)


def is_fqdn(
        value: typing.Any,
        require_tld: bool = True,
        allow_underscores: bool = False,
        allow_trailing_dot: bool = False,
) -> bool:
    """
    This function checks whether the value is a fully qualified domain name. Non-ASCII labels must be encodable with
    IDNA.
    """
    if not isinstance(value, str) or value == "":
        return False
    if allow_trailing_dot and value.endswith("."):
        value = value[:-1]
    parts = value.split(".")
    if require_tld:
        if len(parts) < 2 or _FQDN_TLD.match(parts[-1]) is None:
            return False
    for part in parts:
        if len(part) == 0 or len(part) > 63:
            return False
        if allow_underscores:
            part = part.replace("_", "")
        if _FQDN_LABEL.match(part) is None or part.startswith("-") or part.endswith("-"):
            return False
        if not part.isascii():
            try:
                idna.encode(part, uts46=True)
            except idna.IDNAError:
                return False
    return True


class IsFQDN(Constraint):
    name = "isFqdn"
    template = "$property must be a valid domain name"

    def __init__(
            self,
            require_tld: bool = True,
            allow_underscores: bool = False,
            allow_trailing_dot: bool = False,
            **kwargs
    ):
        super().__init__(**kwargs)
        self.require_tld = require_tld
        self.allow_underscores = allow_underscores
        self.allow_trailing_dot = allow_trailing_dot

    def check(self, value, args):
        return is_fqdn(value, self.require_tld, self.allow_underscores, self.allow_trailing_dot)


class IsURL(Constraint):
    name = "isUrl"
    template = "$property must be a URL address"

    def __init__(self, schemes: typing.Iterable[str] = ("http", "https", "ftp"), **kwargs):
        super().__init__(**kwargs)
        self.schemes = list(schemes)

    def check(self, value, args):
        if not isinstance(value, str):
            return False
        try:
            result = urllib.parse.urlparse(value)
            host = result.hostname
        except ValueError:
            return False
        if result.scheme not in self.schemes or host is None:
            return False
        return host == "localhost" or is_fqdn(host) or _is_ip_address(host)


def _is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


class IsIP(Constraint):
    name = "isIp"
    template = "$property must be an ip address"

    def __init__(self, version: typing.Optional[int] = None, **kwargs):
        if version not in (None, 4, 6):
            raise BadArgumentException("IsIP version must be 4, 6 or None, {!r} given".format(version))
        super().__init__(version, **kwargs)

    def check(self, value, args):
        if not isinstance(value, str):
            return False
        try:
            address = ipaddress.ip_address(value)
        except ValueError:
            return False
        return self.constraints[0] is None or address.version == self.constraints[0]


class IsUUID(Constraint):
    name = "isUuid"
    template = "$property must be a UUID"

    def __init__(self, version: typing.Optional[int] = None, **kwargs):
        super().__init__(version, **kwargs)

    def check(self, value, args):
        if not isinstance(value, str):
            return False
        try:
            parsed = uuid.UUID(value)
        except ValueError:
            return False
        return self.constraints[0] is None or parsed.version == self.constraints[0]


class IsJSON(Constraint):
    name = "isJson"
    template = "$property must be a json string"

    def check(self, value, args):
        if not isinstance(value, str):
            return False
        try:
            json.loads(value)
        except ValueError:
            return False
        return True


class Length(Constraint):
    name = "length"

    def __init__(self, min_length: int, max_length: typing.Optional[int] = None, **kwargs):
        if max_length is not None and max_length < min_length:
            raise BadArgumentException(
                "Length expects min <= max, got min {} and max {}".format(min_length, max_length)
            )
        super().__init__(min_length, max_length, **kwargs)

    def check(self, value, args):
        if not isinstance(value, str):
            return False
        min_length, max_length = self.constraints
        return len(value) >= min_length and (max_length is None or len(value) <= max_length)

    def default_message(self, args):
        if isinstance(args.value, str) and len(args.value) < self.constraints[0]:
            return "$property must be longer than or equal to $constraint1 characters"
        return "$property must be shorter than or equal to $constraint2 characters"


class MinLength(Constraint):
    name = "minLength"
    template = "$property must be longer than or equal to $constraint1 characters"

    def __init__(self, min_length: int, **kwargs):
        super().__init__(min_length, **kwargs)

    def check(self, value, args):
        return isinstance(value, str) and len(value) >= self.constraints[0]


class MaxLength(Constraint):
    name = "maxLength"
    template = "$property must be shorter than or equal to $constraint1 characters"

    def __init__(self, max_length: int, **kwargs):
        super().__init__(max_length, **kwargs)

    def check(self, value, args):
        return isinstance(value, str) and len(value) <= self.constraints[0]


class Matches(Constraint):
    name = "matches"
    template = "$property must match $constraint1 regular expression"

    def __init__(self, pattern: typing.Union[str, typing.Pattern], **kwargs):
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        super().__init__(pattern.pattern, **kwargs)
        self.pattern = pattern

    def check(self, value, args):
        return isinstance(value, str) and self.pattern.search(value) is not None


# endregion

# region Array constraints


class ArrayContains(Constraint):
    name = "arrayContains"
    template = "$property must contain $constraint1 values"

    def __init__(self, values: typing.Iterable[typing.Any], **kwargs):
        super().__init__(list(values), **kwargs)

    def check(self, value, args):
        return isinstance(value, (list, tuple)) and all(v in value for v in self.constraints[0])


class ArrayNotContains(ArrayContains):
    name = "arrayNotContains"
    template = "$property should not contain $constraint1 values"

    def check(self, value, args):
        return isinstance(value, (list, tuple)) and all(v not in value for v in self.constraints[0])


class ArrayNotEmpty(Constraint):
    name = "arrayNotEmpty"
    template = "$property should not be empty"

    def check(self, value, args):
        return isinstance(value, (list, tuple)) and len(value) > 0


class ArrayMinSize(Constraint):
    name = "arrayMinSize"
    template = "$property must contain at least $constraint1 elements"

    def __init__(self, size: int, **kwargs):
        super().__init__(size, **kwargs)

    def check(self, value, args):
        return isinstance(value, (list, tuple)) and len(value) >= self.constraints[0]


class ArrayMaxSize(Constraint):
    name = "arrayMaxSize"
    template = "$property must contain not more than $constraint1 elements"

    def __init__(self, size: int, **kwargs):
        super().__init__(size, **kwargs)

    def check(self, value, args):
        return isinstance(value, (list, tuple)) and len(value) <= self.constraints[0]


class ArrayUnique(Constraint):
    name = "arrayUnique"
    template = "All $property's elements must be unique"

    def check(self, value, args):
        if not isinstance(value, (list, tuple)):
            return False
        seen = []
        for item in value:
            if item in seen:
                return False
            seen.append(item)
        return True


# endregion

# region Object constraints


class Strict(Constraint):
    """
    Strict rejects input keys that the schema does not declare. It is a whole-object constraint: use it as a class
    decorator, or in the annotation of any field, in both cases it is registered against the object itself::

        @Strict(True)
        class User(Schema):
            ...

    Strict(False) registers nothing, it only documents the decision at the declaration site.
    """
    name = "strict"

    def __init__(self, enabled: bool = True, message: MessageT = None):
        if not isinstance(enabled, bool):
            raise BadArgumentException("Strict expects a boolean, {!r} given".format(enabled))
        super().__init__(message=message)
        self.enabled = enabled

    def __call__(self, cls: type) -> type:
        if self.enabled:
            get_metadata_storage().add_rule(cls, WHOLE_OBJECT, self)
        return cls

    def property_for(self, field_name: str) -> typing.Optional[str]:
        if not self.enabled:
            return None
        return WHOLE_OBJECT

    def check(self, value, args):
        return len(getattr(value, "unregistered_fields", [])) == 0

    def default_message(self, args):
        # Rendered at validation time, the list is only known after population.
        unregistered = getattr(args.object, "unregistered_fields", [])
        return "properties are not allowed: {}".format(", ".join(str(f) for f in unregistered))

    def __repr__(self):
        return "Strict({!r})".format(self.enabled)


# endregion
