"""
Sanitizers rewrite field values in place after validation. Like constraints, they are declared in typing.Annotated
metadata::

    class Post(Schema):
        title: typing.Annotated[str, Length(5, 20), Trim()]
        date: typing.Annotated[datetime.datetime, IsDatable(), ToDate()]
"""
import datetime
import logging
import typing

from sw_schema.metadata import Rule, get_metadata_storage

_log = logging.getLogger(__name__)


class Sanitizer(Rule):
    """
    Sanitizer is the base class for sanitization rules. Subclasses implement apply(), which returns the new value.

    :param each: apply the sanitizer to every element when the value is a list or tuple.
    """

    def __init__(self, each: bool = False):
        self.each = each

    def apply(self, value: typing.Any) -> typing.Any:
        raise NotImplementedError()

    def sanitize_value(self, value: typing.Any) -> typing.Any:
        if self.each and isinstance(value, (list, tuple)):
            return type(value)(self.apply(item) for item in value)
        return self.apply(value)

    def __repr__(self):
        return "{}()".format(type(self).__name__)


def sanitize(instance: typing.Any):
    """
    This function applies the sanitizers registered for the class of the instance, in declaration order. Unset
    properties are skipped and None values are left alone.
    :param instance: the object to sanitize in place.
    """
    for metadata in get_metadata_storage().get_target_rules(type(instance), Sanitizer):
        property_name = metadata.property_name
        if property_name not in vars(instance):
            continue
        value = getattr(instance, property_name)
        if value is None:
            continue
        setattr(instance, property_name, metadata.rule.sanitize_value(value))


# region String sanitizers


class Trim(Sanitizer):
    """
    Removes the given characters (whitespace by default) from both ends.
    """

    def __init__(self, chars: typing.Optional[str] = None, each: bool = False):
        super().__init__(each)
        self.chars = chars

    def apply(self, value):
        return str(value).strip(self.chars)


class LTrim(Trim):
    def apply(self, value):
        return str(value).lstrip(self.chars)


class RTrim(Trim):
    def apply(self, value):
        return str(value).rstrip(self.chars)


class ToLowerCase(Sanitizer):
    def apply(self, value):
        return str(value).lower()


class ToUpperCase(Sanitizer):
    def apply(self, value):
        return str(value).upper()


_HTML_ENTITIES = {
    "&": "&amp;",
    '"': "&quot;",
    "'": "&#x27;",
    "<": "&lt;",
    ">": "&gt;",
    "/": "&#x2F;",
    "\\": "&#x5C;",
    "`": "&#96;",
}


class Escape(Sanitizer):
    """
    Replaces HTML special characters with their entities.
    """

    def apply(self, value):
        return "".join(_HTML_ENTITIES.get(c, c) for c in str(value))


class Blacklist(Sanitizer):
    """
    Removes every character that appears in chars.
    """

    def __init__(self, chars: str, each: bool = False):
        super().__init__(each)
        self.chars = chars

    def apply(self, value):
        return "".join(c for c in str(value) if c not in self.chars)


class Whitelist(Blacklist):
    """
    Removes every character that does not appear in chars.
    """

    def apply(self, value):
        return "".join(c for c in str(value) if c in self.chars)


class StripLow(Sanitizer):
    """
    Removes ASCII control characters, optionally keeping newlines.
    """

    def __init__(self, keep_new_lines: bool = False, each: bool = False):
        super().__init__(each)
        self.keep_new_lines = keep_new_lines

    def apply(self, value):
        kept = "\n\r" if self.keep_new_lines else ""
        return "".join(c for c in str(value) if c in kept or not (ord(c) < 32 or ord(c) == 127))


# endregion

# region Type sanitizers


class ToString(Sanitizer):
    def apply(self, value):
        return str(value)


class ToInt(Sanitizer):
    """
    Parses the value as an integer in the given radix. Unparseable values become None.
    """

    def __init__(self, radix: int = 10, each: bool = False):
        super().__init__(each)
        self.radix = radix

    def apply(self, value):
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            try:
                return int(value)
            except (OverflowError, ValueError):
                return None
        try:
            return int(str(value).strip(), self.radix)
        except ValueError:
            return None


class ToFloat(Sanitizer):
    """
    Parses the value as a float. Unparseable values become None.
    """

    def apply(self, value):
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class ToBoolean(Sanitizer):
    """
    Converts strings to booleans. In strict mode only "1" and "true" are True, otherwise everything but "0", "false"
    and "" is True.
    """

    def __init__(self, strict: bool = False, each: bool = False):
        super().__init__(each)
        self.strict = strict

    def apply(self, value):
        if isinstance(value, bool):
            return value
        value = str(value)
        if self.strict:
            return value in ("1", "true")
        return value not in ("0", "false", "")


class ToDate(Sanitizer):
    """
    Parses ISO 8601 strings into datetime values. A trailing "Z" is read as UTC. Unparseable values become None.
    """

    def apply(self, value):
        if isinstance(value, datetime.date):
            return value
        value = str(value)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            return datetime.datetime.fromisoformat(value)
        except ValueError:
            _log.debug("ToDate could not parse %r", value)
            return None


# endregion

# region Nested sanitizers


class SanitizeNested(Sanitizer):
    """
    Sanitizes a nested object, or every object in a list.
    """

    def sanitize_value(self, value):
        if isinstance(value, (list, tuple)):
            for item in value:
                self.apply(item)
            return value
        return self.apply(value)

    def apply(self, value):
        if value is not None:
            sanitize(value)
        return value


# endregion
