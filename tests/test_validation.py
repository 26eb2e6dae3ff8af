"""Tests for the validation engine, the metadata registry and the constraint catalogue."""

import datetime
import typing
import uuid

import pytest

from sw_schema import (
    WHOLE_OBJECT,
    ArrayContains,
    ArrayMaxSize,
    ArrayMinSize,
    ArrayNotContains,
    ArrayNotEmpty,
    ArrayUnique,
    BadArgumentException,
    Constraint,
    Contains,
    Equals,
    IsAlpha,
    IsAlphanumeric,
    IsArray,
    IsAscii,
    IsBoolean,
    IsDatable,
    IsDate,
    IsDefined,
    IsDivisibleBy,
    IsEmail,
    IsEmpty,
    IsFQDN,
    IsIn,
    IsInt,
    IsIP,
    IsJSON,
    IsLowercase,
    IsNegative,
    IsNotEmpty,
    IsNotIn,
    IsNumber,
    IsOptional,
    IsPositive,
    IsString,
    IsUppercase,
    IsURL,
    IsUUID,
    Length,
    Matches,
    Max,
    MaxDate,
    MaxLength,
    Min,
    MinDate,
    MinLength,
    NotContains,
    NotEquals,
    RawView,
    Schema,
    Strict,
    ValidateIf,
    ValidateNested,
    ValidatorOptions,
    conditions_met,
    get_metadata_storage,
    validate,
)


class Address(Schema):
    city: typing.Annotated[str, IsDefined(), IsString()]

    def __init__(self):
        super().__init__("city")


class Profile(Schema):
    nick: typing.Annotated[str, IsOptional(), MinLength(3)]
    age: typing.Annotated[int, IsInt(), Min(0), Max(130)]
    email: typing.Annotated[str, ValidateIf(lambda o: o.email is not None), IsEmail()]
    tags: typing.Annotated[typing.List[str], IsOptional(), MaxLength(3, each=True)]
    address: typing.Annotated[Address, IsOptional(), ValidateNested()]
    addresses: typing.Annotated[typing.List[Address], IsOptional(), ValidateNested()]

    def __init__(self, *extra):
        super().__init__("nick", "age", "email", "tags", {"address": Address}, {"addresses": [Address]}, *extra)


@Strict(True)
class Admin(Profile):
    level: typing.Annotated[int, IsDefined(), Max(3, message="$target.$property is capped at $constraint1")]

    def __init__(self):
        super().__init__("level")


class Labelled(Schema):
    label: typing.Annotated[str, Length(5, 20, message=lambda args: "bad label {!r}".format(args.value))]

    def __init__(self):
        super().__init__("label")


def _profile(raw: typing.Dict[str, typing.Any]) -> Profile:
    return Profile().populate(raw)


class TestEngine:
    def test_valid_instance_has_no_errors(self) -> None:
        profile = _profile({"nick": "pat", "age": 30, "address": {"city": "Lyon"}})
        assert validate(profile) == []

    def test_errors_follow_declaration_order(self) -> None:
        errors = validate(_profile({"nick": "p", "age": -1}))
        assert [e.property for e in errors] == ["nick", "age"]

    def test_all_failing_constraints_are_reported(self) -> None:
        errors = validate(_profile({"age": "old"}))
        assert list(errors[0].constraints.keys()) == ["isInt", "min", "max"]

    def test_stop_at_first_error(self) -> None:
        errors = validate(_profile({"age": "old"}), ValidatorOptions(stop_at_first_error=True))
        assert list(errors[0].constraints.keys()) == ["isInt"]

    def test_optional_skips_none(self) -> None:
        errors = validate(_profile({"age": 5, "nick": None}))
        assert errors == []

    def test_skip_missing_properties_keeps_is_defined(self) -> None:
        errors = validate(Address(), ValidatorOptions(skip_missing_properties=True))
        assert len(errors) == 1
        assert errors[0].constraints == {"isDefined": "city should not be null or undefined"}

    def test_skip_missing_properties(self) -> None:
        assert validate(Profile(), ValidatorOptions(skip_missing_properties=True)) == []

    def test_conditional_validation(self) -> None:
        assert validate(_profile({"age": 5})) == []
        errors = validate(_profile({"age": 5, "email": "nope"}))
        assert errors[0].property == "email"
        assert errors[0].constraints == {"isEmail": "email must be an email"}

    def test_each_checks_every_element(self) -> None:
        errors = validate(_profile({"age": 5, "tags": ["ab", "abcd"]}))
        assert errors[0].constraints == {
            "maxLength": "each value in tags must be shorter than or equal to 3 characters"
        }

    def test_nested_object_failures_are_children(self) -> None:
        errors = validate(_profile({"age": 5, "address": {}}))
        assert errors[0].property == "address"
        assert errors[0].constraints == {}
        assert errors[0].children[0].property == "city"

    def test_nested_array_children_use_indexes(self) -> None:
        errors = validate(_profile({"age": 5, "addresses": [{"city": "Lyon"}, {}]}))
        assert len(errors[0].children) == 1
        assert errors[0].children[0].property == "1"
        assert errors[0].children[0].children[0].property == "city"

    def test_nested_primitive(self) -> None:
        profile = _profile({"age": 5})
        profile.address = "Lyon"
        errors = validate(profile)
        assert errors[0].constraints == {
            "nestedValidation": "nested property address must be either object or array"
        }

    def test_nested_primitive_array_element(self) -> None:
        profile = _profile({"age": 5})
        profile.addresses = ["Lyon"]
        errors = validate(profile)
        assert errors[0].children[0].constraints == {
            "nestedValidation": "nested property 0 must be either object or array"
        }

    def test_error_value_and_target(self) -> None:
        profile = _profile({"age": -1})
        error = validate(profile)[0]
        assert error.value == -1
        assert error.target is None
        options = ValidatorOptions(validation_error_target=True, validation_error_value=False)
        error = validate(profile, options)[0]
        assert error.value is None
        assert error.target is profile

    def test_error_tree_string(self) -> None:
        errors = validate(_profile({"age": 5, "addresses": [{}]}))
        assert str(errors[0]) == "  - property addresses.0.city has failed the following constraints: isDefined, " \
                                 "isString\n"

    def test_inherited_rules_and_custom_template(self) -> None:
        admin = Admin().populate({"age": 200, "level": 9, "extra": True})
        errors = validate(admin)
        assert [e.property for e in errors] == [WHOLE_OBJECT, "age", "level"]
        assert errors[0].constraints == {"strict": "properties are not allowed: extra"}
        assert errors[2].constraints == {"max": "Admin.level is capped at 3"}

    def test_callable_message(self) -> None:
        errors = validate(Labelled().populate({"label": "abc"}))
        assert errors[0].constraints == {"length": "bad label 'abc'"}

    def test_length_message_depends_on_value(self) -> None:
        class Title(Schema):
            title: typing.Annotated[str, Length(5, 8)]

            def __init__(self):
                super().__init__("title")

        short = validate(Title().populate({"title": "abc"}))[0]
        long = validate(Title().populate({"title": "abcdefghij"}))[0]
        assert short.constraints["length"] == "title must be longer than or equal to 5 characters"
        assert long.constraints["length"] == "title must be shorter than or equal to 8 characters"

    def test_custom_constraint(self) -> None:
        class IsEven(Constraint):
            name = "isEven"
            template = "$property must be even, got $value"

            def check(self, value, args):
                return isinstance(value, int) and value % 2 == 0

        class Counter(Schema):
            count: typing.Annotated[int, IsEven()]

            def __init__(self):
                super().__init__("count")

        errors = validate(Counter().populate({"count": 3}))
        assert errors[0].constraints == {"isEven": "count must be even, got 3"}


class TestMetadata:
    def test_rules_in_declaration_order(self) -> None:
        rules = get_metadata_storage().get_property_rules(Profile, "age")
        assert [type(m.rule) for m in rules] == [IsInt, Min, Max]
        assert all(m.target is Profile for m in rules)

    def test_whole_object_rules_come_first(self) -> None:
        rules = get_metadata_storage().get_target_rules(Admin)
        assert rules[0].property_name == WHOLE_OBJECT
        assert rules[0].target is Admin
        assert rules[-1].property_name == "level"

    def test_rule_type_filter(self) -> None:
        rules = get_metadata_storage().get_target_rules(Profile, ValidateNested)
        assert [m.property_name for m in rules] == ["address", "addresses"]

    def test_conditional_rules(self) -> None:
        rules = get_metadata_storage().get_conditional_rules(Profile, "email")
        assert len(rules) == 1
        assert isinstance(rules[0].rule, ValidateIf)

    def test_decorator_requires_a_class(self) -> None:
        with pytest.raises(BadArgumentException):
            Strict(True)(lambda: None)

    def test_unresolvable_annotations(self) -> None:
        class Broken(Schema):
            a: "typing.Annotated[Missing, IsDefined()]"

            def __init__(self):
                super().__init__("a")

        with pytest.raises(BadArgumentException):
            validate(Broken())


class TestConditions:
    def test_without_conditions(self) -> None:
        assert conditions_met(Profile, "age", Profile())

    def test_on_instance(self) -> None:
        assert not conditions_met(Profile, "email", Profile())
        assert conditions_met(Profile, "email", _profile({"email": "a@b.c"}))

    def test_on_raw_view(self) -> None:
        assert not conditions_met(Profile, "email", RawView({}))
        assert conditions_met(Profile, "email", RawView({"email": "a@b.c"}))

    def test_raw_view(self) -> None:
        view = RawView({"a": 1})
        assert view.a == 1
        assert view.b is None
        assert view["a"] == 1
        assert "a" in view
        assert view.get("b", 2) == 2

    def test_raw_view_wraps_nested_dicts(self) -> None:
        view = RawView({"meta": {"enabled": True}, "items": [{"name": "a"}, 3]})
        assert view.meta.enabled is True
        assert view["meta"].missing is None
        assert view.items[0].name == "a"
        assert view.items[1] == 3


class TestArguments:
    @pytest.mark.parametrize(
        "factory",
        [
            lambda: Min("1"),
            lambda: Max(None),
            lambda: Length(5, 2),
            lambda: IsDivisibleBy(0),
            lambda: IsIP(5),
            lambda: MinDate("2020-01-01"),
            lambda: Strict("yes"),
            lambda: ValidateIf(True),
        ],
    )
    def test_bad_arguments(self, factory: typing.Callable[[], typing.Any]) -> None:
        with pytest.raises(BadArgumentException) as e:
            factory()
        assert e.value.kind == "bad_argument"


class TestCatalogue:
    @pytest.mark.parametrize(
        "rule,good,bad",
        [
            (Equals(3), 3, 4),
            (NotEquals(3), 4, 3),
            (IsEmpty(), "", "a"),
            (IsNotEmpty(), "a", ""),
            (IsIn([1, 2]), 2, 3),
            (IsNotIn([1, 2]), 3, 2),
            (IsBoolean(), False, 0),
            (IsDate(), datetime.date(2020, 1, 1), "2020-01-01"),
            (IsString(), "a", 1),
            (IsNumber(), 1.5, True),
            (IsInt(), 2, 2.5),
            (IsArray(), [], "abc"),
            (IsDivisibleBy(3), 9, 10),
            (IsPositive(), 1, 0),
            (IsNegative(), -1, 0),
            (Min(2), 2, 1),
            (Max(2), 2, 3),
            (MinDate(datetime.date(2020, 1, 1)), datetime.datetime(2021, 1, 1, 10, 0), datetime.date(2019, 1, 1)),
            (MaxDate(datetime.date(2020, 1, 1)), datetime.date(2019, 1, 1), "2019-01-01"),
            (Contains("ok"), "it is ok", "nope"),
            (NotContains("ok"), "nope", "it is ok"),
            (IsAlpha(), "abc", "ab1"),
            (IsAlphanumeric(), "ab1", "ab-1"),
            (IsAscii(), "abc", "abé"),
            (IsLowercase(), "abc", "aBc"),
            (IsUppercase(), "ABC", "AbC"),
            (IsEmail(), "okok@okok.com", "not-an-email"),
            (IsFQDN(), "www.okok.com", "localhost"),
            (IsURL(), "https://www.okok.com/path?q=1", "notaurl"),
            (IsIP(4), "127.0.0.1", "::1"),
            (IsIP(), "::1", "1.2.3"),
            (IsUUID(4), str(uuid.uuid4()), "1234"),
            (IsJSON(), '{"a": 1}', "{a: 1}"),
            (Length(2, 3), "abc", "abcd"),
            (MinLength(2), "ab", "a"),
            (MaxLength(2), "ab", "abc"),
            (Matches(r"^\d+$"), "123", "12a"),
            (ArrayContains([1, 2]), [1, 2, 3], [1]),
            (ArrayNotContains([1]), [2, 3], [1, 2]),
            (ArrayNotEmpty(), [1], []),
            (ArrayMinSize(2), [1, 2], [1]),
            (ArrayMaxSize(1), [1], [1, 2]),
            (ArrayUnique(), [1, 2], [1, 1]),
        ],
    )
    def test_rule(self, rule: Constraint, good: typing.Any, bad: typing.Any) -> None:
        assert rule.check(good, None)
        assert not rule.check(bad, None)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2015-05-05T14:56:43.854Z", True),
            ("2015-05-05T14:56:43.854+02:00", True),
            (datetime.datetime(2015, 5, 5), True),
            ("2015-05-05T14:56:43Z", False),
            ("2015-05-05", False),
            (1430837803, False),
            ("2015-05-05T44:56:43.854Z", False),
            ("2015-02-30T14:56:43.854Z", False),
            ("2015-05-05T14:56:43.854Z\n", False),
            ("\uff12\uff10\uff11\uff15-05-05T14:56:43.854Z", False),
        ],
    )
    def test_is_datable(self, value: typing.Any, expected: bool) -> None:
        assert IsDatable().check(value, None) is expected

    @pytest.mark.parametrize(
        "value,kwargs,expected",
        [
            ("münchen.de", {}, True),
            ("-bad.com", {}, False),
            ("exa mple.com", {}, False),
            ("foo_bar.com", {}, False),
            ("foo_bar.com", {"allow_underscores": True}, True),
            ("okok.com.", {}, False),
            ("okok.com.", {"allow_trailing_dot": True}, True),
            ("intranet", {"require_tld": False}, True),
            ("okok.c", {}, False),
        ],
    )
    def test_is_fqdn(self, value: str, kwargs: typing.Dict[str, bool], expected: bool) -> None:
        assert IsFQDN(**kwargs).check(value, None) is expected

    def test_url_hosts(self) -> None:
        assert IsURL().check("http://localhost:8080", None)
        assert IsURL().check("http://127.0.0.1/", None)
        assert not IsURL().check("mailto:a@b.com", None)
        assert IsURL(schemes=["mailto"]).check("mailto://okok.com", None)
