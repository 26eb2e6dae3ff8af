"""
Payload I/O for schema types: loading raw data from JSON or YAML files and streams, and dumping instance trees.
"""
import datetime
import io
import json
import os
import pprint
import typing

import yaml

from sw_schema.exceptions import LoadFromFileException, SchemaException
from sw_schema.validation import validate


def load_from_file(file_name: str) -> typing.Any:
    """
    This function loads a raw payload from a JSON or YAML file, based on the file extension.
    :param file_name: the file to load.
    :return: the decoded data.
    :raise LoadFromFileException: if the file cannot be read or decoded.
    """
    if file_name.endswith(".json"):
        try:
            with open(file_name, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise LoadFromFileException("Failed to load JSON from {}: {}".format(file_name, e.__str__())) from e
        except OSError as e:
            raise LoadFromFileException("Failed to open {}: {}".format(file_name, e.__str__())) from e
    elif file_name.endswith(".yaml") or file_name.endswith(".yml"):
        try:
            with open(file_name, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LoadFromFileException("Failed to load YAML from {}: {}".format(file_name, e.__str__())) from e
        except OSError as e:
            raise LoadFromFileException("Failed to open {}: {}".format(file_name, e.__str__())) from e
    else:
        raise LoadFromFileException(
            "Unsupported file extension: {}, expected .json, .yaml or .yml".format(os.path.basename(file_name))
        )


def load_from_stdin(stdin: io.TextIOWrapper) -> typing.Any:
    """
    This function loads a raw payload from a text stream. JSON input is accepted, it is a subset of YAML.
    :param stdin: the stream to read.
    :return: the decoded data.
    :raise LoadFromFileException: if the stream cannot be decoded.
    """
    try:
        return yaml.safe_load(stdin)
    except yaml.YAMLError as e:
        raise LoadFromFileException("Failed to load YAML from standard input: {}".format(e.__str__())) from e


class SchemaEncoder(json.JSONEncoder):
    """
    SchemaEncoder serializes schema instances through their to_json() method, and dates as ISO 8601 strings.
    """

    def default(self, o: typing.Any) -> typing.Any:
        to_json = getattr(o, "to_json", None)
        if callable(to_json):
            return to_json()
        if isinstance(o, datetime.datetime):
            return _isoformat(o)
        if isinstance(o, datetime.date):
            return o.isoformat()
        return super().default(o)


def _isoformat(value: datetime.datetime) -> str:
    result = value.isoformat(timespec="milliseconds")
    if result.endswith("+00:00"):
        result = result[:-6] + "Z"
    return result


def dumps_json(data: typing.Any, **kwargs) -> str:
    """
    This function encodes a schema instance (or any structure containing them) as JSON.
    :param data: the data to encode.
    :param kwargs: passed on to json.dumps.
    """
    return json.dumps(data, cls=SchemaEncoder, **kwargs)


def dumps_yaml(data: typing.Any) -> str:
    """
    This function encodes a schema instance as YAML, keeping the declared field order.
    :param data: a schema instance or plain data.
    """
    to_schema = getattr(data, "to_schema", None)
    if callable(to_schema):
        data = to_schema()
    return yaml.safe_dump(data, sort_keys=False)


class SerializationTestFailure(SchemaException):
    kind: typing.ClassVar[str] = "serialization_test"

    def __init__(self, msg: str):
        self.msg = msg

    def __str__(self):
        return self.msg


def check_object_serialization(instance: typing.Any, fail: typing.Optional[typing.Callable[[str], None]] = None):
    """
    This function helps schema authors check their declarations: it validates the instance, serializes it, populates
    a new instance from the result, and checks that the two are equal on every declared field.
    :param instance: a populated schema instance to use as sample data.
    :param fail: called with the report on failure, a SerializationTestFailure is raised if not given.
    """
    try:
        errors = validate(instance)
        if len(errors) > 0:
            raise Exception("Validation failed:\n" + "".join(e.__str__() for e in errors))
        serialized_data = instance.to_schema()
        populated = type(instance)().populate(serialized_data)
        if populated != instance:
            raise Exception(
                "After serializing and populating {}, the data mismatched. Serialized data was: {}".format(
                    type(instance).__name__,
                    serialized_data
                )
            )
    except Exception as e:
        result = "Your object serialization test for {} failed.\n\n" \
                 "This means that your object cannot be properly serialized by its schema. There are three possible " \
                 "reasons for this:\n\n" \
                 "1. A nested field is declared with a type that does not extend Schema\n" \
                 "2. Your sample data is invalid according to your own rules\n" \
                 "3. There is a bug in sw-schema (please report it)\n\n" \
                 "Check the error message below for details.\n\n" \
                 "---\n\n".format(type(instance).__name__)
        result += "Error message:\n" + e.__str__() + "\n\n"
        result += "Input:\n" + pprint.pformat(instance) + "\n\n"
        result += "---\n\n"
        if fail is None:
            raise SerializationTestFailure(result) from e
        fail(result)

