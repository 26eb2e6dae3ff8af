"""
The metadata registry records which rules (constraints and sanitizers) apply to which property of which class. Rules
are declared as typing.Annotated metadata on class annotations, or applied as class decorators for whole-object rules.
"""
import inspect
import logging
import threading
import typing
from dataclasses import dataclass

from sw_schema.exceptions import BadArgumentException

_log = logging.getLogger(__name__)

WHOLE_OBJECT = "#"
"""
Sentinel property name for rules that apply to the object itself rather than to one of its fields.
"""


class Rule:
    """
    Rule is the base of everything that can be attached to a schema property. Subclasses are collected from
    typing.Annotated metadata by the registry.
    """

    def property_for(self, field_name: str) -> typing.Optional[str]:
        """
        This function decides which property the rule is registered against when it is found on a field annotation.
        :param field_name: the annotated field.
        :return: the property name, or None if the rule should not be registered at all.
        """
        return field_name


RuleT = typing.TypeVar("RuleT", bound=Rule)


@dataclass(frozen=True)
class RuleMetadata(typing.Generic[RuleT]):
    """
    RuleMetadata binds a single rule to a (target class, property name) pair.
    """
    target: type
    property_name: str
    rule: RuleT


class MetadataStorage:
    """
    MetadataStorage is the process-wide rule table. Explicit registrations (class decorators) happen at class
    definition time, annotation scans happen the first time a class is looked up. After that the table is only read.
    """

    def __init__(self):
        self._declared: typing.Dict[type, typing.List[RuleMetadata]] = {}
        self._scanned: typing.Dict[type, typing.List[RuleMetadata]] = {}
        self._lock = threading.RLock()

    def add_rule(self, target: type, property_name: str, rule: Rule):
        if not isinstance(target, type):
            raise BadArgumentException(
                "Rules can only be registered on classes, {} given".format(type(target).__name__)
            )
        with self._lock:
            self._declared.setdefault(target, []).append(RuleMetadata(target, property_name, rule))

    def get_target_rules(
            self,
            target: type,
            rule_type: typing.Type[RuleT] = Rule,
    ) -> typing.List[RuleMetadata[RuleT]]:
        """
        This function returns every rule of the given type that applies to the target class, including the rules of
        its base classes. Whole-object rules come first, then field rules in declaration order, base classes before
        subclasses.
        :param target: the class to look up.
        :param rule_type: only return rules of this type.
        :return: the ordered rule list.
        """
        whole_object = []
        fields = []
        for klass in reversed(target.__mro__):
            if klass.__module__ == "builtins":
                continue
            for metadata in self._rules_of(klass):
                if not isinstance(metadata.rule, rule_type):
                    continue
                if metadata.property_name == WHOLE_OBJECT:
                    whole_object.append(metadata)
                else:
                    fields.append(metadata)
        return whole_object + fields

    def get_property_rules(
            self,
            target: type,
            property_name: str,
            rule_type: typing.Type[RuleT] = Rule,
    ) -> typing.List[RuleMetadata[RuleT]]:
        return [m for m in self.get_target_rules(target, rule_type) if m.property_name == property_name]

    def get_conditional_rules(self, target: type, property_name: str) -> typing.List[RuleMetadata]:
        # Imported here, validation builds on this module.
        from sw_schema.validation import ValidateIf
        return self.get_property_rules(target, property_name, ValidateIf)

    def _rules_of(self, klass: type) -> typing.List[RuleMetadata]:
        scanned = self._scanned.get(klass)
        if scanned is None:
            with self._lock:
                scanned = self._scanned.get(klass)
                if scanned is None:
                    scanned = _scan_annotations(klass)
                    self._scanned[klass] = scanned
        return self._declared.get(klass, []) + scanned


def _scan_annotations(klass: type) -> typing.List[RuleMetadata]:
    try:
        annotations = inspect.get_annotations(klass, eval_str=True)
    except Exception as e:
        raise BadArgumentException(
            "Failed to resolve the annotations of '{}' ({}). If you use 'from __future__ import annotations', make "
            "sure every referenced class is importable from the module scope.".format(klass.__name__, e.__str__())
        ) from e
    result = []
    for field_name, annotation in annotations.items():
        if typing.get_origin(annotation) is not typing.Annotated:
            continue
        for item in annotation.__metadata__:
            if not isinstance(item, Rule):
                continue
            property_name = item.property_for(field_name)
            if property_name is not None:
                result.append(RuleMetadata(klass, property_name, item))
    if len(result) > 0:
        _log.debug("registered %d rules for %s", len(result), klass.__qualname__)
    return result


_storage = MetadataStorage()


def get_metadata_storage() -> MetadataStorage:
    return _storage
