"""Schema validation of outgoing page content.

Page XML is validated against the XSD registered for its namespace before it
is submitted to the host. The host itself writes some floating point
attributes with more mantissa digits than its own schema accepts (for example
``12.345E+10`` where the facet allows at most ``12.3E+10``), so one narrow
correction is applied: an attribute failing a maxInclusive facet whose value
uses an exponent is truncated to one fractional digit and validated again.

Validation works on a copy; the element passed in is never modified.
"""

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Set, Tuple

from lxml import etree

from .errors import SchemaLoadError

logger = logging.getLogger(__name__)

_ATTRIBUTE_RE = re.compile(r"attribute '([^']+)'")
_ELEMENT_RE = re.compile(r"Element '([^']+)'")
_VALUE_RE = re.compile(r"value '([^']*)'")

EXPONENT_MARKER = 'E'


def correct_exponent_value(value: str) -> Optional[str]:
    """Truncate the mantissa of an exponent value to one fractional digit.

    Returns None when the value has no exponent marker, no decimal point,
    or a decimal point immediately before the marker.

    Example:
        >>> correct_exponent_value("12.345E+10")
        '12.3E+10'
        >>> correct_exponent_value("12.345") is None
        True
    """
    exp = value.find(EXPONENT_MARKER)
    if exp <= 0:
        return None

    dot = value.find('.')
    if dot < 0 or dot >= exp - 1:
        return None

    return value[:dot + 2] + value[exp:]


class Correction(NamedTuple):
    """An attribute rewritten by the validator."""
    element_path: str
    attribute: str
    original: str
    corrected: str


@dataclass
class ValidationResult:
    """Outcome of SchemaValidator.validate.

    Attributes:
        valid: True when the content is safe to submit
        content: Validated copy of the element, with corrections applied
        corrections: Attributes rewritten by the exponent correction
        errors: Messages of the errors that were not handled
    """
    valid: bool
    content: etree._Element
    corrections: List[Correction] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class SchemaValidator:
    """Validates page elements against XSDs registered per target namespace.

    Example:
        >>> validator = SchemaValidator("schemas/page-2013.xsd")
        >>> result = validator.validate(page_root)
        >>> if result.valid:
        ...     api.update_page_content(to_xml(result.content))
    """

    def __init__(self, schema_path: Optional[str] = None):
        """Initialize the validator.

        Args:
            schema_path: Optional XSD to register immediately
        """
        self._schemas: Dict[Optional[str], etree.XMLSchema] = {}
        if schema_path:
            self.register(schema_path)

    def register(self, schema_path: str) -> Optional[str]:
        """Load an XSD and register it under its target namespace.

        Returns:
            The target namespace the schema was registered for

        Raises:
            SchemaLoadError: If the file cannot be read or is not a valid XSD
        """
        try:
            schema_doc = etree.parse(schema_path)
            schema = etree.XMLSchema(schema_doc)
        except (OSError, etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
            raise SchemaLoadError(schema_path, str(e)) from e

        namespace = schema_doc.getroot().get('targetNamespace')
        self._schemas[namespace] = schema
        logger.debug(f"Registered schema {schema_path} for namespace {namespace}")
        return namespace

    def _schema_for(self, namespace: Optional[str]) -> etree.XMLSchema:
        try:
            return self._schemas[namespace]
        except KeyError:
            raise SchemaLoadError(
                str(namespace),
                "no schema registered for this namespace"
            ) from None

    def validate(self, element: etree._Element) -> ValidationResult:
        """Validate a copy of element, correcting exponent values where possible.

        Each maxInclusive failure on an attribute with a correctable exponent
        value is fixed and counts as handled, together with any other error
        reported for the same attribute. Every other error is logged and makes
        the result invalid. If corrections were made and nothing else failed,
        the corrected copy is validated once more.

        Args:
            element: Root of the content to validate (not modified)

        Returns:
            ValidationResult with the corrected copy

        Raises:
            SchemaLoadError: If no schema is registered for the namespace
        """
        content = copy.deepcopy(element)
        schema = self._schema_for(etree.QName(content).namespace)
        doc = etree.ElementTree(content)
        result = ValidationResult(valid=True, content=content)

        if schema.validate(doc):
            return result

        entries = list(schema.error_log)
        # resolved up front, corrections change the values quoted in messages
        locations = [_locate_attribute(doc, entry) for entry in entries]
        handled: Set[Tuple[str, str]] = set()

        for entry, located in zip(entries, locations):
            if entry.type != etree.ErrorTypes.SCHEMAV_CVC_MAXINCLUSIVE_VALID:
                continue
            if located is None:
                continue

            target, attribute = located
            value = target.get(attribute)
            corrected = correct_exponent_value(value)
            if corrected is None:
                continue

            target.set(attribute, corrected)
            element_path = doc.getpath(target)
            handled.add((element_path, attribute))
            result.corrections.append(Correction(element_path, attribute, value, corrected))
            logger.info(f"Corrected attribute {element_path}/@{attribute} [{value}] -> [{corrected}]")

        for entry, located in zip(entries, locations):
            if located is not None and (doc.getpath(located[0]), located[1]) in handled:
                continue
            _log_schema_error(entry)
            result.errors.append(entry.message)

        if result.errors:
            result.valid = False
            return result

        if not schema.validate(doc):
            for entry in schema.error_log:
                _log_schema_error(entry)
                result.errors.append(entry.message)
            result.valid = False

        return result


def _log_schema_error(entry) -> None:
    logger.error(
        f"Schema error [{entry.type_name}] at line {entry.line} {entry.path or ''}: {entry.message}"
    )


def _namespaces(doc: etree._ElementTree) -> Dict[str, str]:
    namespaces: Dict[str, str] = {}
    for node in doc.iter(etree.Element):
        for prefix, uri in node.nsmap.items():
            if prefix:
                namespaces.setdefault(prefix, uri)
    return namespaces


def _element_at(doc: etree._ElementTree, path: Optional[str]) -> Optional[etree._Element]:
    """Resolve the node path reported by the validator to an element."""
    if not path:
        return None

    # attribute nodes are reported as <element path>/@name
    if '/@' in path:
        path = path.rsplit('/@', 1)[0]

    try:
        found = doc.xpath(path, namespaces=_namespaces(doc))
    except etree.XPathError:
        return None

    if isinstance(found, list) and found and isinstance(found[0], etree._Element):
        return found[0]
    return None


def _locate_attribute(doc: etree._ElementTree, entry) -> Optional[Tuple[etree._Element, str]]:
    """Find the element and attribute name a validation error refers to.

    Returns None for errors that are not about an attribute.
    """
    match = _ATTRIBUTE_RE.search(entry.message)
    if match is None:
        return None
    attribute = match.group(1)

    target = _element_at(doc, getattr(entry, 'path', None))
    if target is not None and target.get(attribute) is not None:
        return target, attribute

    # fall back to the element name and offending value quoted in the message
    element_match = _ELEMENT_RE.search(entry.message)
    value_match = _VALUE_RE.search(entry.message)
    if element_match is None:
        return None

    for candidate in doc.iter(element_match.group(1)):
        value = candidate.get(attribute)
        if value is None:
            continue
        if value_match is None or value_match.group(1) == value:
            return candidate, attribute

    return None
