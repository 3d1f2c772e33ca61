"""
Message serializers — turn values into text before signing or encryption.

Three serializers are provided:

- ``JSONSerializer``: compact JSON through orjson. Use this to share
  cookies with Rails (``cookies_serializer = :json``).
- ``XMLSerializer``: element-tree rendering of mappings, objects and lists.
- ``NullSerializer``: no-op, for payloads that already are strings.

``deserialize`` takes an optional ``target`` type. Without it the decoded
value is returned as-is; with it the value is validated into the target
through a pydantic ``TypeAdapter`` (dataclasses, models, ``dict``,
``list[int]``...).
"""
import re
import dataclasses
import functools
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional
import xml.etree.ElementTree as ET

import orjson
from pydantic import BaseModel, TypeAdapter, ValidationError

from .exceptions import SerializationError, DeserializationError

_XML_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")
# Characters outside the XML 1.0 Char production.
_XML_INVALID_CHAR = re.compile(
    r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


@functools.lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class Serializer(ABC):
    """Serializer capability shared by verifiers and encryptors."""

    name: str = "abstract"

    @abstractmethod
    def serialize(self, value: Any) -> str:
        """Render ``value`` as text."""

    @abstractmethod
    def deserialize(self, data: str, target: Optional[Any] = None) -> Any:
        """Parse ``data`` and populate ``target`` (if given)."""

    def _coerce(self, value: Any, target: Optional[Any]) -> Any:
        if target is None:
            return value
        try:
            return _adapter(target).validate_python(value)
        except ValidationError as err:
            raise DeserializationError(
                f"{self.name} payload does not fit {target!r}: {err}"
            ) from err

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def _json_default(obj: Any) -> Any:
    """orjson fallback for types it does not encode natively."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


class JSONSerializer(Serializer):
    """Compact JSON: no whitespace, keys kept in insertion order.

    Non-string mapping keys (``{1: "a"}``) are written as strings.
    """

    name = "json"

    def serialize(self, value: Any) -> str:
        try:
            return orjson.dumps(
                value, default=_json_default, option=orjson.OPT_NON_STR_KEYS,
            ).decode("utf-8")
        except orjson.JSONEncodeError as err:
            raise SerializationError(str(err)) from err

    def deserialize(self, data: str, target: Optional[Any] = None) -> Any:
        try:
            value = orjson.loads(data)
        except orjson.JSONDecodeError as err:
            raise DeserializationError(f"Invalid JSON payload: {err}") from err
        return self._coerce(value, target)


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------

def _xml_fields(value: Any) -> Optional[dict]:
    """Return the field mapping of a structured value, or None for scalars."""
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: getattr(value, field.name)
            for field in dataclasses.fields(value)
        }
    return None


def _is_xml_name(tag: str) -> bool:
    return bool(_XML_NAME.match(tag)) and not tag.lower().startswith("xml")


def _xml_text(text: str) -> str:
    match = _XML_INVALID_CHAR.search(text)
    if match:
        raise SerializationError(
            f"character {match.group()!r} cannot be represented in XML"
        )
    return text


def _xml_element(tag: str, value: Any) -> ET.Element:
    if not _is_xml_name(tag):
        raise SerializationError(f"{tag!r} is not a valid XML element name")
    elem = ET.Element(tag)
    if value is None:
        elem.set("nil", "true")
        return elem
    fields = _xml_fields(value)
    if fields is not None:
        elem.set("type", "dict")
        for key, item in fields.items():
            elem.append(_xml_element(str(key), item))
    elif isinstance(value, (list, tuple, set, frozenset)):
        elem.set("type", "list")
        for item in value:
            elem.append(_xml_element("item", item))
    elif isinstance(value, (bytes, bytearray)):
        raise SerializationError("bytes cannot be rendered as XML text")
    elif isinstance(value, bool):
        elem.text = "true" if value else "false"
    else:
        elem.text = _xml_text(str(value))
    return elem


def _xml_value(elem: ET.Element) -> Any:
    if elem.get("nil") == "true":
        return None
    kind = elem.get("type")
    if kind == "dict":
        return {child.tag: _xml_value(child) for child in elem}
    if kind == "list":
        return [_xml_value(child) for child in elem]
    return elem.text or ""


class XMLSerializer(Serializer):
    """XML rendering of a value.

    The root element is named after the value's type. Mappings, dataclasses
    and models become one child per field (``type="dict"``), sequences
    become ``<item>`` children (``type="list"``) and ``None`` is marked
    ``nil="true"``. Scalars travel as text and are converted back by the
    target type on deserialize.

    Carriage returns are written as ``&#13;`` so they survive parsing.
    Text containing characters XML 1.0 cannot carry (most C0 controls)
    raises ``SerializationError``.
    """

    name = "xml"

    def serialize(self, value: Any) -> str:
        tag = type(value).__name__
        if not _is_xml_name(tag):
            tag = "value"
        root = _xml_element(tag, value)
        # Parsers normalize a literal CR to LF; only a reference survives.
        return ET.tostring(root, encoding="unicode").replace("\r", "&#13;")

    def deserialize(self, data: str, target: Optional[Any] = None) -> Any:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as err:
            raise DeserializationError(f"Invalid XML payload: {err}") from err
        return self._coerce(_xml_value(root), target)


# ---------------------------------------------------------------------------
# Null (pass-through)
# ---------------------------------------------------------------------------

class NullSerializer(Serializer):
    """Pass-through serializer.

    ``serialize`` uses ``str(value)``, which is not reversible for
    non-string values. ``deserialize`` can only populate a ``str``.
    """

    name = "null"

    def serialize(self, value: Any) -> str:
        return str(value)

    def deserialize(self, data: str, target: Optional[Any] = None) -> Any:
        if target not in (None, str):
            raise TypeError(
                f"NullSerializer can only deserialize to str, not {target!r}"
            )
        return data
