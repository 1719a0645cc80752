"""
Reading and writing of .qua files.

The file format is a YAML document holding a single mapping. Keys are the PascalCase forms of the attribute names
of :class:`~quaparser.classes.qua.Qua` and the classes it contains.
"""
import dataclasses
import io
import logging
import typing

from collections.abc import Hashable
from enum import Enum, Flag
from functools import cache
from typing import Any, BinaryIO, TextIO

import yaml

from .base import Parser
from ..classes.base import FieldError, StructuralError, TransportError
from ..classes.qua import Qua
from ..utils import is_whole, parse_flag_names, to_pascal_case

__all__ = [
    "QuaParser",
    "decode",
    "decode_text",
    "encode",
    "to_text",
]

ENCODING = "utf-8"
# BOM is stripped on read, never written
READ_ENCODING = "utf-8-sig"
MAX_FLAG_VALUE = 0xFF
NULL_TAG = "tag:yaml.org,2002:null"
# fmt: off
YAML_DUMP_OPTIONS: dict[str, Any] = {
    "default_flow_style": False,
    "sort_keys"         : False,
    "allow_unicode"     : True,
    "width"             : float("inf"),
    "line_break"        : "\n",
}
# fmt: on

logger = logging.getLogger(__name__)

_FieldSchema = tuple[dataclasses.Field, str, Any]


@cache
def _schema(cls: type) -> tuple[_FieldSchema, ...]:
    hints = typing.get_type_hints(cls)
    return tuple(
        (f, f.metadata.get("key", to_pascal_case(f.name)), hints[f.name]) for f in dataclasses.fields(cls)
    )


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _enum_by_name(enum_type: type[Enum], name: str) -> Enum:
    wanted = name.replace("_", "").lower()
    for member in enum_type:
        if member.name.replace("_", "").lower() == wanted:
            return member
    raise KeyError(name)


def _coerce_int(value: Any, path: str, flag_type: type[Flag] | None = None) -> int:
    if isinstance(value, bool):
        raise FieldError(path, value, "expected an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float) and is_whole(value):
        result = int(value)
    elif isinstance(value, str) and flag_type is not None:
        try:
            result = parse_flag_names(value, flag_type)
        except ValueError as e:
            raise FieldError(path, value, str(e)) from e
    else:
        raise FieldError(path, value, "expected an integer")

    if flag_type is not None and not 0 <= result <= MAX_FLAG_VALUE:
        raise FieldError(path, value, f"bit field must be within 0-{MAX_FLAG_VALUE}")
    return result


def _coerce_float(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FieldError(path, value, "expected a number")
    return float(value)


def _coerce_bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise FieldError(path, value, "expected a boolean")
    return value


def _is_absent(node: yaml.Node | None) -> bool:
    return node is None or (isinstance(node, yaml.ScalarNode) and node.tag == NULL_TAG)


def _construct(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
    return loader.construct_object(node, deep=True)


def _coerce_enum(enum_type: type[Enum], value: Any, path: str) -> Enum:
    if isinstance(value, bool):
        raise FieldError(path, value, f"expected a {enum_type.__name__} value")
    if isinstance(value, int):
        try:
            return enum_type(value)
        except ValueError as e:
            raise FieldError(path, value, f"not a valid {enum_type.__name__} value") from e
    if isinstance(value, str):
        try:
            return _enum_by_name(enum_type, value)
        except KeyError as e:
            raise FieldError(path, value, f"not a valid {enum_type.__name__} name") from e
    raise FieldError(path, value, f"expected a {enum_type.__name__} value")


class QuaParser(Parser):
    """
    Converts between .qua documents and :class:`~quaparser.classes.qua.Qua` objects.

    Absent fields are filled with their defaults, and fields of the wrong type raise :class:`FieldError`. Writing
    always produces every field, in declaration order, so the same chart always produces the same text.
    """

    def parse(self, f: BinaryIO | TextIO) -> Qua:
        """
        Parse a binary or text stream.

        :raises TransportError: if the stream cannot be read.
        :raises StructuralError: if the content is not UTF-8, or not a YAML mapping.
        :raises FieldError: if a field cannot be converted to its type.
        """
        try:
            content = f.read()
        except UnicodeDecodeError as e:
            raise StructuralError(f"chart data is not valid text: {e}") from e
        except (OSError, ValueError) as e:
            raise TransportError(f"cannot read chart data: {e}") from e

        if isinstance(content, bytes):
            try:
                content = content.decode(READ_ENCODING)
            except UnicodeDecodeError as e:
                raise StructuralError(f"chart data is not valid {ENCODING}: {e}") from e

        return self.parse_text(content)

    def parse_text(self, text: str) -> Qua:
        """
        Parse a string.

        Text fields take the scalar exactly as written, so ``Title: 4:33`` or ``Title: Yes`` are read as text. Other
        fields go through the YAML safe schema.
        """
        try:
            loader = yaml.SafeLoader(text)
        except yaml.YAMLError as e:
            raise StructuralError(f"malformed YAML document: {e}") from e

        try:
            document = loader.get_single_node()
            if _is_absent(document):
                document = yaml.MappingNode("tag:yaml.org,2002:map", [])
            if not isinstance(document, yaml.MappingNode):
                got = type(_construct(loader, document)).__name__
                raise StructuralError(f"document must be a single mapping (got {got})")
            qua = self._decode_entity(loader, Qua, document, "")
        except yaml.YAMLError as e:
            raise StructuralError(f"malformed YAML document: {e}") from e
        finally:
            loader.dispose()

        logger.debug(
            f'parsed "{qua.artist} - {qua.title} [{qua.difficulty_name}]": '
            f"{len(qua.timing_points)} timing points, {len(qua.slider_velocities)} scroll velocities, "
            f"{len(qua.hit_objects)} hit objects"
        )
        return qua

    def write(self, qua: Qua, f: BinaryIO | TextIO) -> None:
        """
        Write a chart to a stream. Text streams receive a string, other streams receive UTF-8 bytes.

        :raises TransportError: if the stream cannot be written.
        """
        text = self.to_text(qua)
        data: str | bytes = text if isinstance(f, io.TextIOBase) else text.encode(ENCODING)
        try:
            f.write(data)  # type: ignore[arg-type]
        except (OSError, ValueError) as e:
            raise TransportError(f"cannot write chart data: {e}") from e

    def to_text(self, qua: Qua) -> str:
        return yaml.dump(self._encode_entity(qua), Dumper=yaml.SafeDumper, **YAML_DUMP_OPTIONS)

    def _decode_entity(self, loader: yaml.SafeLoader, cls: type, node: yaml.MappingNode, path: str) -> Any:
        # Resolves merge keys in place
        loader.flatten_mapping(node)
        data: dict[Any, yaml.Node] = {}
        for key_node, value_node in node.value:
            key = _construct(loader, key_node)
            if not isinstance(key, Hashable):
                raise StructuralError(f"unhashable key in {path or 'document'} (got {key!r})")
            data[key] = value_node

        kwargs: dict[str, Any] = {}
        known_keys: set[str] = set()
        for f, key, field_type in _schema(cls):
            aliases = f.metadata.get("aliases", ())
            known_keys.add(key)
            known_keys.update(aliases)

            value_node = data.get(key)
            for alias in aliases:
                if not _is_absent(value_node):
                    break
                key, value_node = alias, data.get(alias)

            if _is_absent(value_node):
                if "missing" in f.metadata:
                    kwargs[f.name] = f.metadata["missing"]
                continue
            kwargs[f.name] = self._decode_value(loader, f, field_type, value_node, _join(path, key))

        for key in data.keys() - known_keys:
            if path:
                logger.debug(f'unrecognized key "{key}" in {path} ignored')
            else:
                logger.warning(f'unrecognized key "{key}" ignored')

        return cls(**kwargs)

    def _decode_value(
        self, loader: yaml.SafeLoader, f: dataclasses.Field, field_type: Any, node: yaml.Node, path: str
    ) -> Any:
        if typing.get_origin(field_type) is list:
            (item_type,) = typing.get_args(field_type)
            if not isinstance(node, yaml.SequenceNode):
                raise FieldError(path, _construct(loader, node), "expected a list")
            items = []
            for i, item_node in enumerate(node.value):
                item_path = f"{path}[{i}]"
                if not isinstance(item_node, yaml.MappingNode):
                    raise FieldError(item_path, _construct(loader, item_node), "expected a mapping")
                items.append(self._decode_entity(loader, item_type, item_node, item_path))
            return items

        if field_type is str:
            if not isinstance(node, yaml.ScalarNode):
                raise FieldError(path, _construct(loader, node), "expected a string")
            return node.value

        value = _construct(loader, node)
        if isinstance(field_type, type) and issubclass(field_type, Enum):
            return _coerce_enum(field_type, value, path)
        if field_type is bool:
            return _coerce_bool(value, path)
        if field_type is int:
            return _coerce_int(value, path, f.metadata.get("flags"))
        if field_type is float:
            return _coerce_float(value, path)
        raise TypeError(f"unsupported field type {field_type!r} for {path}")

    def _encode_entity(self, obj: Any) -> dict[str, Any]:
        return {
            key: self._encode_value(f, field_type, getattr(obj, f.name)) for f, key, field_type in _schema(type(obj))
        }

    def _encode_value(self, f: dataclasses.Field, field_type: Any, value: Any) -> Any:
        if typing.get_origin(field_type) is list:
            return [self._encode_entity(item) for item in value]
        if isinstance(value, Enum):
            return value.value
        if field_type is bool:
            return bool(value)
        if field_type is int:
            return int(value)
        if field_type is float:
            if f.metadata.get("whole") and is_whole(value):
                return int(value)
            return float(value)
        return str(value)


_parser = QuaParser()


def decode(stream: BinaryIO | TextIO) -> Qua:
    """
    Read a chart from a binary or text stream.

    :raises TransportError: if the stream cannot be read.
    :raises DecodeError: if the content is not a valid .qua document.
    """
    return _parser.parse(stream)


def decode_text(text: str) -> Qua:
    """
    Read a chart from a string.

    :raises DecodeError: if the string is not a valid .qua document.
    """
    return _parser.parse_text(text)


def encode(qua: Qua, sink: BinaryIO | TextIO) -> None:
    """
    Write a chart to a binary or text stream.

    :raises TransportError: if the stream cannot be written.
    """
    _parser.write(qua, sink)


def to_text(qua: Qua) -> str:
    """Produce the .qua document for a chart."""
    return _parser.to_text(qua)
