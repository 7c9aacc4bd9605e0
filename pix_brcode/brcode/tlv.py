"""Tag-length-value primitives of the EMV merchant-presented QR format.

A field is ``tag (2 digits) + length (2 digits, zero padded) + value``. A
composite field carries a TLV list as its value; both shapes are encoded and
parsed by the same recursive routines.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from ..utils.constants import COMPOSITE_TAGS, MAX_FIELD_LENGTH
from ..utils.pix_errors import DecodeStructureError, FieldOverflowError, PixFieldError

_TAG_SIZE = 2
_LENGTH_SIZE = 2
_HEADER_SIZE = _TAG_SIZE + _LENGTH_SIZE


@dataclass(frozen=True)
class Leaf:
    tag: str
    value: str

    def encode(self) -> str:
        return encode_field(self.tag, self.value)


@dataclass(frozen=True)
class Composite:
    tag: str
    subfields: Tuple["Field", ...]

    @property
    def value(self) -> str:
        return encode_fields(self.subfields)

    def encode(self) -> str:
        return encode_field(self.tag, self.value)

    def get(self, tag: str) -> Optional["Field"]:
        return find_field(self.subfields, tag)


Field = Union[Leaf, Composite]


def _check_tag(tag: str) -> None:
    if len(tag) != _TAG_SIZE or not tag.isdigit():
        raise PixFieldError(f"invalid tag {tag!r}", tag)


def encode_field(tag: str, value: str) -> str:
    _check_tag(tag)
    if len(value) > MAX_FIELD_LENGTH:
        raise FieldOverflowError(tag, len(value), MAX_FIELD_LENGTH)
    if not value.isascii():
        # the length prefix counts characters, the CRC runs over bytes
        raise PixFieldError(f"field {tag} has non-ASCII characters", tag)
    return f"{tag}{len(value):02d}{value}"


def encode_composite(tag: str, subfields: Iterable[Tuple[str, str]]) -> str:
    return encode_field(tag, "".join(encode_field(subtag, subvalue) for subtag, subvalue in subfields))


def encode_fields(fields: Iterable[Field]) -> str:
    return "".join(f.encode() for f in fields)


def decode_fields(payload: str, *, offset: int = 0) -> List[Tuple[str, str]]:
    """Split a TLV string into ``(tag, value)`` pairs, in order.

    ``offset`` is only used to report absolute positions for nested values.
    """
    out: List[Tuple[str, str]] = []
    cursor = 0
    size = len(payload)
    while cursor < size:
        position = offset + cursor
        if size - cursor < _HEADER_SIZE:
            raise DecodeStructureError(
                f"truncated field header at position {position}", position=position
            )
        tag = payload[cursor:cursor + _TAG_SIZE]
        length_str = payload[cursor + _TAG_SIZE:cursor + _HEADER_SIZE]
        if not tag.isdigit() or not tag.isascii():
            raise DecodeStructureError(f"non-numeric tag {tag!r} at position {position}", tag=tag, position=position)
        if not length_str.isdigit() or not length_str.isascii():
            raise DecodeStructureError(
                f"non-numeric length {length_str!r} for tag {tag} at position {position}", tag=tag, position=position
            )
        length = int(length_str)
        start = cursor + _HEADER_SIZE
        end = start + length
        if end > size:
            raise DecodeStructureError(
                f"tag {tag} declares {length} chars but only {size - start} remain", tag=tag, position=position
            )
        out.append((tag, payload[start:end]))
        cursor = end
    return out


def parse_fields(
    payload: str,
    composite_tags: FrozenSet[str] = COMPOSITE_TAGS,
    *,
    offset: int = 0,
) -> Tuple[Field, ...]:
    """Decode a TLV string into a tree of ``Leaf``/``Composite``.

    Values of ``composite_tags`` are parsed again as TLV lists; their children
    are always leaves.
    """
    fields: List[Field] = []
    cursor = offset
    for tag, value in decode_fields(payload, offset=offset):
        if tag in composite_tags:
            children = parse_fields(value, frozenset(), offset=cursor + _HEADER_SIZE)
            fields.append(Composite(tag, children))
        else:
            fields.append(Leaf(tag, value))
        cursor += _HEADER_SIZE + len(value)
    return tuple(fields)


def find_field(fields: Sequence[Field], tag: str) -> Optional[Field]:
    for f in fields:
        if f.tag == tag:
            return f
    return None
