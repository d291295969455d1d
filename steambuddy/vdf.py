"""Parser for Steam's text registry (``registry.vdf``) files.

This is a simplified parser: macros, comments and other extensions of the
format are not supported.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Union

log = logging.getLogger(__name__)

_WHITESPACE = frozenset(b"\n \t\r")
_ESCAPABLE = frozenset(b'\n\t\r\\"')
_QUOTE = ord('"')
_GROUP_START = ord("{")
_GROUP_END = ord("}")
_ESCAPE = ord("\\")
_INT_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*", re.ASCII)
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class VdfParseError(ValueError):
    """Raised when registry data does not follow the expected structure."""


@dataclass
class Node:
    key: str
    value: Union[list["Node"], str, int] = ""


def _to_value(text: str) -> str | int:
    if _INT_PATTERN.fullmatch(text):
        number = int(text)
        if _INT_MIN <= number <= _INT_MAX:
            return number
    return text


@dataclass
class _Parser:
    parents: list[list[Node]]
    buffer: bytearray = field(default_factory=bytearray)
    expecting_key: bool = True
    is_quoted: bool = False
    next_escaped: bool = False

    def feed(self, data: bytes) -> None:
        for byte in data:
            self._process_byte(byte)

    def _process_byte(self, byte: int) -> None:
        if self.next_escaped:
            if byte not in _ESCAPABLE:
                raise VdfParseError(f"expected escaped char, got {chr(byte)!r} instead")
            self.next_escaped = False
            self.buffer.append(byte)
            return

        if byte == _ESCAPE:
            self.next_escaped = True
            return

        if self.is_quoted:
            self._process_quoted(byte)
        else:
            self._process_unquoted(byte)

    def _process_quoted(self, byte: int) -> None:
        if byte == _QUOTE:
            self.is_quoted = False
            self._save_buffer_and_flip()
        else:
            self.buffer.append(byte)

    def _save_buffer_if_needed(self) -> None:
        if self.buffer:
            self._save_buffer_and_flip()

    def _process_unquoted(self, byte: int) -> None:
        if byte in _WHITESPACE or byte == _QUOTE:
            self.is_quoted = byte == _QUOTE
            self._save_buffer_if_needed()
        elif byte == _GROUP_START:
            self._save_buffer_if_needed()
            self._enter_group()
        elif byte == _GROUP_END:
            self._save_buffer_if_needed()
            self._leave_group()
        else:
            self.buffer.append(byte)

    def _enter_group(self) -> None:
        if self.expecting_key:
            raise VdfParseError("trying to enter group, but we are searching for a key")
        if not self.parents:
            raise VdfParseError("trying to enter group, but no parents are available")
        current_parent = self.parents[-1]
        if not current_parent:
            raise VdfParseError("trying to enter group, but no nodes are available")

        group: list[Node] = []
        current_parent[-1].value = group
        self.parents.append(group)
        self.expecting_key = True

    def _leave_group(self) -> None:
        if not self.expecting_key:
            raise VdfParseError("trying to leave group, but we are searching for a value")
        if not self.parents:
            raise VdfParseError("trying to leave group, but no parents are available")
        self.parents.pop()

    def _save_buffer(self) -> None:
        if not self.parents:
            raise VdfParseError("trying to save buffer, but no parents are available")
        current_parent = self.parents[-1]
        text = bytes(self.buffer).decode("utf-8", errors="replace")
        if self.expecting_key:
            current_parent.append(Node(text, ""))
        else:
            if not current_parent:
                raise VdfParseError("trying to save buffer, but no nodes are available")
            current_parent[-1].value = _to_value(text)
        self.buffer.clear()

    def _save_buffer_and_flip(self) -> None:
        self._save_buffer()
        self.expecting_key = not self.expecting_key


class RegistryFileParser:
    """Holds the node tree of the most recently parsed registry data."""

    def __init__(self) -> None:
        self.root: list[Node] = []

    def parse(self, path: str | os.PathLike[str]) -> None:
        """Parse the file at ``path``; raises ``OSError`` or ``VdfParseError``."""
        with open(path, "rb") as handle:
            data = handle.read()
        self.parse_bytes(data)

    def parse_bytes(self, data: bytes) -> None:
        """Parse ``data``; on error the nodes read so far stay in ``root``."""
        self.root = []
        _Parser(parents=[self.root]).feed(data)


def _format_node(level: int, node: Node) -> str:
    pad = "  " * level
    head = f'{pad}"{node.key}"'
    if isinstance(node.value, list):
        return f"{head} {{\n{_format_list(level + 1, node.value)}{pad}}}\n"
    if isinstance(node.value, str):
        return f'{head} "{node.value}"\n'
    return f"{head} {node.value}\n"


def _format_list(level: int, nodes: list[Node]) -> str:
    return "".join(_format_node(level, node) for node in nodes)


def format_nodes(nodes: list[Node]) -> str:
    """Render a node tree in registry file layout."""
    return _format_list(0, nodes)