"""Structural XML parsing for response documents (no XML-RPC semantics)."""

from __future__ import annotations

from dataclasses import dataclass

from lxml import etree

from .errors import MalformedDocument


def _new_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        huge_tree=False,
    )


def children(element: etree._Element) -> list[etree._Element]:
    """Child elements only; comments and processing instructions are skipped."""
    return [child for child in element if isinstance(child.tag, str)]


def text_of(element: etree._Element) -> str:
    return element.text or ""


@dataclass(slots=True)
class XmlDocument:
    """Parsed document with path queries rooted above the document element."""

    root: etree._Element

    def _resolve(self, path: str) -> tuple[bool, str]:
        head, _, rest = path.strip("/").partition("/")
        return head == self.root.tag, rest

    def find(self, path: str) -> etree._Element | None:
        """First element matching ``path`` (``root/child/...``), or None."""
        matches_root, rest = self._resolve(path)
        if not matches_root:
            return None
        if not rest:
            return self.root
        return self.root.find(rest)

    def find_all(self, path: str) -> list[etree._Element]:
        matches_root, rest = self._resolve(path)
        if not matches_root:
            return []
        if not rest:
            return [self.root]
        return list(self.root.findall(rest))


def parse_document(data: bytes | bytearray | str) -> XmlDocument:
    """Parse raw response bytes into an element tree."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not bytes(data).strip():
        raise MalformedDocument("failed to reconstruct XML DOM: document is empty")
    try:
        root = etree.fromstring(bytes(data), _new_parser())
    except etree.XMLSyntaxError as exc:
        raise MalformedDocument(f"failed to reconstruct XML DOM: {exc}") from exc
    if root is None:
        raise MalformedDocument("failed to reconstruct XML DOM: document is empty")
    return XmlDocument(root)
