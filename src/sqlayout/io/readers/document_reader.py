"""
Schema document reading for sqlayout.

Reads YAML or XML schema documents into the schema model. The document root
is one of ``schema``, ``table`` or ``view``:

YAML::

    schema:
      table:
        - name: users
          column:
            - {name: id, type: integer, pk: {autoincrement: true}}

XML::

    <schema>
      <table name="users">
        <column name="id" type="integer"><pk autoincrement="true"/></column>
      </table>
    </schema>

The reader checks the grammar only and returns an unvalidated ``Schema``,
``Table`` or ``View``; compilation runs full validation.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from lxml import etree
from pydantic import ValidationError as PydanticValidationError

from sqlayout.infrastructure.schema.core import Schema, Table, View
from sqlayout.infrastructure.schema.exceptions import DocumentError
from sqlayout.utils.logging import get_logger

from .document_models import SchemaDocument, TableDocument, ViewDocument

logger = get_logger(__name__)

Document = Union[Schema, Table, View]

ROOT_ELEMENTS = ("schema", "table", "view")
YAML_SUFFIXES = (".yml", ".yaml")
XML_SUFFIXES = (".xml",)

# Elements that may repeat under a parent; every other child occurs at most once
_REPEATED_CHILDREN = {
    "schema": ("table", "view"),
    "table": ("column",),
    "view": ("column",),
}


def parse_document_data(data: Any, source: Optional[str] = None) -> Document:
    """
    Convert an already-parsed document mapping into the schema model.

    Args:
        data: Mapping with exactly one root key (schema, table or view)
        source: Document path for error messages

    Raises:
        DocumentError: If the mapping does not follow the grammar
    """
    if not isinstance(data, Mapping) or len(data) != 1:
        raise DocumentError(
            f"Document must have exactly one root element out of {list(ROOT_ELEMENTS)}",
            source=source,
        )
    root, body = next(iter(data.items()))
    if root not in ROOT_ELEMENTS:
        raise DocumentError(
            f"Unknown root element '{root}'. Expected one of {list(ROOT_ELEMENTS)}",
            source=source,
        )
    if body is None:
        body = {}

    try:
        if root == "schema":
            document: Document = SchemaDocument.model_validate(body).to_schema()
        elif root == "table":
            document = TableDocument.model_validate(body).to_table()
        else:
            document = ViewDocument.model_validate(body).to_view()
    except PydanticValidationError as e:
        raise DocumentError(f"<{root}> does not match the document grammar: {e}", source=source) from e

    logger.debug("document.parsed", root=root, source=source)
    return document


def parse_yaml_document(text: str, source: Optional[str] = None) -> Document:
    """Parse a YAML schema document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentError(f"Invalid YAML in schema document: {e}", source=source) from e
    return parse_document_data(data, source=source)


def _local_name(element: Any) -> str:
    return etree.QName(element).localname


def _element_to_dict(element: Any, source: Optional[str]) -> Dict[str, Any]:
    tag = _local_name(element)
    repeated = _REPEATED_CHILDREN.get(tag, ())
    data: Dict[str, Any] = {etree.QName(k).localname: v for k, v in element.attrib.items()}
    seen_view = False

    for child in element:
        if not isinstance(child.tag, str):
            # comments and processing instructions
            continue
        child_tag = _local_name(child)
        if tag == "schema":
            if child_tag == "view":
                seen_view = True
            elif child_tag == "table" and seen_view:
                raise DocumentError("<table> elements must precede <view> elements", source=source)
        if child_tag in repeated:
            items: List[Dict[str, Any]] = data.setdefault(child_tag, [])
            items.append(_element_to_dict(child, source))
        elif child_tag in data:
            raise DocumentError(
                f"<{child_tag}> may occur at most once inside <{tag}>", source=source
            )
        else:
            data[child_tag] = _element_to_dict(child, source)
    return data


def parse_xml_document(text: Union[str, bytes], source: Optional[str] = None) -> Document:
    """Parse an XML schema document. Namespaces are ignored."""
    if isinstance(text, str):
        text = text.encode("utf-8")
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        root = etree.fromstring(text, parser=parser)
    except etree.XMLSyntaxError as e:
        raise DocumentError(f"Invalid XML in schema document: {e}", source=source) from e
    return parse_document_data({_local_name(root): _element_to_dict(root, source)}, source=source)


def load_document(path: Union[str, Path]) -> Document:
    """
    Read a schema document from disk, choosing the format from the suffix.

    Args:
        path: ``.yml``/``.yaml`` or ``.xml`` file

    Returns:
        Unvalidated Schema, Table or View

    Raises:
        DocumentError: If the file cannot be read or does not follow the grammar
    """
    document_path = Path(path)
    source = str(document_path)
    suffix = document_path.suffix.lower()
    if suffix not in YAML_SUFFIXES + XML_SUFFIXES:
        raise DocumentError(
            f"Unsupported document type '{suffix}'. Expected .yml, .yaml or .xml",
            source=source,
        )

    try:
        raw = document_path.read_bytes()
    except OSError as e:
        raise DocumentError(f"Failed to read schema document: {e}", source=source) from e

    if suffix in XML_SUFFIXES:
        document = parse_xml_document(raw, source=source)
    else:
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentError(f"Schema document is not valid UTF-8: {e}", source=source) from e
        document = parse_yaml_document(text, source=source)

    logger.info("document.loaded", source=source, kind=type(document).__name__)
    return document


__all__ = [
    "Document",
    "parse_document_data",
    "parse_yaml_document",
    "parse_xml_document",
    "load_document",
]
