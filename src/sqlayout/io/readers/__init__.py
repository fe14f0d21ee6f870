"""Schema document readers (YAML and XML front-ends)."""

from .document_reader import (
    Document,
    load_document,
    parse_document_data,
    parse_xml_document,
    parse_yaml_document,
)

__all__ = [
    "Document",
    "load_document",
    "parse_document_data",
    "parse_xml_document",
    "parse_yaml_document",
]
