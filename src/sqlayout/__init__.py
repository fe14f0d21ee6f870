"""
sqlayout - SQLite schema modelling and DDL compilation.

Build a schema with ``SchemaBuilder`` or read it from a YAML/XML document,
then compile it to an ordered list of CREATE TABLE / CREATE VIEW statements
that SQLite executes without foreign key ordering errors.
"""

__version__ = "0.1.0"
