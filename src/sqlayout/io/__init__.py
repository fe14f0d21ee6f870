"""
I/O layer for sqlayout.

- readers: schema documents (YAML, XML) into the schema model
- loader: applying compiled DDL to a live database
"""
