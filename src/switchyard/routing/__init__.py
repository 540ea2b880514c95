"""Routing — pattern compiler and insertion-ordered route table.

Patterns are compiled once, at registration, into regular expressions
that must match the whole request path.
"""
