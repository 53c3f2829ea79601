"""
Analysis package for struct-history.

This package contains the structural parser that reduces a declaration
snippet to a field signature, and the field level comparison used to
explain how consecutive signatures differ.
"""
