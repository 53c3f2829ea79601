"""
struct-history: follow a struct declaration through a file's git history
and report the distinct field layouts it has had, oldest first.
"""
