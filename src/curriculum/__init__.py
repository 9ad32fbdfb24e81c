"""
Curriculum progression engine.

Pure domain logic (ordering, diagram grading, progression state) behind
abstract repositories; storage and HTTP live in the `api` package.
"""
