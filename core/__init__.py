"""
CORE LAYER CONTRACT

This package contains the data structures and the error hierarchy shared by
every other layer of the harvester.

RULES:
- Contains fundamental building blocks for all layers
- Defines dataclasses, enums and exceptions
- No business logic implementation
- No infrastructure dependencies

LAYER RESPONSIBILITY:
- HarvesterError hierarchy
- Entity, fetch, extraction and search records

CROSS-LAYER RESTRICTIONS:
- No imports from services, config or utils
- No filesystem, OS, or network access

If you need concrete implementations, you are in the wrong layer.
"""
