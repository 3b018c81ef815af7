"""
SERVICES LAYER CONTRACT

This package contains the harvester's pipelines and the coordinator that
drives them.

RULES:
- Implements fetching, extraction, search and index access
- Coordinates between core records and the filesystem / network
- Per-entity and per-file errors are collected, never propagated to abort a run

LAYER RESPONSIBILITY:
- Download-extract pipeline (archive_processing)
- Corpus search pipeline (corpus_search)
- Index access and target resolution

CROSS-LAYER RESTRICTIONS:
- No argument parsing or process exit codes
- No logger configuration (import loguru's logger only)

If you need a command-line flag, you are in the wrong layer.
"""
