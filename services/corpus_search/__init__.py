"""
MODULE: services.corpus_search
RESPONSIBILITY: Package for corpus search (discover, scan, select best match).
ALLOWED: services.corpus_search.*
FORBIDDEN: Corpus writes.
ERRORS: None.
"""

from .search_pipeline import SearchPipeline, select_best_hit

__all__ = ['SearchPipeline', 'select_best_hit']
