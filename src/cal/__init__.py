"""repository analysis layer"""
from .repo_scanner import RepositoryScanner, walk_source_files

__all__ = [
    "RepositoryScanner",
    "walk_source_files",
]
