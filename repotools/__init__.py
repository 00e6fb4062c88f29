"""Read, write, fuzzy-edit, restore and bash tools for working inside a repository."""

__version__ = "0.1.0"
__all__ = ["base", "textedit", "bash", "read", "edit", "write", "restore_edit", "registry"]