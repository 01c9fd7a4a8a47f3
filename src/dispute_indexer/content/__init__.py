from .resolver import ContentResolver

__all__ = ["ContentResolver"]
