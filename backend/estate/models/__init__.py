from .records import StoredRecord

__all__ = [
    'StoredRecord',
]
