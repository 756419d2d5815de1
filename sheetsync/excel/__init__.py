from .store import InMemorySheetStore, SheetNotFoundError, SheetStore, StoreError, StoreWriteError, WorkbookStore

__all__ = [
    "SheetStore",
    "InMemorySheetStore",
    "WorkbookStore",
    "StoreError",
    "SheetNotFoundError",
    "StoreWriteError",
]
