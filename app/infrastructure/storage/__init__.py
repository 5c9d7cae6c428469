from .local_storage import IncomingFile, LocalFileStorage, StoredFile

__all__ = ["IncomingFile", "LocalFileStorage", "StoredFile"]
