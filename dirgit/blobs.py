"""Content-addressed blob storage."""

import hashlib

from .errors import NotFound
from .kv.base import KVStore

BLOB_KEY = "__blob__%s"


def digest(data: bytes) -> str:
    """Return the 40-hex-char SHA-1 digest of ``data``.

    Used for both blob and commit identities.
    """
    return hashlib.sha1(data).hexdigest()


class BlobStore:
    """Immutable file contents keyed by their digest.

    Storing identical bytes twice is a no-op, so a file that does not
    change between commits costs nothing.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    def put(self, data: bytes) -> str:
        blob_id = digest(data)
        key = BLOB_KEY % blob_id
        if key not in self.store:
            self.store.set(key, data)
        return blob_id

    def get(self, blob_id: str) -> bytes:
        data = self.store.get(BLOB_KEY % blob_id)
        if data is None:
            raise NotFound(f"No blob with id {blob_id} exists.")
        return data

    def __contains__(self, blob_id: str) -> bool:
        return BLOB_KEY % blob_id in self.store
