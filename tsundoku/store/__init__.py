from .base import BookStore
from .firestore_store import FirestoreBookStore

__all__ = ["BookStore", "FirestoreBookStore"]
