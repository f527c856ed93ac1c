from stockroom.models.record import CollectionRecord, CollectionState

__all__ = ["CollectionRecord", "CollectionState"]
