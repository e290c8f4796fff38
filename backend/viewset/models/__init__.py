from viewset.models.person import Person

__all__ = ["Person"]
