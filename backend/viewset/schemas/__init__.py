from viewset.schemas.person import PersonLookup, PersonRequest, PersonResponse

__all__ = ["PersonLookup", "PersonRequest", "PersonResponse"]
