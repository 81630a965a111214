from .donor import Donor, DonorCreate, DonorMatch, GeoPoint, SearchQuery

__all__ = [
    "Donor",
    "DonorCreate",
    "DonorMatch",
    "GeoPoint",
    "SearchQuery",
]
