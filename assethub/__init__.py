"""AssetHub favourites service."""
