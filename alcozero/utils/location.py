from typing import Any, Dict, Optional


def parse_location(loc: Any) -> Optional[Dict[str, float]]:
    """
    Normalize a stored location into ``{"lat": .., "lng": ..}``.

    Accepts ``{latitude, longitude}`` (GeoPoint style), ``{lat, lng}`` or a
    ``[lat, lng]`` pair. Anything else yields None.
    """
    if not loc:
        return None

    if isinstance(loc, dict):
        if loc.get("latitude") is not None and loc.get("longitude") is not None:
            return {"lat": float(loc["latitude"]), "lng": float(loc["longitude"])}
        if loc.get("lat") is not None and loc.get("lng") is not None:
            return {"lat": float(loc["lat"]), "lng": float(loc["lng"])}
        return None

    if isinstance(loc, (list, tuple)) and len(loc) >= 2:
        try:
            return {"lat": float(loc[0]), "lng": float(loc[1])}
        except (TypeError, ValueError):
            return None

    return None
