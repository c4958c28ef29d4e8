#neighbourly/services/geo.py
import logging
import requests
from neighbourly.core.config import settings
from neighbourly.core.errors import GeoUnavailable

logger = logging.getLogger(__name__)

def _get(path: str, params: dict):
    """GET a JSON document from the geo service; transport and HTTP errors become GeoUnavailable."""
    if not settings.lambda_base_url:
        raise GeoUnavailable("LAMBDA_BASE_URL is not configured")
    url = f"{settings.lambda_base_url.rstrip('/')}{path}"
    try:
        r = requests.get(url, params=params, timeout=settings.geo_timeout_seconds)
        r.raise_for_status()
        return r.json()
    except (requests.RequestException, ValueError) as e:
        raise GeoUnavailable(f"GET {path} failed: {e}") from e

def meshblocks_in_bounds(params: dict) -> dict:
    """Feature collection of mesh blocks inside the bounding box given by `params` (passed through)."""
    data = _get("/territories/bounds", params)
    return data if isinstance(data, dict) else {}

def postcode_bounds(pcode: str) -> dict | None:
    data = _get("/territories/postcode", {"pcode": pcode})
    if isinstance(data, list):
        return data[0] if data else None
    return data or None
