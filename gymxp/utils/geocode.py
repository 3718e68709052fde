# gymxp/utils/geocode.py

import logging

import requests

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
GEOCODER_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"


def reverse_geocode(lat: float, lon: float, url: str = GEOCODER_URL, timeout: float = 5):
    """
    Resuelve país y continente a partir de coordenadas (BigDataCloud, sin API key).
    Ante cualquier fallo devuelve 'Unknown' en ambos campos.
    """
    params = {
        "latitude": lat,
        "longitude": lon,
        "localityLanguage": "en",
    }
    try:
        r = requests.get(url, params=params, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("reverse_geocode(%s, %s) falló: %s", lat, lon, e)
        return {"country": UNKNOWN, "continent": UNKNOWN}

    return {
        "country": (data.get("countryName") or "").strip() or UNKNOWN,
        "continent": (data.get("continent") or "").strip() or UNKNOWN,
    }
