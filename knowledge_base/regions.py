"""
knowledge_base/regions.py
Place-name classifiers: domestic detection, world region, canonical city.

Pure string functions with no I/O, shared by the calculators and the
geo resolver.
"""
import re
from typing import Optional

from knowledge_base.tables import CITY_COORDS, PARCEL_LANES_NGN, ROAD_DISTANCES_KM
from query_processor.models import LatLng

REGIONS = ("nigeria", "africa", "asia", "middleeast", "europe", "usa", "unknown")

_DOMESTIC_RE = re.compile(
    r"\b(lagos|abuja|kano|ogun|abeokuta|port\s*harcourt|portharcourt|ph|apapa|tin\s*can|"
    r"ibadan|benin\s*city|warri|enugu|owerri|calabar|kaduna|jos|maiduguri|sokoto|zaria|"
    r"ilorin|ado\s*ekiti|akure)\b"
)

# Ordered: first match wins, so domestic is always checked before the world regions
_REGION_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("africa", re.compile(
        r"\b(africa|ghana|kenya|ethiopia|south africa|johannesburg|cairo|egypt|morocco|tanzania|"
        r"uganda|senegal|ivory coast|cameroon|accra|nairobi|addis ababa|dakar|abidjan|douala)\b"
    )),
    ("asia", re.compile(
        r"\b(china|shanghai|shenzhen|guangzhou|hong kong|singapore|vietnam|asia|japan|tokyo|osaka|"
        r"seoul|korea|taiwan|taipei|bangkok|thailand|malaysia|kuala lumpur|indonesia|jakarta|"
        r"philippines|manila|india|mumbai|delhi|chennai)\b"
    )),
    ("middleeast", re.compile(
        r"\b(middle east|uae|dubai|abu dhabi|saudi|riyadh|jeddah|kuwait|qatar|doha|bahrain|oman|"
        r"muscat|jordan|amman|beirut|lebanon|israel|tel aviv)\b"
    )),
    ("europe", re.compile(
        r"\b(europe|uk|united kingdom|london|germany|berlin|france|paris|netherlands|amsterdam|"
        r"belgium|brussels|spain|madrid|italy|rome|poland|warsaw|sweden|stockholm|norway|oslo|"
        r"denmark|copenhagen|switzerland|zurich|austria|vienna|portugal|lisbon|ireland|dublin)\b"
    )),
    ("usa", re.compile(
        r"\b(usa|u\.s\.|united states|america|new york|los angeles|lax|jfk|chicago|houston|dallas|"
        r"miami|atlanta|seattle|san francisco|boston|canada|toronto|vancouver|montreal|mexico|"
        r"mexico city)"
        r"(?![a-z])"
    )),
]

_CITY_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("lagos",     re.compile(r"\blagos\b")),
    ("abuja",     re.compile(r"\babuja\b")),
    ("kano",      re.compile(r"\bkano\b")),
    ("ph",        re.compile(r"\bport\s*harcourt\b|\bportharcourt\b|\bph\b")),
    ("abeokuta",  re.compile(r"\babeokuta\b|\bogun\b")),
    ("ibadan",    re.compile(r"\bibadan\b")),
    ("benin",     re.compile(r"\bbenin\s*city\b|\bbenin\b")),
    ("warri",     re.compile(r"\bwarri\b")),
    ("enugu",     re.compile(r"\benugu\b")),
    ("owerri",    re.compile(r"\bowerri\b")),
    ("calabar",   re.compile(r"\bcalabar\b")),
    ("kaduna",    re.compile(r"\bkaduna\b")),
    ("jos",       re.compile(r"\bjos\b")),
    ("maiduguri", re.compile(r"\bmaiduguri\b")),
    ("sokoto",    re.compile(r"\bsokoto\b")),
]

_COORD_PATTERNS: list[tuple[re.Pattern, LatLng]] = [
    (re.compile(pattern), LatLng(lat, lng)) for pattern, lat, lng in CITY_COORDS
]


def _norm(value: Optional[str]) -> str:
    return str(value or "").lower().strip()


def is_domestic(value: Optional[str]) -> bool:
    v = _norm(value)
    if not v:
        return False
    return "nigeria" in v or bool(_DOMESTIC_RE.search(v))


def detect_region(value: Optional[str]) -> str:
    v = _norm(value)
    if not v:
        return "unknown"
    if is_domestic(v):
        return "nigeria"
    for region, pattern in _REGION_PATTERNS:
        if pattern.search(v):
            return region
    return "unknown"


def resolve_domestic_city(value: Optional[str]) -> str:
    """Canonical city key used by the lane and distance tables, or ''."""
    v = _norm(value)
    for key, pattern in _CITY_PATTERNS:
        if pattern.search(v):
            return key
    return ""


def resolve_domestic_coords(value: Optional[str]) -> Optional[LatLng]:
    v = _norm(value)
    if not v:
        return None
    for pattern, coords in _COORD_PATTERNS:
        if pattern.search(v):
            return coords
    return None


def _pair_lookup(table: dict[tuple[str, str], float], a: str, b: str) -> Optional[float]:
    if not a or not b:
        return None
    if (a, b) in table:
        return table[(a, b)]
    return table.get((b, a))


def lane_base_ngn(origin_city: str, dest_city: str) -> Optional[float]:
    return _pair_lookup(PARCEL_LANES_NGN, origin_city, dest_city)


def lane_distance_km(origin_city: str, dest_city: str) -> Optional[float]:
    return _pair_lookup(ROAD_DISTANCES_KM, origin_city, dest_city)
