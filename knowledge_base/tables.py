"""
knowledge_base/tables.py
Hand-curated 2026 rate and distance tables.

Coverage is partial by nature: unmapped lanes and places fall back to the
documented defaults (``unknown`` region rows, long-distance parcel fallback)
instead of raising.
"""

# ─────────────────────────────────────────────────────────────────────────────
# Domestic parcel lanes: city pair → base NGN for parcels ≤1 kg
# Lookups are order-insensitive; see regions.lane_base_ngn.
# ─────────────────────────────────────────────────────────────────────────────
PARCEL_LANES_NGN: dict[tuple[str, str], float] = {
    # Intra-city
    ("abuja", "abuja"): 2_500,
    ("kano", "kano"):   2_500,
    ("lagos", "lagos"): 3_500,
    ("ph", "ph"):       2_800,

    # Lagos hub
    ("abuja", "lagos"):    5_750,
    ("abeokuta", "lagos"): 3_800,
    ("ibadan", "lagos"):   4_000,
    ("lagos", "ph"):       9_500,
    ("lagos", "kano"):    12_000,
    ("benin", "lagos"):    7_500,
    ("lagos", "warri"):    9_000,
    ("enugu", "lagos"):   11_000,
    ("lagos", "owerri"):  10_500,
    ("lagos", "calabar"): 13_000,

    # Abuja hub
    ("abuja", "kano"):    6_500,
    ("abuja", "ph"):     10_500,
    ("abuja", "enugu"):   8_500,
    ("abuja", "kaduna"):  5_500,
    ("abuja", "jos"):     6_000,
    ("abuja", "owerri"):  9_500,

    # South-South / South-East
    ("benin", "ph"):   7_000,
    ("enugu", "ph"):   7_500,
    ("ph", "warri"):   6_500,
    ("calabar", "ph"): 8_000,

    # North
    ("kaduna", "kano"):    4_000,
    ("jos", "kano"):       5_500,
    ("kano", "maiduguri"): 9_000,
    ("kano", "sokoto"):    7_500,
}

# Known road distances (km) between canonical domestic cities
ROAD_DISTANCES_KM: dict[tuple[str, str], float] = {
    ("lagos", "abuja"):    760,
    ("lagos", "kano"):    1000,
    ("lagos", "ph"):       600,
    ("lagos", "abeokuta"):  90,
    ("lagos", "ibadan"):   130,
    ("lagos", "benin"):    320,
    ("lagos", "warri"):    430,
    ("lagos", "enugu"):    550,
    ("lagos", "owerri"):   510,
    ("lagos", "calabar"):  680,
    ("abuja", "kano"):     320,
    ("abuja", "ph"):       580,
    ("abuja", "enugu"):    430,
    ("abuja", "kaduna"):   190,
    ("abuja", "jos"):      330,
    ("abuja", "owerri"):   540,
    ("ph", "benin"):       220,
    ("ph", "enugu"):       290,
    ("ph", "warri"):       200,
    ("ph", "calabar"):     260,
    ("kaduna", "kano"):    195,
    ("jos", "kano"):       280,
    ("kano", "maiduguri"): 650,
    ("kano", "sokoto"):    530,
}

# City centroids (lat, lng), checked in order against the lowercased place
CITY_COORDS: list[tuple[str, float, float]] = [
    (r"\blagos\b",                               6.5244, 3.3792),
    (r"\babuja\b",                               9.0765, 7.4951),
    (r"\bkano\b",                               12.0022, 8.5920),
    (r"\bogun\b|\babeokuta\b",                   7.1452, 3.3619),
    (r"\bport\s*harcourt\b|\bportharcourt\b|\bph\b", 4.8156, 7.0498),
    (r"\bibadan\b",                              7.3775, 3.9470),
    (r"\benugu\b",                               6.4584, 7.5464),
    (r"\bwarri\b",                               5.5167, 5.7500),
    (r"\bcalabar\b",                             4.9517, 8.3220),
    (r"\bkaduna\b",                             10.5105, 7.4165),
    (r"\bjos\b",                                 9.8965, 8.8583),
    (r"\bowerri\b",                              5.4836, 7.0333),
    (r"\bbenin\b",                               6.3350, 5.6270),
]

# ─────────────────────────────────────────────────────────────────────────────
# Ocean freight base (USD) by origin region → Nigeria
# ─────────────────────────────────────────────────────────────────────────────
OCEAN_BASE_USD: dict[str, dict[str, float]] = {
    "europe":     {"20ft": 1_500, "40ft": 2_300, "40hc": 2_500},
    "usa":        {"20ft": 2_500, "40ft": 4_000, "40hc": 4_300},
    "asia":       {"20ft": 2_000, "40ft": 3_200, "40hc": 3_500},
    "middleeast": {"20ft": 1_800, "40ft": 2_900, "40hc": 3_100},
    "africa":     {"20ft": 1_200, "40ft": 1_900, "40hc": 2_100},
    "nigeria":    {"20ft":   900, "40ft": 1_400, "40hc": 1_550},   # coastal / cabotage
    "unknown":    {"20ft": 2_150, "40ft": 3_300, "40hc": 3_600},
}

# Air freight USD per chargeable kg by origin region
AIR_RATE_USD_PER_KG: dict[str, dict[str, float]] = {
    "europe":     {"standard": 4.75, "express":  8.5},
    "usa":        {"standard": 6.50, "express": 11.5},
    "asia":       {"standard": 5.25, "express":  9.5},
    "middleeast": {"standard": 4.50, "express":  8.0},
    "africa":     {"standard": 3.75, "express":  7.0},
    "nigeria":    {"standard": 3.50, "express":  6.5},   # domestic air
    "unknown":    {"standard": 5.75, "express": 10.0},
}

# International parcel base (USD): (max chargeable kg, base); last row open-ended
PARCEL_INTL_BRACKETS_USD: list[tuple[float, float]] = [
    (0.5,  35),
    (1,    50),
    (5,    65),
    (10,  115),
    (30,  215),
    (float("inf"), 350),
]

# Multiplier on the international parcel base, keyed by origin region
PARCEL_REGIONAL_ADJUSTMENT: dict[str, float] = {
    "usa":        1.30,
    "europe":     1.00,
    "asia":       1.10,
    "middleeast": 1.05,
    "africa":     0.90,
    "nigeria":    0.80,
}

# Ground per-km (NGN)
GROUND_INTRA_CITY_NGN_PER_KM: dict[str, float] = {
    "lagos": 350,
    "abuja": 300,
    "kano":  280,
    "ph":    300,
}

# (max km, NGN per km); shorter trips cost more per km
GROUND_DISTANCE_TIERS: list[tuple[float, float]] = [
    (100, 350),
    (300, 300),
    (600, 260),
    (float("inf"), 230),
]
