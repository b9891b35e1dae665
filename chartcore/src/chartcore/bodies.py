"""Body identifiers, orb modifiers, and sign data."""

from __future__ import annotations

from skyloom.schemas.positions import CelestialBody

from chartcore.angles import normalize

# Bodies checked for aspects (exclude the lunar nodes)
ASPECT_BODIES: list[CelestialBody] = [
    b for b in CelestialBody if b not in (CelestialBody.NORTH_NODE, CelestialBody.SOUTH_NODE)
]

# Bodies compared between two charts
SYNASTRY_BODIES: list[CelestialBody] = [
    CelestialBody.SUN,
    CelestialBody.MOON,
    CelestialBody.MERCURY,
    CelestialBody.VENUS,
    CelestialBody.MARS,
    CelestialBody.JUPITER,
    CelestialBody.SATURN,
    CelestialBody.URANUS,
    CelestialBody.NEPTUNE,
    CelestialBody.PLUTO,
    CelestialBody.ASCENDANT,
]

# Zodiac signs in order
SIGNS = [
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
]

ELEMENTS = ["fire", "earth", "air", "water"]
MODALITIES = ["cardinal", "fixed", "mutable"]

# Mean geocentric motion in degrees/day, used to size transit windows
DAILY_MOTION: dict[CelestialBody, float] = {
    CelestialBody.SUN: 0.9856,
    CelestialBody.MOON: 13.1764,
    CelestialBody.MERCURY: 1.383,
    CelestialBody.VENUS: 1.2,
    CelestialBody.MARS: 0.524,
    CelestialBody.JUPITER: 0.083,
    CelestialBody.SATURN: 0.034,
    CelestialBody.URANUS: 0.012,
    CelestialBody.NEPTUNE: 0.006,
    CelestialBody.PLUTO: 0.004,
    CelestialBody.NORTH_NODE: 0.053,
    CelestialBody.SOUTH_NODE: 0.053,
    CelestialBody.CHIRON: 0.02,
    CelestialBody.LILITH: 0.111,
}

# Orb modifiers by body type
# Luminaries (Sun, Moon) and angles get full orb; outer planets get reduced
ORB_MODIFIERS: dict[CelestialBody, float] = {
    CelestialBody.SUN: 1.0,
    CelestialBody.MOON: 1.0,
    CelestialBody.MERCURY: 0.8,
    CelestialBody.VENUS: 0.8,
    CelestialBody.MARS: 0.8,
    CelestialBody.JUPITER: 0.7,
    CelestialBody.SATURN: 0.7,
    CelestialBody.URANUS: 0.6,
    CelestialBody.NEPTUNE: 0.6,
    CelestialBody.PLUTO: 0.6,
    CelestialBody.LILITH: 0.5,
    CelestialBody.CHIRON: 0.5,
    CelestialBody.NORTH_NODE: 0.5,
    CelestialBody.SOUTH_NODE: 0.5,
    CelestialBody.ASCENDANT: 1.0,
    CelestialBody.MIDHEAVEN: 1.0,
}


def parse_body(name: str | CelestialBody) -> CelestialBody:
    """Resolve a body identifier, accepting 'Sun', 'north node', 'north_node'."""
    if isinstance(name, CelestialBody):
        return name
    key = str(name).strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return CelestialBody(key)
    except ValueError:
        raise ValueError(f"Unknown celestial body: {name!r}") from None


def longitude_to_sign(longitude: float) -> tuple[str, float]:
    """Convert ecliptic longitude to sign and degree within sign."""
    longitude = normalize(longitude)
    sign_index = int(longitude // 30.0)
    degree = longitude - (sign_index * 30.0)
    return SIGNS[sign_index], degree


def sign_element(sign: str) -> str:
    """Element of a sign (Aries fire, Taurus earth, ...)."""
    return ELEMENTS[SIGNS.index(sign) % 4]


def sign_modality(sign: str) -> str:
    """Modality of a sign (Aries cardinal, Taurus fixed, ...)."""
    return MODALITIES[SIGNS.index(sign) % 3]


def orb_modifier(body1: CelestialBody, body2: CelestialBody) -> float:
    """Average of the two body modifiers."""
    return (ORB_MODIFIERS.get(body1, 0.7) + ORB_MODIFIERS.get(body2, 0.7)) / 2
