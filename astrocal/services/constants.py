from enum import Enum


class ZodiacSign(str, Enum):
    ARIES = "Aries"
    TAURUS = "Taurus"
    GEMINI = "Gemini"
    CANCER = "Cancer"
    LEO = "Leo"
    VIRGO = "Virgo"
    LIBRA = "Libra"
    SCORPIO = "Scorpio"
    SAGITTARIUS = "Sagittarius"
    CAPRICORN = "Capricorn"
    AQUARIUS = "Aquarius"
    PISCES = "Pisces"


SIGNS = list(ZodiacSign)

# absolute degree at which each sign band starts
SIGN_OFFSETS = {sign: i * 30.0 for i, sign in enumerate(SIGNS)}

# tracked bodies, in display order
BODIES = ("sun", "moon", "mercury", "venus", "mars", "jupiter", "saturn", "uranus", "neptune", "pluto")
ANGLES = ("ascendant", "midheaven")
REQUIRED_BODIES = ("sun", "moon")

PLANET_SYMBOLS = {
    "sun": "☉",
    "moon": "☽",
    "mercury": "☿",
    "venus": "♀",
    "mars": "♂",
    "jupiter": "♃",
    "saturn": "♄",
    "uranus": "♅",
    "neptune": "♆",
    "pluto": "♇",
    "ascendant": "AC",
    "midheaven": "MC",
}

ANGULAR_HOUSES = frozenset({1, 4, 7, 10})


def display_name(body: str) -> str:
    return body[:1].upper() + body[1:]

