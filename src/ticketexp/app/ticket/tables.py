"""Lookup tables and constants of the ATH.ENA ticket layout."""

from __future__ import annotations

from dataclasses import dataclass

# --- File ids ---

FILE_IDENTITY = 0x02
FILE_PERSONALIZATION = 0x04
FILE_CASH = 0x05
FILE_EVENT_LOG = 0x06
FILE_TRIP_COUNTER = 0x0C
FILE_BACKUPS = (0x0D, 0x0E, 0x0F)
FILE_PRODUCTS = 0x10
FILE_ADDITIONAL = 0x14
FILE_MASTER = 0x60

FILE_NAMES: dict[int, str] = {
    FILE_IDENTITY: "identity",
    FILE_PERSONALIZATION: "personalization",
    FILE_CASH: "cash balance",
    FILE_EVENT_LOG: "event log",
    FILE_TRIP_COUNTER: "trip counter",
    0x0D: "product backup 1",
    0x0E: "product backup 2",
    0x0F: "product backup 3",
    FILE_PRODUCTS: "product slots",
    FILE_ADDITIONAL: "additional data",
    FILE_MASTER: "master info",
}

# --- Identity / personalization layout ---

CARD_ID_PREFIX = "30010100"
IDENTITY_SERIAL = slice(13, 17)
IDENTITY_CATEGORY = 9
IDENTITY_MIN_LENGTH = 17

PERSONALIZATION_CODE = slice(4, 7)
PERSONALIZATION_CATEGORY = 9
PERSONALIZATION_MIN_LENGTH = 10

CODE_PERSONALISED = "PKP"
CODE_ANONYMOUS = "ZLZ"

KIND_PERSONALISED = "Plastic personalised"
KIND_ANONYMOUS = "Plastic anonymous"

# --- Product slots ---

SLOT_SIZE = 32
MAX_SLOTS = 4

SLOT_STATUS = 0
SLOT_TYPE = 1
SLOT_CODE = 4
SLOT_DATE = 6
SLOT_VALIDITY = 14
SLOT_TRIPS = 16

SLOT_EMPTY = 0xFF

TYPE_PERIOD = 0x31
TYPE_COUNT = 0x32

DEFAULT_VALIDITY_DAYS = 30

# A trip validated at T stays valid until T + 90 minutes.
TRIP_WINDOW_SECONDS = 5400

EVENT_STRIDE = 4

CASH_DIVISOR = 100

# --- User categories ---

UNKNOWN = "Unknown"

USER_CATEGORIES: dict[int, str] = {
    0x00: "Adult",
    0x01: "Adult",
    0x10: "Student",
    0x20: "Senior (65+)",
    0x30: "Adult",
    0x40: "Child",
    0x50: "Disabled",
    0x60: "Military",
    0x70: "Unemployed",
    0x80: "University Student",
}


def category_name(code: int) -> str:
    return USER_CATEGORIES.get(code, UNKNOWN)


# --- Product codes ---

FARE_STANDARD = ""
FARE_REDUCED = "REDUCED FARE"
FARE_AIRPORT = "AIRPORT"


@dataclass(frozen=True)
class ProductKind:
    """What a product code stands for.

    Count-based names get the trip count prefixed when rendered
    (``"10 trips"``).
    """

    name: str
    fare_type: str = FARE_STANDARD

    @property
    def reduced_fare(self) -> bool:
        return self.fare_type == FARE_REDUCED

    @property
    def airport(self) -> bool:
        return self.fare_type == FARE_AIRPORT


PRODUCT_CODES: dict[int, ProductKind] = {
    # count-based
    0x0134: ProductKind("trips", FARE_REDUCED),
    0x013C: ProductKind("trips", FARE_REDUCED),
    0x0140: ProductKind("trips"),
    0x0148: ProductKind("trips"),
    # period passes
    0x025A: ProductKind("MONTHLY", FARE_AIRPORT),
    0x0258: ProductKind("MONTHLY"),
    0x0260: ProductKind("MONTHLY"),
    0x0270: ProductKind("WEEKLY"),
    0x0280: ProductKind("DAILY"),
}
