"""Numeric ID mappings for the deduction game.

Case data uses string identifiers; the contract and the commitment
operate on u32 IDs. These maps bridge the two. IDs start at 1; the
contract rejects 0 and anything above the per-category maximum.
"""

from __future__ import annotations

SUSPECT_IDS: dict[str, int] = {
    "victor": 1,
    "elena": 2,
    "marcus": 3,
    "isabelle": 4,
    "thomas": 5,
    "priya": 6,
    "james": 7,
    "celeste": 8,
    "ren": 9,
}

WEAPON_IDS: dict[str, int] = {
    "poison_vial": 1,
    "kitchen_knife": 2,
    "candlestick": 3,
    "letter_opener": 4,
    "garden_shears": 5,
}

ROOM_IDS: dict[str, int] = {
    "bedroom": 1,
    "kitchen": 2,
    "study": 3,
    "lounge": 4,
    "garden": 5,
}

SUSPECT_NAMES: dict[int, str] = {v: k for k, v in SUSPECT_IDS.items()}
WEAPON_NAMES: dict[int, str] = {v: k for k, v in WEAPON_IDS.items()}
ROOM_NAMES: dict[int, str] = {v: k for k, v in ROOM_IDS.items()}

# Must match the bounds enforced by the detective contract on accusation.
MAX_SUSPECT_ID = 9
MAX_WEAPON_ID = 5
MAX_ROOM_ID = 5


def case_facts_from_names(suspect: str, weapon: str, room: str) -> tuple[int, int, int]:
    """Convert a named solution to the (suspect, weapon, room) fact tuple."""
    if suspect not in SUSPECT_IDS:
        raise KeyError(f"Unknown suspect: {suspect}")
    if weapon not in WEAPON_IDS:
        raise KeyError(f"Unknown weapon: {weapon}")
    if room not in ROOM_IDS:
        raise KeyError(f"Unknown room: {room}")
    return (SUSPECT_IDS[suspect], WEAPON_IDS[weapon], ROOM_IDS[room])


def case_names_from_facts(suspect_id: int, weapon_id: int, room_id: int) -> tuple[str, str, str]:
    """Reverse lookup of case_facts_from_names."""
    if suspect_id not in SUSPECT_NAMES:
        raise KeyError(f"Unknown suspect ID: {suspect_id}")
    if weapon_id not in WEAPON_NAMES:
        raise KeyError(f"Unknown weapon ID: {weapon_id}")
    if room_id not in ROOM_NAMES:
        raise KeyError(f"Unknown room ID: {room_id}")
    return (SUSPECT_NAMES[suspect_id], WEAPON_NAMES[weapon_id], ROOM_NAMES[room_id])


def validate_case_facts(suspect_id: int, weapon_id: int, room_id: int) -> list[str]:
    """Return range violations the contract would reject at accusation time."""
    errors: list[str] = []
    for label, value, upper in (
        ("suspect_id", suspect_id, MAX_SUSPECT_ID),
        ("weapon_id", weapon_id, MAX_WEAPON_ID),
        ("room_id", room_id, MAX_ROOM_ID),
    ):
        if not 1 <= value <= upper:
            errors.append(f"{label} must be in 1..{upper}, got {value}")
    return errors


def resolve_case_token(token: str, table: dict[str, int]) -> int:
    """Accept either a numeric ID or a name from `table`."""
    key = token.strip().lower()
    # isdecimal, not isdigit: superscripts pass isdigit but int() rejects them
    if key.isdecimal():
        return int(key)
    if key not in table:
        raise KeyError(f"Unknown identifier: {token}")
    return table[key]
