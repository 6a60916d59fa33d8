# Random name/address values for the "generate for me" options on the order form.

from __future__ import annotations

import random
from typing import Dict, Optional

FIRST_NAMES = [
    "James", "John", "Robert", "Michael", "William", "David", "Richard", "Joseph", "Thomas", "Christopher",
    "Mary", "Patricia", "Jennifer", "Linda", "Elizabeth", "Barbara", "Susan", "Jessica", "Sarah", "Karen",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
    "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Martin",
]

STREET_NAMES = [
    "Main", "Oak", "Maple", "Cedar", "Elm", "Washington", "Lake", "Hill", "Park", "Pine",
    "First", "Second", "Third", "Fourth", "Fifth", "Sunset", "River", "Forest", "Spring", "Valley",
]

STREET_TYPES = ["St", "Ave", "Blvd", "Dr", "Ln", "Rd", "Way", "Ct", "Pl"]

CITIES = [
    "Springfield", "Franklin", "Clinton", "Madison", "Georgetown", "Salem", "Fairview", "Riverside",
    "Arlington", "Manchester", "Oxford", "Clayton", "Milton", "Newport", "Ashland", "Burlington",
    "Greenville", "Bristol", "Lexington", "Auburn",
]

US_STATES = [
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
]


def generate_full_name(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def generate_address(rng: Optional[random.Random] = None) -> Dict[str, str]:
    rng = rng or random
    street = f"{rng.randint(100, 9999)} {rng.choice(STREET_NAMES)} {rng.choice(STREET_TYPES)}"
    return {
        "street": street,
        "city": rng.choice(CITIES),
        "state": rng.choice(US_STATES),
        "zip": str(rng.randint(10000, 99999)),
    }
