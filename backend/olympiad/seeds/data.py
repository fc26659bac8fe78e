DEFAULT_ADMIN = {
    "email": "admin@olympiad.local",
    "password": "Admin@2024!",
    "name": "Olympiad Admin",
}

DEMO_YEAR = 2024

# (name, abbreviation, color)
TEAMS = [
    ("Red Rockets", "RED", "#dc2626"),
    ("Blue Barracudas", "BLU", "#2563eb"),
    ("Green Geckos", "GRN", "#16a34a"),
    ("Gold Griffins", "GLD", "#ca8a04"),
    ("Purple Pythons", "PUR", "#9333ea"),
    ("Orange Otters", "ORG", "#ea580c"),
    ("Silver Sharks", "SLV", "#6b7280"),
    ("Black Bears", "BLK", "#111827"),
]

PLAYERS_PER_TEAM = 3

FIRST_NAMES = [
    "Alex", "Sam", "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Jamie",
    "Avery", "Quinn", "Drew", "Reese", "Skyler", "Rowan", "Emerson", "Parker",
    "Hayden", "Kendall", "Logan", "Peyton", "Sage", "Blake", "Cameron", "Dakota",
]

LAST_NAMES = [
    "Smith", "Johnson", "Brown", "Davis", "Wilson", "Moore", "Clark", "Lewis",
    "Walker", "Hall", "Young", "King", "Wright", "Scott", "Green", "Baker",
]

# One event of each kind
EVENTS = [
    {
        "name": "Beer Pong",
        "abbreviation": "BP",
        "symbol": "🏓",
        "type": "tournament",
        "location": "Main Hall",
        "duration_minutes": 120,
        "points": [100, 75, 50, 25],
    },
    {
        "name": "Trivia Night",
        "abbreviation": "TRV",
        "symbol": "🧠",
        "type": "scored",
        "location": "Lounge",
        "duration_minutes": 90,
        "points": [80, 60, 40, 20],
    },
    {
        "name": "Tug of War",
        "abbreviation": "TOW",
        "symbol": "🪢",
        "type": "combined_team",
        "location": "Field 1",
        "duration_minutes": 30,
        "points": [50, 50],
    },
]
