"""Static cost tables: city benchmarks, country multipliers and currencies."""

# Country → city → monthly USD amounts (accommodation, food, transport, coworking)
CITY_BENCHMARKS: dict[str, dict[str, tuple[int, int, int, int]]] = {
    "Thailand": {
        "Bangkok": (600, 300, 80, 150),
        "Chiang Mai": (400, 250, 50, 120),
        "Phuket": (700, 350, 100, 180),
        "Pattaya": (500, 280, 70, 140),
    },
    "Portugal": {
        "Lisbon": (900, 400, 60, 180),
        "Porto": (700, 350, 50, 150),
        "Faro": (600, 300, 40, 120),
    },
    "Germany": {
        "Berlin": (1000, 450, 80, 200),
        "Munich": (1200, 500, 90, 220),
        "Hamburg": (1100, 480, 85, 210),
        "Cologne": (950, 420, 75, 190),
    },
    "Mexico": {
        "Mexico City": (700, 350, 60, 150),
        "Guadalajara": (600, 300, 50, 130),
        "Playa del Carmen": (800, 400, 70, 180),
        "Tulum": (900, 450, 80, 200),
    },
    "Spain": {
        "Barcelona": (1000, 450, 70, 200),
        "Madrid": (950, 420, 65, 190),
        "Valencia": (700, 350, 50, 150),
        "Seville": (650, 320, 45, 140),
    },
    "Czech Republic": {
        "Prague": (600, 300, 60, 120),
        "Brno": (500, 250, 50, 100),
    },
    "Hungary": {"Budapest": (500, 250, 50, 100)},
    "Estonia": {"Tallinn": (600, 300, 60, 120)},
    "Latvia": {"Riga": (550, 280, 55, 110)},
    "Lithuania": {"Vilnius": (500, 250, 50, 100)},
    "Poland": {
        "Warsaw": (600, 300, 60, 120),
        "Krakow": (550, 280, 55, 110),
    },
    "Romania": {
        "Bucharest": (500, 250, 50, 100),
        "Cluj-Napoca": (450, 220, 45, 90),
    },
    "Bulgaria": {"Sofia": (400, 200, 40, 80)},
    "Croatia": {
        "Zagreb": (600, 300, 60, 120),
        "Split": (700, 350, 70, 140),
    },
    "Slovenia": {"Ljubljana": (650, 320, 65, 130)},
    "Slovakia": {"Bratislava": (550, 280, 55, 110)},
}

# Price level relative to the base estimate; 1.0 when a country is missing.
COUNTRY_COST_MULTIPLIERS: dict[str, float] = {
    "Thailand": 0.6,
    "Vietnam": 0.5,
    "Philippines": 0.5,
    "Indonesia": 0.5,
    "Malaysia": 0.7,
    "Mexico": 0.7,
    "Colombia": 0.6,
    "Argentina": 0.8,
    "Brazil": 0.8,
    "Portugal": 0.8,
    "Spain": 0.9,
    "Germany": 1.2,
    "France": 1.3,
    "Italy": 1.1,
    "Netherlands": 1.4,
    "Switzerland": 1.8,
    "Austria": 1.3,
    "Belgium": 1.2,
    "Denmark": 1.6,
    "Sweden": 1.5,
    "Norway": 1.8,
    "Finland": 1.4,
    "Czech Republic": 0.7,
    "Hungary": 0.6,
    "Poland": 0.7,
    "Romania": 0.5,
    "Bulgaria": 0.4,
    "Croatia": 0.8,
    "Slovenia": 0.8,
    "Slovakia": 0.7,
    "Estonia": 0.8,
    "Latvia": 0.7,
    "Lithuania": 0.6,
}

COUNTRY_CURRENCIES: dict[str, str] = {
    "Thailand": "THB",
    "Vietnam": "VND",
    "Philippines": "PHP",
    "Indonesia": "IDR",
    "Malaysia": "MYR",
    "Mexico": "MXN",
    "Colombia": "COP",
    "Argentina": "ARS",
    "Brazil": "BRL",
    "Portugal": "EUR",
    "Spain": "EUR",
    "Germany": "EUR",
    "France": "EUR",
    "Italy": "EUR",
    "Netherlands": "EUR",
    "Switzerland": "CHF",
    "Austria": "EUR",
    "Belgium": "EUR",
    "Denmark": "DKK",
    "Sweden": "SEK",
    "Norway": "NOK",
    "Finland": "EUR",
    "Czech Republic": "CZK",
    "Hungary": "HUF",
    "Poland": "PLN",
    "Romania": "RON",
    "Bulgaria": "BGN",
    "Croatia": "EUR",
    "Slovenia": "EUR",
    "Slovakia": "EUR",
    "Estonia": "EUR",
    "Latvia": "EUR",
    "Lithuania": "EUR",
}

# Cities pre-populated by the cache warm-up.
POPULAR_CITIES: list[tuple[str, str]] = [
    ("Bangkok", "Thailand"),
    ("Lisbon", "Portugal"),
    ("Berlin", "Germany"),
    ("Mexico City", "Mexico"),
    ("Barcelona", "Spain"),
    ("Prague", "Czech Republic"),
    ("Budapest", "Hungary"),
    ("Tallinn", "Estonia"),
    ("Chiang Mai", "Thailand"),
    ("Medellin", "Colombia"),
    ("Buenos Aires", "Argentina"),
    ("Sofia", "Bulgaria"),
    ("Warsaw", "Poland"),
    ("Krakow", "Poland"),
    ("Bratislava", "Slovakia"),
    ("Zagreb", "Croatia"),
    ("Belgrade", "Serbia"),
    ("Bucharest", "Romania"),
    ("Sarajevo", "Bosnia and Herzegovina"),
    ("Skopje", "North Macedonia"),
]
