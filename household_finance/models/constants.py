"""Domain constants and enumerations for validation.

Kept as plain sets/dicts; routers and services share them.
"""

from typing import Dict, List, Set

# Rate tags: official, parallel ("blue"), MEP/CCL dollar quotes, crypto, manual entry
RATE_TYPES: Set[str] = {"oficial", "blue", "mep", "ccl", "cripto", "manual"}
TRANSACTION_TYPES: Set[str] = {"income", "expense", "investment", "saving"}

# Reference data seeded into an empty database
SEED_CURRENCIES: List[Dict[str, object]] = [
    {"id": "ARS", "name": "Peso argentino", "symbol": "$", "decimal_places": 2},
    {"id": "USD", "name": "US Dollar", "symbol": "US$", "decimal_places": 2},
    {"id": "EUR", "name": "Euro", "symbol": "€", "decimal_places": 2},
    {"id": "BRL", "name": "Real brasileño", "symbol": "R$", "decimal_places": 2},
    {"id": "UYU", "name": "Peso uruguayo", "symbol": "$U", "decimal_places": 2},
    {"id": "CLP", "name": "Peso chileno", "symbol": "CLP$", "decimal_places": 0},
    {"id": "MXN", "name": "Peso mexicano", "symbol": "MX$", "decimal_places": 2},
    {"id": "GBP", "name": "Pound sterling", "symbol": "£", "decimal_places": 2},
]

# Suggested categories per transaction type (entry form options)
CATEGORIES: Dict[str, List[str]] = {
    "income": ["trabajo", "freelance", "negocio", "otros"],
    "expense": [
        "alimentacion",
        "transporte",
        "entretenimiento",
        "servicios",
        "salud",
        "otros",
    ],
    "investment": ["acciones", "criptomonedas", "fondos", "inmuebles", "otros"],
    "saving": ["emergencia", "vacaciones", "jubilacion", "objetivos", "otros"],
}
