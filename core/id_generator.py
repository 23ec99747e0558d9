import uuid

# Короткие префиксы сущностей
TYPE_PREFIX = {
    "users": "usr",
    "events": "evt",
    "event_likes": "lik",
}


def generate_random_id(entity: str) -> str:
    """Возвращает непрозрачный id: префикс сущности + 32 hex-символа uuid4."""
    if entity not in TYPE_PREFIX:
        raise ValueError(f"Unknown entity for ID generation: {entity}")
    return f"{TYPE_PREFIX[entity]}_{uuid.uuid4().hex}"
