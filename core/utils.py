# core/utils.py

def sanitize(data: dict) -> dict:
    """
    Clean a request body before it is stored:
    - Empty or blank strings → None
    - Other strings are stripped
    - Everything else is kept as-is (ids stay strings even when numeric)
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped or None
            continue

        clean[k] = v

    return clean
