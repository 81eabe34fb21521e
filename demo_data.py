import time

COLUMNS = ["name", "position", "country", "flag", "image"]

# 1x1 transparent PNG
PIXEL_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


def demo_rows() -> list[dict]:
    return [
        {"image": PIXEL_PNG, "name": "Oles", "position": "Developer", "country": "China", "flag": "CN"},
        {"name": "Mark", "position": "Designer", "country": "USA", "flag": "US"},
        {"name": "Anna", "position": "Designer", "country": "UK", "flag": "GB"},
        {"name": "Setup", "position": "Designer", "country": "UK"},
    ]


def load_flags(delay: float = 1.0) -> list[dict]:
    """Stands in for a remote lookup; the grid shows placeholders until it returns."""
    time.sleep(delay)
    return [
        {"key": "CN", "value": "China (CN)"},
        {"key": "US", "value": "United States (US)"},
        {"key": "GB", "value": "United Kingdom (GB)"},
    ]
