IMAGE_CATEGORIES = [
    "paintings",
    "photography",
    "digital_art",
    "sculpture",
    "drawings",
    "prints",
    "mixed_media",
    "other",
]
