from healthscan.ingredients_logic.ingredient_matcher import fold

DEFAULT_CATEGORY = "other"

# Table order breaks ties: the first category with a keyword in the text wins.
PRODUCT_CATEGORIES = {
    "alimento": ["ingredientes", "alimento", "comida", "nutritiva", "calorias", "ingredients", "food", "calories"],
    "bebida": ["bebida", "liquido", "refresco", "jugo", "agua", "beverage", "drink", "juice"],
    "cosmético": ["cosmético", "crema", "loción", "shampoo", "maquillaje", "cosmetic", "cream", "lotion"],
    "medicamento": ["medicamento", "medicina", "farmaco", "comprimido", "medicine", "tablet"],
    "suplemento": ["suplemento", "vitamina", "mineral", "nutricional", "supplement", "vitamin"],
}


def detect_product_category(text: str, categories=None) -> str:
    """Coarse product category from the full label text, or "other"."""
    categories = PRODUCT_CATEGORIES if categories is None else categories
    text_folded = fold(text)
    if not text_folded:
        return DEFAULT_CATEGORY

    for category, keywords in categories.items():
        if any(fold(keyword) in text_folded for keyword in keywords):
            return category
    return DEFAULT_CATEGORY
