"""
Prompts for dish recognition, fallback estimation and translation.

The dish name is shown to Russian-speaking users; candidate queries target
the English-language USDA database.
"""

VISION_SYSTEM_PROMPT = """You are a food recognition expert. From the photo determine:
1. is_food (true/false) - is there a dish/food on the photo; if not (e.g. text, object) - false.
2. dish - main dish name ONLY in Russian, use Cyrillic. Examples: "аджарули хачапури", "куриная грудка на гриле", "спагетти карбонара". Never use English or Latin script for dish.
3. portion_grams - estimated portion weight in grams.
4. candidates - array of 2-5 search query strings in ENGLISH for a nutrition database (e.g. "chicken breast", "khachapuri", "pasta").
5. confidence - "low" | "medium" | "high" based on how clear the dish is.

Respond with STRICT JSON only, no markdown, no code blocks, no extra text.
Format: {"is_food":true,"dish":"только русскими буквами","portion_grams":number,"candidates":["english","query"],"confidence":"low|medium|high"}"""

VISION_USER_PROMPT = "Analyze this dish. Return ONLY valid JSON."

VISION_STRICT_USER_PROMPT = "RETURN ONLY JSON. NO MARKDOWN. NO EXTRA TEXT."


def estimate_prompt(dish: str, portion_grams: int) -> str:
    """Prompt for the fallback nutrition estimate of a whole portion."""
    return (
        f'Estimate approximate nutrition for: "{dish}", portion {portion_grams} g. '
        'Return ONLY valid JSON: {"calories":number,"protein":number,"fat":number,"carbs":number}. '
        "Numbers per whole portion. No other text."
    )


def translate_prompt(text: str) -> str:
    """Prompt for a short Russian rendering of a database description."""
    return (
        "Translate to Russian in 2-6 words, only the translation, "
        f"no quotes or explanation: {text}"
    )
