"""
USDA data mapper.

Transforms USDA FoodData Central responses to domain models.
"""

from typing import Any, Dict, List, Optional

from nutrisnap.domain.nutrition.models import NutrientProfile, SearchHit
from nutrisnap.domain.nutrition.resolver import ensure_valid


class USDAMapper:
    """Maps USDA API payloads to domain models."""

    # FDC nutrient ids as reported by /food/{id} (per 100 g)
    NUTRIENT_IDS = {
        1008: "calories",  # Energy (kcal)
        1003: "protein",  # Protein (g)
        1004: "fat",  # Total lipid (fat) (g)
        1005: "carbs",  # Carbohydrate, by difference (g)
    }

    @staticmethod
    def _number(value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)) and value == value:  # NaN check
            return float(value)
        return None

    @staticmethod
    def parse_search_hits(response_data: Dict[str, Any]) -> List[SearchHit]:
        """
        Parse a /foods/search response.

        Entries without fdcId or description are dropped; a numeric score is
        kept as relevance.

        Example:
            >>> hits = USDAMapper.parse_search_hits(
            ...     {
            ...         "foods": [
            ...             {
            ...                 "fdcId": 171077,
            ...                 "description": " Chicken breast, raw ",
            ...                 "dataType": "SR Legacy",
            ...                 "score": 512.3,
            ...             },
            ...             {"description": "no id"},
            ...         ]
            ...     }
            ... )
            >>> assert len(hits) == 1
            >>> assert hits[0].description == "Chicken breast, raw"
        """
        hits: List[SearchHit] = []
        for food in response_data.get("foods") or []:
            fdc_id = food.get("fdcId")
            description = food.get("description")
            if fdc_id is None or not description:
                continue

            data_type = food.get("dataType")
            hits.append(
                SearchHit(
                    external_id=int(fdc_id),
                    description=str(description).strip(),
                    data_source=str(data_type) if data_type is not None else None,
                    relevance_score=USDAMapper._number(food.get("score")),
                )
            )
        return hits

    @staticmethod
    def map_nutrients(food_nutrients: List[Dict[str, Any]]) -> Dict[str, float]:
        """
        Extract the four macros; missing or non-numeric amounts become 0.

        The first entry for a nutrient id wins. Negative amounts are clamped
        to 0.
        """
        values = {name: 0.0 for name in USDAMapper.NUTRIENT_IDS.values()}
        seen = set()
        for entry in food_nutrients:
            nutrient = entry.get("nutrient") or {}
            field_name = USDAMapper.NUTRIENT_IDS.get(nutrient.get("id"))
            if field_name is None or field_name in seen:
                continue
            seen.add(field_name)
            amount = USDAMapper._number(entry.get("amount"))
            if amount is not None:
                values[field_name] = max(0.0, amount)
        return values

    @staticmethod
    def to_nutrient_profile(food_id: int, response_data: Dict[str, Any]) -> NutrientProfile:
        """
        Parse a /food/{id} response.

        ``servingSize`` becomes the reference amount.

        Raises:
            InvalidNutrientsError: If all four macros are non-positive
        """
        nutrients = USDAMapper.map_nutrients(response_data.get("foodNutrients") or [])
        serving_size = USDAMapper._number(response_data.get("servingSize"))

        profile = NutrientProfile(
            calories_per_100g=nutrients["calories"],
            protein_per_100g=nutrients["protein"],
            fat_per_100g=nutrients["fat"],
            carbs_per_100g=nutrients["carbs"],
            reference_amount_g=serving_size,
            description=str(response_data.get("description") or "").strip(),
        )
        return ensure_valid(profile, food_id)
