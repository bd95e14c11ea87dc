"""Structured-output schemas for the three detail levels.

Each builder returns a Gemini ``responseSchema`` type descriptor whose
field descriptions are written in the requested language. The descriptor
field names match the camelCase aliases of the pydantic models in
``schemas/``, so a conforming response validates without remapping.
"""

from __future__ import annotations

from typing import Any

from ...constants import (
    DIFFICULTY_LABELS,
    FREE_PRODUCTS_PER_SECTOR,
    FREE_SECTOR_SUGGESTIONS,
    MAX_PRODUCTS,
    MODE_CREATIVE,
    PREMIUM_PRODUCTS_PER_SECTOR,
    PREMIUM_SECTOR_SUGGESTIONS,
    TIER_PREMIUM,
)

SchemaDescriptor = dict[str, Any]


# ── Tier → product counts ────────────────────────────────────────────────

def _clamp(count: int) -> int:
    return max(1, min(count, MAX_PRODUCTS))


def products_per_sector(tier: str) -> int:
    """Number of trending products requested per sector in a report."""
    free = _clamp(FREE_PRODUCTS_PER_SECTOR)
    if tier == TIER_PREMIUM:
        return max(free, _clamp(PREMIUM_PRODUCTS_PER_SECTOR))
    return free


def suggestions_per_sector(tier: str) -> int:
    """Number of product suggestions requested in a sector analysis."""
    free = _clamp(FREE_SECTOR_SUGGESTIONS)
    if tier == TIER_PREMIUM:
        return max(free, _clamp(PREMIUM_SECTOR_SUGGESTIONS))
    return free


# ── Descriptor helpers ───────────────────────────────────────────────────

def _string(description: str) -> SchemaDescriptor:
    return {"type": "STRING", "description": description}


def _number(description: str) -> SchemaDescriptor:
    return {"type": "NUMBER", "description": description}


def _integer(description: str) -> SchemaDescriptor:
    return {"type": "INTEGER", "description": description}


def _string_list(description: str) -> SchemaDescriptor:
    return {"type": "ARRAY", "description": description, "items": {"type": "STRING"}}


# ── Localized field descriptions ─────────────────────────────────────────

_DESCRIPTIONS: dict[str, dict[str, str]] = {
    "en": {
        "sectors": "List of consumer sectors.",
        "sectorName": "Sector name (e.g. technology, fashion).",
        "products": "The {count} most demanded products in this sector.",
        "name": "Product name.",
        "demandRate": "Estimated demand rate in percent (e.g. 15 for 15%).",
        "regions": "World regions where demand will be strongest.",
        "reasons": "Key demand drivers (economic, seasonal, cultural, media).",
        "profitabilityScore": "Profitability score for a reseller, integer from 0 to 10.",
        "suppliers": "Potential suppliers, wholesalers or marketplaces.",
        "globalAnalysis": "Global analysis of at most 150 words summarising market dynamics and the most promising sectors.",
        "inDepthAnalysis": "In-depth analysis of the sector: dynamics, consumer behaviour, opportunities and threats.",
        "productSuggestions": "The {count} most promising products to launch or resell in this sector.",
        "description": "Short description of the product.",
        "targetAudience": "Target audience.",
        "sellingPoints": "Key selling points.",
        "priceRange": "Recommended retail price range.",
        "marketEntryDifficulty": "Market entry difficulty.",
        "productName": "Product name.",
        "marketAnalysis": "Detailed market analysis for the product.",
        "keyRegions": "Regions with the strongest demand.",
        "risks": "Main risks for a seller entering this market.",
    },
    "fr": {
        "sectors": "Liste des secteurs de consommation.",
        "sectorName": "Nom du secteur (ex: technologie, mode).",
        "products": "Les {count} produits les plus demandés dans ce secteur.",
        "name": "Nom du produit.",
        "demandRate": "Taux de demande estimé en pourcentage (ex: 15 pour 15%).",
        "regions": "Régions du monde où la demande sera la plus forte.",
        "reasons": "Raisons clés de la demande (facteurs économiques, saisonniers, culturels, médiatiques).",
        "profitabilityScore": "Score de rentabilité pour un revendeur, entier de 0 à 10.",
        "suppliers": "Fournisseurs, grossistes ou places de marché potentiels.",
        "globalAnalysis": "Analyse globale de 150 mots maximum résumant les dynamiques du marché et les secteurs porteurs.",
        "inDepthAnalysis": "Analyse approfondie du secteur : dynamiques, comportements des consommateurs, opportunités et menaces.",
        "productSuggestions": "Les {count} produits les plus prometteurs à lancer ou revendre dans ce secteur.",
        "description": "Courte description du produit.",
        "targetAudience": "Public cible.",
        "sellingPoints": "Arguments de vente clés.",
        "priceRange": "Fourchette de prix de vente conseillée.",
        "marketEntryDifficulty": "Difficulté d'entrée sur le marché.",
        "productName": "Nom du produit.",
        "marketAnalysis": "Analyse de marché détaillée du produit.",
        "keyRegions": "Régions à plus forte demande.",
        "risks": "Principaux risques pour un vendeur entrant sur ce marché.",
    },
}


def _descriptions(language: str) -> dict[str, str]:
    return _DESCRIPTIONS.get(language, _DESCRIPTIONS["en"])


# ── Public builders ──────────────────────────────────────────────────────

def build_report_schema(language: str, tier: str, mode: str) -> SchemaDescriptor:
    """Schema for the top-level report (all sectors, summary level)."""
    d = _descriptions(language)
    count = products_per_sector(tier)

    product_required = ["name", "demandRate", "regions", "reasons", "suppliers"]
    # Creative mode lets the model skip scores it cannot ground.
    if mode != MODE_CREATIVE:
        product_required.append("profitabilityScore")

    product = {
        "type": "OBJECT",
        "properties": {
            "name": _string(d["name"]),
            "demandRate": _number(d["demandRate"]),
            "regions": _string(d["regions"]),
            "reasons": _string(d["reasons"]),
            "profitabilityScore": _integer(d["profitabilityScore"]),
            "suppliers": _string_list(d["suppliers"]),
        },
        "required": product_required,
    }

    return {
        "type": "OBJECT",
        "properties": {
            "sectors": {
                "type": "ARRAY",
                "description": d["sectors"],
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "sectorName": _string(d["sectorName"]),
                        "products": {
                            "type": "ARRAY",
                            "description": d["products"].format(count=count),
                            "minItems": count,
                            "maxItems": count,
                            "items": product,
                        },
                    },
                    "required": ["sectorName", "products"],
                },
            },
            "globalAnalysis": _string(d["globalAnalysis"]),
        },
        "required": ["sectors", "globalAnalysis"],
    }


def build_sector_analysis_schema(language: str, tier: str) -> SchemaDescriptor:
    """Schema for the single-sector detailed analysis."""
    d = _descriptions(language)
    count = suggestions_per_sector(tier)
    labels = DIFFICULTY_LABELS.get(language, DIFFICULTY_LABELS["en"])

    suggestion = {
        "type": "OBJECT",
        "properties": {
            "name": _string(d["name"]),
            "description": _string(d["description"]),
            "targetAudience": _string(d["targetAudience"]),
            "sellingPoints": _string_list(d["sellingPoints"]),
            "priceRange": _string(d["priceRange"]),
            "suppliers": _string_list(d["suppliers"]),
            "profitabilityScore": _integer(d["profitabilityScore"]),
            "marketEntryDifficulty": {
                "type": "STRING",
                "description": d["marketEntryDifficulty"],
                "enum": [labels["low"], labels["medium"], labels["high"]],
            },
        },
        "required": [
            "name",
            "description",
            "targetAudience",
            "sellingPoints",
            "priceRange",
            "suppliers",
            "profitabilityScore",
            "marketEntryDifficulty",
        ],
    }

    return {
        "type": "OBJECT",
        "properties": {
            "sectorName": _string(d["sectorName"]),
            "inDepthAnalysis": _string(d["inDepthAnalysis"]),
            "productSuggestions": {
                "type": "ARRAY",
                "description": d["productSuggestions"].format(count=count),
                "minItems": count,
                "maxItems": count,
                "items": suggestion,
            },
        },
        "required": ["sectorName", "inDepthAnalysis", "productSuggestions"],
    }


def build_product_analysis_schema(language: str) -> SchemaDescriptor:
    """Schema for the single-product analysis (deepest level)."""
    d = _descriptions(language)
    return {
        "type": "OBJECT",
        "properties": {
            "productName": _string(d["productName"]),
            "marketAnalysis": _string(d["marketAnalysis"]),
            "keyRegions": _string_list(d["keyRegions"]),
            "targetAudience": _string(d["targetAudience"]),
            "sellingPoints": _string_list(d["sellingPoints"]),
            "priceRange": _string(d["priceRange"]),
            "suppliers": _string_list(d["suppliers"]),
            "risks": _string_list(d["risks"]),
        },
        "required": [
            "productName",
            "marketAnalysis",
            "keyRegions",
            "targetAudience",
            "sellingPoints",
            "priceRange",
            "suppliers",
            "risks",
        ],
    }
