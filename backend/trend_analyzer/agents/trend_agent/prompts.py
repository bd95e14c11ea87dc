"""Prompt templates for the trend agent (report, sector, product levels).

All builders are pure: the forecast window is derived from an explicit
``reference_date`` rather than the clock, and every non-empty user filter is
interpolated verbatim into the instruction block.
"""

from __future__ import annotations

from datetime import date

from ...constants import DIFFICULTY_LABELS, MONTH_NAMES, SECTORS
from ...schemas.request_schema import ReportOptions
from .schema import products_per_sector, suggestions_per_sector


# ── Forecast window ──────────────────────────────────────────────────────

def _add_months(year: int, month: int, months: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def forecast_window(reference_date: date, period_months: int, language: str) -> str:
    """Human-readable forecast window starting the month after ``reference_date``.

    ``forecast_window(date(2026, 12, 5), 1, "en")`` → ``"January 2027"``.
    """
    months = MONTH_NAMES.get(language, MONTH_NAMES["en"])
    start_year, start_month = _add_months(reference_date.year, reference_date.month, 1)
    start = f"{months[start_month - 1]} {start_year}"
    if period_months <= 1:
        return start
    end_year, end_month = _add_months(start_year, start_month, period_months - 1)
    end = f"{months[end_month - 1]} {end_year}"
    joiner = " to " if language == "en" else " à "
    return f"{start}{joiner}{end}"


# ── Filter block ─────────────────────────────────────────────────────────

_FILTER_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "header": "User filters (apply them strictly):",
        "regions": "Focus regions",
        "keywords": "Keywords to favour",
        "excluded_keywords": "Excluded keywords (never suggest matching products)",
        "industries": "Industries to focus on",
    },
    "fr": {
        "header": "Filtres utilisateur (à appliquer strictement) :",
        "regions": "Régions ciblées",
        "keywords": "Mots-clés à privilégier",
        "excluded_keywords": "Mots-clés exclus (ne jamais suggérer de produits correspondants)",
        "industries": "Industries à cibler",
    },
}


def _filter_lines(options: ReportOptions) -> list[str]:
    labels = _FILTER_LABELS.get(options.language, _FILTER_LABELS["en"])
    lines: list[str] = []
    for field in ("regions", "keywords", "excluded_keywords", "industries"):
        value = getattr(options, field)
        if value and value.strip():
            lines.append(f"- {labels[field]}: {value}")
    if lines:
        lines.insert(0, labels["header"])
    return lines


# ── Report level ─────────────────────────────────────────────────────────

def build_report_prompt(options: ReportOptions, reference_date: date) -> str:
    lang = options.language
    window = forecast_window(reference_date, options.period_months, lang)
    count = products_per_sector(options.tier)
    sectors = ", ".join(SECTORS.get(lang, SECTORS["en"]))

    if lang == "fr":
        lines = [
            "En tant qu'expert international en analyse de tendances de consommation, "
            f"identifie les produits qui seront les plus demandés dans le monde pour {window} "
            f"(horizon de {options.period_months} mois).",
            "",
            "Tâche :",
            f"- Classe les produits par secteur de consommation ({sectors}).",
            f"- Pour chaque secteur, donne les {count} produits les plus susceptibles d'être achetés, "
            "leur taux de demande estimé (en %), les régions du monde à plus forte demande, les raisons clés, "
            "un score de rentabilité de 0 à 10 et des fournisseurs potentiels.",
            "- Termine par une analyse globale (150 mots max) sur les dynamiques générales du marché "
            "et les secteurs les plus porteurs.",
        ]
        constraints = [
            "Contraintes :",
            "- Ton professionnel, clair et synthétique.",
            "- Utilise des pourcentages crédibles basés sur des tendances observables.",
            "- Mets en évidence les signaux émergents (nouvelles habitudes, innovations, influence des réseaux sociaux).",
            "- Rédige toutes les valeurs textuelles en français.",
            "- Fournis la réponse exclusivement au format JSON en respectant le schéma fourni.",
        ]
    else:
        lines = [
            "As an international expert in consumer trend analysis, identify the products that will be "
            f"in highest demand worldwide for {window} ({options.period_months}-month horizon).",
            "",
            "Task:",
            f"- Group the products by consumer sector ({sectors}).",
            f"- For each sector, give the {count} products most likely to be bought, their estimated demand rate "
            "(in %), the world regions with the strongest demand, the key reasons, a profitability score "
            "from 0 to 10 and potential suppliers.",
            "- Finish with a global analysis (150 words max) of the overall market dynamics "
            "and the most promising sectors.",
        ]
        constraints = [
            "Constraints:",
            "- Professional, clear and concise tone.",
            "- Use credible percentages based on observable trends.",
            "- Highlight emerging signals (new habits, innovations, social media influence).",
            "- Write every text value in English.",
            "- Return the answer exclusively as JSON matching the provided schema.",
        ]

    filters = _filter_lines(options)
    if filters:
        lines += [""] + filters
    lines += [""] + constraints
    return "\n".join(lines)


# ── Sector level ─────────────────────────────────────────────────────────

def build_sector_analysis_prompt(
    sector_name: str, options: ReportOptions, reference_date: date
) -> str:
    lang = options.language
    window = forecast_window(reference_date, options.period_months, lang)
    count = suggestions_per_sector(options.tier)
    labels = DIFFICULTY_LABELS.get(lang, DIFFICULTY_LABELS["en"])
    difficulty = " / ".join(labels[level] for level in ("low", "medium", "high"))

    if lang == "fr":
        lines = [
            f"En tant qu'analyste de marché senior, réalise une analyse approfondie du secteur « {sector_name} » "
            f"pour {window}.",
            "",
            "Tâche :",
            "- Rédige une analyse détaillée du secteur : dynamiques, comportements des consommateurs, "
            "opportunités et menaces.",
            f"- Propose {count} produits prometteurs à lancer ou revendre, avec pour chacun : description, "
            "public cible, arguments de vente, fourchette de prix, fournisseurs potentiels, "
            f"score de rentabilité de 0 à 10 et difficulté d'entrée sur le marché ({difficulty}).",
        ]
        closing = [
            "Contraintes :",
            "- Rédige toutes les valeurs textuelles en français.",
            "- Fournis la réponse exclusivement au format JSON en respectant le schéma fourni.",
        ]
    else:
        lines = [
            f"As a senior market analyst, produce an in-depth analysis of the \"{sector_name}\" sector "
            f"for {window}.",
            "",
            "Task:",
            "- Write a detailed analysis of the sector: dynamics, consumer behaviour, opportunities and threats.",
            f"- Suggest {count} promising products to launch or resell, each with: description, target audience, "
            "selling points, price range, potential suppliers, profitability score from 0 to 10 "
            f"and market entry difficulty ({difficulty}).",
        ]
        closing = [
            "Constraints:",
            "- Write every text value in English.",
            "- Return the answer exclusively as JSON matching the provided schema.",
        ]

    filters = _filter_lines(options)
    if filters:
        lines += [""] + filters
    lines += [""] + closing
    return "\n".join(lines)


# ── Product level ────────────────────────────────────────────────────────

def build_product_analysis_prompt(
    product_name: str,
    sector_name: str,
    options: ReportOptions,
    reference_date: date,
) -> str:
    lang = options.language
    window = forecast_window(reference_date, options.period_months, lang)

    if lang == "fr":
        context = f" dans le secteur « {sector_name} »" if sector_name else ""
        lines = [
            f"En tant qu'expert en lancement de produits, analyse en détail le produit « {product_name} »{context} "
            f"pour {window}.",
            "",
            "Tâche :",
            "- Analyse de marché détaillée, régions clés, public cible, arguments de vente, "
            "fourchette de prix, fournisseurs potentiels et principaux risques.",
            "",
            "Contraintes :",
            "- Rédige toutes les valeurs textuelles en français.",
            "- Fournis la réponse exclusivement au format JSON en respectant le schéma fourni.",
        ]
    else:
        context = f" in the \"{sector_name}\" sector" if sector_name else ""
        lines = [
            f"As a product launch expert, analyse the product \"{product_name}\"{context} in detail "
            f"for {window}.",
            "",
            "Task:",
            "- Detailed market analysis, key regions, target audience, selling points, price range, "
            "potential suppliers and main risks.",
            "",
            "Constraints:",
            "- Write every text value in English.",
            "- Return the answer exclusively as JSON matching the provided schema.",
        ]

    filters = _filter_lines(options)
    if filters:
        insert_at = lines.index("") + 1
        lines[insert_at:insert_at] = filters + [""]
    return "\n".join(lines)
