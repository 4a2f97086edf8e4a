"""User-facing text catalogs for the screening report."""

from typing import Optional

from scodia.config import settings

MESSAGES = {
    "en": {
        "not_available": "n/a",
        "verdict_low": "Low risk",
        "verdict_medium": "Medium risk",
        "verdict_high": "High risk",
        "note_no_pose": (
            "Could not recognize the pose. Try taking the photo in good lighting "
            "with your full height in the frame."
        ),
        "note_metrics": "MVP: back-view metrics (shoulders/hips/axis) + side-view metric (trunk lean).",
        "no_pose_recommendations": [
            "Stand straight with your arms down",
            "Take the photo from 2–3 meters away",
            "Keep the camera level",
        ],
        "base_recommendations": [
            "Keep the load symmetrical (backpack on both straps)",
            "Do core exercises 10–15 min/day",
            "If there is pain or progression, see a doctor",
        ],
        "high_recommendations": [
            "An orthopedist/spine specialist consultation is recommended",
            "Confirming the degree usually requires an X-ray (Cobb angle)",
        ],
        "medium_recommendations": [
            "Repeat the photos in 2–4 weeks for comparison",
        ],
        "low_recommendations": [
            "Low risk: stay active and keep mindful posture",
        ],
    },
    "ru": {
        "not_available": "н/д",
        "verdict_low": "Низкий риск",
        "verdict_medium": "Средний риск",
        "verdict_high": "Высокий риск",
        "note_no_pose": (
            "Не удалось распознать позу. Попробуйте сделать фото при хорошем освещении "
            "и полный рост в кадре."
        ),
        "note_metrics": "MVP: метрики сзади (плечи/таз/ось) + метрика сбоку (наклон корпуса).",
        "no_pose_recommendations": [
            "Встаньте ровно, руки опущены",
            "Сделайте фото с расстояния 2–3 метра",
            "Не наклоняйте камеру",
        ],
        "base_recommendations": [
            "Следите за симметрией нагрузки (рюкзак на 2 лямках)",
            "Делайте упражнения на мышцы кора 10–15 мин/день",
            "Если есть боль или прогрессирование — обратитесь к врачу",
        ],
        "high_recommendations": [
            "Рекомендуется консультация ортопеда/вертебролога",
            "Для подтверждения степени обычно нужен рентген (Cobb angle)",
        ],
        "medium_recommendations": [
            "Повторите фото через 2–4 недели для сравнения",
        ],
        "low_recommendations": [
            "Риск низкий: поддерживайте активность и осознанную осанку",
        ],
    },
}

DEFAULT_LANGUAGE = "en"


def get_messages(language: Optional[str] = None) -> dict:
    """Return the catalog for a language, falling back to English."""
    language = language or settings.LANGUAGE
    return MESSAGES.get(language, MESSAGES[DEFAULT_LANGUAGE])
