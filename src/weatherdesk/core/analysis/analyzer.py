from __future__ import annotations

from datetime import datetime, timezone

from weatherdesk.core.weather.schemas import WeatherRecord

from .schemas import ActivityAdvice, AnalysisType, ClothingAdvice, HealthAdvice, WeatherAnalysis

_RAIN_MARKERS = ("дожд", "ливень", "морось", "гроз")
_SNOW_MARKERS = ("снег", "град")
_SUNNY_MARKERS = ("ясно", "малооблачно")

# (upper bound of effective temperature, main advice, items)
_CLOTHING_BANDS: list[tuple[float, str, list[str]]] = [
    (-15, "Очень тёплая зимняя одежда", ["пуховик", "термобельё", "тёплая шапка", "шарф", "варежки", "зимние ботинки"]),
    (-5, "Тёплая зимняя одежда", ["зимняя куртка", "свитер", "шапка", "шарф", "перчатки", "зимняя обувь"]),
    (5, "Тёплая верхняя одежда", ["тёплая куртка или пальто", "свитер", "шапка", "перчатки", "закрытая обувь"]),
    (15, "Демисезонная одежда", ["лёгкая куртка", "кофта", "джинсы или брюки", "закрытая обувь"]),
    (22, "Лёгкая одежда", ["футболка или рубашка", "лёгкая кофта на вечер", "брюки", "кроссовки"]),
]
_SUMMER_CLOTHING = ("Летняя одежда", ["шорты или лёгкие брюки", "футболка", "сандалии", "головной убор"])


def _has(condition: str, markers: tuple[str, ...]) -> bool:
    lowered = condition.casefold()
    return any(marker in lowered for marker in markers)


def _effective_temperature(weather: WeatherRecord) -> float:
    return weather.feels_like if weather.feels_like is not None else weather.temperature


def _clothing(weather: WeatherRecord) -> ClothingAdvice:
    effective = _effective_temperature(weather)
    main, items = _SUMMER_CLOTHING
    for upper, band_main, band_items in _CLOTHING_BANDS:
        if effective <= upper:
            main, items = band_main, band_items
            break

    extras: list[str] = []
    if _has(weather.condition, _RAIN_MARKERS):
        extras.extend(["зонт", "непромокаемая обувь"])
    elif _has(weather.condition, _SNOW_MARKERS):
        extras.append("непромокаемая обувь")
    if (weather.wind_speed or 0) >= 10:
        extras.append("ветровка")
    if _has(weather.condition, _SUNNY_MARKERS) and weather.temperature > 20:
        extras.extend(["солнцезащитные очки", "солнцезащитный крем"])
    return ClothingAdvice(main=main, items=list(items), extras=extras)


def _activity(weather: WeatherRecord) -> ActivityAdvice:
    temperature = weather.temperature
    wind = weather.wind_speed or 0
    if _has(weather.condition, ("гроз",)):
        advice = ActivityAdvice(
            suitable=["музей", "кино", "кафе"],
            avoid=["прогулки на открытом воздухе", "велосипед", "пикник", "купание"],
            tips=["Во время грозы оставайтесь в помещении"],
        )
    elif _has(weather.condition, _RAIN_MARKERS + _SNOW_MARKERS):
        advice = ActivityAdvice(
            suitable=["музей", "кино", "спортзал", "бассейн"],
            avoid=["пикник", "велосипед"],
            tips=["Возьмите зонт, если выходите на улицу"],
        )
    elif temperature < -10:
        advice = ActivityAdvice(
            suitable=["катание на коньках", "короткие прогулки", "музей"],
            avoid=["длительное пребывание на улице"],
            tips=["Делайте перерывы в тёплом помещении"],
        )
    elif temperature < 5:
        advice = ActivityAdvice(
            suitable=["прогулка", "музей", "спортзал"],
            avoid=["купание", "пикник"],
            tips=["Одевайтесь слоями"],
        )
    elif temperature < 25:
        advice = ActivityAdvice(
            suitable=["прогулка в парке", "велосипед", "бег", "пикник"],
            avoid=[],
            tips=["Отличная погода для активного отдыха"],
        )
    else:
        advice = ActivityAdvice(
            suitable=["купание", "прогулка утром или вечером"],
            avoid=["интенсивный спорт днём"],
            tips=["Пейте больше воды и избегайте прямого солнца в полдень"],
        )

    if wind >= 10:
        if "велосипед" not in advice.avoid:
            advice.avoid.append("велосипед")
        if "велосипед" in advice.suitable:
            advice.suitable.remove("велосипед")
        advice.tips.append("Сильный ветер: выбирайте защищённые от ветра места")
    return advice


def _health(weather: WeatherRecord) -> HealthAdvice:
    warnings: list[str] = []
    tips: list[str] = []
    severe = False
    temperature = weather.temperature

    if temperature <= -20:
        warnings.append("Сильный мороз: риск обморожения")
        tips.append("Закрывайте лицо и руки, ограничьте время на улице")
        severe = True
    elif temperature <= -10:
        warnings.append("Мороз")
        tips.append("Одевайтесь теплее и защищайте открытые участки кожи")

    if temperature >= 32:
        warnings.append("Сильная жара: риск теплового удара")
        tips.append("Пейте больше воды и оставайтесь в тени")
        severe = True
    elif temperature >= 30:
        warnings.append("Жара")
        tips.append("Пейте больше воды")

    if weather.humidity >= 85:
        warnings.append("Высокая влажность")
        tips.append("Людям с заболеваниями дыхательных путей стоит быть осторожнее")
    elif weather.humidity <= 30:
        warnings.append("Низкая влажность")
        tips.append("Увлажняйте кожу и пейте больше жидкости")

    if weather.pressure <= 735:
        warnings.append("Пониженное атмосферное давление: возможны головные боли")
        tips.append("Метеочувствительным людям стоит снизить нагрузку")
    elif weather.pressure >= 770:
        warnings.append("Повышенное атмосферное давление")
        tips.append("Следите за самочувствием при гипертонии")

    if (weather.wind_speed or 0) >= 15:
        warnings.append("Сильный ветер")
        tips.append("Избегайте нахождения рядом с деревьями и конструкциями")

    if _has(weather.condition, ("гроз",)):
        warnings.append("Гроза")
        tips.append("Оставайтесь в помещении")
        severe = True

    if severe or len(warnings) >= 3:
        risk_level = "high"
    elif warnings:
        risk_level = "medium"
    else:
        risk_level = "low"
    if not tips:
        tips.append("Погодные условия благоприятны для самочувствия")
    return HealthAdvice(warnings=warnings, tips=tips, risk_level=risk_level)


def _summary(analysis_type: AnalysisType, weather: WeatherRecord, advice) -> str:
    if analysis_type == "clothing":
        text = f"{advice.main}. Ощущается как {_effective_temperature(weather):g}°C."
        if advice.extras:
            text += f" Дополнительно: {', '.join(advice.extras)}."
        return text
    if analysis_type == "activity":
        return f"Рекомендуется: {', '.join(advice.suitable)}."
    risk_names = {"low": "низкий", "medium": "средний", "high": "высокий"}
    return f"Уровень риска для здоровья: {risk_names[advice.risk_level]}."


def analyze_weather(
    weather: WeatherRecord,
    analysis_type: AnalysisType,
    now: datetime | None = None,
) -> WeatherAnalysis:
    """Rule based advice for ``weather``. No I/O; only ``timestamp`` depends on the clock."""
    builders = {"clothing": _clothing, "activity": _activity, "health": _health}
    if analysis_type not in builders:
        raise ValueError(f"unsupported analysis type: {analysis_type}")
    advice = builders[analysis_type](weather)
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return WeatherAnalysis(
        type=analysis_type,
        city=weather.city,
        temperature=weather.temperature,
        condition=weather.condition,
        summary=_summary(analysis_type, weather, advice),
        timestamp=timestamp,
        **{analysis_type: advice},
    )


def format_analysis_text(analysis: WeatherAnalysis) -> str:
    lines = [f"Анализ погоды ({analysis.type}) для города {analysis.city}:", analysis.summary]
    if analysis.clothing is not None:
        lines.append(f"Основное: {analysis.clothing.main}")
        lines.append(f"Что надеть: {', '.join(analysis.clothing.items)}")
        if analysis.clothing.extras:
            lines.append(f"Дополнительно: {', '.join(analysis.clothing.extras)}")
    if analysis.activity is not None:
        lines.append(f"Подходит: {', '.join(analysis.activity.suitable) or '-'}")
        lines.append(f"Лучше избегать: {', '.join(analysis.activity.avoid) or '-'}")
        lines.extend(f"- {tip}" for tip in analysis.activity.tips)
    if analysis.health is not None:
        lines.extend(f"! {warning}" for warning in analysis.health.warnings)
        lines.extend(f"- {tip}" for tip in analysis.health.tips)
    return "\n".join(lines)
