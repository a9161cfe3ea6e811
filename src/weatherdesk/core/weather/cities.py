"""Supported cities and best-effort city extraction from free text.

The extraction is a fixed set of regex patterns plus a lookup table of
known names, English spellings and Russian grammatical case forms. It is
not an NLP component: text it cannot place is handed back unchanged by
``normalize_city``.
"""

from __future__ import annotations

import re

from .schemas import CityCoordinates

# canonical name, lat, lon, aliases (lowercase: English names, short forms, case forms)
_CITY_TABLE: list[tuple[str, float, float, tuple[str, ...]]] = [
    ("Москва", 55.7558, 37.6173, ("moscow", "москве", "москву", "москвой", "москвы")),
    ("Санкт-Петербург", 59.9343, 30.3351, ("saint petersburg", "st. petersburg", "петербург", "петербурге", "спб", "питер", "питере", "санкт-петербурге")),
    ("Рига", 56.9496, 24.1052, ("riga", "риге", "ригу", "ригой", "риги")),
    ("Таллин", 59.4370, 24.7536, ("tallinn", "таллине", "таллина", "таллином")),
    ("Вильнюс", 54.6872, 25.2797, ("vilnius", "вильнюсе", "вильнюса")),
    ("Минск", 53.9045, 27.5615, ("minsk", "минске", "минска", "минском")),
    ("Киев", 50.4501, 30.5234, ("kyiv", "kiev", "киеве", "киева", "киевом")),
    ("Варшава", 52.2297, 21.0122, ("warsaw", "варшаве", "варшаву")),
    ("Прага", 50.0755, 14.4378, ("prague", "праге", "прагу", "прагой")),
    ("Вена", 48.2082, 16.3738, ("vienna", "вене", "вену", "веной")),
    ("Берлин", 52.5200, 13.4050, ("berlin", "берлине", "берлина", "берлином")),
    ("Мюнхен", 48.1351, 11.5820, ("munich", "мюнхене", "мюнхена")),
    ("Париж", 48.8566, 2.3522, ("paris", "париже", "парижа", "парижем")),
    ("Лондон", 51.5074, -0.1278, ("london", "лондоне", "лондона", "лондоном")),
    ("Амстердам", 52.3676, 4.9041, ("amsterdam", "амстердаме")),
    ("Стокгольм", 59.3293, 18.0686, ("stockholm", "стокгольме")),
    ("Копенгаген", 55.6761, 12.5683, ("copenhagen", "копенгагене")),
    ("Хельсинки", 60.1699, 24.9384, ("helsinki",)),
    ("Осло", 59.9139, 10.7522, ("oslo",)),
    ("Мадрид", 40.4168, -3.7038, ("madrid", "мадриде", "мадрида")),
    ("Барселона", 41.3874, 2.1686, ("barcelona", "барселоне", "барселону")),
    ("Рим", 41.9028, 12.4964, ("rome", "риме", "рима", "римом")),
    ("Милан", 45.4642, 9.1900, ("milan", "милане", "милана")),
    ("Цюрих", 47.3769, 8.5417, ("zurich", "цюрихе", "цюриха")),
    ("Стамбул", 41.0082, 28.9784, ("istanbul", "стамбуле", "стамбула")),
    ("Дубай", 25.2048, 55.2708, ("dubai", "дубае", "дубая")),
    ("Токио", 35.6762, 139.6503, ("tokyo",)),
    ("Пекин", 39.9042, 116.4074, ("beijing", "пекине", "пекина")),
    ("Шанхай", 31.2304, 121.4737, ("shanghai", "шанхае", "шанхая")),
    ("Сеул", 37.5665, 126.9780, ("seoul", "сеуле", "сеула")),
    ("Бангкок", 13.7563, 100.5018, ("bangkok", "бангкоке", "бангкока")),
    ("Сингапур", 1.3521, 103.8198, ("singapore", "сингапуре", "сингапура")),
    ("Нью-Йорк", 40.7128, -74.0060, ("new york", "нью-йорке")),
    ("Казань", 55.7887, 49.1221, ("kazan", "казани", "казанью")),
    ("Новосибирск", 55.0084, 82.9357, ("novosibirsk", "новосибирске")),
    ("Екатеринбург", 56.8389, 60.6057, ("yekaterinburg", "екатеринбурге")),
    ("Красноярск", 56.0153, 92.8932, ("krasnoyarsk", "красноярске")),
    ("Владивосток", 43.1155, 131.8855, ("vladivostok", "владивостоке")),
    ("Калининград", 54.7104, 20.4522, ("kaliningrad", "калининграде")),
    ("Самара", 53.1959, 50.1002, ("samara", "самаре", "самару")),
    ("Одесса", 46.4825, 30.7233, ("odesa", "odessa", "одессе", "одессу")),
    ("Астана", 51.1694, 71.4491, ("astana", "астане", "астану")),
]

_COORDINATES: dict[str, CityCoordinates] = {
    name: CityCoordinates(name=name, lat=lat, lon=lon) for name, lat, lon, _ in _CITY_TABLE
}

_FORMS: dict[str, str] = {}
for _name, _lat, _lon, _aliases in _CITY_TABLE:
    _FORMS[_name.casefold()] = _name
    for _alias in _aliases:
        _FORMS[_alias] = _name

# longest first so "санкт-петербург" wins over "петербург"
_FORMS_BY_LENGTH = sorted(_FORMS.items(), key=lambda item: len(item[0]), reverse=True)

_CYR = r"[а-яёА-ЯЁ\-\s]"
_END = r"(?:\?|!|,|\.|$)"
_PATTERNS = [
    re.compile(rf"погод[аеуы]?\s+(?:в|во)\s+({_CYR}+?){_END}", re.IGNORECASE),
    re.compile(rf"\b(?:в|во)\s+({_CYR}+?)\s+погод", re.IGNORECASE),
    re.compile(r"weather\s+(?:in|at|for)\s+([a-zA-Z\-\s]+?)(?:\?|!|,|\.|$)", re.IGNORECASE),
    re.compile(r"([а-яёА-ЯЁ\-]{3,})\s+погод", re.IGNORECASE),
    re.compile(rf"что\s+(?:с\s+погодой\s+)?(?:в|во)\s+({_CYR}+?){_END}", re.IGNORECASE),
    re.compile(rf"как\s+(?:там\s+)?(?:в|во)\s+({_CYR}+?){_END}", re.IGNORECASE),
    re.compile(rf"(?:сейчас\s+)?\b(?:в|во)\s+({_CYR}+?){_END}", re.IGNORECASE),
]

# words the "X погода" pattern would otherwise mistake for a city
_NOT_CITIES = {"какая", "какой", "какую", "как", "что", "сейчас", "сегодня", "завтра", "хорошая", "плохая", "текущая"}


def find_city(name: str) -> CityCoordinates | None:
    canonical = _FORMS.get(name.strip().casefold())
    if canonical is None:
        return None
    return _COORDINATES[canonical]


def list_cities() -> list[str]:
    return [name for name, _, _, _ in _CITY_TABLE]


def _normalize_city_name(name: str) -> str:
    normalized = name.strip().casefold()
    if normalized in _FORMS:
        return _FORMS[normalized]
    return normalized[:1].upper() + normalized[1:]


def extract_city_from_message(message: str) -> str | None:
    for pattern in _PATTERNS:
        match = pattern.search(message)
        if not match:
            continue
        candidate = match.group(1).strip()
        if not candidate or candidate.casefold() in _NOT_CITIES:
            continue
        return _normalize_city_name(candidate)

    lowered = message.casefold()
    for form, canonical in _FORMS_BY_LENGTH:
        if re.search(rf"(?<![\w-]){re.escape(form)}(?![\w-])", lowered):
            return canonical
    return None


def normalize_city(text: str) -> str:
    """City name for ``text``; the stripped input itself when nothing matches."""
    return extract_city_from_message(text) or text.strip()
