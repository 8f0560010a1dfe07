"""UI strings returned by the API, keyed by language."""

from ..core.enums import Language

TRANSLATIONS: dict[str, dict[str, str]] = {
    "sv": {
        "selectBrand": "VÄLJ MÄRKE",
        "selectModel": "VÄLJ MODELL",
        "selectYear": "VÄLJ ÅRSMODELL",
        "selectEngine": "VÄLJ MOTOR",
        "headline": "Välj din bil nedan för att se vad vi kan erbjuda",
        "contact": "KONTAKT",
        "fuelPetrol": "Bensin",
        "originalHp": "ORIGINAL HK",
        "stageLabel": "Steg",
        "stockHp": "Original HK",
        "informationMissing": "Information saknas för det valda fordonet",
        "contactSent": "Tack! Vi återkommer så snart vi kan.",
        "contactError": "Misslyckades att skicka förfrågan. Försök igen.",
    },
    "en": {
        "selectBrand": "SELECT BRAND",
        "selectModel": "SELECT MODEL",
        "selectYear": "SELECT YEAR",
        "selectEngine": "SELECT ENGINE",
        "headline": "Select your car below to see what we can offer",
        "contact": "CONTACT",
        "fuelPetrol": "Petrol",
        "originalHp": "Stock HP",
        "stageLabel": "Stage",
        "stockHp": "Stock HP",
        "informationMissing": "Information is missing for the selected vehicle",
        "contactSent": "Thank you! We will get back to you shortly.",
        "contactError": "Failed to send the request. Please try again.",
    },
    "de": {
        "selectBrand": "MARKE WÄHLEN",
        "selectModel": "MODELL WÄHLEN",
        "selectYear": "BAUJAHR WÄHLEN",
        "selectEngine": "MOTOR WÄHLEN",
        "headline": "Wähle dein Auto unten aus, um unser Angebot zu sehen",
        "contact": "KONTAKT",
        "fuelPetrol": "Benzin",
        "originalHp": "Serien-PS",
        "stageLabel": "Stufe",
        "stockHp": "Serien-PS",
        "informationMissing": "Für das gewählte Fahrzeug fehlen Informationen",
        "contactSent": "Danke! Wir melden uns so schnell wie möglich.",
        "contactError": "Anfrage konnte nicht gesendet werden. Bitte erneut versuchen.",
    },
}


def t(lang: str | None, key: str) -> str:
    """Translate a key, falling back to Swedish and finally to the key itself."""
    language = Language.from_string(lang).value
    return TRANSLATIONS[language].get(key) or TRANSLATIONS["sv"].get(key, key)
