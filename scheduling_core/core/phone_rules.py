from typing import NamedTuple


class CountryPhoneRule(NamedTuple):
    min_length: int
    max_length: int
    name: str


# National number lengths (digits after the calling code).
COUNTRY_PHONE_RULES: dict[str, CountryPhoneRule] = {
    "1": CountryPhoneRule(10, 10, "USA/Canada"),
    "7": CountryPhoneRule(10, 10, "Russia"),
    "20": CountryPhoneRule(10, 10, "Egypt"),
    "27": CountryPhoneRule(9, 9, "South Africa"),
    "31": CountryPhoneRule(9, 9, "Netherlands"),
    "33": CountryPhoneRule(9, 9, "France"),
    "34": CountryPhoneRule(9, 9, "Spain"),
    "39": CountryPhoneRule(9, 11, "Italy"),
    "44": CountryPhoneRule(10, 11, "United Kingdom"),
    "49": CountryPhoneRule(10, 12, "Germany"),
    "52": CountryPhoneRule(10, 10, "Mexico"),
    "55": CountryPhoneRule(10, 11, "Brazil"),
    "60": CountryPhoneRule(9, 10, "Malaysia"),
    "61": CountryPhoneRule(9, 9, "Australia"),
    "62": CountryPhoneRule(9, 12, "Indonesia"),
    "63": CountryPhoneRule(10, 10, "Philippines"),
    "65": CountryPhoneRule(8, 8, "Singapore"),
    "66": CountryPhoneRule(9, 9, "Thailand"),
    "81": CountryPhoneRule(10, 11, "Japan"),
    "82": CountryPhoneRule(9, 11, "South Korea"),
    "84": CountryPhoneRule(9, 10, "Vietnam"),
    "86": CountryPhoneRule(11, 11, "China"),
    "90": CountryPhoneRule(10, 10, "Turkey"),
    "91": CountryPhoneRule(10, 10, "India"),
    "92": CountryPhoneRule(10, 10, "Pakistan"),
    "94": CountryPhoneRule(9, 9, "Sri Lanka"),
    "234": CountryPhoneRule(10, 10, "Nigeria"),
    "254": CountryPhoneRule(9, 9, "Kenya"),
    "880": CountryPhoneRule(10, 10, "Bangladesh"),
    "966": CountryPhoneRule(9, 9, "Saudi Arabia"),
    "971": CountryPhoneRule(9, 9, "UAE"),
    "977": CountryPhoneRule(10, 10, "Nepal"),
}

# Totals (calling code included) accepted for calling codes not in the table.
GENERIC_MIN_DIGITS = 8
GENERIC_MAX_DIGITS = 15
