"""Fixed clinical and storage constants.

These values describe how the clinic works, not how a deployment is tuned,
so they live here rather than in the environment-backed settings.
"""

# Persisted store keys
STORAGE_KEYS = {
    "ANIMAL_DONORS": "animal_donors",
    "EDITING_DONOR": "editing_donor",
    "LAST_LOCATION": "last_location",
    "LAST_DATE": "last_date",
    "ACTIVE_LOCATION": "active_location",
    "REMOVED_HIGHLIGHTS": "removed_highlights",
    "EXTERNAL_CELLS_DATA": "external_cells_data",
}

MONTHLY_DATA_PREFIX = "monthly_data_"

BACKUP_FILENAME = "donor_backup.json"

# Collection sites
LOCATIONS = ["רחובות", "איגוד ערים דן", "פתחיה", "חולון", "חיצוני"]
DEFAULT_ACTIVE_LOCATION = LOCATIONS[0]

ANIMAL_TYPES = ["Dog", "Cat"]
GENDERS = ["Male", "Female"]
INFECTION_STATUSES = ["Negative", "Positive"]

BLOOD_TYPES = {
    "DOG": ["DEA 1.1 Positive", "DEA 1.1 Negative"],
    "CAT": ["A", "AB", "B"],
}

# Short dog blood type spellings accepted on older records
LEGACY_DOG_BLOOD_TYPES = ["DEA 1.1+", "DEA 1.1-", "DEA 1.2+", "DEA 1.2-"]

DONATED_YES_VALUES = ["yes", "כן"]

# Donation interval and windows (days)
DONATION_INTERVAL_DAYS = 90
HIGHLIGHT_DAYS_BEFORE = 7
HIGHLIGHT_DAYS_AFTER = 14
UPCOMING_WINDOW_DAYS = 7

# Fields that make up a donor's clinical fingerprint
FINGERPRINT_FIELDS = [
    "animalName",
    "date",
    "location",
    "age",
    "weight",
    "gender",
    "animalType",
    "bloodType",
    "pcv",
    "hct",
    "wbc",
    "plt",
    "fiv",
    "felv",
    "packedCell",
    "slideFindings",
    "donated",
    "volume",
    "notes",
]

NUMERIC_DONOR_FIELDS = ["age", "weight", "pcv", "hct", "wbc", "plt", "packedCell", "volume"]

TEXT_DONOR_FIELDS = [
    "animalName",
    "ownerName",
    "ownerPhone",
    "location",
    "animalType",
    "bloodType",
    "gender",
    "fiv",
    "felv",
    "donated",
    "slideFindings",
    "notes",
]

# External blood products tracked per month
EXTERNAL_CELL_PRODUCTS = [
    ("wholeBloodCat", "דם מלא- חתול (Whole Blood - Cat)"),
    ("wholeBloodDog", "דם מלא- כלב (Whole Blood - Dog)"),
    ("plasmaCat", "פלסמה- חתול (Plasma - Cat)"),
    ("plasmaDog", "פלסמה- כלב (Plasma - Dog)"),
    ("pcCat", "תרכיז- חתול (PC - Cat)"),
    ("pcDog", "תרכיז- כלב (PC - Dog)"),
]
