"""Shared constants."""

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# Number of entries/assessments shown on the dashboard
DASHBOARD_RECENT_LIMIT = 10

# Symptom labels offered by the intake form
COMMON_SYMPTOMS = [
    "Fever",
    "Cough",
    "Fatigue",
    "Shortness of breath",
    "Headache",
    "Body aches",
    "Sore throat",
    "Loss of taste or smell",
    "Nausea",
    "Vomiting",
    "Diarrhea",
    "Chest pain",
    "Confusion",
    "Persistent pain",
    "Weight loss",
]

MAX_SYMPTOMS_PER_ENTRY = 50
MAX_SYMPTOM_LENGTH = 200
MAX_NOTES_LENGTH = 5000
