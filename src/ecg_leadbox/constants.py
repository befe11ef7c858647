"""Constants for lead annotation and preview rendering."""

# Lead regions are captured and serialized in this order
CANONICAL_LEAD_ORDER = (
    "I",
    "II",
    "III",
    "aVR",
    "aVL",
    "aVF",
    "V1",
    "V2",
    "V3",
    "V4",
    "V5",
    "V6",
)

N_LEADS = len(CANONICAL_LEAD_ORDER)

# Lead name -> position in the canonical order
LEAD_INDEX = {name: i for i, name in enumerate(CANONICAL_LEAD_ORDER)}

# Pixels per millivolt
MIN_SCALE_FACTOR = 5
DEFAULT_SCALE_FACTOR = 20

DEFAULT_PREVIEW_POINTS = 400
DEFAULT_BASELINE = 20.0

MAX_IMAGE_BYTES = 10 * 1024 * 1024

# Initial selection box
MIN_BOX_SIZE = 40
INITIAL_BOX_ORIGIN = (10, 10)
NEXT_BOX_OFFSET = (20, 10)

DEFAULT_NOTE = "Frontend-generated payload."
