"""
Application-wide constants.
Centralizes magic numbers and fixed shop content.
"""

# Slot grid
SLOT_MINUTES = 20
DURATION_BLOCK_LABEL = "Duration Block"

# Display formatting
BOOKING_ID_DISPLAY_LENGTH = 8

# Validation limits
MAX_NAME_LENGTH = 100
MAX_NOTES_LENGTH = 1000
MAX_REASON_LENGTH = 200

# Upload rules per attachment kind
ALLOWED_UPLOAD_TYPES = {
    "receipt": ["image/jpeg", "image/png", "image/jpg", "application/pdf"],
    "notes": [
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ],
}

# Status used for ids in bulk deletes that must match every row
NIL_UUID = "00000000-0000-0000-0000-000000000000"

# Marketing site copy
SHOP_NAME = "SWAT Barbershop"
SHOP_HOURS = "9:00 AM - 9:00 PM (Mon-Sun)"
RECEIPT_REMINDERS = [
    "Please arrive 10 minutes before your appointment time",
    "Payment is due at the time of service",
    "Late arrivals may result in shortened service time",
]
SHOP_BADGE = "Premium Haircut Since 2022"
SHOP_TAGLINE = (
    "Master barbers. Modern techniques. Premium results. "
    "Elevate your style with our skilled professionals."
)
SHOP_STATS = [
    {"value": "5k+", "label": "Happy Clients"},
    {"value": "3+", "label": "Years Experience"},
    {"value": "3", "label": "Master Barbers"},
]

# Contact section
SHOP_ADDRESS = "202 Don Pepe St., Maingate, Marisol Village (Infront of fresh options)"
SHOP_PHONE = "09555672389"
SHOP_EMAIL = "swatbarbershop22@gmail.com"
SHOP_DIRECTIONS_URL = (
    "https://www.google.com/maps/dir//Swat+Barbershop+-Angeles+Branch/"
    "@15.15314522703422,120.59130502259913,17z"
)
