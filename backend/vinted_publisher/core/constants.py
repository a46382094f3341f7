"""
Target-site constants
"""
import re

# Canonical item-detail URL, e.g. https://www.vinted.fr/items/12345-blue-jacket
# Digits are required so the creation page (/items/new) never matches.
ITEM_URL_PATTERN = re.compile(r"/items/\d+")

# Present in the header only for a signed-in member
SIGNED_IN_MARKER = '[data-testid="user-menu"]'

# Listing condition -> value of the target's <select name="status"> option
CONDITION_OPTIONS = {
    "new_with_tag": "6",
    "new_with_tags": "6",
    "new_without_tag": "1",
    "new_without_tags": "1",
    "very_good": "2",
    "good": "3",
    "satisfactory": "4",
}

# Remote photos without a usable file name in their URL path
DEFAULT_PHOTO_NAME = "photo.jpg"
