"""
Notification text catalog.

Messages are keyed by language; unknown languages and missing keys
fall back to English. Positional arguments are substituted with
str.format.
"""

DEFAULT_LANGUAGE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "user:notification:ban:subject": "Your account on {0} has been banned",
        "user:notification:ban:body": (
            "Hi {0},\n\n"
            "Your account on {1} has been banned.\n\n"
            "To go to the site, click here:\n{2}"
        ),
        "user:notification:unban:subject": "Your account on {0} is no longer banned",
        "user:notification:unban:body": (
            "Hi {0},\n\n"
            "Your account on {1} is no longer banned. You can use the site again.\n\n"
            "To go to the site, click here:\n{2}"
        ),
        "notification:subject": "Notification about {0}",
        "notification:body": "There is new activity on {0}.",
        "email:changereq:subject": "Request for new password",
        "email:changereq:body": (
            "Hi {0},\n\n"
            "Somebody has requested a new password for your account on {1}.\n\n"
            "If you requested this, click on the link below. "
            "Otherwise ignore this email.\n\n{2}"
        ),
        "email:resetpassword:subject": "Password reset!",
        "email:resetpassword:body": "Hi {0},\n\nYour password has been reset to: {1}",
        "email:changepassword:subject": "Password changed!",
        "email:changepassword:body": "Hi {0},\n\nYour password on {1} has been changed.",
    },
    "nl": {
        "user:notification:ban:subject": "Je account op {0} is geblokkeerd",
        "user:notification:ban:body": (
            "Hallo {0},\n\n"
            "Je account op {1} is geblokkeerd.\n\n"
            "Klik hier om naar de site te gaan:\n{2}"
        ),
        "user:notification:unban:subject": "Je account op {0} is niet langer geblokkeerd",
        "user:notification:unban:body": (
            "Hallo {0},\n\n"
            "Je account op {1} is niet langer geblokkeerd. Je kunt de site weer gebruiken.\n\n"
            "Klik hier om naar de site te gaan:\n{2}"
        ),
    },
}


def translate(key: str, args: list[object] | None = None, language: str | None = None) -> str:
    """Look up key in language (falling back to English) and format it.

    Unknown keys are returned as-is.
    """
    catalog = MESSAGES.get(language or DEFAULT_LANGUAGE, {})
    template = catalog.get(key) or MESSAGES[DEFAULT_LANGUAGE].get(key)
    if template is None:
        return key
    return template.format(*(args or []))
