# devgad/core/errors.py
# Error taxonomy: validation failures (before any write), auth provider errors, missing documents

from typing import Optional

MESSAGES = {
    "en": {
        "auth/invalid-credential": "Invalid email or password",
        "auth/email-already-in-use": "Email already in use",
        "auth/invalid-email": "Invalid email",
        "auth/popup-closed-by-user": "Sign in cancelled",
        "auth/too-many-requests": "Too many attempts. Please try again later.",
        "auth/operation-not-allowed": "This sign in method is not enabled",
        "auth/invalid-action-code": "This link is invalid or has expired",
        "auth/user-not-found": "Please log in again",
        "generic": "Something went wrong. Please try again.",
    },
    "mr": {
        "auth/invalid-credential": "चुकीचा ईमेल किंवा पासवर्ड",
        "auth/email-already-in-use": "हा ईमेल आधीच वापरात आहे",
        "auth/invalid-email": "चुकीचा ईमेल",
        "auth/popup-closed-by-user": "पॉपअप बंद केले",
        "auth/too-many-requests": "खूप प्रयत्न झाले. कृपया नंतर प्रयत्न करा.",
        "auth/operation-not-allowed": "ही साइन इन पद्धत सक्षम नाही",
        "auth/invalid-action-code": "ही लिंक अवैध आहे किंवा कालबाह्य झाली आहे",
        "auth/user-not-found": "कृपया पुन्हा लॉगिन करा",
        "generic": "काहीतरी चूक झाली. कृपया पुन्हा प्रयत्न करा.",
    },
}

PROVIDER_STATUS = {
    "auth/invalid-credential": 401,
    "auth/email-already-in-use": 409,
    "auth/invalid-email": 400,
    "auth/popup-closed-by-user": 400,
    "auth/too-many-requests": 429,
    "auth/operation-not-allowed": 501,
    "auth/invalid-action-code": 400,
    "auth/user-not-found": 401,
}


def pick_language(accept_language: Optional[str]) -> str:
    if accept_language and accept_language.strip().lower().startswith("mr"):
        return "mr"
    return "en"


class StorefrontError(Exception):
    status_code = 500

    def message(self, language: str = "en") -> str:
        return MESSAGES[language]["generic"]


class ValidationFailure(StorefrontError):
    """Bad form input, caught before any network or database call."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self._message = message

    def message(self, language: str = "en") -> str:
        return self._message


class ProviderError(StorefrontError):
    """Auth provider failure classified by a provider code."""

    def __init__(self, code: str, detail: Optional[str] = None):
        super().__init__(detail or code)
        self.code = code
        self.status_code = PROVIDER_STATUS.get(code, 500)

    def message(self, language: str = "en") -> str:
        table = MESSAGES.get(language, MESSAGES["en"])
        return table.get(self.code, table["generic"])


class NotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, what: str):
        super().__init__(f"{what} not found")
        self.what = what

    def message(self, language: str = "en") -> str:
        return str(self)


class ConflictError(StorefrontError):
    status_code = 409

    def message(self, language: str = "en") -> str:
        return str(self)
