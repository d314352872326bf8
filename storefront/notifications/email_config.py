from dataclasses import dataclass

import storefront.config as config

# Services SMTP connus (EMAIL_SERVICE), EMAIL_HOST reste prioritaire
KNOWN_SERVICES = {
    "gmail": "smtp.gmail.com",
    "outlook": "smtp.office365.com",
    "hotmail": "smtp.office365.com",
    "yahoo": "smtp.mail.yahoo.com",
    "zoho": "smtp.zoho.com",
}


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int
    secure: bool
    user: str
    password: str
    owner_email: str
    sender_name: str
    service: str = ""
    timeout: float = 10.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.user and self.password)


def load_smtp_settings() -> SmtpSettings:
    service = (config.EMAIL_SERVICE or "").lower()
    host = config.EMAIL_HOST or KNOWN_SERVICES.get(service, "")
    return SmtpSettings(
        host=host,
        port=config.EMAIL_PORT,
        secure=config.EMAIL_SECURE,
        user=config.EMAIL_USER,
        password=config.EMAIL_PASS,
        owner_email=config.OWNER_EMAIL or config.EMAIL_USER,
        sender_name=config.STORE_NAME,
        service=service,
        timeout=config.EMAIL_TIMEOUT,
    )
