import re
from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from storefront.orders.models import Customer

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\d{10}$")

ADDRESS_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "houseNumber",
    "roadName",
    "city",
    "state",
    "pinCode",
)

REQUIRED_MESSAGE = "Ce champ est obligatoire"
EMAIL_MESSAGE = "Veuillez saisir une adresse email valide"
PHONE_MESSAGE = "Veuillez saisir un numéro de téléphone à 10 chiffres"
SUMMARY_MESSAGE = "Veuillez remplir tous les champs d'adresse obligatoires."


class AddressValidationError(Exception):
    def __init__(self, errors: Dict[str, str], message: str = SUMMARY_MESSAGE):
        super().__init__(message)
        self.errors = errors
        self.code = "invalid_address"


def validate_address_form(form: Mapping[str, Any]) -> Dict[str, str]:
    """
    Vérifie le formulaire d'adresse champ par champ.
    Retourne {champ: message}; un dict vide signifie formulaire valide.
    """
    errors: Dict[str, str] = {}
    values = {k: str(form.get(k) or "").strip() for k in ADDRESS_FIELDS}
    for name in ADDRESS_FIELDS:
        if not values[name]:
            errors[name] = REQUIRED_MESSAGE
    if "email" not in errors and not EMAIL_RE.match(values["email"]):
        errors["email"] = EMAIL_MESSAGE
    if "phone" not in errors and not PHONE_RE.match(values["phone"]):
        errors["phone"] = PHONE_MESSAGE
    return errors


def customer_from_form(form: Mapping[str, Any]) -> Customer:
    """Valide puis construit le Customer; lève AddressValidationError sinon."""
    errors = validate_address_form(form)
    if errors:
        raise AddressValidationError(errors)
    values = {k: str(form.get(k) or "").strip() for k in ADDRESS_FIELDS}
    try:
        customer = Customer.model_validate(values)
    except PydanticValidationError:
        raise AddressValidationError({"email": EMAIL_MESSAGE})
    return customer
