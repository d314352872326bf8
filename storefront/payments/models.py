from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from storefront.config import PAYMENT_CURRENCY


class CreateIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: float = Field(gt=0)
    currency: str = PAYMENT_CURRENCY
    receipt: str = ""
    notes: Dict[str, Any] = Field(default_factory=dict)


class VerifyPaymentRequest(BaseModel):
    """Accepte les noms du tunnel (paymentId...) et les noms natifs Razorpay (razorpay_*)."""
    model_config = ConfigDict(populate_by_name=True)

    payment_id: str = Field(
        min_length=1, validation_alias=AliasChoices("paymentId", "payment_id", "razorpay_payment_id")
    )
    gateway_order_id: str = Field(
        min_length=1, validation_alias=AliasChoices("gatewayOrderId", "gateway_order_id", "razorpay_order_id")
    )
    signature: str = Field(
        min_length=1, validation_alias=AliasChoices("signature", "razorpay_signature")
    )
    order_reference: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("orderReference", "order_reference")
    )
