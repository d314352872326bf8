"""
Orchestrateur du tunnel de commande (machine à états).

    STEP1_REVIEW -> STEP2_ADDRESS -> STEP3_PAYMENT -> SUBMITTING -> CONFIRMED | FAILED

- Paiement à la livraison: enregistrement -> emails -> confirmation.
- Paiement en ligne: intention -> commande 'pending' -> fenêtre hébergée ->
  vérification -> statut 'completed' -> emails -> confirmation.
- FAILED est signalé puis le tunnel revient à l'étape 3, formulaire conservé:
  une nouvelle soumission est possible. submit() renvoie l'issue de la tentative.
- Clé d'idempotence: un nonce par tunnel, renouvelé après chaque confirmation.
- Les emails et le panier distant sont best-effort; l'enregistrement de la
  commande et la vérification du paiement ne le sont pas.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from storefront.cart.models import (
    CartItem,
    cart_total,
    decrement_quantity,
    increment_quantity,
    remove_item,
)
from storefront.orders.models import (
    Customer,
    OrderDraft,
    PaymentMethod,
    PaymentStatus,
    Verification,
    build_order_draft,
    new_checkout_nonce,
)
from storefront.orders.repository import OrderResult
from storefront.payments.adapter import PaymentGatewayError, PaymentTimeout
from storefront.payments.outcomes import Abandoned, Cancelled, Failed
from .context import CheckoutContext
from .validation import AddressValidationError, customer_from_form

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Votre panier est vide."
ADDRESS_REQUIRED_MESSAGE = "Veuillez compléter votre adresse de livraison."
INTENT_TIMEOUT_MESSAGE = "Le serveur de paiement ne répond pas. Veuillez réessayer."
CANCELLED_MESSAGE = "Paiement annulé. Veuillez réessayer."
EMAIL_WARNING_MESSAGE = (
    "Votre commande est confirmée, mais l'email de confirmation n'a pas pu être envoyé."
)
UNEXPECTED_MESSAGE = "Une erreur inattendue est survenue. Veuillez réessayer."


class CheckoutStep(str, Enum):
    REVIEW = "step1_review"
    ADDRESS = "step2_address"
    PAYMENT = "step3_payment"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class CheckoutOrchestrator:
    def __init__(self, ctx: CheckoutContext):
        self.ctx = ctx
        self.step = CheckoutStep.REVIEW
        self.items: List[CartItem] = []
        self.form: Dict[str, Any] = {}
        self.customer: Optional[Customer] = None
        self.draft: Optional[OrderDraft] = None
        self.last_error: Optional[str] = None
        self.outcome: Optional[CheckoutStep] = None
        self._nonce = new_checkout_nonce()
        self._submitting = False

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def _go(self, step: CheckoutStep) -> CheckoutStep:
        self.step = step
        self.ctx.view.show_step(step.value)
        return step

    def _render_summary(self) -> None:
        self.ctx.view.render_summary(list(self.items), cart_total(self.items))

    # Étape 1: récapitulatif du panier
    async def load_cart(self) -> List[CartItem]:
        self.items = await self.ctx.cart.get_items()
        self._render_summary()
        self._go(CheckoutStep.REVIEW)
        return self.items

    async def _update_items(self, items: List[CartItem]) -> None:
        self.items = items
        await self.ctx.cart.save_items(items)
        self._render_summary()

    async def increment(self, item_id: str) -> None:
        await self._update_items(increment_quantity(self.items, item_id))

    async def decrement(self, item_id: str) -> None:
        await self._update_items(decrement_quantity(self.items, item_id))

    async def remove(self, item_id: str) -> None:
        await self._update_items(remove_item(self.items, item_id))

    def continue_to_address(self) -> bool:
        if self.step != CheckoutStep.REVIEW:
            return False
        if not self.items:
            self.ctx.view.show_error(EMPTY_CART_MESSAGE)
            return False
        self._go(CheckoutStep.ADDRESS)
        return True

    # Étape 2: adresse
    def back_to_summary(self) -> None:
        if self.step == CheckoutStep.ADDRESS:
            self._go(CheckoutStep.REVIEW)

    def continue_to_payment(self, form: Mapping[str, Any]) -> bool:
        if self.step != CheckoutStep.ADDRESS:
            return False
        self.form = dict(form)
        try:
            self.customer = customer_from_form(self.form)
        except AddressValidationError as e:
            self.ctx.view.show_field_errors(e.errors)
            self.ctx.view.show_error(str(e))
            return False
        self._go(CheckoutStep.PAYMENT)
        return True

    # Étape 3: paiement
    def back_to_address(self) -> None:
        if self.step == CheckoutStep.PAYMENT:
            self._go(CheckoutStep.ADDRESS)

    async def submit(
        self,
        payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY,
        notes: str = "",
    ) -> CheckoutStep:
        if self._submitting:
            logger.info("checkout.orchestrator.submit ignored: submission already in progress")
            return self.step
        view = self.ctx.view
        if self.step != CheckoutStep.PAYMENT or self.customer is None:
            view.show_error(ADDRESS_REQUIRED_MESSAGE)
            return self.step
        if self.ctx.session is None or not self.ctx.orders.check_order_auth_requirement().is_authenticated:
            view.show_account_prompt()
            return self.step

        self._submitting = True
        view.set_submit_enabled(False)
        try:
            items = await self.ctx.cart.get_items()
            if not items:
                return self._fail(EMPTY_CART_MESSAGE)
            self.items = items
            self.draft = build_order_draft(
                items=items,
                customer=self.customer,
                payment_method=payment_method,
                notes=notes,
                user_id=self.ctx.session.user_id,
                nonce=self._nonce,
            )
            self.last_error = None
            self.outcome = None
            self._go(CheckoutStep.SUBMITTING)
            if self.draft.payment_method == PaymentMethod.ONLINE_GATEWAY:
                return await self._submit_online(self.draft)
            return await self._submit_cash_on_delivery(self.draft)
        except Exception:
            logger.exception("checkout.orchestrator.submit failed unexpectedly")
            return self._fail(UNEXPECTED_MESSAGE)
        finally:
            self._submitting = False
            if self.step != CheckoutStep.CONFIRMED:
                view.set_submit_enabled(True)

    def _fail(self, message: str) -> CheckoutStep:
        self.last_error = message
        self.outcome = CheckoutStep.FAILED
        self.ctx.view.show_error(message)
        self._go(CheckoutStep.FAILED)
        # Retour à l'étape 3 avec le formulaire intact
        self._go(CheckoutStep.PAYMENT)
        return CheckoutStep.FAILED

    def _back_to_payment(self) -> CheckoutStep:
        self.outcome = CheckoutStep.PAYMENT
        return self._go(CheckoutStep.PAYMENT)

    async def _save(self, draft: OrderDraft) -> Optional[OrderResult]:
        """Enregistre la commande; None si l'état a déjà été traité (auth/erreur)."""
        saved = await asyncio.to_thread(self.ctx.orders.save_order, draft)
        if saved.requires_auth:
            self.ctx.view.show_account_prompt()
            self._back_to_payment()
            return None
        if not saved.success:
            self._fail(f"Impossible d'enregistrer votre commande: {saved.error}")
            return None
        draft.order_id = saved.order_id
        if saved.order_reference:
            draft.order_reference = saved.order_reference
        return saved

    async def _submit_cash_on_delivery(self, draft: OrderDraft) -> CheckoutStep:
        if await self._save(draft) is None:
            return self.outcome
        return await self._confirm(draft)

    async def _submit_online(self, draft: OrderDraft) -> CheckoutStep:
        payments = self.ctx.payments
        try:
            intent = await payments.create_intent(draft)
        except PaymentTimeout:
            return self._fail(INTENT_TIMEOUT_MESSAGE)
        except PaymentGatewayError as e:
            return self._fail(f"Impossible d'initialiser le paiement: {e}")

        draft.payment_status = PaymentStatus.PENDING
        draft.gateway_order_id = intent.gateway_order_id
        if await self._save(draft) is None:
            return self.outcome

        outcome = await payments.collect_payment(intent, draft)
        if isinstance(outcome, Abandoned):
            logger.info("checkout.orchestrator payment window closed reference=%s", draft.order_reference)
            return self._back_to_payment()
        if isinstance(outcome, Cancelled):
            return self._fail(CANCELLED_MESSAGE)
        if isinstance(outcome, Failed):
            return self._fail(f"Échec du paiement: {outcome.reason}")

        verification = Verification.VERIFIED
        try:
            result = await payments.verify_payment(outcome)
        except PaymentTimeout as e:
            # Paiement probablement passé côté passerelle: accepté, marqué pour rapprochement
            logger.warning(
                "checkout.orchestrator payment accepted without verification reference=%s order_id=%s: %s",
                draft.order_reference, draft.order_id, e,
            )
            verification = Verification.UNVERIFIED
        except PaymentGatewayError as e:
            return self._fail(f"Impossible de vérifier le paiement: {e}")
        else:
            if not result.success:
                return self._fail(f"Échec de la vérification du paiement: {result.message}")

        draft.payment_status = PaymentStatus.COMPLETED
        draft.payment_id = outcome.payment_id
        draft.payment_signature = outcome.signature
        draft.verification = verification
        updated = await asyncio.to_thread(
            self.ctx.orders.update_order_payment_status,
            draft.order_id,
            payment_status=PaymentStatus.COMPLETED,
            payment_id=outcome.payment_id,
            payment_signature=outcome.signature,
            verification=verification,
        )
        if not updated.success:
            logger.error(
                "checkout.orchestrator payment status update failed order_id=%s: %s",
                draft.order_id, updated.error,
            )
        return await self._confirm(draft)

    async def _confirm(self, draft: OrderDraft) -> CheckoutStep:
        try:
            emails = await self.ctx.notifier.send_order_emails(draft)
        except Exception:
            logger.exception("checkout.orchestrator emails failed reference=%s", draft.order_reference)
            emails = {"success": False}
        if not emails.get("success"):
            self.ctx.view.show_warning(EMAIL_WARNING_MESSAGE)

        self.outcome = CheckoutStep.CONFIRMED
        self._nonce = new_checkout_nonce()
        self._go(CheckoutStep.CONFIRMED)
        self.ctx.view.show_confirmation(draft)
        await self.clear_cart()
        return self.step

    async def clear_cart(self) -> None:
        """Vide le panier sur tous les supports; sans effet s'il est déjà vide."""
        try:
            await self.ctx.cart.clear()
        except Exception:
            logger.exception("checkout.orchestrator cart clear failed")
        self.items = []

    def close_confirmation(self) -> None:
        if self.step == CheckoutStep.CONFIRMED:
            self.ctx.view.navigate_home()
