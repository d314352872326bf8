"""
Collaborateur d'affichage du tunnel de commande.

Le rendu (HTML, terminal, tests) est hors du périmètre: l'orchestrateur ne fait
qu'appeler ces méthodes. RecordingView garde une trace des appels (tests, démo).
"""
from typing import Any, Dict, List, Optional, Protocol, Tuple

from storefront.cart.models import CartItem
from storefront.orders.models import OrderDraft


class CheckoutView(Protocol):
    def show_step(self, step: str) -> None: ...
    def render_summary(self, items: List[CartItem], total: float) -> None: ...
    def show_field_errors(self, errors: Dict[str, str]) -> None: ...
    def show_error(self, message: str) -> None: ...
    def show_warning(self, message: str) -> None: ...
    def show_account_prompt(self) -> None: ...
    def set_submit_enabled(self, enabled: bool) -> None: ...
    def show_confirmation(self, draft: OrderDraft) -> None: ...
    def navigate_home(self) -> None: ...


class RecordingView:
    def __init__(self):
        self.calls: List[Tuple[str, Any]] = []
        self.submit_enabled: Optional[bool] = None

    def _record(self, name: str, payload: Any = None) -> None:
        self.calls.append((name, payload))

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def last(self, name: str) -> Any:
        for call, payload in reversed(self.calls):
            if call == name:
                return payload
        return None

    def show_step(self, step: str) -> None:
        self._record("show_step", step)

    def render_summary(self, items: List[CartItem], total: float) -> None:
        self._record("render_summary", (list(items), total))

    def show_field_errors(self, errors: Dict[str, str]) -> None:
        self._record("show_field_errors", dict(errors))

    def show_error(self, message: str) -> None:
        self._record("show_error", message)

    def show_warning(self, message: str) -> None:
        self._record("show_warning", message)

    def show_account_prompt(self) -> None:
        self._record("show_account_prompt")

    def set_submit_enabled(self, enabled: bool) -> None:
        self.submit_enabled = enabled
        self._record("set_submit_enabled", enabled)

    def show_confirmation(self, draft: OrderDraft) -> None:
        self._record("show_confirmation", draft)

    def navigate_home(self) -> None:
        self._record("navigate_home")
