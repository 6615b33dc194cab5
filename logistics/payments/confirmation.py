"""
Cas d'usage « confirmer un paiement » (polling ou webhook).
- Pas de session dans le registre: NoCheckoutInProgress (l'acheteur n'a pas payé).
- Commande déjà payée: settled=True sans appel fournisseur ni effet de bord.
- Statut PAID: bascule conditionnelle du drapeau paid; seul l'appelant qui a
  effectivement basculé déclenche les effets de bord (SMS au vendeur).
- Autre statut: settled=False (résultat de polling valide, pas une erreur).
- Fournisseur injoignable: ConfirmationUnavailable (« paiement non encore
  confirmé »), distinct des échecs de démarrage du checkout.
"""
from dataclasses import dataclass
import logging

from logistics.errors import ConfirmationUnavailable, NotFound, NoCheckoutInProgress, PaymentProviderError
from logistics.notifications import messages
from .ledger import PaymentSessionLedger
from .stripe_client import SessionStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmationResult:
    settled: bool


class PaymentConfirmationService:
    def __init__(self, provider, ledger: PaymentSessionLedger, orders, dispatcher=None):
        self.provider = provider
        self.ledger = ledger
        self.orders = orders
        self.dispatcher = dispatcher

    def confirm(self, order_id: str) -> ConfirmationResult:
        try:
            record = self.ledger.find(order_id)
        except NotFound as e:
            raise NoCheckoutInProgress(f"Aucun checkout en cours pour la commande {order_id}") from e

        order = self.orders.get_order(order_id)
        if order.paid:
            return ConfirmationResult(settled=True)

        try:
            status = self.provider.get_session_status(record.external_session_id)
        except PaymentProviderError as e:
            raise ConfirmationUnavailable(f"Statut de paiement indisponible pour la commande {order_id}: {e}") from e
        if status is not SessionStatus.PAID:
            logger.info("payments.confirm not settled order_id=%s status=%s", order_id, status.value)
            return ConfirmationResult(settled=False)

        if self.orders.mark_paid(order_id, order.kind):
            logger.info("payments.confirm settled order_id=%s session_id=%s", order_id, record.external_session_id)
            if self.dispatcher is not None:
                self.dispatcher.dispatch(messages.payment_settled(order_id), order.seller_phone)
        else:
            # Un appel concurrent a déjà effectué la transition
            logger.info("payments.confirm already settled order_id=%s", order_id)
        return ConfirmationResult(settled=True)
