"""
Erreurs métier du coeur tarification/paiement.
Chaque exception porte un `code` stable, repris tel quel dans les réponses JSON
(voir logistics.app_setup.exceptions).
"""


class LogisticsError(Exception):
    code = "logistics_error"

    def __init__(self, message: str = "", code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class InvalidArgument(LogisticsError):
    code = "invalid_argument"


class PaymentProviderError(LogisticsError):
    """Fournisseur de paiement injoignable, timeout ou requête rejetée."""
    code = "payment_provider_error"


class LedgerInconsistency(LogisticsError):
    """Écriture du registre de sessions échouée (session fournisseur potentiellement orpheline)."""
    code = "ledger_inconsistency"

    def __init__(self, message: str = "", orphaned_session_id: str | None = None):
        super().__init__(message)
        self.orphaned_session_id = orphaned_session_id


class NotFound(LogisticsError):
    code = "not_found"


class NoCheckoutInProgress(NotFound):
    """Aucune session de paiement enregistrée: l'acheteur n'a pas terminé le checkout."""
    code = "no_checkout_in_progress"


class OrderNotFound(NotFound):
    code = "order_not_found"


class ConfirmationUnavailable(PaymentProviderError):
    """Statut de paiement illisible chez le fournisseur pendant une confirmation."""
    code = "payment_confirmation_unavailable"
