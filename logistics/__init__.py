"""Backend logistique: tarification des livraisons, sessions de paiement, suivi."""
