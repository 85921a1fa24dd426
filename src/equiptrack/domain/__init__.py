"""Domain layer for equiptrack application."""


# Import services lazily; the database layer imports entities from this package
def __getattr__(name):
    if name == "EquipmentTransactionService":
        from equiptrack.domain.transaction import EquipmentTransactionService
        return EquipmentTransactionService
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
