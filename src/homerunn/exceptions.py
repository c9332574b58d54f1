"""
Errores del motor de match.
"""

from typing import Optional


class MalformedSignature(ValueError):
    """La firma no tiene 15 símbolos o contiene un símbolo ilegal para su slot."""

    def __init__(self, value, reason: str, slot: Optional[int] = None):
        self.value = value
        self.reason = reason
        self.slot = slot
        where = f" (slot {slot})" if slot is not None else ""
        super().__init__(f"Firma inválida {value!r}{where}: {reason}")


class ProfileUnavailable(RuntimeError):
    """El store de perfiles no respondió (red, timeout, error de Supabase)."""

    def __init__(self, user_id: str, operation: str):
        self.user_id = user_id
        self.operation = operation
        super().__init__(
            f"Perfil de {user_id} no disponible durante '{operation}'"
        )
