from decimal import Decimal

from yishaq import config
from yishaq.utils.enums import PaymentMethod


def payment_instructions(method: str, order_number: str, total: Decimal) -> str:
    """Message shown after checkout. Payments are simulated, nothing is charged here."""
    amount = "${0:,.2f} {1}".format(Decimal(str(total)), config.CURRENCY)
    if method == PaymentMethod.CARD.value:
        return "Serás redirigido a la pasarela de pago segura."
    if method == PaymentMethod.OXXO.value:
        return (
            "Presenta este número de orden ({0}) en cualquier OXXO y paga {1}. "
            "Tu pedido será procesado una vez confirmado el pago.".format(order_number, amount)
        )
    if method == PaymentMethod.TRANSFER.value:
        return (
            "Realiza una transferencia de {0} con el concepto: {1}. "
            "Recibirás los datos bancarios por email.".format(amount, order_number)
        )
    return "Gracias por tu compra."
