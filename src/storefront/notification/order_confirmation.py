"""Order confirmation email, sent once an order is paid.

Rendered in Spanish by default; English is the only other language. Orders
are referred to by the first eight characters of their id.
"""

from html import escape

DEFAULT_LANGUAGE = "es"

TRANSLATIONS = {
    "es": {
        "subject": "Confirmación de Pedido #{id}",
        "title": "¡Pedido Confirmado!",
        "intro": "Gracias por tu compra. Tu pedido {id} ha sido recibido.",
        "details": "Detalles del Pedido:",
        "total": "Total:",
        "track": "Puedes rastrear el estado de tu pedido en tu dashboard.",
    },
    "en": {
        "subject": "Order Confirmation #{id}",
        "title": "Order Confirmed!",
        "intro": "Thank you for your purchase. Your order {id} has been received.",
        "details": "Order Details:",
        "total": "Total:",
        "track": "You can track your order status in your dashboard.",
    },
}


def short_order_id(order_id) -> str:
    return str(order_id)[:8]


def format_amount(amount: float) -> str:
    return f"${amount:,.0f}"


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        """Render subject, plain-text body and HTML body.

        ``context`` carries ``order_id``, ``total``, ``items`` (dicts with
        ``title``, ``quantity`` and ``price``) and an optional ``language``.
        """
        t = TRANSLATIONS.get(context.get("language"), TRANSLATIONS[DEFAULT_LANGUAGE])
        short_id = short_order_id(context["order_id"])
        items = context.get("items", [])
        total = format_amount(context.get("total", 0.0))

        lines = [f"{item['title']} x {item['quantity']} - {format_amount(item['price'])}" for item in items]
        body = "\n".join(
            [
                t["title"],
                "",
                t["intro"].format(id=f"#{short_id}"),
                "",
                t["details"],
                *lines,
                f"{t['total']} {total}",
                "",
                t["track"],
            ]
        )

        item_rows = "".join(
            '<div style="border-bottom: 1px solid #eee; padding: 10px 0;">'
            f"<strong>{escape(item['title'])}</strong> x {item['quantity']}<br/>"
            f'<span style="color: #666;">{format_amount(item["price"])}</span>'
            "</div>"
            for item in items
        )
        html_body = (
            '<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">'
            f'<h1 style="color: #7c3aed;">{t["title"]}</h1>'
            f"<p>{t['intro'].format(id=f'<strong>#{short_id}</strong>')}</p>"
            f"<h3>{t['details']}</h3>"
            f'<div style="background: #f9fafb; padding: 20px; border-radius: 8px;">{item_rows}'
            f'<div style="margin-top: 20px; text-align: right; font-weight: bold;">{t["total"]} {total}</div>'
            "</div>"
            f"<p>{t['track']}</p>"
            "</div>"
        )

        return {
            "subject": t["subject"].format(id=short_id),
            "body": body,
            "html_body": html_body,
        }
