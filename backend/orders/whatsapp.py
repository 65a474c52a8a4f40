"""
WhatsApp click-to-chat links for product inquiries and cart checkout.
"""
import re
from urllib.parse import quote

WHATSAPP_BASE_URL = 'https://wa.me/'
CURRENCY = 'TND'

# Characters encodeURIComponent leaves alone; wa.me links are shared with the JS storefront
_URI_SAFE = "-_.!~*'()"


def _digits(phone) -> str:
    return re.sub(r'\D', '', str(phone or ''))


def _format_amount(value) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)


def _build_url(phone, message: str) -> str:
    return f"{WHATSAPP_BASE_URL}{_digits(phone)}?text={quote(message, safe=_URI_SAFE)}"


def generate_whatsapp_url(phone, product_name, price, shop_name, size=None, color=None) -> str:
    """Link asking the shop about a single product"""
    message = f"Hi, I'm interested in *{product_name}*"
    if size:
        message += f" (Size: {size})"
    if color:
        message += f" (Color: {color})"
    message += f" - {_format_amount(price)} {CURRENCY} from {shop_name}."
    return _build_url(phone, message)


def generate_whatsapp_cart_url(phone, shop_name, items) -> str:
    """
    Link carrying a whole cart.

    Each item is a dict with product_name, price, quantity and optional
    size/color.
    """
    message = f"Hi, I'd like to order the following from *{shop_name}*:\n\n"
    total = 0.0
    for index, item in enumerate(items, start=1):
        line = f"{index}. {item['product_name']}"
        size, color = item.get('size'), item.get('color')
        if size or color:
            details = []
            if size:
                details.append(f"Size: {size}")
            if color:
                details.append(f"Color: {color}")
            line += f" ({', '.join(details)})"
        quantity = item.get('quantity', 1)
        line += f" - {_format_amount(item['price'])} {CURRENCY} x {quantity}\n"
        message += line
        total += float(item['price']) * quantity
    message += f"\n*Total: {total:.2f} {CURRENCY}*"
    return _build_url(phone, message)


def is_valid_whatsapp_number(phone) -> bool:
    return 8 <= len(_digits(phone)) <= 15


def format_phone_number(phone) -> str:
    """Human readable phone number (+216 XX XXX XXX for Tunisia)"""
    digits = _digits(phone)
    if digits.startswith('216'):
        return f"+216 {digits[3:5]} {digits[5:8]} {digits[8:]}"
    if len(digits) > 10:
        return f"+{digits[:-10]} {digits[-10:-7]} {digits[-7:-4]} {digits[-4:]}"
    return re.sub(r'(\d{2})(?=\d)', r'\1 ', digits)
