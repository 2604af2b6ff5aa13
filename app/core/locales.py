# app/core/locales.py

# Сообщения об ошибках
ERROR_LOADING_PRODUCTS = "Error loading products."
ERROR_PRODUCT_NOT_FOUND = "Product not found."
ERROR_PRODUCT_UNAVAILABLE = "Product '{name}' is no longer available."
ERROR_CART_SESSION_NOT_FOUND = "Cart session not found or expired."
ERROR_ITEM_NOT_IN_CART = "Product is not in the cart."
ERROR_CART_EMPTY = "The cart is empty."
ERROR_LOADING_FAVORITES = "Error loading favorites."
ERROR_UPDATING_FAVORITES = "Error updating favorites."
ERROR_ITEM_NOT_IN_FAVORITES = "Product is not in favorites."
ERROR_LOADING_ORDERS = "Error loading orders."
ERROR_ORDER_NOT_FOUND = "Order not found."
ERROR_ORDER_FORBIDDEN = "You do not have permission to access this order."
ERROR_ORDER_NOT_CANCELLABLE = "Order in status '{status}' cannot be cancelled."
ERROR_ORDER_NOT_PAYMENT_PENDING = "Order is not awaiting payment."
ERROR_CANCELLING_ORDER = "Error cancelling the order."
ERROR_PAYMENT_PREFERENCE = "Error creating the payment preference."
ERROR_CREATING_ORDER = "Error creating the order."
ERROR_PAYMENT_NOT_STARTED = (
    "The order was created but the payment could not be started. "
    "You can retry it from your pending payments."
)

# Сообщения об успехе
SUCCESS_ADDED_TO_FAVORITES = "Product added to favorites."
SUCCESS_REMOVED_FROM_FAVORITES = "Product removed from favorites."

# Подписи промо-акций
PROMOTION_LABEL_2X1 = "Buy 2, pay 1"
PROMOTION_LABEL_3X1 = "Buy 3, pay 1"
PROMOTION_LABEL_3X2 = "Buy 3, pay 2"
PROMOTION_LABEL_DISCOUNT = "{percent}% OFF"

# Название для позиции заказа, чей товар удален из каталога
UNAVAILABLE_PRODUCT_NAME = "Product no longer available"

# Таймер окна оплаты
TIME_REMAINING_EXPIRED = "Expired"
TIME_REMAINING = "{hours}h {minutes}m remaining"
