# Services package - Consolidated imports only

from .auth import AuthService
from .discounts import DiscountService, evaluate_discount
from .orders import OrderService
from .payments import PaymentService
from .payment_gateway import PaymentGateway, StripePaymentGateway, get_payment_gateway
from .pricing import calculate_totals
from .webhooks import WebhookService, next_payment_state
