from payments.api.routes import account_router, payment_router

__all__ = ["account_router", "payment_router"]
