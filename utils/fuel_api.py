"""
Endpoint wrappers for the FuelMate backend, grouped by resource.

Each method maps to exactly one REST call. Shaping of the response is left
to the caller (see utils.api_client.as_list / unwrap).
"""

from typing import Any, Optional

from utils.api_client import ApiClient, get_api_client


class _Resource:
    def __init__(self, client: ApiClient):
        self.client = client


class AuthAPI(_Resource):
    def login(self, email: str, password: str) -> Any:
        return self.client.post('/auth/login', json={'email': email, 'password': password},
                                fallback='Login failed')

    def register(self, user_data: dict) -> Any:
        return self.client.post('/auth/register', json=user_data, fallback='Registration failed')

    def get_profile(self) -> Any:
        return self.client.get('/auth/profile', fallback='Failed to load profile')

    def update_profile(self, user_data: dict) -> Any:
        return self.client.put('/auth/profile', json=user_data, fallback='Failed to update profile')


class OrderAPI(_Resource):
    # Customer
    def create(self, data: dict) -> Any:
        return self.client.post('/orders', json=data, fallback='Failed to create order')

    def my_orders(self) -> Any:
        return self.client.get('/orders/my-orders', fallback='Failed to fetch orders')

    def get(self, order_id: str) -> Any:
        return self.client.get(f'/orders/{order_id}', fallback='Failed to fetch order details')

    def simulate_payment(self, order_id: str) -> Any:
        return self.client.post(f'/orders/{order_id}/simulate-payment',
                                fallback='Payment simulation failed')

    # Admin
    def all_orders(self, params: Optional[dict] = None) -> Any:
        return self.client.get('/orders', params=params, fallback='Failed to fetch orders')

    def pending(self) -> Any:
        return self.client.get('/orders/pending', fallback='Failed to fetch orders')

    def stats(self) -> Any:
        return self.client.get('/orders/stats', fallback='Failed to fetch order stats')

    def verify(self, qr_data: str) -> Any:
        return self.client.post('/orders/verify', json={'qrData': qr_data},
                                fallback='Failed to verify QR code')

    def complete(self, order_id: str) -> Any:
        return self.client.put(f'/orders/{order_id}/complete', fallback='Failed to complete order')

    def cancel(self, order_id: str) -> Any:
        return self.client.put(f'/orders/{order_id}/cancel', fallback='Failed to cancel order')


class PaymentAPI(_Resource):
    def create_order(self, data: dict) -> Any:
        return self.client.post('/payments/create-order', json=data,
                                fallback='Failed to create payment')

    def verify(self, data: dict) -> Any:
        return self.client.post('/payments/verify', json=data, fallback='Payment verification failed')

    def status(self, order_id: str) -> Any:
        return self.client.get(f'/payments/status/{order_id}',
                               fallback='Failed to fetch payment status')

    def refund(self, data: dict) -> Any:
        return self.client.post('/payments/refund', json=data, fallback='Refund failed')


class TransactionAPI(_Resource):
    def create(self, data: dict) -> Any:
        return self.client.post('/transactions', json=data, fallback='Failed to record transaction')

    def all(self) -> Any:
        return self.client.get('/transactions', fallback='Failed to fetch transactions')

    def customers(self) -> Any:
        return self.client.get('/transactions/customers', fallback='Failed to load data')

    def mine(self) -> Any:
        return self.client.get('/transactions/my-transactions',
                               fallback='Failed to fetch transactions')

    def get(self, transaction_id: str) -> Any:
        return self.client.get(f'/transactions/{transaction_id}',
                               fallback='Failed to fetch transaction')


class UserAPI(_Resource):
    def customers(self) -> Any:
        return self.client.get('/users/customers', fallback='Failed to fetch customers')

    def top_customers(self) -> Any:
        return self.client.get('/users/top-customers', fallback='Failed to fetch customers')

    def get(self, user_id: str) -> Any:
        return self.client.get(f'/users/{user_id}', fallback='Failed to fetch customer')

    def update(self, user_id: str, data: dict) -> Any:
        return self.client.put(f'/users/{user_id}', json=data, fallback='Failed to update customer')

    def delete(self, user_id: str) -> Any:
        return self.client.delete(f'/users/{user_id}', fallback='Failed to delete customer')


class FuelPriceAPI(_Resource):
    def list(self) -> Any:
        return self.client.get('/fuel-prices', fallback='Failed to fetch fuel prices')

    def update(self, price_id: str, price_per_liter: float) -> Any:
        return self.client.put(f'/fuel-prices/{price_id}', json={'pricePerLiter': price_per_liter},
                               fallback='Failed to update price')


class NotificationAPI(_Resource):
    # Customer
    def mine(self) -> Any:
        return self.client.get('/notifications/my', fallback='Failed to fetch notifications')

    def unread_count(self) -> Any:
        return self.client.get('/notifications/unread-count',
                               fallback='Failed to fetch notifications')

    def mark_read(self, notification_id: str) -> Any:
        return self.client.put(f'/notifications/{notification_id}/read',
                               fallback='Failed to update notification')

    def mark_all_read(self) -> Any:
        return self.client.put('/notifications/read-all', fallback='Failed to update notifications')

    def delete(self, notification_id: str) -> Any:
        return self.client.delete(f'/notifications/{notification_id}',
                                  fallback='Failed to delete notification')

    # Admin
    def all(self) -> Any:
        return self.client.get('/notifications', fallback='Failed to fetch notifications')

    def send(self, data: dict) -> Any:
        return self.client.post('/notifications/send', json=data,
                                fallback='Failed to send notification')

    def broadcast(self, data: dict) -> Any:
        return self.client.post('/notifications/broadcast', json=data,
                                fallback='Failed to broadcast notification')


class SupportAPI(_Resource):
    # Customer
    def create(self, data: dict) -> Any:
        return self.client.post('/support', json=data, fallback='Failed to create ticket')

    def mine(self) -> Any:
        return self.client.get('/support/my', fallback='Failed to fetch support tickets')

    def get(self, ticket_id: str) -> Any:
        return self.client.get(f'/support/{ticket_id}', fallback='Failed to load ticket details')

    def reply(self, ticket_id: str, message: str) -> Any:
        return self.client.post(f'/support/{ticket_id}/reply', json={'message': message},
                                fallback='Failed to send reply')

    # Admin
    def all(self, status: Optional[str] = None) -> Any:
        return self.client.get('/support', params={'status': status}, fallback='Failed to load tickets')

    def update_status(self, ticket_id: str, status: str) -> Any:
        return self.client.put(f'/support/{ticket_id}/status', json={'status': status},
                               fallback='Failed to update status')


class RewardAPI(_Resource):
    def redeem(self, data: dict) -> Any:
        return self.client.post('/rewards/redeem', json=data, fallback='Failed to submit request')

    def all(self) -> Any:
        return self.client.get('/rewards', fallback='Failed to fetch redemptions')

    def mine(self) -> Any:
        return self.client.get('/rewards/my-redemptions', fallback='Failed to fetch redemptions')

    def update_status(self, redemption_id: str, data: dict) -> Any:
        return self.client.put(f'/rewards/{redemption_id}/status', json=data,
                               fallback='Failed to update redemption')

    def customer_approved(self, customer_id: str) -> Any:
        return self.client.get(f'/rewards/customer/{customer_id}/approved',
                               fallback='Failed to fetch redemptions')


class FuelApi:
    """All resource groups over one client: `api.orders.verify(...)`."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.auth = AuthAPI(client)
        self.orders = OrderAPI(client)
        self.payments = PaymentAPI(client)
        self.transactions = TransactionAPI(client)
        self.users = UserAPI(client)
        self.fuel_prices = FuelPriceAPI(client)
        self.notifications = NotificationAPI(client)
        self.support = SupportAPI(client)
        self.rewards = RewardAPI(client)


def get_api() -> FuelApi:
    return FuelApi(get_api_client())
