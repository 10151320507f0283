from datetime import timedelta, datetime, timezone
import re

from core.utils.auth.jwt_auth import JWTManager
from core.utils.encryption import PasswordManager
from services.orders import OrderService


def test_token_round_trip():
    manager = JWTManager(secret_key="test-secret")

    token = manager.create_access_token({"sub": "abc", "role": "admin"})
    payload = manager.verify_token(token)

    assert payload["sub"] == "abc"
    assert payload["role"] == "admin"
    assert payload["exp"] > payload["iat"]


def test_expired_token_is_rejected():
    manager = JWTManager(secret_key="test-secret")

    token = manager.create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-5))

    assert manager.verify_token(token) is None


def test_token_from_another_key_is_rejected():
    token = JWTManager(secret_key="one").create_access_token({"sub": "abc"})
    assert JWTManager(secret_key="two").verify_token(token) is None


def test_password_hashing():
    hashed = PasswordManager.hash_password("wick-and-wax")

    assert hashed != "wick-and-wax"
    assert PasswordManager.verify_password("wick-and-wax", hashed) is True
    assert PasswordManager.verify_password("wrong", hashed) is False
    assert PasswordManager.verify_password("wick-and-wax", "not-a-bcrypt-hash") is False


def test_order_number_uses_date_and_random_suffix():
    number = OrderService.generate_order_number(datetime(2024, 11, 5, tzinfo=timezone.utc))

    assert re.fullmatch(r"KK-20241105-[0-9A-F]{6}", number)
