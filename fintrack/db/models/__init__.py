from fintrack.db.models.category import Category
from fintrack.db.models.password_reset import PasswordReset
from fintrack.db.models.user import User
from fintrack.db.models.wallet import Wallet

__all__ = ["User", "PasswordReset", "Wallet", "Category"]
