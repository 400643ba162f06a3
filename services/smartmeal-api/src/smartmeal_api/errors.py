"""Service-level exceptions.

Services raise these; routers translate them into HTTP responses.
"""


class SmartMealError(Exception):
    """Base exception for SmartMeal service errors."""

    pass


class InvalidProfile(SmartMealError):
    """Raised when a profile cannot feed the calorie calculations."""

    pass


class InvalidRequest(SmartMealError):
    """Raised when a menu generation request is malformed."""

    pass


class Forbidden(SmartMealError):
    """Raised when a user acts on a menu they do not own."""

    def __init__(self, menu_id: str, user_id: str):
        super().__init__(f"User {user_id} does not own menu {menu_id}")
        self.menu_id = menu_id
        self.user_id = user_id
