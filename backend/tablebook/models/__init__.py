from tablebook.models.closure import Closure
from tablebook.models.date_notice import DateNotice
from tablebook.models.reservation import Reservation

__all__ = [
    "Closure",
    "DateNotice",
    "Reservation",
]
