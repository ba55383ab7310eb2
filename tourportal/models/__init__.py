# Make `from tourportal.models import User, Tour, Order` work
from .orm import (  # noqa: F401  (re-export)
    Destination,
    Favorite,
    Order,
    Review,
    Ticket,
    TicketResponse,
    Tour,
    User,
)
