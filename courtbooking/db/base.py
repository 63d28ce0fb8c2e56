from courtbooking.db.session import Base
from courtbooking.models.user import User
from courtbooking.models.court import Court, CourtPeakWindow, CourtBlock
from courtbooking.models.booking import Booking, BookingPlayer
from courtbooking.models.notification import Notification
