from courtbooking.models.user import User, UserRole
from courtbooking.models.court import (
    Court, CourtPeakWindow, CourtBlock, CourtType, CourtSurface, BlockReason, RecurringPattern,
)
from courtbooking.models.booking import Booking, BookingPlayer, BookingStatus, PaymentStatus
from courtbooking.models.notification import Notification
