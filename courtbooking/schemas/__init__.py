from courtbooking.schemas.common import PaginatedResponse, ErrorResponse
from courtbooking.schemas.user import User, UserCreate, UserSummary
from courtbooking.schemas.court import (
    Court, CourtCreate, CourtUpdate, CourtSummary,
    CourtBlock, CourtBlockCreate, CourtBlockCreateResponse,
    OperatingHoursWindow, PeakWindow,
)
from courtbooking.schemas.availability import (
    Slot, AvailabilityResponse, CourtAvailability, AllCourtsAvailabilityResponse, PriceQuote,
)
from courtbooking.schemas.booking import (
    Booking, BookingCreate, BookingPlayer, BookingCancelRequest, BookingCancelResponse,
    AdminBookingUpdate,
)
from courtbooking.schemas.notification import Notification
