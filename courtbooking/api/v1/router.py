from fastapi import APIRouter

# Public: courts, availability, pricing
from courtbooking.api.v1.public.courts import router as courts_router

# Public: bookings
from courtbooking.api.v1.public.bookings import router as bookings_router

# Public: notifications
from courtbooking.api.v1.public.notifications import router as notifications_router

# Admin
from courtbooking.api.v1.admin.courts import router as admin_courts_router
from courtbooking.api.v1.admin.bookings import router as admin_bookings_router
from courtbooking.api.v1.admin.users import router as admin_users_router

api_router = APIRouter()

# --- Public ---
api_router.include_router(courts_router)
api_router.include_router(bookings_router)
api_router.include_router(notifications_router)

# --- Admin ---
api_router.include_router(admin_courts_router)
api_router.include_router(admin_bookings_router)
api_router.include_router(admin_users_router)
