from boohk.routes.auth import router as auth_router
from boohk.routes.auth import admin_router as admin_users_router
from boohk.routes.account import router as account_router
from boohk.routes.clients import router as clients_router
from boohk.routes.products import router as products_router
from boohk.routes.quotations import router as quotations_router
from boohk.routes.cost_estimates import router as cost_estimates_router
from boohk.routes.proposals import router as proposals_router
from boohk.routes.bookings import router as bookings_router
from boohk.routes.collectibles import router as collectibles_router
from boohk.routes.job_orders import router as job_orders_router
from boohk.routes.job_orders import logistics_router
from boohk.routes.service_assignments import router as service_assignments_router
from boohk.routes.notifications import router as notifications_router
from boohk.routes.fleet import router as fleet_router
from boohk.routes.assistant import router as assistant_router
from boohk.routes.weather import router as weather_router
from boohk.routes.search import router as search_router
from boohk.routes.maps import router as maps_router
from boohk.routes.files import router as files_router
from boohk.routes.business import router as business_router
from boohk.routes.reports import router as reports_router

__all__ = [
    'auth_router',
    'admin_users_router',
    'account_router',
    'clients_router',
    'products_router',
    'quotations_router',
    'cost_estimates_router',
    'proposals_router',
    'bookings_router',
    'collectibles_router',
    'job_orders_router',
    'logistics_router',
    'service_assignments_router',
    'notifications_router',
    'fleet_router',
    'assistant_router',
    'weather_router',
    'search_router',
    'maps_router',
    'files_router',
    'business_router',
    'reports_router',
]
