from .routes_profiles import router as profiles_router
from .routes_twins import router as twins_router

all_routers = [
    profiles_router,
    twins_router,
]
