"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from repairshop.api.auth import router as auth_router
from repairshop.api.workshops import router as workshops_router
from repairshop.api.users import router as users_router
from repairshop.api.vehicles import router as vehicles_router
from repairshop.api.assessments import router as assessments_router
from repairshop.api.quotations import router as quotations_router
from repairshop.api.work_orders import router as work_orders_router
from repairshop.api.invoices import router as invoices_router
from repairshop.api.dashboard import router as dashboard_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(workshops_router)
api_router.include_router(users_router)
api_router.include_router(vehicles_router)
api_router.include_router(assessments_router)
api_router.include_router(quotations_router)
api_router.include_router(work_orders_router)
api_router.include_router(invoices_router)
api_router.include_router(dashboard_router)
