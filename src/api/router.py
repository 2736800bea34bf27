"""APIルーターの集約"""

from fastapi import APIRouter

from .routes import auth, exports, geocoding, trips

router = APIRouter()

router.include_router(auth.router, tags=["auth"])
router.include_router(trips.router, tags=["trips"])
router.include_router(exports.router, tags=["exports"])
router.include_router(geocoding.router, tags=["geocoding"])
