from fastapi import APIRouter, Depends, HTTPException
from models.auth.user_models import User, UserRole
from services.current_user import get_current_user
from services.performance_service import performance_service

router = APIRouter(prefix="/api/performance", tags=["Performance"])


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


@router.get("/report", response_model=dict)
def get_report(current_user: User = Depends(require_admin)):
    return performance_service.get_performance_report()


@router.get("/metrics", response_model=dict)
def get_stored_metrics(current_user: User = Depends(require_admin)):
    return performance_service.get_stored_metrics()


@router.delete("/metrics", response_model=dict)
def clear_metrics(current_user: User = Depends(require_admin)):
    performance_service.clear_metrics()
    return {"detail": "Performance metrics cleared"}
