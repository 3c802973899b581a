"""services package"""

__all__ = [
    "activity_feed",
    "avatar",
    "current_user",
    "file_validation",
    "password_policy",
    "performance_service",
    "phases",
    "progress_report",
    "security",
    "theme",
    "ws_manager",
]
