from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from care.models import AuditEvent

User = get_user_model()

def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if isinstance(user, User) else None,
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )
