"""
WebSocket event payloads pushed to dashboards
"""
from typing import Dict, Any, Optional
from datetime import datetime, timezone


def _event(event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def create_complaint_submitted_event(
    complaint_id: str,
    complaint_type: str,
    location: Optional[str],
    user_name: str
) -> Dict[str, Any]:
    """New complaint, for the admin dashboard"""
    return _event("complaint_submitted", {
        "complaint_id": complaint_id,
        "complaint_type": complaint_type,
        "location": location,
        "user_name": user_name,
    })


def create_tax_record_event(
    event_type: str,
    record_id: str,
    user_id: str,
    property_id: str,
    tax_type: str,
    amount: float,
    status: str
) -> Dict[str, Any]:
    """tax_record_created / tax_record_paid, for the owner and admins"""
    return _event(event_type, {
        "record_id": record_id,
        "user_id": user_id,
        "property_id": property_id,
        "tax_type": tax_type,
        "amount": amount,
        "status": status,
    })
