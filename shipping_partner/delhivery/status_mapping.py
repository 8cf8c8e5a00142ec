status_mapping = {
    "UD": {
        "Manifested": "booked",
        "Not Picked": "pickup pending",
        "Pending": "in transit",
        "In Transit": "in transit",
        "Dispatched": "out for delivery",
    },
    "DL": {
        "Delivered": "delivered",
        "RTO": "RTO delivered",
    },
    "RT": {
        "In Transit": "RTO in transit",
        "Pending": "RTO in transit",
        "Dispatched": "RTO out for delivery",
    },
    "CN": {
        "Canceled": "cancelled",
        "Cancelled": "cancelled",
    },
}


def map_status(status_type: str, status: str) -> str:
    return status_mapping.get(status_type, {}).get(status, (status or "").lower())
